"""Single model invocation: prompt assembly, provider call, error classification."""

import logging

import anthropic
import openai

from pageprompt.models import CallResult, ModelConfig, SamplingParams
from pageprompt.providers.base import GenerationRequest, LLMProvider

logger = logging.getLogger(__name__)

CONTENT_FENCE = "```"


def build_prompt(instructions: str, content: str) -> str:
    """Instruction text followed by the content in a fenced block."""
    return f"{instructions}{CONTENT_FENCE}{content}{CONTENT_FENCE}"


class InstructionRunner:
    """Runs the user's instructions against one piece of content."""

    def __init__(
        self,
        provider: LLMProvider,
        model_config: ModelConfig,
        *,
        sampling_params: SamplingParams | None = None,
    ) -> None:
        self._provider = provider
        self._model_config = model_config
        self._sampling_params = sampling_params or SamplingParams()

    @property
    def model_config(self) -> ModelConfig:
        return self._model_config

    async def run(
        self,
        instructions: str,
        content: str,
        *,
        url: str | None = None,
        chunk_index: int | None = None,
    ) -> CallResult:
        """Send one prompt to the model.

        Raises:
            ModelAuthenticationError: The credential was rejected.
            ModelRateLimitError: Rate limit or quota exhausted.
            UpstreamModelError: Any other failure of the model call.
        """
        request = GenerationRequest(
            model=self._model_config.model,
            messages=[{"role": "user", "content": build_prompt(instructions, content)}],
            sampling_params=self._sampling_params,
        )
        logger.debug(
            "Calling %s for %s (chunk %s)", self._model_config.model, url, chunk_index
        )
        try:
            result = await self._provider.generate(request)
        except Exception as e:
            error_cls = classify_error(e)
            raise error_cls(str(e), url=url, chunk_index=chunk_index) from e

        return CallResult(
            answer=result.content,
            usage=result.usage,
            model=result.model,
            finish_reason=result.finish_reason,
        )


def classify_error(exc: BaseException) -> type["ModelCallError"]:
    """Map an SDK or transport exception onto the model error taxonomy."""
    if isinstance(
        exc,
        (
            openai.AuthenticationError,
            openai.PermissionDeniedError,
            anthropic.AuthenticationError,
            anthropic.PermissionDeniedError,
        ),
    ):
        return ModelAuthenticationError
    if isinstance(exc, (openai.RateLimitError, anthropic.RateLimitError)):
        return ModelRateLimitError

    # OpenAI-compatible servers sometimes surface plain status errors
    status_code = getattr(exc, "status_code", None)
    if status_code in (401, 403):
        return ModelAuthenticationError
    if status_code == 429:
        return ModelRateLimitError
    return UpstreamModelError


class ModelCallError(Exception):
    """Base class for classified model-call failures."""

    kind = "upstream"

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        chunk_index: int | None = None,
    ) -> None:
        self.url = url
        self.chunk_index = chunk_index
        context = []
        if url is not None:
            context.append(f"url={url}")
        if chunk_index is not None:
            context.append(f"chunk={chunk_index}")
        suffix = f" ({', '.join(context)})" if context else ""
        super().__init__(f"{message}{suffix}")


class ModelAuthenticationError(ModelCallError):
    kind = "authentication"


class ModelRateLimitError(ModelCallError):
    kind = "rate_limit"


class UpstreamModelError(ModelCallError):
    kind = "upstream"
