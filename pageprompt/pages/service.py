"""Page service: turns one crawled page into one result record."""

import logging

from pageprompt.config import RunConfig
from pageprompt.generation.adapter import ConfigurationError, ContentAdapter
from pageprompt.generation.context import resolve_model_config
from pageprompt.generation.merge import ModelAssistedMerger, NewlineJoinMerger, ResultMerger
from pageprompt.generation.runner import (
    InstructionRunner,
    ModelAuthenticationError,
    ModelCallError,
)
from pageprompt.generation.tokens import TokenCounter, get_token_counter
from pageprompt.generation.usage import CredentialUsageTracker, UsageAccumulator, UsageLimits
from pageprompt.models import ModelConfig, PageContent, PageOutcome, PageResult
from pageprompt.pages.schemas import PageRequest
from pageprompt.pages.sink import ResultSink
from pageprompt.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class PageService:
    """Orchestrates per-page processing: measure, adapt, tally, record.

    One instance serves a whole run. It holds only run-scoped values (config,
    model, provider, credential tracker); everything page-scoped is created
    inside process().
    """

    def __init__(
        self,
        config: RunConfig,
        registry: ProviderRegistry,
        sink: ResultSink,
        *,
        model_config: ModelConfig | None = None,
        counter: TokenCounter | None = None,
        limits: UsageLimits | None = None,
        tracker: CredentialUsageTracker | None = None,
    ) -> None:
        self._config = config
        self._sink = sink
        self._model_config = model_config or resolve_model_config(config.model)
        self._counter = counter or get_token_counter(self._model_config)
        self._limits = limits or UsageLimits(default_limit=config.usage_ceiling)
        self._tracker = tracker or CredentialUsageTracker()
        provider = registry.get(self._model_config.provider)
        self._runner = InstructionRunner(provider, self._model_config)

    @property
    def model_config(self) -> ModelConfig:
        return self._model_config

    @property
    def sink(self) -> ResultSink:
        return self._sink

    async def process(self, request: PageRequest) -> PageOutcome:
        """Process one page. Skipped pages produce no record.

        Raises:
            ConfigurationError: The page cannot be processed as configured.
            ModelCallError: A model call failed; nothing is recorded.
        """
        instructions = request.instructions or self._config.instructions
        if not instructions:
            raise ConfigurationError("No instructions configured")
        policy = request.long_content_policy or self._config.long_content_policy

        page = PageContent(
            url=request.url,
            text=request.content,
            format=request.content_format or self._config.content_format,
        )
        usage = UsageAccumulator(
            self._model_config.model, limits=self._limits, tracker=self._tracker
        )
        adapter = ContentAdapter(self._runner, self._counter, merger=self._make_merger())

        try:
            adapted = await adapter.adapt(page, instructions, policy, usage)
        except ConfigurationError as e:
            logger.error("Abandoning page %s: %s", page.url, e)
            raise
        except ModelAuthenticationError as e:
            logger.error("Model credential rejected on page %s: %s", page.url, e)
            raise
        except ModelCallError as e:
            logger.warning("Model call failed (%s) on page %s: %s", e.kind, page.url, e)
            raise

        if adapted.skipped:
            return PageOutcome(status="skipped")

        answer = adapted.answer or ""
        answer_tokens = self._counter.count(answer)
        logger.info(
            "Received answer from %s model for %s with %d tokens",
            self._model_config.model, page.url, answer_tokens,
        )

        credential = self._config.credential_for(self._model_config.provider)
        record = PageResult(
            url=page.url,
            content_length=len(page.text),
            content_token_length=adapted.content_tokens,
            instruction_token_length=adapted.instruction_tokens,
            answer_token_length=answer_tokens,
            total_token_usage=usage.total(),
            model=self._model_config.model,
            usage_limit_exceeded=usage.exceeded_limit(credential),
            answer=answer,
            original_content=request.original_content or request.content,
            content=adapted.adapted_content or "",
            strategy=adapted.strategy,
            chunk_count=adapted.chunk_count,
            content_format=page.format,
        )
        if credential:
            self._tracker.commit(credential, usage.total())
        await self._sink.push(record)
        return PageOutcome(status="processed", record=record)

    def _make_merger(self) -> ResultMerger:
        if self._config.merge_mode == "model":
            return ModelAssistedMerger(self._runner, self._counter)
        return NewlineJoinMerger()
