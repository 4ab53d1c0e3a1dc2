"""Shared base class for OpenAI-compatible LLM providers.

Handles parameter building and response parsing. OpenAIProvider is a thin
subclass that only configures the client.
"""

import time
from typing import Any

from openai import AsyncOpenAI

from pageprompt.models import TokenUsage
from pageprompt.providers.base import (
    GenerationRequest,
    GenerationResult,
    LLMProvider,
)


class OpenAICompatibleProvider(LLMProvider):
    """Base provider for any API that speaks the OpenAI chat completions protocol."""

    def __init__(self, client: AsyncOpenAI) -> None:
        self._client = client

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        params = self._build_params(request)
        start = time.monotonic()
        response = await self._client.chat.completions.create(**params)
        latency_ms = int((time.monotonic() - start) * 1000)

        choice = response.choices[0]
        content = choice.message.content or ""

        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return GenerationResult(
            content=content,
            model=response.model,
            finish_reason=choice.finish_reason,
            usage=usage,
            latency_ms=latency_ms,
            raw_response=response.model_dump(),
        )

    @staticmethod
    def _build_params(request: GenerationRequest) -> dict[str, Any]:
        """Build kwargs dict for client.chat.completions.create()."""
        sp = request.sampling_params
        messages: list[dict[str, str]] = []

        # System prompt → prepended as system message
        if request.system_prompt is not None:
            messages.append({"role": "system", "content": request.system_prompt})

        messages.extend(
            {"role": m["role"], "content": m["content"]} for m in request.messages
        )

        params: dict[str, Any] = {
            "model": request.model,
            "messages": messages,
        }

        if sp.max_tokens is not None:
            params["max_tokens"] = sp.max_tokens
        if sp.temperature is not None:
            params["temperature"] = sp.temperature
        if sp.top_p is not None:
            params["top_p"] = sp.top_p

        return params
