"""Anthropic (Claude) LLM provider implementation."""

import time
from typing import Any

from anthropic import AsyncAnthropic

from pageprompt.models import TokenUsage
from pageprompt.providers.base import (
    GenerationRequest,
    GenerationResult,
    LLMProvider,
)

# The Messages API requires an explicit output cap.
DEFAULT_MAX_OUTPUT_TOKENS = 4096


class AnthropicProvider(LLMProvider):
    """LLM provider backed by Anthropic's Messages API."""

    def __init__(self, client: AsyncAnthropic) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "anthropic"

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        params = self._build_params(request)
        start = time.monotonic()
        response = await self._client.messages.create(**params)
        latency_ms = int((time.monotonic() - start) * 1000)

        content = self._extract_text(response)
        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens
        return GenerationResult(
            content=content,
            model=response.model,
            finish_reason=response.stop_reason,
            usage=TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            latency_ms=latency_ms,
            raw_response=response.model_dump(),
        )

    @staticmethod
    def _build_params(request: GenerationRequest) -> dict[str, Any]:
        """Build kwargs dict for client.messages.create()."""
        sp = request.sampling_params
        params: dict[str, Any] = {
            "model": request.model,
            "max_tokens": sp.max_tokens or DEFAULT_MAX_OUTPUT_TOKENS,
            "messages": [
                {"role": m["role"], "content": m["content"]} for m in request.messages
            ],
        }
        if request.system_prompt is not None:
            params["system"] = request.system_prompt
        if sp.temperature is not None:
            params["temperature"] = sp.temperature
        if sp.top_p is not None:
            params["top_p"] = sp.top_p
        return params

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Extract text content from Anthropic Message response."""
        parts = []
        for block in response.content:
            if block.type == "text":
                parts.append(block.text)
        return "".join(parts)
