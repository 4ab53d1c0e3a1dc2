"""Shared test helpers: fake provider, counters, content builders."""

import asyncio
from collections.abc import Callable

from pageprompt.generation.runner import CONTENT_FENCE
from pageprompt.generation.tokens import TokenCounter
from pageprompt.models import ModelConfig, PageContent, TokenUsage
from pageprompt.providers.base import GenerationRequest, GenerationResult, LLMProvider

# 100-token window used by the budget scenarios: floor(0.9 * 100) = 90
SMALL_MODEL = ModelConfig(model="gpt-4", max_tokens=100, provider="openai")

# 40 chars → 10 tokens with the approximate counter
TEN_TOKEN_INSTRUCTIONS = "Extract all product names from the page."


class WordTokenCounter(TokenCounter):
    """One token per whitespace-separated word. Makes budgets easy to read."""

    def count(self, text: str) -> int:
        return len(text.split())


def numbered_words(n: int) -> str:
    """n four-char words "000 001 ..." → exactly n tokens at len // 4."""
    return "".join(f"{i:03d} " for i in range(n))


def fenced_content(request: GenerationRequest) -> str:
    """The page content the runner fenced into the prompt."""
    prompt = request.messages[0]["content"]
    start = prompt.index(CONTENT_FENCE) + len(CONTENT_FENCE)
    return prompt[start : prompt.rindex(CONTENT_FENCE)]


def first_word(request: GenerationRequest) -> str:
    words = fenced_content(request).split()
    return words[0] if words else ""


def make_page(text: str, url: str = "https://example.com/a") -> PageContent:
    return PageContent(url=url, text=text, format="markdown")


class FakeProvider(LLMProvider):
    """Test provider with scriptable answers, usage, delays and failures.

    Tracks every request, the peak number of concurrent calls, and how many
    calls ran to completion.
    """

    def __init__(
        self,
        *,
        provider_name: str = "openai",
        answer_fn: Callable[[GenerationRequest], str] | None = None,
        usage_fn: Callable[[GenerationRequest], TokenUsage] | None = None,
        delay_fn: Callable[[GenerationRequest], float] | None = None,
        fail_fn: Callable[[GenerationRequest], Exception | None] | None = None,
    ) -> None:
        self._provider_name = provider_name
        self._answer_fn = answer_fn or (lambda r: "Fake answer")
        self._usage_fn = usage_fn or (
            lambda r: TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15)
        )
        self._delay_fn = delay_fn or (lambda r: 0.0)
        self._fail_fn = fail_fn or (lambda r: None)
        self.calls: list[GenerationRequest] = []
        self.completed = 0
        self.max_in_flight = 0
        self._in_flight = 0

    @property
    def name(self) -> str:
        return self._provider_name

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.calls.append(request)
        error = self._fail_fn(request)
        if error is not None:
            raise error

        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(self._delay_fn(request))
        finally:
            self._in_flight -= 1

        self.completed += 1
        return GenerationResult(
            content=self._answer_fn(request),
            model=request.model,
            finish_reason="stop",
            usage=self._usage_fn(request),
            latency_ms=1,
        )
