"""Token counting abstractions for content budgeting.

Provides a TokenCounter interface and implementations. The approximate counter
(len // 4) is the provider-agnostic heuristic; OpenAI-family models are counted
with tiktoken.
"""

from abc import ABC, abstractmethod

import tiktoken

from pageprompt.models import ModelConfig

FALLBACK_ENCODING = "cl100k_base"


class TokenCounter(ABC):
    """Interface for counting tokens in text."""

    @abstractmethod
    def count(self, text: str) -> int:
        """Return the estimated token count for the given text."""
        ...


class ApproximateTokenCounter(TokenCounter):
    """Character heuristic: len(text) // 4.

    Roughly 4 characters per token for English text. Adequate for
    boundary-safe truncation decisions; not precise enough for
    billing-grade token attribution.
    """

    def count(self, text: str) -> int:
        return len(text) // 4


class TiktokenCounter(TokenCounter):
    """Exact BPE token counts for OpenAI models.

    The encoding is resolved lazily on first use, so constructing a counter
    never touches the tiktoken cache.
    """

    def __init__(self, model: str) -> None:
        self._model = model
        self._encoding: tiktoken.Encoding | None = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            try:
                self._encoding = tiktoken.encoding_for_model(self._model)
            except KeyError:
                self._encoding = tiktoken.get_encoding(FALLBACK_ENCODING)
        return self._encoding

    def count(self, text: str) -> int:
        if not text:
            return 0
        return len(self.encoding.encode(text, disallowed_special=()))


def get_token_counter(model_config: ModelConfig) -> TokenCounter:
    """Pick the counter matching the model family."""
    if model_config.provider == "openai":
        return TiktokenCounter(model_config.model)
    return ApproximateTokenCounter()
