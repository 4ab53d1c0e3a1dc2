"""Canonical data structures for pageprompt.

Defined once here, referenced everywhere else. Page-level inputs come from the
crawler, call-level results from the model providers, and PageResult is the
record handed to the result sink.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ContentFormat = Literal["markdown", "text", "html"]

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class LongContentPolicy(str, Enum):
    """How to handle content that does not fit the model's context window."""

    SKIP = "skip"
    TRUNCATE = "truncate"
    SPLIT = "split"


class Strategy(str, Enum):
    """The path a page actually took through the adapter."""

    PASS_THROUGH = "pass_through"
    SKIP = "skip"
    TRUNCATE = "truncate"
    SPLIT = "split"


# ---------------------------------------------------------------------------
# Model configuration and content
# ---------------------------------------------------------------------------


class SamplingParams(BaseModel):
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None  # output cap; provider default when None


class ModelConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    max_tokens: int  # context window, instructions + content combined
    provider: str = "openai"


class PageContent(BaseModel):
    url: str
    text: str
    format: ContentFormat = "markdown"


class Chunk(BaseModel):
    index: int  # position in the page; determines merge order
    text: str
    token_count: int


# ---------------------------------------------------------------------------
# Call results and usage
# ---------------------------------------------------------------------------


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class CallResult(BaseModel):
    """One model invocation's answer and usage."""

    answer: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str | None = None
    finish_reason: str | None = None


class AdaptedAnswer(BaseModel):
    """What the ContentAdapter produced for one page.

    answer and adapted_content are None only for the skip strategy.
    """

    strategy: Strategy
    answer: str | None = None
    adapted_content: str | None = None
    chunk_count: int = 0
    content_tokens: int
    instruction_tokens: int

    @property
    def skipped(self) -> bool:
        return self.strategy is Strategy.SKIP


# ---------------------------------------------------------------------------
# Page-level records
# ---------------------------------------------------------------------------


class PageResult(BaseModel):
    """The record pushed to the sink for each processed page."""

    url: str
    content_length: int
    content_token_length: int
    instruction_token_length: int
    answer_token_length: int
    total_token_usage: int
    model: str
    usage_limit_exceeded: bool
    answer: str
    original_content: str
    content: str  # adapted content actually sent to the model

    strategy: Strategy
    chunk_count: int = 1
    content_format: ContentFormat = "markdown"


class PageOutcome(BaseModel):
    status: Literal["processed", "skipped"]
    record: PageResult | None = None
