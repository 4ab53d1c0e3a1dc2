"""Abstract LLM provider interface and shared data types."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from pageprompt.models import SamplingParams, TokenUsage


class GenerationRequest(BaseModel):
    """Everything a provider needs to make an API call."""

    model: str
    messages: list[dict[str, str]]
    system_prompt: str | None = None
    sampling_params: SamplingParams = Field(default_factory=SamplingParams)


class GenerationResult(BaseModel):
    """Full response from a provider after generation completes."""

    content: str
    model: str
    finish_reason: str | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)
    latency_ms: int | None = None
    raw_response: dict[str, Any] | None = None


class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'openai')."""
        ...

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Send a non-streaming generation request. Returns the full result."""
        ...
