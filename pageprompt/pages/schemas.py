"""Request and response schemas for page endpoints."""

from typing import Literal

from pydantic import BaseModel

from pageprompt.models import ContentFormat

# -- Requests --


class PageRequest(BaseModel):
    """A rendered page handed over by the crawler.

    instructions and long_content_policy override the run configuration for
    this page only.
    """

    url: str
    content: str
    content_format: ContentFormat | None = None
    original_content: str | None = None  # raw HTML; defaults to content
    instructions: str | None = None
    long_content_policy: str | None = None


# -- Responses --


class SkippedResponse(BaseModel):
    status: Literal["skipped"] = "skipped"
    url: str


class ModelInfo(BaseModel):
    model: str
    provider: str
    max_tokens: int
