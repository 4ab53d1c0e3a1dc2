"""pageprompt FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from anthropic import AsyncAnthropic
from fastapi import FastAPI

from pageprompt.config import RunConfig, load_run_config
from pageprompt.generation.context import MODEL_CONTEXT_LIMITS, provider_for_model
from pageprompt.pages.router import get_page_service
from pageprompt.pages.router import router as pages_router
from pageprompt.pages.schemas import ModelInfo
from pageprompt.pages.service import PageService
from pageprompt.pages.sink import InMemoryResultSink, JsonLinesResultSink, ResultSink
from pageprompt.providers.anthropic import AnthropicProvider
from pageprompt.providers.openai import OpenAIProvider
from pageprompt.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def build_registry(config: RunConfig) -> ProviderRegistry:
    """Register a provider for every family with a configured credential."""
    registry = ProviderRegistry()

    if config.openai_api_key:
        registry.register(
            OpenAIProvider(
                api_key=config.openai_api_key,
                organization=config.openai_organization_id,
                base_url=config.openai_base_url,
            )
        )

    if config.anthropic_api_key:
        registry.register(AnthropicProvider(AsyncAnthropic(api_key=config.anthropic_api_key)))

    return registry


def build_sink(config: RunConfig) -> ResultSink:
    if config.results_path:
        return JsonLinesResultSink(config.results_path)
    return InMemoryResultSink()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Resolve configuration once and wire the page service."""
    config = load_run_config()
    registry = build_registry(config)
    service = PageService(config, registry, build_sink(config))
    logger.info(
        "Serving pages with %s (%d token context)",
        service.model_config.model, service.model_config.max_tokens,
    )
    app.dependency_overrides[get_page_service] = lambda: service

    app.state.registry = registry
    yield

    app.dependency_overrides.pop(get_page_service, None)


app = FastAPI(
    title="pageprompt",
    description=(
        "Runs natural-language instructions over crawled pages, fitting each"
        " page into the model's context window"
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(pages_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}


@app.get("/api/models")
async def models() -> list[ModelInfo]:
    return [
        ModelInfo(model=name, provider=provider_for_model(name), max_tokens=limit)
        for name, limit in MODEL_CONTEXT_LIMITS.items()
    ]
