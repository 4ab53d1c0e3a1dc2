"""Model catalogue: context window sizes and provider families.

resolve_model_config() is called once per run. Unlike a chat UI, a page run
cannot fall back to a guessed context limit: budget arithmetic depends on it,
so unknown models are rejected up front.
"""

from pageprompt.models import ModelConfig

# Known model context limits (tokens), keyed by model id.
MODEL_CONTEXT_LIMITS: dict[str, int] = {
    # Anthropic
    "claude-opus-4-6": 200_000,
    "claude-sonnet-4-5-20250929": 200_000,
    "claude-haiku-4-5-20251001": 200_000,
    "claude-3-5-sonnet-20241022": 200_000,
    "claude-3-haiku-20240307": 200_000,
    # OpenAI
    "gpt-5.2": 400_000,
    "gpt-5-mini": 128_000,
    "gpt-4o": 128_000,
    "gpt-4o-mini": 128_000,
    "gpt-4-turbo": 128_000,
    "gpt-4-32k": 32_768,
    "gpt-4": 8_192,
    "gpt-3.5-turbo-16k": 16_385,
    "gpt-3.5-turbo": 16_385,
    "o4-mini": 200_000,
    "o3-mini": 200_000,
}

DEFAULT_MODEL = "gpt-3.5-turbo"


def provider_for_model(model: str) -> str:
    """Provider family of a catalogue model id."""
    if model.startswith("claude"):
        return "anthropic"
    return "openai"


def resolve_model_config(model: str | None = None) -> ModelConfig:
    """Look up a model's context window.

    Raises:
        UnsupportedModelError: If the model is not in the catalogue.
    """
    model = model or DEFAULT_MODEL
    try:
        max_tokens = MODEL_CONTEXT_LIMITS[model]
    except KeyError:
        raise UnsupportedModelError(model)
    return ModelConfig(
        model=model,
        max_tokens=max_tokens,
        provider=provider_for_model(model),
    )


def content_budget(max_tokens: int, instruction_tokens: int) -> int:
    """Tokens left for content: floor(0.9 * max_tokens) - instruction_tokens.

    The 10% headroom covers tokenizer drift and the answer itself.
    """
    return max_tokens * 9 // 10 - instruction_tokens


class UnsupportedModelError(Exception):
    def __init__(self, model: str) -> None:
        self.model = model
        supported = ", ".join(sorted(MODEL_CONTEXT_LIMITS))
        super().__init__(f"Unsupported model '{model}'. Supported: {supported}")
