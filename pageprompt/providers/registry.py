"""Provider registry: holds the configured LLM provider instances for a run.

A registry is an explicit value created at startup and passed to whoever needs
it; there is no module-level provider table.
"""

from pageprompt.providers.base import LLMProvider


class ProviderRegistry:
    """Maps provider names to provider instances."""

    def __init__(self) -> None:
        self._providers: dict[str, LLMProvider] = {}

    def register(self, provider: LLMProvider) -> None:
        """Register a provider instance by name."""
        self._providers[provider.name] = provider

    def get(self, name: str) -> LLMProvider:
        """Get a registered provider by name. Raises ProviderNotFoundError if not found."""
        try:
            return self._providers[name]
        except KeyError:
            available = ", ".join(self._providers.keys()) or "(none)"
            raise ProviderNotFoundError(
                f"Provider '{name}' not registered. Available: {available}"
            )

    def names(self) -> list[str]:
        """Return names of all registered providers."""
        return list(self._providers.keys())

    def clear(self) -> None:
        self._providers.clear()


class ProviderNotFoundError(Exception):
    pass
