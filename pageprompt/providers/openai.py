"""OpenAI LLM provider, a thin subclass of OpenAICompatibleProvider."""

from openai import AsyncOpenAI

from pageprompt.providers.openai_compat import OpenAICompatibleProvider


class OpenAIProvider(OpenAICompatibleProvider):
    """LLM provider backed by OpenAI's Chat Completions API.

    base_url points the client at another server speaking the same protocol
    (a proxy or a self-hosted gateway); catalogue models still route here.
    """

    def __init__(
        self,
        *,
        client: AsyncOpenAI | None = None,
        api_key: str | None = None,
        organization: str | None = None,
        base_url: str | None = None,
    ) -> None:
        if client is not None:
            super().__init__(client)
        else:
            super().__init__(
                AsyncOpenAI(api_key=api_key, organization=organization, base_url=base_url)
            )

    @property
    def name(self) -> str:
        return "openai"
