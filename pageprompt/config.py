"""Run configuration loaded from the environment (and an optional .env file)."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

from pageprompt.generation.context import DEFAULT_MODEL
from pageprompt.models import ContentFormat


class RunConfig(BaseModel):
    """Everything a run needs to know, resolved once at startup.

    long_content_policy is kept as the raw configured string; it is validated
    per page so a bad value abandons pages instead of crashing the run.
    """

    model: str = DEFAULT_MODEL
    instructions: str | None = None
    long_content_policy: str | None = None
    content_format: ContentFormat = "markdown"
    merge_mode: Literal["join", "model"] = "join"
    usage_ceiling: int | None = None
    results_path: str | None = None

    openai_api_key: str | None = None
    openai_organization_id: str | None = None
    openai_base_url: str | None = None
    anthropic_api_key: str | None = None

    def credential_for(self, provider: str) -> str | None:
        """API key used for calls to the given provider family."""
        if provider == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key


def load_run_config(
    env: Mapping[str, str] | None = None,
    *,
    dotenv_path: Path | None = None,
) -> RunConfig:
    """Build a RunConfig from environment variables.

    With no explicit env, a .env file (dotenv_path, or the default lookup) is
    loaded into os.environ first. Empty values count as unset.
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    def get(name: str) -> str | None:
        value = env.get(name, "").strip()
        return value or None

    values = {
        "model": get("PAGEPROMPT_MODEL"),
        "instructions": get("PAGEPROMPT_INSTRUCTIONS"),
        "long_content_policy": get("PAGEPROMPT_LONG_CONTENT"),
        "content_format": get("PAGEPROMPT_CONTENT_FORMAT"),
        "merge_mode": get("PAGEPROMPT_MERGE_MODE"),
        "usage_ceiling": get("PAGEPROMPT_USAGE_CEILING"),
        "results_path": get("PAGEPROMPT_RESULTS_PATH"),
        "openai_api_key": get("OPENAI_API_KEY"),
        "openai_organization_id": get("OPENAI_ORGANIZATION_ID"),
        "openai_base_url": get("OPENAI_BASE_URL"),
        "anthropic_api_key": get("ANTHROPIC_API_KEY"),
    }
    return RunConfig.model_validate({k: v for k, v in values.items() if v is not None})
