"""Token usage accounting: per-page accumulation and per-credential ceilings."""

import hashlib

from pydantic import BaseModel, Field

from pageprompt.models import TokenUsage


def credential_fingerprint(credential: str) -> str:
    """Stable short id for a credential, so raw keys are never kept."""
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()[:16]


class UsageLimits(BaseModel):
    """Token ceilings per credential. None means unlimited."""

    default_limit: int | None = None
    per_credential: dict[str, int] = Field(default_factory=dict)  # fingerprint → ceiling

    def limit_for(self, credential: str) -> int | None:
        return self.per_credential.get(
            credential_fingerprint(credential), self.default_limit
        )


class CredentialUsageTracker:
    """Run-scoped tally of tokens spent per credential.

    Pages commit their totals here once they finish; nothing is persisted
    across runs.
    """

    def __init__(self) -> None:
        self._used: dict[str, int] = {}

    def used(self, credential: str) -> int:
        return self._used.get(credential_fingerprint(credential), 0)

    def commit(self, credential: str, tokens: int) -> None:
        key = credential_fingerprint(credential)
        self._used[key] = self._used.get(key, 0) + tokens


class UsageAccumulator:
    """Token usage for a single page's model calls.

    Created fresh per page. record() does not await, so concurrent chunk
    tasks on one event loop cannot interleave inside it.
    """

    def __init__(
        self,
        model: str,
        *,
        limits: UsageLimits | None = None,
        tracker: CredentialUsageTracker | None = None,
    ) -> None:
        self.model = model
        self._limits = limits or UsageLimits()
        self._tracker = tracker
        self._usage = TokenUsage()
        self._calls = 0

    def record(self, usage: TokenUsage) -> None:
        self._usage = self._usage + usage
        self._calls += 1

    def total(self) -> int:
        return self._usage.total_tokens

    @property
    def usage(self) -> TokenUsage:
        return self._usage

    @property
    def call_count(self) -> int:
        return self._calls

    def exceeded_limit(self, credential: str | None) -> bool:
        """Whether this page plus earlier pages on the credential crossed its ceiling."""
        if not credential:
            return False
        ceiling = self._limits.limit_for(credential)
        if ceiling is None:
            return False
        previous = self._tracker.used(credential) if self._tracker else 0
        return previous + self.total() > ceiling
