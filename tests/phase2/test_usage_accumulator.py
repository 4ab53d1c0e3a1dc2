"""Contract tests for UsageAccumulator, UsageLimits and CredentialUsageTracker."""

import asyncio

from pageprompt.generation.usage import (
    CredentialUsageTracker,
    UsageAccumulator,
    UsageLimits,
    credential_fingerprint,
)
from pageprompt.models import TokenUsage


def _usage(total: int) -> TokenUsage:
    return TokenUsage(prompt_tokens=total - 1, completion_tokens=1, total_tokens=total)


class TestRecord:
    def test_starts_empty(self):
        acc = UsageAccumulator("gpt-4")
        assert acc.total() == 0
        assert acc.call_count == 0
        assert acc.usage == TokenUsage()

    def test_sums_recorded_usage(self):
        acc = UsageAccumulator("gpt-4")
        acc.record(_usage(15))
        acc.record(_usage(30))
        assert acc.total() == 45
        assert acc.usage.completion_tokens == 2
        assert acc.call_count == 2

    async def test_concurrent_records_are_not_lost(self):
        acc = UsageAccumulator("gpt-4")

        async def call(i: int) -> None:
            await asyncio.sleep(0)
            acc.record(_usage(i + 1))

        await asyncio.gather(*[call(i) for i in range(100)])
        assert acc.total() == sum(range(1, 101))
        assert acc.call_count == 100


class TestExceededLimit:
    def test_no_ceiling_never_exceeded(self):
        acc = UsageAccumulator("gpt-4")
        acc.record(_usage(1_000_000))
        assert acc.exceeded_limit("sk-test") is False

    def test_missing_credential_never_exceeded(self):
        acc = UsageAccumulator("gpt-4", limits=UsageLimits(default_limit=1))
        acc.record(_usage(100))
        assert acc.exceeded_limit(None) is False

    def test_default_ceiling(self):
        acc = UsageAccumulator("gpt-4", limits=UsageLimits(default_limit=20))
        acc.record(_usage(20))
        assert acc.exceeded_limit("sk-test") is False
        acc.record(_usage(1))
        assert acc.exceeded_limit("sk-test") is True

    def test_per_credential_override(self):
        limits = UsageLimits(
            default_limit=1_000,
            per_credential={credential_fingerprint("sk-trial"): 10},
        )
        acc = UsageAccumulator("gpt-4", limits=limits)
        acc.record(_usage(50))
        assert acc.exceeded_limit("sk-trial") is True
        assert acc.exceeded_limit("sk-paid") is False

    def test_includes_earlier_pages_from_tracker(self):
        tracker = CredentialUsageTracker()
        tracker.commit("sk-test", 90)
        acc = UsageAccumulator("gpt-4", limits=UsageLimits(default_limit=100), tracker=tracker)
        acc.record(_usage(15))
        assert acc.exceeded_limit("sk-test") is True
        assert acc.exceeded_limit("sk-other") is False


class TestCredentialUsageTracker:
    def test_commits_accumulate_per_credential(self):
        tracker = CredentialUsageTracker()
        tracker.commit("sk-a", 10)
        tracker.commit("sk-a", 5)
        tracker.commit("sk-b", 1)
        assert tracker.used("sk-a") == 15
        assert tracker.used("sk-b") == 1
        assert tracker.used("sk-c") == 0

    def test_raw_credentials_not_stored(self):
        tracker = CredentialUsageTracker()
        tracker.commit("sk-secret-value", 10)
        assert "sk-secret-value" not in repr(vars(tracker))

    def test_fingerprint_is_stable(self):
        assert credential_fingerprint("sk-a") == credential_fingerprint("sk-a")
        assert credential_fingerprint("sk-a") != credential_fingerprint("sk-b")
