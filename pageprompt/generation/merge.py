"""Combining ordered chunk answers into a single page answer.

NewlineJoinMerger is the default: a structural join in chunk order.
ModelAssistedMerger asks the model to stitch the parts into one document and
is only used when explicitly configured.
"""

import logging
from abc import ABC, abstractmethod

from pageprompt.generation.context import content_budget
from pageprompt.generation.runner import InstructionRunner
from pageprompt.generation.tokens import TokenCounter
from pageprompt.generation.usage import UsageAccumulator

logger = logging.getLogger(__name__)

MERGE_DOCS_SEPARATOR = "----"

MERGE_INSTRUCTIONS = (
    f"Merge the following text separated by {MERGE_DOCS_SEPARATOR} into a single text. "
    "The final text should have same format."
)


class ResultMerger(ABC):
    """Interface for merging answers produced from consecutive chunks."""

    @abstractmethod
    async def merge(
        self,
        answers: list[str],
        *,
        url: str | None = None,
        usage: UsageAccumulator | None = None,
    ) -> str:
        """Merge answers, given in chunk order, into one answer."""
        ...


class NewlineJoinMerger(ResultMerger):
    async def merge(
        self,
        answers: list[str],
        *,
        url: str | None = None,
        usage: UsageAccumulator | None = None,
    ) -> str:
        return "\n".join(answers)


class ModelAssistedMerger(ResultMerger):
    """One extra model call that rewrites the parts as a coherent whole.

    The merge call's usage is recorded on the page accumulator when given.
    When the parts together do not fit the model's content budget, the call
    is not made and the parts are joined by newlines instead.
    """

    def __init__(
        self,
        runner: InstructionRunner,
        counter: TokenCounter,
        instructions: str = MERGE_INSTRUCTIONS,
    ) -> None:
        self._runner = runner
        self._counter = counter
        self._instructions = instructions

    async def merge(
        self,
        answers: list[str],
        *,
        url: str | None = None,
        usage: UsageAccumulator | None = None,
    ) -> str:
        if len(answers) < 2:
            return "\n".join(answers)

        joined = f"\n{MERGE_DOCS_SEPARATOR}\n".join(answers)
        budget = content_budget(
            self._runner.model_config.max_tokens,
            self._counter.count(self._instructions),
        )
        merge_tokens = self._counter.count(joined)
        if merge_tokens > budget:
            logger.warning(
                "Answers for %s are %d tokens, over the %d token merge budget; "
                "joining without a merge call",
                url, merge_tokens, budget,
            )
            return "\n".join(answers)

        result = await self._runner.run(self._instructions, joined, url=url)
        if usage is not None:
            usage.record(result.usage)
        return result.answer
