"""Content adaptation: fit page content into a model's context window.

ContentAdapter picks one strategy per page and runs it:

- pass_through: content fits, one call with the untouched content
- skip: content too long and policy says skip; no call at all
- truncate: one call on a word-aligned prefix that fits the budget
- split: one concurrent call per chunk, answers merged in chunk order

The content budget for truncate/split leaves 10% of the window as headroom
and subtracts the instruction tokens.
"""

import asyncio
import logging

from pageprompt.generation.chunker import Chunker
from pageprompt.generation.context import content_budget
from pageprompt.generation.merge import NewlineJoinMerger, ResultMerger
from pageprompt.generation.runner import InstructionRunner
from pageprompt.generation.tokens import TokenCounter
from pageprompt.generation.usage import UsageAccumulator
from pageprompt.models import (
    AdaptedAnswer,
    CallResult,
    Chunk,
    LongContentPolicy,
    PageContent,
    Strategy,
)

logger = logging.getLogger(__name__)


def parse_policy(value: LongContentPolicy | str | None) -> LongContentPolicy | None:
    """Normalize a configured policy value.

    Raises:
        UnsupportedPolicyError: If the value is not skip, truncate or split.
    """
    if value is None or isinstance(value, LongContentPolicy):
        return value
    try:
        return LongContentPolicy(value)
    except ValueError:
        raise UnsupportedPolicyError(value)


def select_strategy(
    content_tokens: int, max_tokens: int, policy: LongContentPolicy | None
) -> Strategy:
    """Pure strategy choice from content size, window size and policy.

    Raises:
        ConfigurationError: If content is too long and no policy is set.
    """
    if content_tokens <= max_tokens:
        return Strategy.PASS_THROUGH
    if policy is None:
        raise ConfigurationError(
            f"Content has {content_tokens} tokens, over the {max_tokens} token limit, "
            "and no long content policy is configured"
        )
    return Strategy(policy.value)


class ContentAdapter:
    """Runs one page's content through the strategy state machine."""

    def __init__(
        self,
        runner: InstructionRunner,
        counter: TokenCounter,
        *,
        merger: ResultMerger | None = None,
    ) -> None:
        self._runner = runner
        self._counter = counter
        self._chunker = Chunker(counter)
        self._merger = merger or NewlineJoinMerger()

    async def adapt(
        self,
        page: PageContent,
        instructions: str,
        policy: LongContentPolicy | str | None,
        usage: UsageAccumulator,
    ) -> AdaptedAnswer:
        """Produce the page's answer, or a skip outcome.

        Every call's usage is recorded on usage as soon as the call returns.

        Raises:
            ConfigurationError: Bad policy or no room left for content.
            ModelCallError: A model call failed; the page is abandoned.
        """
        model_config = self._runner.model_config
        content_tokens = self._counter.count(page.text)
        instruction_tokens = self._counter.count(instructions)

        # The policy only matters once content is over the window
        parsed_policy = None
        if content_tokens > model_config.max_tokens:
            parsed_policy = parse_policy(policy)
        strategy = select_strategy(content_tokens, model_config.max_tokens, parsed_policy)
        outcome = AdaptedAnswer(
            strategy=strategy,
            content_tokens=content_tokens,
            instruction_tokens=instruction_tokens,
        )

        if strategy is Strategy.PASS_THROUGH:
            logger.info(
                "Processing page %s (%d chars, %s)", page.url, len(page.text), page.format
            )
            result = await self._runner.run(instructions, page.text, url=page.url)
            usage.record(result.usage)
            return outcome.model_copy(
                update={"answer": result.answer, "adapted_content": page.text, "chunk_count": 1}
            )

        if strategy is Strategy.SKIP:
            logger.info(
                "Skipping page %s: %d tokens is too long for %s",
                page.url, content_tokens, model_config.model,
            )
            return outcome

        budget = content_budget(model_config.max_tokens, instruction_tokens)

        if strategy is Strategy.TRUNCATE:
            if budget < 0:
                raise InsufficientBudgetError(budget, instruction_tokens, model_config.max_tokens)
            truncated = self._chunker.truncate(page.text, budget)
            logger.warning(
                "Content for %s was truncated to %d of %d chars to fit %d tokens",
                page.url, len(truncated), len(page.text), budget,
            )
            result = await self._runner.run(instructions, truncated, url=page.url)
            usage.record(result.usage)
            return outcome.model_copy(
                update={"answer": result.answer, "adapted_content": truncated, "chunk_count": 1}
            )

        # Strategy.SPLIT: a chunk needs at least one token of room
        if budget < 1:
            raise InsufficientBudgetError(budget, instruction_tokens, model_config.max_tokens)
        chunks = self._chunker.split(page.text, budget)
        logger.info(
            "Processing page %s in %d chunks of at most %d tokens",
            page.url, len(chunks), budget,
        )
        results = await self._run_chunks(instructions, chunks, page.url, usage)
        answer = await self._merger.merge(
            [r.answer for r in results], url=page.url, usage=usage
        )
        return outcome.model_copy(
            update={
                "answer": answer,
                "adapted_content": "".join(c.text for c in chunks),
                "chunk_count": len(chunks),
            }
        )

    async def _run_chunks(
        self,
        instructions: str,
        chunks: list[Chunk],
        url: str,
        usage: UsageAccumulator,
    ) -> list[CallResult]:
        """Run all chunks concurrently; results come back in chunk order.

        The first failure cancels the chunks still in flight and propagates.
        """
        tasks = [
            asyncio.create_task(self._run_chunk(instructions, chunk, url, usage))
            for chunk in chunks
        ]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Drain so sibling failures are retrieved, not reported as unhandled
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _run_chunk(
        self,
        instructions: str,
        chunk: Chunk,
        url: str,
        usage: UsageAccumulator,
    ) -> CallResult:
        logger.debug(
            "Chunk %d of %s: %d tokens", chunk.index, url, chunk.token_count
        )
        result = await self._runner.run(
            instructions, chunk.text, url=url, chunk_index=chunk.index
        )
        usage.record(result.usage)
        return result


class ConfigurationError(Exception):
    """Page-scoped configuration problem; the page is abandoned."""


class UnsupportedPolicyError(ConfigurationError):
    def __init__(self, value: object) -> None:
        self.value = value
        allowed = ", ".join(p.value for p in LongContentPolicy)
        super().__init__(
            f"Unsupported config value for long content policy: {value!r} "
            f"(expected one of {allowed})"
        )


class InsufficientBudgetError(ConfigurationError):
    def __init__(self, budget: int, instruction_tokens: int, max_tokens: int) -> None:
        self.budget = budget
        super().__init__(
            f"Instructions use {instruction_tokens} tokens, leaving {budget} tokens "
            f"for content within 90% of the {max_tokens} token context window"
        )
