"""Result sinks: where processed page records go."""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path

from pageprompt.models import PageResult


class ResultSink(ABC):
    @abstractmethod
    async def push(self, record: PageResult) -> None:
        """Store one page record."""
        ...

    @abstractmethod
    async def records(self) -> list[PageResult]:
        """All records pushed so far, in push order."""
        ...


class InMemoryResultSink(ResultSink):
    def __init__(self) -> None:
        self._records: list[PageResult] = []

    async def push(self, record: PageResult) -> None:
        self._records.append(record)

    async def records(self) -> list[PageResult]:
        return list(self._records)


class JsonLinesResultSink(ResultSink):
    """Appends one JSON object per record to a file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    async def push(self, record: PageResult) -> None:
        await asyncio.to_thread(self._append, record.model_dump_json() + "\n")

    async def records(self) -> list[PageResult]:
        if not self._path.exists():
            return []
        text = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        return [PageResult.model_validate_json(line) for line in text.splitlines() if line]

    def _append(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line)
