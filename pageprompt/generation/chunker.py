"""Word-boundary truncation and splitting of page content by token budget.

Text is viewed as a sequence of word segments: a run of non-whitespace plus
the whitespace that follows it. Leading whitespace sticks to the first word,
so joining all segments reproduces the text exactly.
"""

import re

from pageprompt.generation.tokens import TokenCounter
from pageprompt.models import Chunk

_WORD_RE = re.compile(r"\S+\s*")
_LEADING_WS_RE = re.compile(r"\s*")


class Chunker:
    """Fits text into token budgets without cutting words."""

    def __init__(self, counter: TokenCounter) -> None:
        self._counter = counter

    def truncate(self, text: str, max_tokens: int) -> str:
        """Return the longest word-aligned prefix of text within max_tokens.

        The whole text is returned unchanged if it already fits. Trailing
        whitespace of the kept prefix is dropped. If not even the first word
        fits, the result is the empty string.

        Raises:
            ValueError: If max_tokens is negative.
        """
        if max_tokens < 0:
            raise ValueError(f"max_tokens must be >= 0, got {max_tokens}")
        if self._counter.count(text) <= max_tokens:
            return text

        segments = self._segments(text)
        end = self._fit(segments, 0, max_tokens)
        return "".join(segments[:end]).rstrip()

    def split(self, text: str, max_tokens: int) -> list[Chunk]:
        """Partition text into the fewest ordered chunks within max_tokens.

        Chunks are packed greedily from the front, breaking only between
        words. Concatenating chunk texts in order gives back the input.
        A single word larger than the budget is cut at character boundaries,
        the one case where a break falls inside a word.

        Raises:
            ValueError: If max_tokens is not positive.
        """
        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be > 0, got {max_tokens}")

        segments = self._segments(text)
        pieces: list[str] = []
        start = 0
        while start < len(segments):
            end = self._fit(segments, start, max_tokens)
            if end > start:
                pieces.append("".join(segments[start:end]))
                start = end
                continue
            # Oversized word: emit the part that fits, keep the rest in place
            head, rest = self._cut_word(segments[start], max_tokens)
            pieces.append(head)
            if rest:
                segments[start] = rest
            else:
                start += 1

        return [
            Chunk(index=i, text=piece, token_count=self._counter.count(piece))
            for i, piece in enumerate(pieces)
        ]

    @staticmethod
    def _segments(text: str) -> list[str]:
        leading = _LEADING_WS_RE.match(text).group()
        words = _WORD_RE.findall(text, len(leading))
        if not words:
            return [leading] if leading else []
        words[0] = leading + words[0]
        return words

    def _fit(self, segments: list[str], start: int, max_tokens: int) -> int:
        """Largest end such that segments[start:end] fits; start if none do.

        Binary search, relying on the counter being monotone under appending.
        """
        lo, hi = start, len(segments)
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._counter.count("".join(segments[start:mid])) <= max_tokens:
                lo = mid
            else:
                hi = mid - 1
        return lo

    def _cut_word(self, word: str, max_tokens: int) -> tuple[str, str]:
        """Split an oversized word into (longest fitting prefix, remainder).

        At least one character is always taken so splitting makes progress.
        """
        lo, hi = 1, len(word)
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._counter.count(word[:mid]) <= max_tokens:
                lo = mid
            else:
                hi = mid - 1
        return word[:lo], word[lo:]
