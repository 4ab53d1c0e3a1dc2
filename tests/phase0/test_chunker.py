"""Contract tests for Chunker.truncate() and Chunker.split()."""

import pytest

from pageprompt.generation.chunker import Chunker
from pageprompt.generation.tokens import ApproximateTokenCounter
from tests.fixtures import WordTokenCounter, numbered_words


@pytest.fixture
def words() -> Chunker:
    return Chunker(WordTokenCounter())


@pytest.fixture
def approx() -> Chunker:
    return Chunker(ApproximateTokenCounter())


class TestTruncate:
    def test_text_that_fits_is_returned_unchanged(self, words: Chunker):
        text = "  already short enough \n"
        assert words.truncate(text, 10) == text

    def test_cuts_at_word_boundary(self, words: Chunker):
        assert words.truncate("alpha beta gamma delta", 2) == "alpha beta"

    def test_never_cuts_inside_a_word(self, approx: Chunker):
        # "abcdefgh " is 2 tokens; adding "ijklmnop" makes 4
        assert approx.truncate("abcdefgh ijklmnop", 3) == "abcdefgh"

    def test_result_within_budget(self, approx: Chunker):
        counter = ApproximateTokenCounter()
        text = numbered_words(250)
        result = approx.truncate(text, 80)
        assert counter.count(result) <= 80
        assert text.startswith(result)
        assert result.split() == text.split()[:80]

    def test_first_word_too_long_gives_empty(self, approx: Chunker):
        assert approx.truncate("abcdefghijkl more", 2) == ""

    def test_zero_budget(self, words: Chunker):
        assert words.truncate("alpha beta", 0) == ""

    def test_negative_budget_rejected(self, words: Chunker):
        with pytest.raises(ValueError):
            words.truncate("alpha", -1)

    def test_deterministic(self, approx: Chunker):
        text = numbered_words(120)
        assert approx.truncate(text, 33) == approx.truncate(text, 33)


class TestSplit:
    def test_empty_input_gives_no_chunks(self, words: Chunker):
        assert words.split("", 5) == []

    def test_concatenation_reconstructs_input(self, words: Chunker):
        text = "  Hello,  world!\n\nThis is   a test.\t End "
        chunks = words.split(text, 2)
        assert "".join(c.text for c in chunks) == text
        assert [c.text for c in chunks] == [
            "  Hello,  world!\n\n",
            "This is   ",
            "a test.\t ",
            "End ",
        ]

    def test_every_chunk_within_budget(self, approx: Chunker):
        counter = ApproximateTokenCounter()
        chunks = approx.split(numbered_words(250), 80)
        assert all(counter.count(c.text) <= 80 for c in chunks)
        assert all(c.token_count == counter.count(c.text) for c in chunks)

    def test_minimal_chunk_count(self, words: Chunker):
        text = " ".join(f"w{i}" for i in range(10))
        assert len(words.split(text, 3)) == 4
        assert len(words.split(text, 5)) == 2
        assert len(words.split(text, 10)) == 1

    def test_scenario_250_tokens_budget_80_gives_four_chunks(self, approx: Chunker):
        chunks = approx.split(numbered_words(250), 80)
        assert len(chunks) == 4
        assert [c.token_count for c in chunks] == [80, 80, 80, 10]

    def test_chunks_are_indexed_in_order(self, words: Chunker):
        chunks = words.split("a b c d e f g", 2)
        assert [c.index for c in chunks] == list(range(len(chunks)))

    def test_oversized_word_is_split_by_characters(self, approx: Chunker):
        counter = ApproximateTokenCounter()
        text = "x" * 20
        chunks = approx.split(text, 2)
        assert "".join(c.text for c in chunks) == text
        assert all(counter.count(c.text) <= 2 for c in chunks)
        assert len(chunks) == 2

    def test_oversized_word_remainder_packs_with_next_words(self, approx: Chunker):
        # "xxxxxxxxxxxx " is 3 tokens; 11 chars fit in 2, the tail joins "yy"
        chunks = approx.split("xxxxxxxxxxxx yy", 2)
        assert [c.text for c in chunks] == ["xxxxxxxxxxx", "x yy"]

    def test_one_word_budget_gives_one_word_per_chunk(self, words: Chunker):
        chunks = words.split("one two three", 1)
        assert [c.text for c in chunks] == ["one ", "two ", "three"]

    def test_result_is_restartable(self, words: Chunker):
        chunks = words.split("a b c d", 2)
        assert list(chunks) == list(chunks)

    def test_deterministic(self, approx: Chunker):
        text = numbered_words(300)
        assert approx.split(text, 70) == approx.split(text, 70)

    def test_non_positive_budget_rejected(self, words: Chunker):
        with pytest.raises(ValueError):
            words.split("alpha", 0)
