"""Tests for the word-window chunker."""

import pytest

from helpers import numbered_words
from kbqa.chunking.chunker import WordChunker, split_words


class TestWordChunker:

    def test_300_words_default_window(self):
        chunks = WordChunker().split(numbered_words(300))
        assert len(chunks) == 2
        assert len(chunks[0].split()) == 220
        assert len(chunks[1].split()) == 80

    @pytest.mark.parametrize("n_words,max_words", [(1, 1), (10, 3), (9, 3), (221, 220), (50, 100)])
    def test_reconstruction_and_window_sizes(self, n_words, max_words):
        text = numbered_words(n_words)
        chunks = WordChunker(max_words).split(text)

        assert " ".join(chunks) == " ".join(text.split())
        assert all(len(c.split()) == max_words for c in chunks[:-1])
        assert 0 < len(chunks[-1].split()) <= max_words

    def test_irregular_whitespace_collapses(self):
        text = "alpha\n\nbeta\t gamma    delta\r\nepsilon  "
        chunks = WordChunker(2).split(text)
        assert chunks == ["alpha beta", "gamma delta", "epsilon"]

    def test_empty_input(self):
        assert WordChunker().split("") == []
        assert WordChunker().split(" \n ") == []

    @pytest.mark.parametrize("bad", [0, -5])
    def test_non_positive_max_words_rejected(self, bad):
        with pytest.raises(ValueError):
            WordChunker(bad)
        with pytest.raises(ValueError):
            split_words("a b", bad)
