"""
Word-window chunker
--------------------
Splits a document's whitespace-delimited words into consecutive,
non-overlapping windows of at most ``max_words`` words.  Only the last
window may be shorter, and joining every window's words with single
spaces reproduces the document's word sequence exactly.

Whitespace inside the document (newlines, tabs, runs of spaces) is not
preserved -- chunk text is always single-space joined.
"""
from __future__ import annotations

from loguru import logger

MAX_WORDS = 220


def split_words(text: str, max_words: int = MAX_WORDS) -> list[list[str]]:
    """Group the words of ``text`` into windows of at most ``max_words``."""
    if max_words <= 0:
        raise ValueError(f"max_words must be > 0, got {max_words}")
    words = text.split()
    return [words[i: i + max_words] for i in range(0, len(words), max_words)]


class WordChunker:
    """
    Fixed-size word windows, no overlap.

    Usage:
        chunker = WordChunker(max_words=220)
        texts = chunker.split(document_text)
    """

    def __init__(self, max_words: int = MAX_WORDS) -> None:
        if max_words <= 0:
            raise ValueError(f"max_words must be > 0, got {max_words}")
        self.max_words = max_words

    def split(self, text: str) -> list[str]:
        """Return chunk texts in document order; empty text yields []."""
        chunks = [" ".join(window) for window in split_words(text, self.max_words)]
        logger.debug(f"[Chunker] {len(chunks)} chunk(s) | max_words={self.max_words}")
        return chunks
