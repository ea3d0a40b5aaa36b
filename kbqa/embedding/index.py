"""
In-memory chunk index
----------------------
Holds the ordered chunk records produced by the last ingest run.

The index never mutates in place.  Ingest builds a complete new tuple
of chunks and hands it to replace(), which swaps the reference under a
lock.  Readers call snapshot() once at the start of an operation and
work on that tuple, so a query in flight sees either the whole old
index or the whole new one.

Nothing is persisted: a restart starts from the Empty state.
"""
from __future__ import annotations

import threading
from typing import Iterable

from loguru import logger

from kbqa.chunking.schemas import Chunk


class ChunkIndex:
    """Replaceable, read-mostly container for the current chunk set."""

    def __init__(self) -> None:
        self._chunks: tuple[Chunk, ...] = ()
        self._lock = threading.Lock()

    def snapshot(self) -> tuple[Chunk, ...]:
        """Return the current chunk tuple (immutable, safe to iterate without locking)."""
        with self._lock:
            return self._chunks

    def replace(self, chunks: Iterable[Chunk]) -> int:
        """Swap in a freshly built chunk sequence.  Returns the new size."""
        new_chunks = tuple(chunks)
        with self._lock:
            previous = len(self._chunks)
            self._chunks = new_chunks
        logger.info(f"[ChunkIndex] Replaced {previous} chunk(s) with {len(new_chunks)}")
        return len(new_chunks)

    @property
    def is_empty(self) -> bool:
        return len(self.snapshot()) == 0

    def __len__(self) -> int:
        return len(self.snapshot())
