"""
Shared query-side schemas.

Chunk itself lives in kbqa.chunking.schemas; this module holds the
derived, never-persisted shapes built on top of it.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kbqa.chunking.schemas import Chunk


class ScoredChunk(BaseModel):
    """A chunk paired with its similarity to one query."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    score: float = Field(ge=0.0, le=1.0)

    def to_result(self) -> dict[str, Any]:
        """Wire shape shared by the search and ask responses."""
        return {
            "id": self.chunk.id,
            "source": self.chunk.source,
            "chunk_index": self.chunk.ordinal,
            "text": self.chunk.text,
            "score": self.score,
        }
