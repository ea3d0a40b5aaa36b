"""
Chunk schema - the atomic unit that gets vectorised and indexed.

A Chunk traces back to its source document path so every retrieval
result carries the provenance needed for attribution.
"""
from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """
    A bounded window of consecutive words from one document.

    Chunks are frozen: once the ingest pipeline builds one it is never
    modified, which is what lets query threads share them without locking.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    id: str                              # "<basename>::<ordinal>"
    source: str                          # Full path of the source document
    ordinal: int = Field(ge=0)           # Position within the document

    # Content
    text: str
    vector: dict[str, int] = Field(default_factory=dict)

    @property
    def source_name(self) -> str:
        return Path(self.source).name

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @staticmethod
    def make_id(source: str | Path, ordinal: int) -> str:
        return f"{Path(source).name}::{ordinal}"
