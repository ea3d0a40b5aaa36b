"""
Error taxonomy for the knowledge-base engine.

Only InvalidInput ever reaches a caller.  Document read failures are
absorbed by the ingest pipeline and generation failures by the answer
assembler -- both are logged and degrade the result instead of raising.
"""
from __future__ import annotations

from pathlib import Path


class KBQAError(Exception):
    """Base class for all engine errors."""


class InvalidInput(KBQAError):
    """A required request field is missing or malformed (e.g. blank question)."""


class DocumentReadFailure(KBQAError):
    """A single corpus document could not be read."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {self.path}: {reason}")


class GenerationUnavailable(KBQAError):
    """External generation was requested but no credential is configured."""


class GenerationFailure(KBQAError):
    """The external generation call errored or returned nothing usable."""
