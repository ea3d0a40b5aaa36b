"""
Corpus sources
---------------
Two collaborators feed the ingest pipeline:

  FileDocumentLoader -- reads one document path as text, raising
                        DocumentReadFailure for anything that goes wrong
                        with that single path.
  UploadRegistry     -- lists (and stores) documents uploaded at runtime,
                        which are ingested alongside the static corpus.

Both are small on purpose so tests and alternative deployments can swap
in their own objects with the same methods.
"""
from __future__ import annotations

from pathlib import Path
from typing import Protocol

from loguru import logger

from kbqa.errors import DocumentReadFailure
from kbqa.utils.helpers import ensure_dirs, safe_filename


class DocumentLoader(Protocol):
    def load(self, path: Path) -> str: ...


class UploadSource(Protocol):
    def paths(self) -> list[Path]: ...


class FileDocumentLoader:
    """Reads documents from the local filesystem."""

    def __init__(self, encoding: str = "utf-8-sig") -> None:
        self.encoding = encoding

    def load(self, path: Path) -> str:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadFailure(path, str(exc)) from exc


class UploadRegistry:
    """
    Directory-backed registry of uploaded documents.

    Every regular file in ``upload_dir`` counts as an uploaded document.
    A missing directory simply means nothing has been uploaded yet.
    """

    def __init__(self, upload_dir: str | Path = "data/uploads") -> None:
        self.upload_dir = Path(upload_dir)

    def paths(self) -> list[Path]:
        if not self.upload_dir.is_dir():
            return []
        return sorted(p for p in self.upload_dir.iterdir() if p.is_file())

    def save(self, filename: str, data: bytes) -> Path:
        """Store an uploaded file, never overwriting an existing one."""
        ensure_dirs(self.upload_dir)
        name = safe_filename(filename)
        target = self.upload_dir / name
        stem, suffix = target.stem, target.suffix
        n = 1
        while target.exists():
            target = self.upload_dir / f"{stem}_{n}{suffix}"
            n += 1
        target.write_bytes(data)
        logger.info(f"[UploadRegistry] Stored {filename!r} -> {target} ({len(data)} bytes)")
        return target
