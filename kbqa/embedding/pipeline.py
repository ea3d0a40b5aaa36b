"""
Ingest Pipeline - Load, Chunk, Vectorise, Index
-------------------------------------------------
Rebuilds the chunk index from scratch:

    static corpus paths + uploaded paths
        |
        v
    DocumentLoader   (unreadable paths are logged and skipped)
        |
        v
    WordChunker      (220-word windows by default)
        |
        v
    Tokenizer -> term_frequency_vector
        |
        v
    ChunkIndex.replace()   (single atomic swap)

A run where some documents fail is still a successful run: the index
holds exactly the chunks of the documents that could be read.  A run
where every document fails leaves the index Empty.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from langsmith import traceable
from loguru import logger

from kbqa.chunking.chunker import WordChunker
from kbqa.chunking.schemas import Chunk
from kbqa.collection.loader import DocumentLoader, FileDocumentLoader, UploadSource
from kbqa.embedding.index import ChunkIndex
from kbqa.embedding.vectorizer import term_frequency_vector
from kbqa.errors import DocumentReadFailure
from kbqa.retrieval.tokenizer import Tokenizer


@dataclass
class IngestReport:
    """Outcome of one ingest run."""

    indexed: int = 0
    documents: int = 0
    failed: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0


def _dedupe(paths: Iterable[Path]) -> list[Path]:
    seen: set[Path] = set()
    unique: list[Path] = []
    for p in paths:
        key = Path(p)
        if key in seen:
            continue
        seen.add(key)
        unique.append(key)
    return unique


class IngestPipeline:
    """
    Orchestrates loader -> chunker -> tokenizer -> vectoriser into a ChunkIndex.

    Usage:
        pipeline = IngestPipeline(index, static_paths=[...], uploads=UploadRegistry(...))
        report = pipeline.run()
        print(report.indexed)
    """

    def __init__(
        self,
        index: ChunkIndex,
        static_paths: Sequence[str | Path] = (),
        uploads: Optional[UploadSource] = None,
        loader: Optional[DocumentLoader] = None,
        chunker: Optional[WordChunker] = None,
        tokenizer: Optional[Tokenizer] = None,
    ) -> None:
        self.index = index
        self.static_paths = [Path(p) for p in static_paths]
        self.uploads = uploads
        self.loader = loader or FileDocumentLoader()
        self.chunker = chunker or WordChunker()
        self.tokenizer = tokenizer or Tokenizer()
        # Serialises ingest runs; readers never take this lock
        self._run_lock = threading.Lock()

    def corpus_paths(self) -> list[Path]:
        """
        Static corpus first, then uploads; duplicates keep their first position.

        An upload directory that cannot be listed contributes nothing and
        the static corpus is still returned.
        """
        uploaded: list[Path] = []
        if self.uploads is not None:
            try:
                uploaded = self.uploads.paths()
            except OSError as exc:
                logger.warning(f"[Ingest] Could not list uploads, continuing without them: {exc}")
        return _dedupe([*self.static_paths, *uploaded])

    def build_chunks(self, path: Path, text: str) -> list[Chunk]:
        """Chunk and vectorise one loaded document."""
        chunks: list[Chunk] = []
        for ordinal, chunk_text in enumerate(self.chunker.split(text)):
            tokens = self.tokenizer.tokenize(chunk_text)
            chunks.append(
                Chunk(
                    id=Chunk.make_id(path, ordinal),
                    source=str(path),
                    ordinal=ordinal,
                    text=chunk_text,
                    vector=term_frequency_vector(tokens),
                )
            )
        return chunks

    @traceable(name="ingest", run_type="chain")
    def run(self) -> IngestReport:
        """Rebuild the index from the current corpus.  Never raises for unreadable documents."""
        with self._run_lock:
            t0 = time.perf_counter()
            report = IngestReport()
            new_chunks: list[Chunk] = []

            paths = self.corpus_paths()
            logger.info(f"[Ingest] Starting run over {len(paths)} document(s)")

            for path in paths:
                try:
                    text = self.loader.load(path)
                except DocumentReadFailure as exc:
                    logger.warning(f"[Ingest] Skipping {path}: {exc.reason}")
                    report.failed.append(str(path))
                    continue

                doc_chunks = self.build_chunks(path, text)
                new_chunks.extend(doc_chunks)
                report.documents += 1
                logger.debug(f"[Ingest] {path.name} -> {len(doc_chunks)} chunk(s)")

            report.indexed = self.index.replace(new_chunks)
            report.elapsed_ms = (time.perf_counter() - t0) * 1000

            logger.info(
                f"[Ingest] Complete | {report.indexed} chunks from "
                f"{report.documents} document(s) | {len(report.failed)} failed | "
                f"{report.elapsed_ms:.0f}ms"
            )
            return report
