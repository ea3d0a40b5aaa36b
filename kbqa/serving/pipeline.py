"""
Knowledge-Base Service
-----------------------
The single object the HTTP API and CLI talk to.  It owns the chunk index
and wires the ingest and query paths around it:

    ingest()  ->  IngestPipeline  ->  ChunkIndex.replace()
    search()  ->  LexicalRetriever (one index snapshot per call)
    ask()     ->  LexicalRetriever -> AnswerAssembler
    status()  ->  current index size

Queries may run concurrently with each other and with an ingest; see
kbqa.embedding.index for the snapshot/swap contract.
"""
from __future__ import annotations

from typing import Optional

from langsmith import traceable
from loguru import logger

from kbqa.chunking.chunker import WordChunker
from kbqa.collection.loader import DocumentLoader, FileDocumentLoader, UploadRegistry
from kbqa.config import Settings
from kbqa.embedding.index import ChunkIndex
from kbqa.embedding.pipeline import IngestPipeline, IngestReport
from kbqa.errors import InvalidInput
from kbqa.generation.assembler import AnswerAssembler, AnswerResult
from kbqa.generation.generator import AnswerGenerator, make_generator
from kbqa.retrieval.retriever import LexicalRetriever
from kbqa.retrieval.tokenizer import Tokenizer
from kbqa.schemas import ScoredChunk


def _require_question(question: Optional[str]) -> str:
    if question is None or not str(question).strip():
        raise InvalidInput("question required")
    return str(question)


def _check_top_k(top_k: Optional[int]) -> Optional[int]:
    if top_k is None:
        return None
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
        raise InvalidInput(f"top_k must be a positive integer, got {top_k!r}")
    return top_k


class KnowledgeBaseService:
    """
    In-memory document Q&A over a lexical chunk index.

    Usage:
        service = KnowledgeBaseService.from_settings(load_settings())
        service.ingest()
        result = service.ask("how to setup inventory")
        print(result.text, result.confidence)
    """

    def __init__(
        self,
        ingest_pipeline: IngestPipeline,
        retriever: LexicalRetriever,
        assembler: AnswerAssembler,
        uploads: Optional[UploadRegistry] = None,
    ) -> None:
        self.index: ChunkIndex = ingest_pipeline.index
        self.ingest_pipeline = ingest_pipeline
        self.retriever = retriever
        self.assembler = assembler
        self.uploads = uploads

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        loader: Optional[DocumentLoader] = None,
        generator: Optional[AnswerGenerator] = None,
        enable_generation: bool = True,
    ) -> "KnowledgeBaseService":
        """
        Wire every component from configuration.

        When ``generator`` is not given, one is built from the generation
        settings if the provider's API key is available.
        """
        index = ChunkIndex()
        tokenizer = Tokenizer(settings.tokenizer.extra_ranges)
        uploads = UploadRegistry(settings.corpus.upload_dir)

        ingest_pipeline = IngestPipeline(
            index=index,
            static_paths=settings.corpus.static_paths(),
            uploads=uploads,
            loader=loader or FileDocumentLoader(settings.corpus.encoding),
            chunker=WordChunker(settings.chunking.max_words),
            tokenizer=tokenizer,
        )
        retriever = LexicalRetriever(index, tokenizer, top_k=settings.retrieval.top_k)

        if generator is None and enable_generation:
            generator = make_generator(settings.generation)
        assembler = AnswerAssembler(
            generator=generator,
            relevance_threshold=settings.answer.relevance_threshold,
            preview_chars=settings.answer.preview_chars,
        )

        logger.info(
            f"[KBService] Ready | corpus={len(ingest_pipeline.static_paths)} static file(s) | "
            f"uploads={uploads.upload_dir} | generation={'on' if generator else 'off'}"
        )
        return cls(ingest_pipeline, retriever, assembler, uploads=uploads)

    @property
    def generation_enabled(self) -> bool:
        return self.assembler.generator is not None

    # --- Operations -----------------------------------------------------------

    def ingest(self) -> IngestReport:
        """Rebuild the index from the static corpus plus uploads."""
        return self.ingest_pipeline.run()

    def search(self, question: Optional[str], top_k: Optional[int] = None) -> list[ScoredChunk]:
        question = _require_question(question)
        return self.retriever.retrieve(question, _check_top_k(top_k))

    @traceable(name="kb_ask", run_type="chain")
    def ask(
        self,
        question: Optional[str],
        industry: Optional[str] = None,
        scenario: Optional[str] = None,
        top_k: Optional[int] = None,
        use_external_generation: bool = False,
    ) -> AnswerResult:
        question = _require_question(question)
        ranked = self.retriever.retrieve(question, _check_top_k(top_k))
        result = self.assembler.assemble(
            question,
            ranked,
            industry=industry,
            scenario=scenario,
            use_generation=use_external_generation,
        )
        logger.info(
            f"[KBService] Ask | sources={len(result.sources)} "
            f"confidence={result.confidence:.3f} generated={result.generated}"
        )
        return result

    def status(self) -> dict:
        return {"indexed": len(self.index)}
