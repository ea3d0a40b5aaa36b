"""
Lexical Retriever
------------------
Scores every chunk in the current index snapshot against the query's
term-frequency vector and returns the best ``top_k``.

The retriever is stateless per query -- call retrieve() as many times as
you like, from as many threads as you like.  Each call takes one index
snapshot up front, so an ingest finishing mid-query cannot mix old and
new chunks into the same ranking.
"""
from __future__ import annotations

from typing import Optional

from langsmith import traceable
from loguru import logger

from kbqa.embedding.index import ChunkIndex
from kbqa.embedding.vectorizer import cosine_similarity, term_frequency_vector
from kbqa.retrieval.tokenizer import Tokenizer
from kbqa.schemas import ScoredChunk

TOP_K = 6


class LexicalRetriever:
    """Cosine similarity over sparse term-frequency vectors."""

    def __init__(
        self,
        index: ChunkIndex,
        tokenizer: Optional[Tokenizer] = None,
        top_k: int = TOP_K,
    ) -> None:
        self.index = index
        self.tokenizer = tokenizer or Tokenizer()
        if top_k <= 0:
            raise ValueError(f"top_k must be > 0, got {top_k}")
        self.top_k = top_k

    @traceable(name="retrieve", run_type="retriever")
    def retrieve(self, query: str, top_k: Optional[int] = None) -> list[ScoredChunk]:
        """
        Rank indexed chunks for a query.

        Args:
            query: Raw user query string.
            top_k: Maximum number of results (defaults to the instance's top_k).
                   Must be positive.

        Returns:
            Up to top_k ScoredChunks sorted by score descending; ties keep
            index order.  An empty index yields [].
        """
        k = self.top_k if top_k is None else top_k
        if k <= 0:
            raise ValueError(f"top_k must be > 0, got {k}")
        chunks = self.index.snapshot()
        if not chunks:
            logger.debug("[Retriever] Index is empty")
            return []

        query_vec = term_frequency_vector(self.tokenizer.tokenize(query))
        scored = [
            ScoredChunk(chunk=chunk, score=cosine_similarity(query_vec, chunk.vector))
            for chunk in chunks
        ]
        # sorted() is stable, so equal scores keep their index order
        ranked = sorted(scored, key=lambda s: s.score, reverse=True)[:k]

        logger.info(
            f"[Retriever] {len(ranked)}/{len(chunks)} chunks "
            f"(top score: {ranked[0].score:.4f}) | query={query[:80]!r}"
        )
        return ranked
