"""Tests for lexical retrieval over the chunk index."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from kbqa.chunking.schemas import Chunk
from kbqa.embedding.index import ChunkIndex
from kbqa.embedding.vectorizer import term_frequency_vector
from kbqa.retrieval.retriever import LexicalRetriever
from kbqa.retrieval.tokenizer import tokenize


def make_chunk(source: str, ordinal: int, text: str) -> Chunk:
    return Chunk(
        id=Chunk.make_id(source, ordinal),
        source=source,
        ordinal=ordinal,
        text=text,
        vector=term_frequency_vector(tokenize(text)),
    )


@pytest.fixture
def index() -> ChunkIndex:
    idx = ChunkIndex()
    idx.replace(
        [
            make_chunk("a.txt", 0, "billing invoices overdue"),
            make_chunk("a.txt", 1, "inventory setup inventory items"),
            make_chunk("b.txt", 0, "completely unrelated words"),
            make_chunk("b.txt", 1, "inventory"),
            make_chunk("c.txt", 0, "setup wizard"),
        ]
    )
    return idx


class TestLexicalRetriever:

    def test_single_chunk_match(self):
        idx = ChunkIndex()
        idx.replace([make_chunk("guide.txt", 0, "zoho inventory setup guide")])

        results = LexicalRetriever(idx).retrieve("how to setup inventory")

        assert len(results) == 1
        assert results[0].score > 0
        assert results[0].chunk.id == "guide.txt::0"

    def test_empty_index_returns_nothing(self):
        assert LexicalRetriever(ChunkIndex()).retrieve("anything at all") == []

    def test_scores_non_increasing(self, index):
        results = LexicalRetriever(index).retrieve("inventory setup")
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert results[0].chunk.id == "a.txt::1"

    @pytest.mark.parametrize("top_k,expected", [(1, 1), (3, 3), (5, 5), (50, 5)])
    def test_length_is_min_of_top_k_and_index(self, index, top_k, expected):
        assert len(LexicalRetriever(index).retrieve("inventory", top_k=top_k)) == expected

    def test_default_top_k(self):
        idx = ChunkIndex()
        idx.replace([make_chunk("d.txt", i, f"word{i}") for i in range(10)])
        assert len(LexicalRetriever(idx).retrieve("word1")) == 6

    def test_non_positive_top_k_rejected(self, index):
        with pytest.raises(ValueError):
            LexicalRetriever(index, top_k=0)
        with pytest.raises(ValueError):
            LexicalRetriever(index).retrieve("inventory", top_k=0)

    def test_ties_keep_index_order(self, index):
        # Nothing matches: every score is 0, so ranking equals index order
        results = LexicalRetriever(index).retrieve("zzz qqq")
        assert [r.chunk.id for r in results] == [c.id for c in index.snapshot()]

    def test_query_without_terms_scores_zero(self, index):
        results = LexicalRetriever(index).retrieve("?!")
        assert all(r.score == 0 for r in results)

    def test_does_not_mutate_index(self, index):
        before = index.snapshot()
        LexicalRetriever(index).retrieve("inventory setup")
        assert index.snapshot() is before


class TestConcurrentReplace:

    def test_queries_never_mix_old_and_new_chunks(self):
        old = [make_chunk("old.txt", i, f"shared term old{i}") for i in range(40)]
        new = [make_chunk("new.txt", i, f"shared term new{i}") for i in range(40)]
        idx = ChunkIndex()
        idx.replace(old)
        retriever = LexicalRetriever(idx)
        stop = threading.Event()

        def swapper():
            flip = False
            while not stop.is_set():
                idx.replace(new if flip else old)
                flip = not flip

        def query(_):
            results = retriever.retrieve("shared term", top_k=80)
            return {r.chunk.source for r in results}

        writer = threading.Thread(target=swapper)
        writer.start()
        try:
            with ThreadPoolExecutor(max_workers=8) as pool:
                observed = list(pool.map(query, range(200)))
        finally:
            stop.set()
            writer.join()

        assert all(sources in ({"old.txt"}, {"new.txt"}) for sources in observed)
