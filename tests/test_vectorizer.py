"""Tests for term-frequency vectors and cosine similarity."""

import pytest

from kbqa.embedding.vectorizer import cosine_similarity, term_frequency_vector


class TestTermFrequencyVector:

    def test_counts_accumulate(self):
        assert term_frequency_vector(["a", "b", "a", "a"]) == {"a": 3, "b": 1}

    def test_order_independent(self):
        assert term_frequency_vector(["x", "y", "x"]) == term_frequency_vector(["x", "x", "y"])

    def test_empty(self):
        assert term_frequency_vector([]) == {}


VECTORS = [
    {"a": 1},
    {"a": 3, "b": 1},
    {"zoho": 2, "inventory": 1, "setup": 5},
    {"x": 7, "y": 11, "z": 13, "w": 1},
]


class TestCosine:

    @pytest.mark.parametrize("v", VECTORS)
    def test_self_similarity_is_one(self, v):
        assert cosine_similarity(v, v) == 1.0

    @pytest.mark.parametrize("v", VECTORS)
    def test_empty_vector_scores_zero(self, v):
        assert cosine_similarity(v, {}) == 0
        assert cosine_similarity({}, v) == 0

    def test_both_empty(self):
        assert cosine_similarity({}, {}) == 0.0

    @pytest.mark.parametrize("v1", VECTORS)
    @pytest.mark.parametrize("v2", VECTORS)
    def test_symmetric_and_bounded(self, v1, v2):
        s = cosine_similarity(v1, v2)
        assert s == cosine_similarity(v2, v1)
        assert 0.0 <= s <= 1.0

    def test_disjoint_vectors(self):
        assert cosine_similarity({"a": 1}, {"b": 1}) == 0.0

    def test_known_value(self):
        chunk = term_frequency_vector("zoho inventory setup guide".split())
        query = term_frequency_vector("how to setup inventory".split())
        # dot = 2, |chunk| = |query| = 2
        assert cosine_similarity(query, chunk) == pytest.approx(0.5)
