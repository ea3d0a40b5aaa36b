"""
Sparse term-frequency vectors and cosine similarity.

Vectors are plain ``dict[str, int]`` maps: absent terms count as zero,
so similarity only ever walks the keys that are actually present.
"""
from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Mapping

TermVector = dict[str, int]


def term_frequency_vector(tokens: Iterable[str]) -> TermVector:
    """Count term occurrences."""
    return dict(Counter(tokens))


def _squared_norm(vec: Mapping[str, int]) -> int:
    return sum(v * v for v in vec.values())


def cosine_similarity(v1: Mapping[str, int], v2: Mapping[str, int]) -> float:
    """
    dot(v1, v2) / (|v1| * |v2|), or 0.0 when either vector has zero norm.

    Squared norms and the dot product stay integral until the final
    division, so cosine(v, v) is exactly 1.0.  The result is clamped to
    [0, 1] to absorb any remaining rounding.
    """
    sq1 = _squared_norm(v1)
    sq2 = _squared_norm(v2)
    if sq1 == 0 or sq2 == 0:
        return 0.0

    # Iterate the smaller map for the dot product
    small, large = (v1, v2) if len(v1) <= len(v2) else (v2, v1)
    dot = sum(count * large[term] for term, count in small.items() if term in large)
    return min(1.0, max(0.0, dot / math.sqrt(sq1 * sq2)))
