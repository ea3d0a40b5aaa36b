"""
Multi-script tokenizer
-----------------------
Normalises raw text into lowercase terms for term-frequency vectors.

A character survives normalisation when it is an ASCII letter/digit,
whitespace, or falls inside one of the accepted extended-script ranges
(Arabic by default).  Everything else becomes a space, so punctuation
splits words instead of gluing them together:

    "Zoho's Inventory-setup!"  ->  ["zoho", "s", "inventory", "setup"]

No stemming and no stop-word removal.
"""
from __future__ import annotations

from typing import Callable, Iterable, Sequence

ARABIC_RANGE: tuple[int, int] = (0x0600, 0x06FF)
DEFAULT_RANGES: tuple[tuple[int, int], ...] = (ARABIC_RANGE,)


def make_char_predicate(
    extra_ranges: Iterable[Sequence[int]] = DEFAULT_RANGES,
) -> Callable[[str], bool]:
    """Return a predicate accepting ASCII alphanumerics plus the given code-point ranges."""
    ranges = tuple((int(lo), int(hi)) for lo, hi in extra_ranges)

    def accept(ch: str) -> bool:
        if ("a" <= ch <= "z") or ("0" <= ch <= "9"):
            return True
        cp = ord(ch)
        return any(lo <= cp <= hi for lo, hi in ranges)

    return accept


class Tokenizer:
    """
    Lowercase + character-class normalisation + whitespace split.

    Usage:
        tokenizer = Tokenizer()
        tokenizer.tokenize("How to setup Inventory?")  # ['how', 'to', 'setup', 'inventory']
    """

    def __init__(self, extra_ranges: Iterable[Sequence[int]] = DEFAULT_RANGES) -> None:
        self.extra_ranges = tuple(tuple(r) for r in extra_ranges)
        self._accept = make_char_predicate(self.extra_ranges)

    def normalise(self, text: str) -> str:
        return "".join(
            ch if ch.isspace() or self._accept(ch) else " "
            for ch in text.lower()
        )

    def tokenize(self, text: str) -> list[str]:
        return self.normalise(text).split()

    __call__ = tokenize


_DEFAULT = Tokenizer()


def tokenize(text: str) -> list[str]:
    """Tokenize with the default (ASCII + Arabic) character set."""
    return _DEFAULT.tokenize(text)
