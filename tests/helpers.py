"""Helpers shared across test modules."""
from __future__ import annotations

from typing import Optional

from kbqa.errors import GenerationFailure


def numbered_words(n: int, prefix: str = "w") -> str:
    """n distinct words: 'w0 w1 w2 ...'."""
    return " ".join(f"{prefix}{i}" for i in range(n))


class FakeGenerator:
    """Stands in for OpenAIGenerator / AnthropicGenerator."""

    def __init__(
        self,
        answer: str = "generated answer [1]",
        fail: bool = False,
        error: Optional[Exception] = None,
    ) -> None:
        self.model = "fake-model"
        self.answer = answer
        self.fail = fail
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if self.fail:
            raise GenerationFailure("provider exploded")
        return self.answer
