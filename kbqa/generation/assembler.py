"""
Answer Assembler
-----------------
Turns ranked retrieval results into the final answer payload:

    ranked ScoredChunks
        |
        v
    relevance filter   (score > relevance_threshold, default 0.01)
        |
        v
    confidence         (mean of retained scores, clamped to [0, 1])
        |
        v
    answer text        external generator if requested and available,
                       otherwise built-in source-attributed previews

Nothing from the optional generation step is allowed to reach the
caller as an error: an absent or failing generator just means the
built-in text is used.  Sources and confidence are identical either way.

The threshold and confidence formula are plain configuration -- they
are not tuned values.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from loguru import logger

from kbqa.generation.generator import AnswerGenerator
from kbqa.generation.prompts import (
    ANSWER_BLOCK_SEPARATOR,
    ANSWER_BLOCK_TEMPLATE,
    CONTEXT_LINE_TEMPLATE,
    NO_CONTEXT_RESPONSE,
    SOURCE_TEMPLATE,
    USER_PROMPT,
)
from kbqa.schemas import ScoredChunk
from kbqa.utils.helpers import truncate_text

RELEVANCE_THRESHOLD = 0.01
PREVIEW_CHARS = 250


@dataclass
class AnswerResult:
    """Answer text plus the chunks it was built from."""

    text: str
    sources: list[ScoredChunk] = field(default_factory=list)
    confidence: float = 0.0
    generated: bool = False
    model: str = ""

    def to_dict(self) -> dict:
        return {
            "answer": self.text,
            "sources": [s.to_result() for s in self.sources],
            "confidence": round(self.confidence, 4),
            "generated": self.generated,
            "model": self.model,
        }


def mean_confidence(results: Sequence[ScoredChunk]) -> float:
    if not results:
        return 0.0
    mean = sum(r.score for r in results) / len(results)
    return min(1.0, max(0.0, mean))


class AnswerAssembler:
    """
    Filters, scores and formats retrieval results.

    Usage:
        assembler = AnswerAssembler(generator=make_generator(settings.generation))
        result = assembler.assemble(question, ranked)
    """

    def __init__(
        self,
        generator: Optional[AnswerGenerator] = None,
        relevance_threshold: float = RELEVANCE_THRESHOLD,
        preview_chars: int = PREVIEW_CHARS,
    ) -> None:
        self.generator = generator
        self.relevance_threshold = relevance_threshold
        self.preview_chars = preview_chars

    def filter_relevant(self, results: Sequence[ScoredChunk]) -> list[ScoredChunk]:
        return [r for r in results if r.score > self.relevance_threshold]

    def format_answer(self, relevant: Sequence[ScoredChunk]) -> str:
        """Built-in answer: one attributed preview per chunk, in rank order."""
        return ANSWER_BLOCK_SEPARATOR.join(
            ANSWER_BLOCK_TEMPLATE.format(
                source=r.chunk.source_name,
                chunk_index=r.chunk.ordinal,
                preview=truncate_text(r.chunk.text, self.preview_chars),
            )
            for r in relevant
        )

    def build_prompt(
        self,
        question: str,
        relevant: Sequence[ScoredChunk],
        industry: Optional[str] = None,
        scenario: Optional[str] = None,
    ) -> str:
        context_lines = [
            CONTEXT_LINE_TEMPLATE.format(label=label, value=value)
            for label, value in (("INDUSTRY", industry), ("SCENARIO", scenario))
            if value
        ]
        context_block = "\n" + "\n".join(context_lines) + "\n" if context_lines else ""
        sources = "\n\n".join(
            SOURCE_TEMPLATE.format(
                index=i,
                source=r.chunk.source_name,
                chunk_index=r.chunk.ordinal,
                score=r.score,
                text=r.chunk.text,
            )
            for i, r in enumerate(relevant, start=1)
        )
        return USER_PROMPT.format(
            question=question, context_block=context_block, sources=sources
        )

    def _try_generate(self, prompt: str) -> Optional[str]:
        """
        One generation attempt; None means "use the built-in text".

        Any error from the generator is a fallback, not a failure of the
        ask: bundled generators raise GenerationFailure, injected ones may
        raise anything.
        """
        if self.generator is None:
            logger.debug("[Assembler] No generator configured, using built-in answer")
            return None
        try:
            return self.generator.generate(prompt)
        except Exception as exc:
            logger.warning(f"[Assembler] Generation failed, using built-in answer: {exc}")
            return None

    def assemble(
        self,
        question: str,
        results: Sequence[ScoredChunk],
        industry: Optional[str] = None,
        scenario: Optional[str] = None,
        use_generation: bool = False,
    ) -> AnswerResult:
        """
        Build the answer for one question.

        industry / scenario are advisory: they only reach the generation
        prompt and never affect filtering or ranking.
        """
        relevant = self.filter_relevant(results)
        if not relevant:
            logger.info(
                f"[Assembler] No result above {self.relevance_threshold} "
                f"({len(results)} candidate(s))"
            )
            return AnswerResult(text=NO_CONTEXT_RESPONSE)

        confidence = mean_confidence(relevant)

        if use_generation:
            prompt = self.build_prompt(question, relevant, industry, scenario)
            generated = self._try_generate(prompt)
            if generated is not None:
                return AnswerResult(
                    text=generated,
                    sources=list(relevant),
                    confidence=confidence,
                    generated=True,
                    model=self.generator.model,
                )

        logger.debug(f"[Assembler] {len(relevant)} source(s) | confidence={confidence:.3f}")
        return AnswerResult(
            text=self.format_answer(relevant),
            sources=list(relevant),
            confidence=confidence,
        )
