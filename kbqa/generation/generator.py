"""
External answer generators
---------------------------
Two implementations with an identical generate() interface:

  OpenAIGenerator    -- OpenAI chat completions (gpt-4o-mini by default)
  AnthropicGenerator -- Anthropic messages API (claude-haiku-4-5 by default)

Both take a fully built prompt and return the generated text, raising
GenerationFailure when the provider errors out after retries.  They are
optional collaborators: make_generator() returns None when the matching
API key is not configured, and the answer assembler then uses its
built-in formatting instead.
"""
from __future__ import annotations

import os
from typing import Optional, Protocol

from langsmith import traceable
from loguru import logger
from tenacity import retry, stop_after_attempt, wait_exponential

from kbqa.config import GenerationSettings
from kbqa.errors import GenerationFailure, GenerationUnavailable
from kbqa.generation.prompts import SYSTEM_PROMPT

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-haiku-4-5-20251001",
}

API_KEY_ENV: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class AnswerGenerator(Protocol):
    model: str

    def generate(self, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# OpenAI Generator
# ---------------------------------------------------------------------------

class OpenAIGenerator:
    """Grounded answer synthesis using OpenAI chat models."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODELS["openai"],
        max_tokens: int = 1024,
        temperature: float = 0.1,
        retry_attempts: int = 2,
    ) -> None:
        from openai import OpenAI  # lazy import keeps import graph clean
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.retry_attempts = retry_attempts
        self._client = OpenAI(api_key=api_key)

    @traceable(name="generate_openai", run_type="llm")
    def generate(self, prompt: str) -> str:
        try:
            answer = retry(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=8),
                reraise=True,
            )(self._complete)(prompt)
        except Exception as exc:
            raise GenerationFailure(f"OpenAI call failed: {exc}") from exc
        if not answer.strip():
            raise GenerationFailure("OpenAI returned an empty answer")
        return answer

    def _complete(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        usage = response.usage
        if usage is not None:
            logger.info(
                f"[OpenAIGenerator] {self.model} | prompt={usage.prompt_tokens} "
                f"completion={usage.completion_tokens}"
            )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Anthropic Generator
# ---------------------------------------------------------------------------

class AnthropicGenerator:
    """
    Grounded answer synthesis using Anthropic Claude models.

    The Anthropic SDK passes the system prompt as a separate `system`
    parameter (not inside the messages list).
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODELS["anthropic"],
        max_tokens: int = 1024,
        temperature: float = 0.1,
        retry_attempts: int = 2,
    ) -> None:
        from anthropic import Anthropic  # lazy import
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.retry_attempts = retry_attempts
        self._client = Anthropic(api_key=api_key)

    @traceable(name="generate_anthropic", run_type="llm")
    def generate(self, prompt: str) -> str:
        try:
            answer = retry(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=8),
                reraise=True,
            )(self._complete)(prompt)
        except Exception as exc:
            raise GenerationFailure(f"Anthropic call failed: {exc}") from exc
        if not answer.strip():
            raise GenerationFailure("Anthropic returned an empty answer")
        return answer

    def _complete(self, prompt: str) -> str:
        response = self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        logger.info(
            f"[AnthropicGenerator] {self.model} | input={response.usage.input_tokens} "
            f"output={response.usage.output_tokens}"
        )
        return response.content[0].text if response.content else ""


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def build_generator(settings: GenerationSettings) -> AnswerGenerator:
    """
    Instantiate the configured generator.

    Raises GenerationUnavailable when the provider's API key is not set.
    """
    provider = settings.provider
    api_key = os.getenv(API_KEY_ENV[provider])
    if not api_key:
        raise GenerationUnavailable(f"{API_KEY_ENV[provider]} is not set")

    kwargs = dict(
        api_key=api_key,
        model=settings.model or DEFAULT_MODELS[provider],
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        retry_attempts=settings.retry_attempts,
    )
    if provider == "anthropic":
        return AnthropicGenerator(**kwargs)
    return OpenAIGenerator(**kwargs)


def make_generator(settings: GenerationSettings) -> Optional[AnswerGenerator]:
    """build_generator(), but None instead of GenerationUnavailable."""
    try:
        generator = build_generator(settings)
    except GenerationUnavailable as exc:
        logger.info(f"[Generation] External generation disabled: {exc}")
        return None
    logger.info(f"[Generation] {settings.provider} generator ready | model={generator.model}")
    return generator
