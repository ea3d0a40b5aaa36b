"""Shared fixtures: throwaway corpora on disk and a scriptable generator."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from kbqa.config import AnswerSettings, ChunkingSettings, CorpusSettings, LoggingSettings, Settings
from kbqa.serving.pipeline import KnowledgeBaseService

from helpers import FakeGenerator


ENV_OVERRIDES = (
    "KBQA_CONFIG",
    "KBQA_DATA_DIR",
    "KBQA_UPLOAD_DIR",
    "KBQA_FILES",
    "KBQA_ENCODING",
    "KBQA_LOG_LEVEL",
    "KBQA_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    data.mkdir()
    return data


@pytest.fixture
def make_settings(corpus_dir: Path):
    def _make(files: list[str], max_words: int = 220, threshold: float = 0.01) -> Settings:
        return Settings(
            corpus=CorpusSettings(
                data_dir=str(corpus_dir),
                upload_dir=str(corpus_dir / "uploads"),
                files=files,
            ),
            chunking=ChunkingSettings(max_words=max_words),
            answer=AnswerSettings(relevance_threshold=threshold),
            logging=LoggingSettings(file=None),
        )

    return _make


@pytest.fixture
def make_service(make_settings):
    def _make(
        files: list[str],
        generator: Optional[FakeGenerator] = None,
        **kwargs,
    ) -> KnowledgeBaseService:
        return KnowledgeBaseService.from_settings(
            make_settings(files, **kwargs),
            generator=generator,
            enable_generation=False,
        )

    return _make


@pytest.fixture
def zoho_corpus(corpus_dir: Path) -> list[str]:
    (corpus_dir / "guide.txt").write_text("zoho inventory setup guide", encoding="utf-8")
    (corpus_dir / "billing.txt").write_text(
        "zoho books invoices and billing reminders for overdue customers", encoding="utf-8"
    )
    return ["guide.txt", "billing.txt"]
