"""
Service configuration
----------------------
Settings are read from a YAML file (config/config.yaml by default) into
pydantic models.  The corpus and logging sections are pydantic-settings
models, so matching environment variables take precedence over the file
and deployments can relocate data or raise the log level without editing
it.

Environment overrides:
    KBQA_CONFIG      path to the YAML file
    KBQA_DATA_DIR    corpus directory (static corpus files are relative to it)
    KBQA_UPLOAD_DIR  directory scanned for uploaded documents
    KBQA_LOG_LEVEL   loguru level
    KBQA_LOG_FILE    rotating log file path
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = "config/config.yaml"


class EnvOverrideSettings(BaseSettings):
    """Section whose environment variables win over values passed in from YAML."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class ConfigLocation(EnvOverrideSettings):
    model_config = SettingsConfigDict(env_prefix="KBQA_")

    config: str = DEFAULT_CONFIG_PATH


class CorpusSettings(EnvOverrideSettings):
    model_config = SettingsConfigDict(env_prefix="KBQA_")

    data_dir: str = "data"
    upload_dir: str = "data/uploads"
    # Relative entries are resolved against data_dir
    files: list[str] = Field(
        default_factory=lambda: ["s.txt", "Zoho tutrial.txt", "how to use zoho.txt"]
    )
    # utf-8-sig drops a leading byte-order mark
    encoding: str = "utf-8-sig"

    def static_paths(self) -> list[Path]:
        base = Path(self.data_dir)
        return [p if p.is_absolute() else base / p for p in map(Path, self.files)]


class ChunkingSettings(BaseModel):
    max_words: int = Field(default=220, gt=0)


class TokenizerSettings(BaseModel):
    # Inclusive code-point ranges accepted alongside ASCII a-z / 0-9
    extra_ranges: list[tuple[int, int]] = Field(default_factory=lambda: [(0x0600, 0x06FF)])


class RetrievalSettings(BaseModel):
    top_k: int = Field(default=6, gt=0)


class AnswerSettings(BaseModel):
    relevance_threshold: float = Field(default=0.01, ge=0.0, le=1.0)
    preview_chars: int = Field(default=250, gt=0)


class GenerationSettings(BaseModel):
    provider: Literal["openai", "anthropic"] = "openai"
    model: Optional[str] = None
    max_tokens: int = Field(default=1024, ge=1)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    retry_attempts: int = Field(default=2, ge=1)


class LoggingSettings(EnvOverrideSettings):
    model_config = SettingsConfigDict(env_prefix="KBQA_LOG_")

    level: str = "INFO"
    file: Optional[str] = "logs/kbqa.log"


class Settings(BaseModel):
    """Top-level configuration for the knowledge-base service."""

    corpus: CorpusSettings = Field(default_factory=CorpusSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    tokenizer: TokenizerSettings = Field(default_factory=TokenizerSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    answer: AnswerSettings = Field(default_factory=AnswerSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _load_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Build Settings from YAML plus environment overrides.

    A missing config file is not an error: defaults are used and a
    debug line is logged.
    """
    config_path = Path(path or ConfigLocation().config)
    raw: dict = {}
    if config_path.exists():
        raw = _load_yaml(config_path)
        logger.debug(f"[Config] Loaded {config_path}")
    else:
        logger.debug(f"[Config] {config_path} not found, using defaults")

    # Nested validation skips BaseSettings.__init__, so the env-aware
    # sections are built here where their sources are consulted
    return Settings.model_validate(
        {
            **raw,
            "corpus": CorpusSettings(**(raw.get("corpus") or {})),
            "logging": LoggingSettings(**(raw.get("logging") or {})),
        }
    )
