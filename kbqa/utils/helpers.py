"""Shared utility functions used across the service."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import orjson


# --- Text Utilities -----------------------------------------------------------

def truncate_text(text: str, max_chars: int = 250) -> str:
    """Cut text to max_chars and append an ellipsis.

    The ellipsis is always appended, matching how answer previews are shown
    to users (a preview never claims to be the full chunk).
    """
    return text[:max_chars] + "..."


_UNSAFE_FILENAME = re.compile(r"[^\w.\- ]+", re.UNICODE)


def safe_filename(name: str) -> str:
    """Strip directory components and unsafe characters from an upload name."""
    base = Path(name.replace("\\", "/")).name
    base = _UNSAFE_FILENAME.sub("_", base).strip(" .")
    return base or "upload.txt"


# --- Serialisation ------------------------------------------------------------

def dumps_json(data: Any) -> str:
    """Serialise data to an indented JSON string using orjson."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS).decode("utf-8")


def ensure_dirs(*paths: str | Path) -> None:
    """Create directories (and parents) if they don't exist."""
    for p in paths:
        Path(p).mkdir(parents=True, exist_ok=True)
