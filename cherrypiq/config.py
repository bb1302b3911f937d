"""JSON config loading.

Reads bundler command overrides, paging, status timing, and style choices.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "cherrypiq"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_PAGE_SIZE = 10
DEFAULT_STATUS_SECONDS = 3.0
DEFAULT_PYGMENTS_STYLE = "monokai"
TOKENIZER_CHOICES = ("auto", "heuristic")


@dataclass(frozen=True)
class Settings:
    """Effective settings after config and CLI overrides are merged."""

    bundler_command: tuple[str, ...] | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    status_seconds: float = DEFAULT_STATUS_SECONDS
    tokenizer: str = "auto"
    pygments_style: str = DEFAULT_PYGMENTS_STYLE
    theme: str | None = None


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_positive_int(value: object, default: int) -> int:
    """Booleans and non-integers are invalid and fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _coerce_positive_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return float(value)


def _coerce_command(value: object) -> tuple[str, ...] | None:
    """Accept a non-empty list of non-empty strings."""
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(part, str) and part for part in value):
        return None
    return tuple(value)


def _coerce_choice(value: object, choices: tuple[str, ...], default: str) -> str:
    return value if isinstance(value, str) and value in choices else default


def load_settings() -> Settings:
    """Build ``Settings`` from the config file with strict validation."""
    data = load_config()
    style = data.get("pygments_style")
    theme = data.get("theme")
    return Settings(
        bundler_command=_coerce_command(data.get("bundler_command")),
        page_size=_coerce_positive_int(data.get("page_size"), DEFAULT_PAGE_SIZE),
        status_seconds=_coerce_positive_float(data.get("status_seconds"), DEFAULT_STATUS_SECONDS),
        tokenizer=_coerce_choice(data.get("tokenizer"), TOKENIZER_CHOICES, "auto"),
        pygments_style=style if isinstance(style, str) and style else DEFAULT_PYGMENTS_STYLE,
        theme=theme if isinstance(theme, str) and theme else None,
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_STATUS_SECONDS",
    "TOKENIZER_CHOICES",
    "Settings",
    "load_config",
    "load_settings",
]
