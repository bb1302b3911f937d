"""File logging for the TUI session.

The terminal is owned by the UI while the loop runs, so log records go to a
file under the platform log directory instead of stderr.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_FILENAME = "cherrypiq.log"
LOG_ENV_VAR = "CHERRYPIQ_LOG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def resolve_log_level(level: str | None) -> int:
    """Map a level name (CLI, then ``$CHERRYPIQ_LOG``) to a logging constant."""
    name = (level or os.environ.get(LOG_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def configure_logging(level: str | None = None, log_path: Path | None = None) -> Path | None:
    """Attach a file handler to the package logger.

    Returns the log file path, or ``None`` when the log directory cannot be
    created (records are then discarded).
    """
    package_logger = logging.getLogger("cherrypiq")
    package_logger.setLevel(resolve_log_level(level))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = False

    target = log_path or default_log_path()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        package_logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    return target


__all__ = [
    "LOG_ENV_VAR",
    "default_log_path",
    "resolve_log_level",
    "configure_logging",
]
