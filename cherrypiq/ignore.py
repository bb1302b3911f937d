"""Ignore-pattern loading and simplified glob matching.

Patterns come from the working root's ``.gitignore`` and are read once per
session. Matching supports trailing-slash directory patterns plus ``*`` and
``?`` globs only; ``**``, character classes, and braces are not supported.

Negation patterns (``!pattern``) are parsed but never re-include a path that
another pattern excludes. They simply never cause exclusion themselves.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

IGNORE_FILENAME = ".gitignore"
NEGATION_PREFIX = "!"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IgnorePatternSet:
    """Immutable pattern list anchored at the session's working root."""

    root: Path
    patterns: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)


def parse_ignore_lines(text: str) -> tuple[str, ...]:
    """Drop blank and ``#`` comment lines, trimming the rest."""
    out: list[str] = []
    for line in text.split("\n"):
        if not line or line.startswith("#"):
            continue
        stripped = line.strip()
        if stripped:
            out.append(stripped)
    return tuple(out)


def load_ignore_patterns(root: Path) -> IgnorePatternSet:
    """Read ``<root>/.gitignore``; missing or unreadable files yield no patterns."""
    root = root.resolve()
    ignore_path = root / IGNORE_FILENAME
    try:
        text = ignore_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("no ignore patterns loaded from %s: %s", ignore_path, exc)
        return IgnorePatternSet(root=root)
    patterns = parse_ignore_lines(text)
    logger.info("loaded %d ignore patterns from %s", len(patterns), ignore_path)
    return IgnorePatternSet(root=root, patterns=patterns)


@lru_cache(maxsize=512)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a ``*``/``?`` glob into a fully anchored regular expression."""
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + "$")


def relative_posix(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with ``/`` separators.

    Paths outside ``root`` keep their leading ``..`` segments.
    """
    rel = os.path.relpath(os.fspath(path), os.fspath(root))
    if os.sep != "/":
        rel = rel.replace(os.sep, "/")
    return rel


def _matches_directory_pattern(rel: str, pattern: str) -> bool:
    bare = pattern.rstrip("/")
    if rel == bare or rel.endswith("/" + bare):
        return True
    return rel.startswith(pattern) or ("/" + pattern) in rel


def pattern_matches(rel: str, pattern: str) -> bool:
    """Return whether one pattern excludes the root-relative path ``rel``."""
    if pattern.startswith(NEGATION_PREFIX):
        return False
    if pattern.endswith("/"):
        return _matches_directory_pattern(rel, pattern)
    return glob_to_regex(pattern).match(rel) is not None


def is_ignored(path: Path, patterns: IgnorePatternSet) -> bool:
    """Return whether ``path`` is excluded by any pattern in ``patterns``."""
    if not patterns:
        return False
    rel = relative_posix(path, patterns.root)
    return any(pattern_matches(rel, pattern) for pattern in patterns.patterns)


__all__ = [
    "IGNORE_FILENAME",
    "IgnorePatternSet",
    "parse_ignore_lines",
    "load_ignore_patterns",
    "glob_to_regex",
    "relative_posix",
    "pattern_matches",
    "is_ignored",
]
