"""Live line/char/token statistics over the current selection.

Per-file results are cached by ``(st_size, st_mtime_ns)`` so re-running the
aggregation after an unrelated selection change does not re-read files.
"""

from __future__ import annotations

import logging
import re
import stat as stat_mod
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import tiktoken

from .selection import SelectionSet

TIKTOKEN_ENCODING = "cl100k_base"

_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT_RE = re.compile(r"//.*")
_PUNCTUATION_RE = re.compile(r"([{}()\[\].,;=+\-*/<>!&|%^~?:])")
_QUOTED_RE = re.compile(r"'[^']*'|\"[^\"]*\"|`[^`]*`")
_WHITESPACE_RE = re.compile(r"\s+")

logger = logging.getLogger(__name__)


class Tokenizer(Protocol):
    name: str
    precise: bool

    def count(self, text: str) -> int: ...


class HeuristicTokenizer:
    """Approximate token counter used when no precise encoding is available.

    Comments are stripped, punctuation is padded into its own segments, quoted
    strings collapse to a single segment, and whitespace-delimited segments
    are counted.
    """

    name = "basic token estimation"
    precise = False

    def count(self, text: str) -> int:
        stripped = _BLOCK_COMMENT_RE.sub("", text)
        stripped = _LINE_COMMENT_RE.sub("", stripped)
        padded = _PUNCTUATION_RE.sub(r" \1 ", stripped)
        atomic = _QUOTED_RE.sub(lambda match: _WHITESPACE_RE.sub("", match.group(0)), padded)
        collapsed = _WHITESPACE_RE.sub(" ", atomic).strip()
        if not collapsed:
            return 0
        return sum(1 for segment in collapsed.split(" ") if segment)


class TiktokenTokenizer:
    name = "OpenAI's cl100k_base tokenizer"
    precise = True

    def __init__(self, encoding: tiktoken.Encoding) -> None:
        self._encoding = encoding

    def count(self, text: str) -> int:
        return len(self._encoding.encode(text, disallowed_special=()))


def resolve_tokenizer(preferred: str = "auto") -> Tokenizer:
    """Return the precise tokenizer when its encoding loads, else the heuristic one."""
    if preferred == "heuristic":
        return HeuristicTokenizer()
    try:
        encoding = tiktoken.get_encoding(TIKTOKEN_ENCODING)
    except Exception as exc:
        # Encoding files are fetched on first use and may be unavailable offline.
        logger.info("tiktoken %s unavailable, using heuristic tokens: %s", TIKTOKEN_ENCODING, exc)
        return HeuristicTokenizer()
    return TiktokenTokenizer(encoding)


@dataclass(frozen=True)
class FileStat:
    lines: int
    chars: int
    tokens: int
    signature: tuple[int, int]


@dataclass(frozen=True)
class AggregateStats:
    file_count: int = 0
    total_lines: int = 0
    total_tokens: int = 0
    total_chars: int = 0
    tokenizer_name: str = HeuristicTokenizer.name
    precise: bool = False


def count_lines(content: str) -> int:
    """Count lines containing at least one non-whitespace character."""
    return sum(1 for line in content.split("\n") if line.strip())


def count_chars(content: str) -> int:
    """Count characters excluding all whitespace."""
    return len(_WHITESPACE_RE.sub("", content))


class StatsAggregator:
    """Owns the per-file ``FileStat`` cache and sums it over a selection."""

    def __init__(self, tokenizer: Tokenizer) -> None:
        self.tokenizer = tokenizer
        self._cache: dict[Path, FileStat] = {}
        self.reads = 0
        self.last = AggregateStats(tokenizer_name=tokenizer.name, precise=tokenizer.precise)

    def _file_stat(self, path: Path) -> FileStat | None:
        try:
            info = path.stat()
        except OSError:
            self._cache.pop(path, None)
            return None
        if not stat_mod.S_ISREG(info.st_mode):
            return None

        signature = (int(info.st_size), int(info.st_mtime_ns))
        cached = self._cache.get(path)
        if cached is not None and cached.signature == signature:
            return cached

        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("stats skipped unreadable file %s: %s", path, exc)
            self._cache.pop(path, None)
            return None
        self.reads += 1
        computed = FileStat(
            lines=count_lines(content),
            chars=count_chars(content),
            tokens=self.tokenizer.count(content),
            signature=signature,
        )
        self._cache[path] = computed
        return computed

    def update(self, selection: SelectionSet) -> AggregateStats:
        """Recompute totals for ``selection`` reusing unchanged cache entries."""
        paths = selection.snapshot_paths()
        file_count = lines = tokens = chars = 0
        for path in paths:
            file_stat = self._file_stat(path)
            if file_stat is None:
                continue
            file_count += 1
            lines += file_stat.lines
            tokens += file_stat.tokens
            chars += file_stat.chars

        live = set(paths)
        for stale in [path for path in self._cache if path not in live]:
            del self._cache[stale]

        self.last = AggregateStats(
            file_count=file_count,
            total_lines=lines,
            total_tokens=tokens,
            total_chars=chars,
            tokenizer_name=self.tokenizer.name,
            precise=self.tokenizer.precise,
        )
        return self.last


__all__ = [
    "Tokenizer",
    "HeuristicTokenizer",
    "TiktokenTokenizer",
    "resolve_tokenizer",
    "FileStat",
    "AggregateStats",
    "count_lines",
    "count_chars",
    "StatsAggregator",
]
