"""Selection set of absolute paths chosen for bundling.

Membership has set semantics; insertion order is kept only so snapshots are
stable for display and for the bundler's include argument.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import DirectoryUnreadable
from .ignore import IgnorePatternSet
from .listing import list_directory

logger = logging.getLogger(__name__)


def _normalize(path: Path | str) -> Path:
    return Path(path).absolute()


class SelectionSet:
    """Unique absolute paths, mutated only through this API."""

    def __init__(self, paths: Iterable[Path | str] = ()) -> None:
        self._members: dict[Path, None] = {}
        for path in paths:
            self.add(path)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Path]:
        return iter(tuple(self._members))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self.contains(path)

    def contains(self, path: Path | str) -> bool:
        """Return whether ``path`` is a member after normalization."""
        return _normalize(path) in self._members

    def size(self) -> int:
        """Return the number of members, directories included."""
        return len(self._members)

    def add(self, path: Path | str) -> bool:
        """Add ``path``; return whether membership changed."""
        key = _normalize(path)
        if key in self._members:
            return False
        self._members[key] = None
        return True

    def remove(self, path: Path | str) -> bool:
        """Remove ``path``; return whether membership changed."""
        key = _normalize(path)
        if key not in self._members:
            return False
        del self._members[key]
        return True

    def toggle(self, path: Path | str) -> bool:
        """Flip membership of ``path`` and return the new membership."""
        if self.remove(path):
            return False
        self.add(path)
        return True

    def replace(self, paths: Iterable[Path | str]) -> None:
        """Replace all members, dropping duplicates while keeping first-seen order."""
        self._members = {}
        for path in paths:
            self.add(path)

    def snapshot_paths(self) -> tuple[Path, ...]:
        """Return an immutable copy of the members in insertion order."""
        return tuple(self._members)

    def mark_subtree(self, directory: Path, mark: bool, patterns: IgnorePatternSet) -> int:
        """Recursively add (``mark``) or remove every non-ignored file under ``directory``.

        Ignored entries, files and directories alike, are skipped outright, so
        nothing below an ignored directory is ever visited. Unreadable nested
        directories are skipped; an unreadable ``directory`` raises
        ``DirectoryUnreadable``. Returns how many memberships changed.
        """
        changed = 0
        for entry in list_directory(directory, patterns, self):
            if entry.ignored:
                continue
            if entry.is_dir:
                try:
                    changed += self.mark_subtree(entry.path, mark, patterns)
                except DirectoryUnreadable as exc:
                    logger.warning("skipping unreadable directory during subtree mark: %s", exc)
                continue
            if mark:
                changed += self.add(entry.path)
            else:
                changed += self.remove(entry.path)
        return changed

    def __repr__(self) -> str:
        return f"SelectionSet({[str(path) for path in self._members]!r})"


__all__ = ["SelectionSet"]
