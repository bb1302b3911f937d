"""Directory projection: one listing of immediate children with derived flags.

Entries are rebuilt on every listing call. The ``selected`` flag is a
read-through projection of selection membership and is refreshed with
``project_selection`` whenever the selection changes.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import DirectoryUnreadable
from .ignore import IgnorePatternSet, is_ignored

if TYPE_CHECKING:
    from .selection import SelectionSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entry:
    """One directory child row."""

    name: str
    path: Path
    is_dir: bool
    ignored: bool = False
    selected: bool = False

    def with_selection(self, selection: SelectionSet) -> Entry:
        selected = selection.contains(self.path)
        if selected == self.selected:
            return self
        return replace(self, selected=selected)


def entry_sort_key(entry: Entry) -> tuple[bool, str, str]:
    """Directories first, then case-insensitive name with a case-sensitive tiebreak."""
    return (not entry.is_dir, entry.name.casefold(), entry.name)


def _child_is_dir(child: os.DirEntry[str]) -> bool:
    try:
        return child.is_dir(follow_symlinks=False)
    except OSError:
        return False


def list_directory(
    directory: Path,
    patterns: IgnorePatternSet,
    selection: SelectionSet,
) -> list[Entry]:
    """List immediate children of ``directory`` sorted dirs-first.

    Raises ``DirectoryUnreadable`` when the directory cannot be scanned.
    """
    entries: list[Entry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                child_path = Path(child.path)
                entries.append(
                    Entry(
                        name=child.name,
                        path=child_path,
                        is_dir=_child_is_dir(child),
                        ignored=is_ignored(child_path, patterns),
                        selected=selection.contains(child_path),
                    )
                )
    except OSError as exc:
        reason = exc.strerror or exc.__class__.__name__
        logger.warning("listing %s failed: %s", directory, reason)
        raise DirectoryUnreadable(directory, reason) from exc

    entries.sort(key=entry_sort_key)
    return entries


def project_selection(entries: Iterable[Entry], selection: SelectionSet) -> list[Entry]:
    """Recompute ``selected`` flags without touching the filesystem."""
    return [entry.with_selection(selection) for entry in entries]


__all__ = [
    "Entry",
    "entry_sort_key",
    "list_directory",
    "project_selection",
]
