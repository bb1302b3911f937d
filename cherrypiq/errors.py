"""Error taxonomy shared by listing, stats, preview, and subprocess layers.

I/O failures are recoverable and are converted to status text by callers.
Only ``RequiredToolMissing`` blocks entry into the interactive loop.
"""

from __future__ import annotations

from pathlib import Path


class CherrypiqError(Exception):
    """Base class for all errors raised by cherrypiq components."""


class DirectoryUnreadable(CherrypiqError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read directory {path}: {reason}")


class FileUnreadable(CherrypiqError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read file {path}: {reason}")


class BundlerInvocationFailed(CherrypiqError):
    """External bundler exited non-zero or could not be spawned.

    ``message`` carries the subprocess's own diagnostic text when available.
    ``returncode`` is ``None`` when the process never started.
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        self.message = message
        self.returncode = returncode
        super().__init__(message)


class RequiredToolMissing(CherrypiqError):
    def __init__(self, tool: str, hint: str = "") -> None:
        self.tool = tool
        self.hint = hint
        text = f"{tool} is not installed."
        if hint:
            text = f"{text} {hint}"
        super().__init__(text)


class OptionalToolMissing(CherrypiqError):
    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"{tool} is not installed")


__all__ = [
    "CherrypiqError",
    "DirectoryUnreadable",
    "FileUnreadable",
    "BundlerInvocationFailed",
    "RequiredToolMissing",
    "OptionalToolMissing",
]
