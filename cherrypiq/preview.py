"""File preview content for the full-screen preview overlay.

Prefers the external ``bat`` pager's colored output. When it is missing or
fails, a diagnostic line is shown above an in-process Pygments rendering.
Terminal control bytes are neutralized before display.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound

from .errors import FileUnreadable

PAGER_FLAGS = ("--paging=never", "--color=always", "--style=numbers,changes")
PAGER_MISSING_MESSAGE = "bat is not installed. Install it for file preview functionality."

# C0 controls except tab/newline/CR, DEL, and C1 controls. ESC is kept so
# pager color sequences survive; bare ESC in file text is handled separately.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1a\x1c-\x1f\x7f-\x9f]")
_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewDocument:
    title: str
    lines: list[str] = field(default_factory=list)
    diagnostic: str = ""


def sanitize_terminal_text(source: str, keep_sgr: bool = False) -> str:
    """Escape control bytes to avoid side effects (bell, cursor moves, etc.).

    With ``keep_sgr`` only color/style sequences survive; any other escape
    sequence is shown literally.
    """
    source = _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", source)
    if "\x1b" not in source:
        return source
    if not keep_sgr:
        return source.replace("\x1b", "\\x1b")
    out: list[str] = []
    pos = 0
    for match in _SGR_RE.finditer(source):
        out.append(source[pos : match.start()].replace("\x1b", "\\x1b"))
        out.append(match.group(0))
        pos = match.end()
    out.append(source[pos:].replace("\x1b", "\\x1b"))
    return "".join(out)


def read_text(path: Path) -> str:
    """Decode a file with a few common encodings, raising ``FileUnreadable``."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise FileUnreadable(path, exc.strerror or exc.__class__.__name__) from exc
    for encoding in ("utf-8", "utf-8-sig"):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    return raw.decode("latin-1")


def pygments_highlight(source: str, path: Path, style: str) -> str:
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    try:
        formatter = TerminalFormatter(style=style)
    except ClassNotFound:
        formatter = TerminalFormatter()
    return highlight(source, lexer, formatter)


class PreviewRenderer:
    def __init__(
        self,
        pager_command: str | None,
        style: str = "monokai",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.pager_command = pager_command
        self.style = style
        self._runner = runner

    def _run_pager(self, path: Path) -> str:
        assert self.pager_command is not None
        proc = self._runner(
            [self.pager_command, *PAGER_FLAGS, str(path)],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            check=False,
        )
        if proc.returncode != 0:
            detail = (proc.stdout or "").strip() or f"exit status {proc.returncode}"
            raise RuntimeError(f"Error previewing file: {detail}")
        return proc.stdout or ""

    def _fallback(self, path: Path, diagnostic: str) -> PreviewDocument:
        try:
            source = read_text(path)
        except FileUnreadable as exc:
            return PreviewDocument(title=str(path), diagnostic=str(exc))
        rendered = pygments_highlight(source, path, self.style)
        lines = sanitize_terminal_text(rendered, keep_sgr=True).splitlines()
        return PreviewDocument(title=str(path), lines=lines, diagnostic=diagnostic)

    def render(self, path: Path) -> PreviewDocument:
        """Build the preview for ``path``; failures become a diagnostic, never an error."""
        if self.pager_command is None:
            return self._fallback(path, PAGER_MISSING_MESSAGE)
        try:
            output = self._run_pager(path)
        except (OSError, RuntimeError) as exc:
            logger.warning("pager failed for %s: %s", path, exc)
            return self._fallback(path, str(exc))
        lines = sanitize_terminal_text(output, keep_sgr=True).splitlines()
        return PreviewDocument(title=str(path), lines=lines)


__all__ = [
    "PAGER_MISSING_MESSAGE",
    "PreviewDocument",
    "PreviewRenderer",
    "sanitize_terminal_text",
    "read_text",
    "pygments_highlight",
]
