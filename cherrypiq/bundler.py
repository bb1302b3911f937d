"""Hand the selected files to the external bundler.

Selected paths become one comma-joined ``--include`` argument of
root-relative paths. The command is always passed as an argument list, so
neither paths nor prompt text are interpreted by a shell.
"""

from __future__ import annotations

import enum
import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import BundlerInvocationFailed
from .ignore import relative_posix
from .selection import SelectionSet

INCLUDE_DELIMITER = ","
INCLUDE_FLAG = "--include"
CLIPBOARD_FLAG = "--copy"
PROMPT_FLAG = "--prompt"

logger = logging.getLogger(__name__)


class BundleMode(enum.Enum):
    DIRECT = "direct"
    CLIPBOARD = "clipboard"
    PROMPT = "prompt"


@dataclass(frozen=True)
class BundleResult:
    mode: BundleMode
    file_count: int = 0
    output: str = ""

    @property
    def empty(self) -> bool:
        """Return whether no paths were handed to the bundler."""
        return self.file_count == 0


def _diagnostic(proc: subprocess.CompletedProcess, program: str) -> str:
    for stream in (proc.stderr, proc.stdout):
        if isinstance(stream, bytes):
            stream = stream.decode("utf-8", errors="replace")
        if isinstance(stream, str) and stream.strip():
            return f"{program} failed: {stream.strip()}"
    return f"{program} exited with status {proc.returncode}"


class BundleInvoker:
    """Builds bundler invocations for the three run modes."""

    def __init__(
        self,
        command: tuple[str, ...],
        root: Path,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.command = tuple(command)
        self.root = root.resolve()
        self._runner = runner

    @property
    def program(self) -> str:
        """Short bundler name used in status and failure messages."""
        return Path(self.command[-1]).name if self.command else "bundler"

    def relative_paths(self, selection: SelectionSet) -> list[str]:
        """Root-relative include paths in selection order.

        A member that is an ancestor of another member is left out: toggling a
        directory in the picker adds its files, and those files stand for it.
        Any other member is passed through as is, including a directory chosen
        wholesale in the alternate selector.
        """
        members = selection.snapshot_paths()
        ancestors = {parent for path in members for parent in path.parents}
        return [relative_posix(path, self.root) for path in members if path not in ancestors]

    def build_include_argument(self, paths: list[str]) -> str:
        """Join root-relative paths into the single ``--include`` value."""
        return INCLUDE_DELIMITER.join(paths)

    def build_command(self, mode: BundleMode, include: str, prompt: str = "") -> list[str]:
        """Return the argv for ``mode``; the prompt is only used in PROMPT mode."""
        argv = [*self.command, INCLUDE_FLAG, include]
        if mode is BundleMode.CLIPBOARD:
            argv.append(CLIPBOARD_FLAG)
        elif mode is BundleMode.PROMPT:
            argv.extend([PROMPT_FLAG, prompt])
        return argv

    def _invoke(self, mode: BundleMode, selection: SelectionSet, prompt: str = "") -> BundleResult:
        relative = self.relative_paths(selection)
        if not relative:
            return BundleResult(mode=mode)

        argv = self.build_command(mode, self.build_include_argument(relative), prompt)
        logger.info("running bundler (%s) with %d files", mode.value, len(relative))
        kwargs: dict[str, object] = {"cwd": self.root, "check": False}
        if mode is not BundleMode.DIRECT:
            kwargs.update(stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
        try:
            proc = self._runner(argv, **kwargs)
        except OSError as exc:
            logger.error("failed to launch bundler %s: %s", argv[0], exc)
            raise BundlerInvocationFailed(f"failed to launch {self.program}: {exc}") from exc

        if proc.returncode != 0:
            message = _diagnostic(proc, self.program)
            logger.error("bundler failed: %s", message)
            raise BundlerInvocationFailed(message, proc.returncode)

        output = proc.stdout if isinstance(proc.stdout, str) else ""
        return BundleResult(mode=mode, file_count=len(relative), output=output)

    def run_direct(self, selection: SelectionSet) -> BundleResult:
        """Run with the inherited terminal; output goes straight to the user."""
        return self._invoke(BundleMode.DIRECT, selection)

    def run_to_clipboard(self, selection: SelectionSet) -> BundleResult:
        """Run with ``--copy``; the bundler puts its output on the clipboard."""
        return self._invoke(BundleMode.CLIPBOARD, selection)

    def run_with_prompt(self, selection: SelectionSet, prompt: str) -> BundleResult:
        """Pass free-text guidance and capture the bundler's output for display."""
        return self._invoke(BundleMode.PROMPT, selection, prompt)

    def run(self, mode: BundleMode, selection: SelectionSet, prompt: str = "") -> BundleResult:
        """Dispatch to the runner for ``mode``."""
        if mode is BundleMode.CLIPBOARD:
            return self.run_to_clipboard(selection)
        if mode is BundleMode.PROMPT:
            return self.run_with_prompt(selection, prompt)
        return self.run_direct(selection)


__all__ = [
    "INCLUDE_DELIMITER",
    "BundleMode",
    "BundleResult",
    "BundleInvoker",
]
