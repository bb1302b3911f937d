"""Bridge to ranger as an alternate selection front-end.

Ranger runs with the inherited terminal and a generated config that binds
``<space>`` to mark the current file and append its path to a handoff file.
After ranger exits, the handoff file becomes the new selection content.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

from .errors import OptionalToolMissing

HANDOFF_FILENAME = ".repomix-selected-files"
CONFIG_FILENAME = ".repomix-ranger-rc.conf"

logger = logging.getLogger(__name__)


def ranger_config(handoff_path: Path) -> str:
    """Config that toggles the mark and records the marked path."""
    target = str(handoff_path).replace("\\", "\\\\").replace('"', '\\"')
    return (
        "map <space> chain mark_files toggle=True; "
        f'eval open("{target}", "a").write(fm.thisfile.path + "\\n")\n'
    )


def read_handoff(handoff_path: Path, base: Path) -> list[Path]:
    """Read one path per line, dropping blanks and duplicates in first-seen order."""
    seen: dict[Path, None] = {}
    text = handoff_path.read_text(encoding="utf-8", errors="replace")
    for line in text.splitlines():
        raw = line.strip()
        if not raw:
            continue
        path = Path(raw)
        if not path.is_absolute():
            path = base / path
        seen.setdefault(path, None)
    return list(seen)


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("could not remove %s: %s", path, exc)


class AlternateSelector:
    """Runs ranger as a one-shot selection front-end over ``work_dir``.

    ``command`` is the ranger executable found at startup, or ``None`` when
    it is not installed.
    """

    def __init__(
        self,
        command: str | None,
        work_dir: Path,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.command = command
        self.work_dir = work_dir.resolve()
        self.handoff_path = self.work_dir / HANDOFF_FILENAME
        self.config_path = self.work_dir / CONFIG_FILENAME
        self._runner = runner

    @property
    def available(self) -> bool:
        """Return whether ranger was found at startup."""
        return self.command is not None

    def launch(self) -> list[Path]:
        """Run ranger to completion and return the paths it marked.

        Both generated files are removed afterwards regardless of outcome.
        Raises ``OptionalToolMissing`` when ranger was not found at startup.
        """
        if self.command is None:
            raise OptionalToolMissing("ranger")

        _unlink_quietly(self.handoff_path)
        try:
            self.config_path.write_text(ranger_config(self.handoff_path), encoding="utf-8")
            logger.info("launching %s in %s", self.command, self.work_dir)
            proc = self._runner(
                [self.command, "--cmd", f"source {self.config_path}"],
                cwd=self.work_dir,
                check=False,
            )
            logger.debug("%s exited with status %s", self.command, proc.returncode)
            if not self.handoff_path.exists():
                return []
            return read_handoff(self.handoff_path, self.work_dir)
        finally:
            _unlink_quietly(self.config_path)
            _unlink_quietly(self.handoff_path)


__all__ = [
    "HANDOFF_FILENAME",
    "CONFIG_FILENAME",
    "ranger_config",
    "read_handoff",
    "AlternateSelector",
]
