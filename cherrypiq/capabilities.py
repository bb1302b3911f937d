"""One-time probe of the external tools a session can use.

The result is passed explicitly to the components that need it; nothing
else consults PATH after startup.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

from .errors import RequiredToolMissing
from .stats import Tokenizer, resolve_tokenizer

BUNDLER_NAME = "repomix"
BUNDLER_INSTALL_HINT = "Install it with: npm install -g repomix"
PAGER_CANDIDATES = ("bat", "batcat")
ALTERNATE_SELECTOR_NAME = "ranger"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    bundler_command: tuple[str, ...]
    pager_command: str | None
    alternate_selector_command: str | None
    tokenizer: Tokenizer


def _npx_can_run_bundler(npx: str, runner: Callable[..., subprocess.CompletedProcess]) -> bool:
    try:
        proc = runner(
            [npx, BUNDLER_NAME, "--version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return proc.returncode == 0


def find_bundler(
    configured: tuple[str, ...] | None = None,
    which: Callable[[str], str | None] = shutil.which,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> tuple[str, ...]:
    """Resolve the bundler command or raise ``RequiredToolMissing``.

    Preference: configured command, ``repomix`` on PATH, then ``npx repomix``.
    """
    if configured and which(configured[0]) is not None:
        return configured
    if configured:
        logger.warning("configured bundler %r not found on PATH", configured[0])

    direct = which(BUNDLER_NAME)
    if direct is not None:
        return (direct,)

    npx = which("npx")
    if npx is not None and _npx_can_run_bundler(npx, runner):
        return (npx, BUNDLER_NAME)

    raise RequiredToolMissing(BUNDLER_NAME, BUNDLER_INSTALL_HINT)


def find_pager(which: Callable[[str], str | None] = shutil.which) -> str | None:
    for candidate in PAGER_CANDIDATES:
        resolved = which(candidate)
        if resolved is not None:
            return resolved
    return None


def probe_capabilities(
    configured_bundler: tuple[str, ...] | None = None,
    tokenizer_preference: str = "auto",
    which: Callable[[str], str | None] = shutil.which,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> Capabilities:
    """Probe every tool once; only a missing bundler is fatal."""
    bundler = find_bundler(configured_bundler, which=which, runner=runner)
    pager = find_pager(which)
    alternate = which(ALTERNATE_SELECTOR_NAME)
    tokenizer = resolve_tokenizer(tokenizer_preference)
    logger.info(
        "capabilities: bundler=%s pager=%s alternate=%s tokenizer=%s",
        " ".join(bundler),
        pager,
        alternate,
        tokenizer.name,
    )
    return Capabilities(
        bundler_command=bundler,
        pager_command=pager,
        alternate_selector_command=alternate,
        tokenizer=tokenizer,
    )


__all__ = [
    "Capabilities",
    "find_bundler",
    "find_pager",
    "probe_capabilities",
]
