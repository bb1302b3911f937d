"""Runtime composition layer for cherrypiq.

Builds the session components from settings and probed capabilities, wires
the terminal handoff into the controller, and starts the loop.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from ..alternate import AlternateSelector
from ..bundler import BundleInvoker
from ..capabilities import Capabilities
from ..config import Settings
from ..ignore import IgnorePatternSet, load_ignore_patterns
from ..preview import PreviewRenderer
from ..stats import StatsAggregator
from ..ui_theme import get_theme
from .controller import NavigationController
from .loop import run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_controller(
    root: Path,
    settings: Settings,
    capabilities: Capabilities,
    patterns: IgnorePatternSet | None = None,
    **controller_kwargs,
) -> NavigationController:
    """Compose a controller for ``root``; extra kwargs go to the controller."""
    root = root.resolve()
    if patterns is None:
        patterns = load_ignore_patterns(root)
    return NavigationController(
        root,
        patterns,
        BundleInvoker(capabilities.bundler_command, root),
        StatsAggregator(capabilities.tokenizer),
        PreviewRenderer(capabilities.pager_command, settings.pygments_style),
        AlternateSelector(capabilities.alternate_selector_command, root),
        page_size=settings.page_size,
        status_seconds=settings.status_seconds,
        **controller_kwargs,
    )


def run_picker(root: Path, settings: Settings, capabilities: Capabilities) -> tuple[int, str]:
    """Run one interactive session and return ``(exit_code, exit_message)``.

    ``DirectoryUnreadable`` for the root propagates before the UI is drawn.
    """
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not (os.isatty(stdin_fd) and os.isatty(stdout_fd)):
        raise SystemExit("cherrypiq needs an interactive terminal.")

    terminal = TerminalController(stdin_fd, stdout_fd)
    controller = build_controller(root, settings, capabilities, terminal_handoff=terminal.suspended)
    controller.start()
    logger.info("session started in %s", controller.root)
    run_main_loop(controller, terminal, stdin_fd, get_theme(settings.theme))
    logger.info("session ended with exit code %d", controller.exit_code)
    return controller.exit_code, controller.exit_message


__all__ = ["build_controller", "run_picker"]
