"""Main interactive event loop for the terminal UI.

Each iteration refreshes geometry, expires status text, redraws when the
controller is dirty, then reads at most one key and dispatches it. The loop
ends once the controller reaches ``Mode.EXITED``.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable

from ..input import event_for_key, read_key
from ..render import Layout, RenderContext, compute_layout, render_frame
from ..ui_theme import DEFAULT_THEME, UITheme
from .controller import NavigationController
from .terminal import TerminalController
from .transitions import Mode

KEY_TIMEOUT_MS = 120

logger = logging.getLogger(__name__)


def build_render_context(controller: NavigationController, layout: Layout) -> RenderContext:
    """Snapshot controller state for one frame."""
    return RenderContext(
        layout=layout,
        current_dir=controller.current_dir,
        entries=controller.entries,
        cursor_index=controller.viewport.cursor_index,
        scroll_offset=controller.viewport.scroll_offset,
        selection_count=controller.selection.size(),
        stats=controller.stats,
        mode=controller.mode,
        show_help=controller.show_help,
        status_message=controller.status_message,
        preview=controller.preview,
        preview_offset=controller.preview_offset,
        prompt_text=controller.prompt_text,
        alternate_available=controller.alternate.available,
    )


def run_main_loop(
    controller: NavigationController,
    terminal: TerminalController,
    stdin_fd: int,
    theme: UITheme = DEFAULT_THEME,
    *,
    read_key_fn: Callable[..., str] = read_key,
    get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    render: Callable[[RenderContext, UITheme, int | None], None] = render_frame,
    timeout_ms: int = KEY_TIMEOUT_MS,
) -> None:
    """Drive the controller until the session exits."""
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while controller.mode is not Mode.EXITED:
            term = get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            if size != last_size:
                last_size = size
                controller.dirty = True
            layout = compute_layout(term.columns, term.lines)
            controller.expire_status()
            controller.layout(layout.list_rows, layout.preview_rows)

            if controller.dirty:
                render(build_render_context(controller, layout), theme, terminal.stdout_fd)
                controller.dirty = False

            try:
                key = read_key_fn(stdin_fd, timeout_ms=timeout_ms)
            except KeyboardInterrupt:
                # CTRL_C arrives as a key in raw mode; stray SIGINTs are ignored.
                continue
            if key == "":
                continue

            event = event_for_key(controller.mode, key)
            if event is None:
                continue
            logger.debug("key %r -> %s in %s", key, event.command.value, controller.mode.value)
            controller.handle(event)


__all__ = ["KEY_TIMEOUT_MS", "build_render_context", "run_main_loop"]
