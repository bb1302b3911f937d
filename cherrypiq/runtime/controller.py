"""Navigation controller: session state plus the effect executor.

Events are planned by ``plan_transition`` and the resulting effects are
applied here against the listing, selection, viewport, stats, bundler, and
alternate selector. Subprocess excursions that need the real terminal run
inside ``terminal_handoff()`` and resume into browsing with the prior
directory, listing, and cursor intact.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import ContextManager

from ..alternate import AlternateSelector
from ..bundler import BundleInvoker, BundleMode, BundleResult
from ..config import DEFAULT_PAGE_SIZE, DEFAULT_STATUS_SECONDS
from ..errors import BundlerInvocationFailed, DirectoryUnreadable, OptionalToolMissing
from ..ignore import IgnorePatternSet
from ..listing import Entry, list_directory, project_selection
from ..preview import PreviewDocument, PreviewRenderer
from ..selection import SelectionSet
from ..stats import AggregateStats, StatsAggregator
from ..viewport import ViewportCursor
from .transitions import (
    Ascend,
    ClearPrompt,
    ClosePreview,
    Descend,
    EditPrompt,
    Effect,
    Event,
    JumpEnd,
    JumpStart,
    LaunchAlternate,
    Mode,
    Move,
    OpenPreview,
    Page,
    Quit,
    RejectIgnored,
    RunBundle,
    ScrollPreview,
    ToggleEntry,
    ToggleHelp,
    Transition,
    TransitionInput,
    plan_transition,
)

NO_FILES_MESSAGE = "No files selected."
CLIPBOARD_DONE_MESSAGE = "Repomix output copied to clipboard!"
DIRECT_DONE_MESSAGE = "Repomix completed successfully!"
CONFIRM_ALTERNATE_PROMPT = "Run repomix with these selections? (y/n) "

logger = logging.getLogger(__name__)


class NavigationController:
    """Top-level picker state machine over one working root."""

    def __init__(
        self,
        root: Path,
        patterns: IgnorePatternSet,
        bundler: BundleInvoker,
        stats: StatsAggregator,
        preview: PreviewRenderer,
        alternate: AlternateSelector,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        status_seconds: float = DEFAULT_STATUS_SECONDS,
        terminal_handoff: Callable[[], ContextManager[object]] = contextlib.nullcontext,
        ask: Callable[[str], str] = input,
        say: Callable[[str], None] = print,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.root = root.resolve()
        self.patterns = patterns
        self.bundler = bundler
        self.stats_aggregator = stats
        self.previewer = preview
        self.alternate = alternate
        self.page_size = max(1, page_size)
        self.status_seconds = status_seconds
        self._terminal_handoff = terminal_handoff
        self._ask = ask
        self._say = say
        self._clock = clock

        self.mode = Mode.BROWSING
        self.current_dir = self.root
        self.entries: list[Entry] = []
        self.selection = SelectionSet()
        self.viewport = ViewportCursor()
        self.stats: AggregateStats = stats.last
        self.prompt_text = ""
        self.preview: PreviewDocument | None = None
        self.preview_offset = 0
        self.preview_rows = 1
        self.show_help = True
        self.status_message = ""
        self.status_until = 0.0
        self.exit_code = 0
        self.exit_message = ""
        self.dirty = True

        self._effect_handlers: dict[type, Callable[[Effect], None]] = {
            Move: self._apply_move,
            JumpStart: lambda _effect: self.viewport.move_to_start(),
            JumpEnd: lambda _effect: self.viewport.move_to_end(),
            Page: self._apply_page,
            ToggleEntry: lambda _effect: self._toggle_current(),
            RejectIgnored: self._apply_reject_ignored,
            Descend: lambda _effect: self._descend(),
            Ascend: lambda _effect: self._ascend(),
            OpenPreview: lambda _effect: self._open_preview(),
            ClosePreview: self._apply_close_preview,
            ScrollPreview: self._apply_scroll_preview,
            ClearPrompt: self._apply_clear_prompt,
            EditPrompt: self._apply_edit_prompt,
            RunBundle: self._apply_run_bundle,
            LaunchAlternate: lambda _effect: self._launch_alternate(),
            ToggleHelp: self._apply_toggle_help,
            Quit: self._apply_quit,
        }

    def start(self) -> None:
        """List the working root; ``DirectoryUnreadable`` propagates to the caller."""
        self.entries = list_directory(self.root, self.patterns, self.selection)
        self.viewport.reset(len(self.entries))
        self.dirty = True

    @property
    def current_entry(self) -> Entry | None:
        if not self.entries:
            return None
        index = self.viewport.cursor_index
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def snapshot(self) -> TransitionInput:
        entry = self.current_entry
        return TransitionInput(
            mode=self.mode,
            has_entry=entry is not None,
            entry_is_dir=bool(entry and entry.is_dir),
            entry_ignored=bool(entry and entry.ignored),
            prompt_text=self.prompt_text,
        )

    def handle(self, event: Event) -> Transition:
        """Plan and apply one input event."""
        transition = plan_transition(self.snapshot(), event)
        if not transition.effects and transition.next_mode is self.mode:
            return transition
        self.mode = transition.next_mode
        for effect in transition.effects:
            self._effect_handlers[type(effect)](effect)
            if self.mode is Mode.EXITED:
                break
        self.dirty = True
        return transition

    def set_status(self, message: str) -> None:
        """Show transient status text for ``status_seconds``."""
        self.status_message = message
        self.status_until = self._clock() + self.status_seconds
        self.dirty = True

    def expire_status(self) -> bool:
        if self.status_message and self._clock() >= self.status_until:
            self.status_message = ""
            self.status_until = 0.0
            self.dirty = True
            return True
        return False

    def layout(self, list_rows: int, preview_rows: int) -> None:
        """Apply the current geometry before a render."""
        previous = self.viewport.scroll_offset
        self.viewport.recompute_scroll(list_rows)
        self.preview_rows = max(1, preview_rows)
        self._clamp_preview_offset()
        if self.viewport.scroll_offset != previous:
            self.dirty = True

    def _finish(self, code: int, message: str = "") -> None:
        self.mode = Mode.EXITED
        self.exit_code = code
        self.exit_message = message

    def _apply_move(self, effect: Move) -> None:
        self.viewport.move_by(effect.delta)

    def _apply_page(self, effect: Page) -> None:
        self.viewport.page_by(effect.direction, self.page_size)

    def _apply_reject_ignored(self, _effect: RejectIgnored) -> None:
        entry = self.current_entry
        name = entry.name if entry is not None else "entry"
        self.set_status(f"{name} is ignored and cannot be selected")

    def _apply_toggle_help(self, _effect: ToggleHelp) -> None:
        self.show_help = not self.show_help

    def _apply_quit(self, _effect: Quit) -> None:
        self._finish(0)

    def _after_selection_change(self) -> None:
        self.entries = project_selection(self.entries, self.selection)
        self.stats = self.stats_aggregator.update(self.selection)

    def _toggle_current(self) -> None:
        entry = self.current_entry
        if entry is None or entry.ignored:
            return
        if not entry.is_dir:
            self.selection.toggle(entry.path)
            self._after_selection_change()
            return

        marking = not self.selection.contains(entry.path)
        try:
            self.selection.mark_subtree(entry.path, marking, self.patterns)
        except DirectoryUnreadable as exc:
            self.set_status(str(exc))
            return
        if marking:
            self.selection.add(entry.path)
        else:
            self.selection.remove(entry.path)
        self._after_selection_change()

    def _enter_directory(self, directory: Path) -> bool:
        try:
            entries = list_directory(directory, self.patterns, self.selection)
        except DirectoryUnreadable as exc:
            self.set_status(str(exc))
            return False
        self.current_dir = directory
        self.entries = entries
        self.viewport.reset(len(entries))
        return True

    def _descend(self) -> None:
        entry = self.current_entry
        if entry is not None and entry.is_dir:
            self._enter_directory(entry.path)

    def _ascend(self) -> None:
        parent = self.current_dir.parent
        if parent == self.current_dir:
            return
        self._enter_directory(parent)

    def _open_preview(self) -> None:
        entry = self.current_entry
        if entry is None or entry.is_dir:
            self.mode = Mode.BROWSING
            return
        self.preview = self.previewer.render(entry.path)
        self.preview_offset = 0

    def _apply_close_preview(self, _effect: ClosePreview) -> None:
        self.preview = None
        self.preview_offset = 0

    def _preview_line_count(self) -> int:
        if self.preview is None:
            return 0
        return len(self.preview.lines) + (1 if self.preview.diagnostic else 0)

    def _clamp_preview_offset(self) -> None:
        max_offset = max(0, self._preview_line_count() - self.preview_rows)
        self.preview_offset = max(0, min(self.preview_offset, max_offset))

    def _apply_scroll_preview(self, effect: ScrollPreview) -> None:
        if effect.edge < 0:
            self.preview_offset = 0
        elif effect.edge > 0:
            self.preview_offset = self._preview_line_count()
        else:
            self.preview_offset += effect.lines + effect.pages * self.preview_rows
        self._clamp_preview_offset()

    def _apply_clear_prompt(self, _effect: ClearPrompt) -> None:
        self.prompt_text = ""

    def _apply_edit_prompt(self, effect: EditPrompt) -> None:
        if effect.backspace:
            self.prompt_text = self.prompt_text[:-1]
        else:
            self.prompt_text += effect.insert

    def _apply_run_bundle(self, effect: RunBundle) -> None:
        if not self.bundler.relative_paths(self.selection):
            self._finish(0, NO_FILES_MESSAGE)
            return
        if effect.mode is BundleMode.DIRECT:
            with self._terminal_handoff():
                self._run_direct()
            return
        try:
            result = self.bundler.run(effect.mode, self.selection, effect.prompt)
        except BundlerInvocationFailed as exc:
            self.mode = Mode.BROWSING
            self.set_status(f"Failed to run repomix: {exc.message}")
            return
        if effect.mode is BundleMode.CLIPBOARD:
            self._finish(0, CLIPBOARD_DONE_MESSAGE)
        else:
            self._finish(0, result.output)

    def _run_direct(self) -> BundleResult | None:
        """Direct runs own the terminal and always end the session."""
        self._say(f"Running repomix with {len(self.bundler.relative_paths(self.selection))} selected files...")
        try:
            result = self.bundler.run_direct(self.selection)
        except BundlerInvocationFailed as exc:
            self._finish(1, f"Failed to run repomix: {exc.message}")
            return None
        self._finish(0, DIRECT_DONE_MESSAGE)
        return result

    def _launch_alternate(self) -> None:
        if not self.alternate.available:
            self.set_status("Ranger is not installed!")
            return
        confirmed = False
        with self._terminal_handoff():
            self._say("Launching ranger. Select files with space, then quit with q to return to cherrypiq.")
            try:
                paths = self.alternate.launch()
            except (OSError, OptionalToolMissing) as exc:
                logger.warning("alternate selector failed: %s", exc)
                self.set_status(f"Error using ranger: {exc}")
                return
            if not paths:
                self.set_status("No files selected in ranger.")
                return
            self.selection.replace(paths)
            self._after_selection_change()
            self._say(f"{len(paths)} files selected from ranger.")
            try:
                answer = self._ask(CONFIRM_ALTERNATE_PROMPT)
            except EOFError:
                answer = ""
            confirmed = answer.strip().lower() == "y"
            if confirmed:
                if not self.bundler.relative_paths(self.selection):
                    self._finish(0, NO_FILES_MESSAGE)
                else:
                    self._run_direct()
        if not confirmed:
            self.set_status(f"{self.selection.size()} files selected from ranger")


__all__ = [
    "NO_FILES_MESSAGE",
    "CLIPBOARD_DONE_MESSAGE",
    "DIRECT_DONE_MESSAGE",
    "NavigationController",
]
