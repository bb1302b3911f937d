"""Pure transition table for the picker's interactive modes.

``plan_transition`` maps ``(snapshot, event)`` to the next mode plus a tuple
of effects. It performs no I/O; ``NavigationController`` executes effects.
Commands that do not apply to the current mode plan nothing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from ..bundler import BundleMode


class Mode(enum.Enum):
    BROWSING = "browsing"
    PREVIEW_OPEN = "preview"
    PROMPT_INPUT = "prompt"
    EXITED = "exited"


class Command(enum.Enum):
    MOVE_DOWN = "move-down"
    MOVE_UP = "move-up"
    JUMP_TOP = "jump-top"
    JUMP_BOTTOM = "jump-bottom"
    PAGE_DOWN = "page-down"
    PAGE_UP = "page-up"
    TOGGLE_SELECT = "toggle-select"
    DESCEND = "descend"
    ASCEND = "ascend"
    RUN_BUNDLE = "run-bundle"
    RUN_BUNDLE_TO_CLIPBOARD = "run-bundle-to-clipboard"
    OPEN_PROMPT = "open-prompt"
    LAUNCH_ALTERNATE_SELECTOR = "launch-alternate-selector"
    PREVIEW = "preview"
    CLOSE_PREVIEW = "close-preview"
    TOGGLE_HELP = "toggle-help"
    QUIT = "quit"
    PROMPT_INSERT = "prompt-insert"
    PROMPT_BACKSPACE = "prompt-backspace"
    PROMPT_SUBMIT = "prompt-submit"
    PROMPT_CANCEL = "prompt-cancel"


@dataclass(frozen=True)
class Event:
    command: Command
    text: str = ""


@dataclass(frozen=True)
class TransitionInput:
    """Read-only view of controller state needed to plan one transition."""

    mode: Mode
    has_entry: bool = False
    entry_is_dir: bool = False
    entry_ignored: bool = False
    prompt_text: str = ""


@dataclass(frozen=True)
class Move:
    delta: int


@dataclass(frozen=True)
class JumpStart:
    pass


@dataclass(frozen=True)
class JumpEnd:
    pass


@dataclass(frozen=True)
class Page:
    direction: int


@dataclass(frozen=True)
class ToggleEntry:
    pass


@dataclass(frozen=True)
class RejectIgnored:
    pass


@dataclass(frozen=True)
class Descend:
    pass


@dataclass(frozen=True)
class Ascend:
    pass


@dataclass(frozen=True)
class OpenPreview:
    pass


@dataclass(frozen=True)
class ClosePreview:
    pass


@dataclass(frozen=True)
class ScrollPreview:
    """Scroll by ``lines`` plus ``pages``; ``edge`` -1/1 jumps to top/bottom."""

    lines: int = 0
    pages: int = 0
    edge: int = 0


@dataclass(frozen=True)
class ClearPrompt:
    pass


@dataclass(frozen=True)
class EditPrompt:
    insert: str = ""
    backspace: bool = False


@dataclass(frozen=True)
class RunBundle:
    mode: BundleMode
    prompt: str = ""


@dataclass(frozen=True)
class LaunchAlternate:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Effect = (
    Move
    | JumpStart
    | JumpEnd
    | Page
    | ToggleEntry
    | RejectIgnored
    | Descend
    | Ascend
    | OpenPreview
    | ClosePreview
    | ScrollPreview
    | ClearPrompt
    | EditPrompt
    | RunBundle
    | LaunchAlternate
    | ToggleHelp
    | Quit
)


@dataclass(frozen=True)
class Transition:
    """Planned outcome of one event.

    ``next_mode`` is the mode to settle in unless an effect ends the session
    (a successful bundler run moves the controller to ``Mode.EXITED``).
    """

    next_mode: Mode
    effects: tuple[Effect, ...] = ()


_BROWSING_SIMPLE: dict[Command, Effect] = {
    Command.MOVE_DOWN: Move(1),
    Command.MOVE_UP: Move(-1),
    Command.JUMP_TOP: JumpStart(),
    Command.JUMP_BOTTOM: JumpEnd(),
    Command.PAGE_DOWN: Page(1),
    Command.PAGE_UP: Page(-1),
    Command.ASCEND: Ascend(),
    Command.RUN_BUNDLE: RunBundle(BundleMode.DIRECT),
    Command.RUN_BUNDLE_TO_CLIPBOARD: RunBundle(BundleMode.CLIPBOARD),
    Command.LAUNCH_ALTERNATE_SELECTOR: LaunchAlternate(),
    Command.TOGGLE_HELP: ToggleHelp(),
}

_PREVIEW_SCROLL: dict[Command, ScrollPreview] = {
    Command.MOVE_DOWN: ScrollPreview(lines=1),
    Command.MOVE_UP: ScrollPreview(lines=-1),
    Command.PAGE_DOWN: ScrollPreview(pages=1),
    Command.PAGE_UP: ScrollPreview(pages=-1),
    Command.JUMP_TOP: ScrollPreview(edge=-1),
    Command.JUMP_BOTTOM: ScrollPreview(edge=1),
}


def _stay(snapshot: TransitionInput, *effects: Effect) -> Transition:
    return Transition(snapshot.mode, tuple(effects))


def _plan_browsing(snapshot: TransitionInput, event: Event) -> Transition:
    command = event.command
    simple = _BROWSING_SIMPLE.get(command)
    if simple is not None:
        return _stay(snapshot, simple)
    if command is Command.QUIT:
        return Transition(Mode.EXITED, (Quit(),))
    if command is Command.OPEN_PROMPT:
        return Transition(Mode.PROMPT_INPUT, (ClearPrompt(),))
    if not snapshot.has_entry:
        return _stay(snapshot)
    if command is Command.TOGGLE_SELECT:
        if snapshot.entry_ignored:
            return _stay(snapshot, RejectIgnored())
        return _stay(snapshot, ToggleEntry())
    if command is Command.DESCEND and snapshot.entry_is_dir:
        return _stay(snapshot, Descend())
    if command is Command.PREVIEW and not snapshot.entry_is_dir:
        return Transition(Mode.PREVIEW_OPEN, (OpenPreview(),))
    return _stay(snapshot)


def _plan_preview(snapshot: TransitionInput, event: Event) -> Transition:
    command = event.command
    if command in {Command.CLOSE_PREVIEW, Command.PREVIEW}:
        return Transition(Mode.BROWSING, (ClosePreview(),))
    if command is Command.QUIT:
        return Transition(Mode.EXITED, (ClosePreview(), Quit()))
    scroll = _PREVIEW_SCROLL.get(command)
    if scroll is not None:
        return _stay(snapshot, scroll)
    return _stay(snapshot)


def _plan_prompt(snapshot: TransitionInput, event: Event) -> Transition:
    command = event.command
    if command is Command.PROMPT_INSERT and event.text:
        return _stay(snapshot, EditPrompt(insert=event.text))
    if command is Command.PROMPT_BACKSPACE:
        return _stay(snapshot, EditPrompt(backspace=True))
    if command is Command.PROMPT_CANCEL:
        return Transition(Mode.BROWSING, (ClearPrompt(),))
    if command is Command.PROMPT_SUBMIT:
        prompt = snapshot.prompt_text.strip()
        if not prompt:
            return Transition(Mode.BROWSING, (ClearPrompt(),))
        return Transition(Mode.BROWSING, (ClearPrompt(), RunBundle(BundleMode.PROMPT, prompt)))
    return _stay(snapshot)


def plan_transition(snapshot: TransitionInput, event: Event) -> Transition:
    """Return the next mode and effects for ``event`` in ``snapshot.mode``."""
    if snapshot.mode is Mode.EXITED:
        return _stay(snapshot)
    if snapshot.mode is Mode.PROMPT_INPUT:
        return _plan_prompt(snapshot, event)
    if snapshot.mode is Mode.PREVIEW_OPEN:
        return _plan_preview(snapshot, event)
    return _plan_browsing(snapshot, event)


__all__ = [
    "Mode",
    "Command",
    "Event",
    "TransitionInput",
    "Effect",
    "Transition",
    "Move",
    "JumpStart",
    "JumpEnd",
    "Page",
    "ToggleEntry",
    "RejectIgnored",
    "Descend",
    "Ascend",
    "OpenPreview",
    "ClosePreview",
    "ScrollPreview",
    "ClearPrompt",
    "EditPrompt",
    "RunBundle",
    "LaunchAlternate",
    "ToggleHelp",
    "Quit",
    "plan_transition",
]
