"""Low-level terminal input decoding and key-to-command maps.

Reads raw bytes from stdin and translates them into normalized key tokens,
then maps tokens to logical commands for the current mode.
"""

from __future__ import annotations

import os
import select

from .runtime.transitions import Command, Event, Mode

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x15": "CTRL_U",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b" ": "SPACE",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

_CSI_TILDE_KEYS: dict[bytes, str] = {
    b"1": "HOME",
    b"7": "HOME",
    b"4": "END",
    b"8": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
    b"3": "DELETE",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, first: bytes) -> str:
    """Complete a multi-byte UTF-8 character started by ``first``."""
    lead = first[0]
    if lead >= 0xF0:
        extra = 3
    elif lead >= 0xE0:
        extra = 2
    elif lead >= 0xC0:
        extra = 1
    else:
        extra = 0
    data = first
    for _ in range(extra):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token; returns ``""`` when ``timeout_ms`` elapses."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    named = _CONTROL_KEYS.get(ch)
    if named is not None:
        return named
    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    final = _CSI_FINAL_KEYS.get(seq)
    if final is not None:
        return final
    tilde = _CSI_TILDE_KEYS.get(seq)
    if tilde is not None:
        seq2 = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if seq2 == b"~":
            return tilde
    return "ESC"


BROWSING_KEYS: dict[str, Command] = {
    "j": Command.MOVE_DOWN,
    "DOWN": Command.MOVE_DOWN,
    "k": Command.MOVE_UP,
    "UP": Command.MOVE_UP,
    "g": Command.JUMP_TOP,
    "HOME": Command.JUMP_TOP,
    "G": Command.JUMP_BOTTOM,
    "END": Command.JUMP_BOTTOM,
    "CTRL_D": Command.PAGE_DOWN,
    "PAGE_DOWN": Command.PAGE_DOWN,
    "CTRL_U": Command.PAGE_UP,
    "PAGE_UP": Command.PAGE_UP,
    "SPACE": Command.TOGGLE_SELECT,
    "ENTER": Command.DESCEND,
    "l": Command.DESCEND,
    "o": Command.DESCEND,
    "RIGHT": Command.DESCEND,
    "BACKSPACE": Command.ASCEND,
    "h": Command.ASCEND,
    "LEFT": Command.ASCEND,
    "r": Command.RUN_BUNDLE,
    "c": Command.RUN_BUNDLE_TO_CLIPBOARD,
    "i": Command.OPEN_PROMPT,
    "R": Command.LAUNCH_ALTERNATE_SELECTOR,
    "p": Command.PREVIEW,
    "ESC": Command.CLOSE_PREVIEW,
    "?": Command.TOGGLE_HELP,
    "q": Command.QUIT,
    "CTRL_C": Command.QUIT,
}

PREVIEW_KEYS: dict[str, Command] = {
    "j": Command.MOVE_DOWN,
    "DOWN": Command.MOVE_DOWN,
    "k": Command.MOVE_UP,
    "UP": Command.MOVE_UP,
    "g": Command.JUMP_TOP,
    "HOME": Command.JUMP_TOP,
    "G": Command.JUMP_BOTTOM,
    "END": Command.JUMP_BOTTOM,
    "CTRL_D": Command.PAGE_DOWN,
    "PAGE_DOWN": Command.PAGE_DOWN,
    "SPACE": Command.PAGE_DOWN,
    "CTRL_U": Command.PAGE_UP,
    "PAGE_UP": Command.PAGE_UP,
    "ESC": Command.CLOSE_PREVIEW,
    "p": Command.CLOSE_PREVIEW,
    "q": Command.CLOSE_PREVIEW,
    "CTRL_C": Command.QUIT,
}

PROMPT_KEYS: dict[str, Command] = {
    "ENTER": Command.PROMPT_SUBMIT,
    "ESC": Command.PROMPT_CANCEL,
    "CTRL_C": Command.PROMPT_CANCEL,
    "BACKSPACE": Command.PROMPT_BACKSPACE,
}


def event_for_key(mode: Mode, key: str) -> Event | None:
    """Map a key token to an ``Event`` for ``mode``; unmapped keys yield ``None``."""
    if mode is Mode.PROMPT_INPUT:
        command = PROMPT_KEYS.get(key)
        if command is not None:
            return Event(command)
        if key == "SPACE":
            return Event(Command.PROMPT_INSERT, " ")
        if len(key) == 1 and key.isprintable():
            return Event(Command.PROMPT_INSERT, key)
        return None
    if mode is Mode.PREVIEW_OPEN:
        command = PREVIEW_KEYS.get(key)
    elif mode is Mode.BROWSING:
        command = BROWSING_KEYS.get(key)
    else:
        command = None
    return Event(command) if command is not None else None


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "BROWSING_KEYS",
    "PREVIEW_KEYS",
    "PROMPT_KEYS",
    "read_key",
    "event_for_key",
]
