"""Frame composition for the picker screen.

The left column shows the current directory listing; the right column shows
selection statistics and key help. Preview and prompt overlays replace or
cover the base frame. ``build_frame`` is pure; ``render_frame`` writes it.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .ansi import fit_ansi_line
from .listing import Entry
from .preview import PreviewDocument
from .runtime.transitions import Mode
from .stats import AggregateStats
from .ui_theme import DEFAULT_THEME, UITheme

LEFT_COLUMN_PERCENT = 60
MIN_LEFT_WIDTH = 20
PROMPT_BOX_PERCENT = 80
PROMPT_TITLE = "Enter Prompt for Repomix"
PROMPT_HINT = "Enter: Submit | Esc: Cancel"
SELECTED_MARK = "[✓] "
DIRECTORY_MARK = "[+] "
FILE_MARK = "    "


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    left_width: int
    right_width: int
    list_rows: int
    preview_rows: int


def compute_layout(columns: int, lines: int) -> Layout:
    """Split the terminal into list/info columns with header and footer rows."""
    width = max(1, columns)
    height = max(3, lines)
    left = max(min(MIN_LEFT_WIDTH, width), (width * LEFT_COLUMN_PERCENT) // 100)
    right = max(0, width - left - 1)
    return Layout(
        width=width,
        height=height,
        left_width=left,
        right_width=right,
        list_rows=max(1, height - 2),
        preview_rows=max(1, height - 2),
    )


@dataclass
class RenderContext:
    layout: Layout
    current_dir: Path
    entries: list[Entry]
    cursor_index: int
    scroll_offset: int
    selection_count: int
    stats: AggregateStats
    mode: Mode = Mode.BROWSING
    show_help: bool = True
    status_message: str = ""
    preview: PreviewDocument | None = None
    preview_offset: int = 0
    prompt_text: str = ""
    alternate_available: bool = True


def format_entry(entry: Entry, theme: UITheme) -> str:
    """Marker plus styled name for one listing row."""
    reset = theme.reset
    if entry.selected:
        prefix = f"{theme.selected_marker}{SELECTED_MARK.rstrip()}{reset} "
    elif entry.is_dir:
        prefix = DIRECTORY_MARK
    else:
        prefix = FILE_MARK

    display = entry.name
    if entry.is_dir:
        display = f"{theme.directory}{display}/{reset}"
    if entry.ignored:
        display = f"{theme.ignored}{display}{reset}"
    if entry.selected:
        display = f"{theme.selected_name}{display}{reset}"
    return prefix + display


def _highlight_row(text: str, width: int, theme: UITheme) -> str:
    body = fit_ansi_line(text, width).replace(theme.reset, theme.reset + theme.cursor)
    return f"{theme.cursor}{body}{theme.reset}"


def stats_lines(stats: AggregateStats, theme: UITheme) -> list[str]:
    token_label = "GPT" if stats.precise else "Estimated"
    note = stats.tokenizer_name
    if stats.precise:
        note = f"{note} (same as GPT-3.5/4)"
    return [
        f"{theme.heading}Code Statistics{theme.reset}",
        "",
        f"Selected Files: {stats.file_count}",
        f"Lines of Code: {stats.total_lines}",
        f"{token_label} Tokens: {stats.total_tokens}",
        f"Characters: {stats.total_chars}",
        "",
        f"{theme.help_dim}Note: Using {note}{theme.reset}",
    ]


def help_lines(theme: UITheme, alternate_available: bool) -> list[str]:
    def key(label: str, text: str) -> str:
        return f"  {theme.help_key}{label}{theme.reset}: {text}"

    ranger = "Launch ranger" if alternate_available else "Launch ranger (not installed)"
    return [
        f"{theme.heading}Commands{theme.reset}",
        "",
        "Navigation:",
        key("j/↓", "Move down"),
        key("k/↑", "Move up"),
        key("g", "Go to top"),
        key("G", "Go to bottom"),
        key("C-d/C-u", "Page down/up"),
        key("h/←", "Go up dir"),
        key("l/→/enter", "Open dir"),
        "",
        "Selection:",
        key("space", "Select file/dir"),
        key("p", "Preview file"),
        key("esc", "Close preview"),
        "",
        "Actions:",
        key("r", "Run repomix"),
        key("c", "Copy to clipboard"),
        key("i", "Input prompt"),
        key("R", ranger),
        key("?", "Toggle help"),
        key("q", "Quit"),
    ]


def _footer(context: RenderContext, theme: UITheme) -> str:
    text = f"{theme.header} Selected: {context.selection_count} {theme.reset}"
    if context.status_message:
        text += f" {theme.status_error} {context.status_message} {theme.reset}"
    return text


def _base_frame(context: RenderContext, theme: UITheme) -> list[str]:
    layout = context.layout
    left_w = layout.left_width
    right_w = layout.right_width
    divider = f"{theme.border}│{theme.reset}" if right_w > 0 else ""

    right_lines = stats_lines(context.stats, theme)
    if context.show_help:
        right_lines += [""] + help_lines(theme, context.alternate_available)

    rows: list[str] = []
    for row in range(layout.height - 1):
        if row == 0:
            left = f"{theme.header}{fit_ansi_line(' ' + str(context.current_dir), left_w)}{theme.reset}"
        else:
            idx = context.scroll_offset + row - 1
            if idx < len(context.entries):
                text = format_entry(context.entries[idx], theme)
                if idx == context.cursor_index:
                    left = _highlight_row(text, left_w, theme)
                else:
                    left = fit_ansi_line(text, left_w)
            else:
                left = " " * left_w
        right = fit_ansi_line(" " + right_lines[row], right_w) if row < len(right_lines) else " " * right_w
        rows.append(left + divider + right)
    rows.append(fit_ansi_line(_footer(context, theme), layout.width))
    return rows


def _preview_frame(context: RenderContext, theme: UITheme) -> list[str]:
    layout = context.layout
    document = context.preview
    assert document is not None
    body: list[str] = []
    if document.diagnostic:
        body.append(f"{theme.status_error} {document.diagnostic} {theme.reset}")
    body.extend(document.lines)

    rows = [f"{theme.header}{fit_ansi_line(' ' + document.title, layout.width)}{theme.reset}"]
    for row in range(layout.preview_rows):
        idx = context.preview_offset + row
        rows.append(fit_ansi_line(body[idx], layout.width) if idx < len(body) else " " * layout.width)
    total = len(body)
    first = min(total, context.preview_offset + 1)
    last = min(total, context.preview_offset + layout.preview_rows)
    footer = f"{theme.header} Esc: close  j/k: scroll  g/G: top/bottom  ({first}-{last}/{total}) {theme.reset}"
    rows.append(fit_ansi_line(footer, layout.width))
    return rows


def _overlay_prompt(rows: list[str], context: RenderContext, theme: UITheme) -> list[str]:
    layout = context.layout
    box_w = max(10, min(layout.width, (layout.width * PROMPT_BOX_PERCENT) // 100))
    inner = box_w - 2
    pad_left = (layout.width - box_w) // 2
    pad_right = layout.width - box_w - pad_left
    border = theme.prompt_border
    reset = theme.reset

    def framed(text: str) -> str:
        return f"{border}│{reset}{fit_ansi_line(text, inner)}{border}│{reset}"

    box = [
        f"{border}┌{'─' * inner}┐{reset}",
        framed(f" {theme.heading}{PROMPT_TITLE}{reset}"),
        framed(""),
        framed(f" > {context.prompt_text[-max(1, inner - 5):]}_"),
        framed(""),
        framed(f" {theme.help_dim}{PROMPT_HINT}{reset}"),
        f"{border}└{'─' * inner}┘{reset}",
    ]
    top = max(0, (layout.height - len(box)) // 2)
    out = list(rows)
    for offset, line in enumerate(box):
        row = top + offset
        if row >= len(out):
            break
        out[row] = " " * pad_left + line + " " * pad_right
    return out


def build_frame(context: RenderContext, theme: UITheme = DEFAULT_THEME) -> list[str]:
    """Return ``layout.height`` display rows for the current state."""
    if context.mode is Mode.PREVIEW_OPEN and context.preview is not None:
        return _preview_frame(context, theme)
    rows = _base_frame(context, theme)
    if context.mode is Mode.PROMPT_INPUT:
        rows = _overlay_prompt(rows, context, theme)
    return rows


def render_frame(context: RenderContext, theme: UITheme = DEFAULT_THEME, fd: int | None = None) -> None:
    out = "\033[H\033[J" + "\r\n".join(build_frame(context, theme))
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, out.encode("utf-8", errors="replace"))


__all__ = [
    "Layout",
    "RenderContext",
    "compute_layout",
    "format_entry",
    "stats_lines",
    "help_lines",
    "build_frame",
    "render_frame",
]
