"""Cursor index and scroll offset for the bounded-height file list."""

from __future__ import annotations

DEFAULT_PAGE_SIZE = 10


class ViewportCursor:
    """Logical cursor into the current item list plus its scroll window.

    All movement clamps to ``[0, item_count - 1]``. ``recompute_scroll`` must
    run before each render so that
    ``scroll_offset <= cursor_index <= scroll_offset + visible_height - 1``.
    """

    def __init__(self, item_count: int = 0) -> None:
        self.item_count = max(0, item_count)
        self.cursor_index = 0
        self.scroll_offset = 0

    def reset(self, item_count: int) -> None:
        """Start over at the top of a freshly listed directory."""
        self.item_count = max(0, item_count)
        self.cursor_index = 0
        self.scroll_offset = 0

    def _set_cursor(self, index: int) -> bool:
        """Clamp and move the cursor; return whether it actually moved."""
        if self.item_count == 0:
            return False
        clamped = max(0, min(index, self.item_count - 1))
        if clamped == self.cursor_index:
            return False
        self.cursor_index = clamped
        return True

    def move_by(self, delta: int) -> bool:
        """Move ``delta`` rows up (negative) or down (positive)."""
        return self._set_cursor(self.cursor_index + delta)

    def move_to_start(self) -> bool:
        """Jump to the first row."""
        return self._set_cursor(0)

    def move_to_end(self) -> bool:
        """Jump to the last row."""
        return self._set_cursor(self.item_count - 1)

    def page_by(self, direction: int, page_size: int = DEFAULT_PAGE_SIZE) -> bool:
        """Move by one page; the page never exceeds the list length."""
        step = min(max(1, page_size), self.item_count)
        sign = 1 if direction >= 0 else -1
        return self._set_cursor(self.cursor_index + sign * step)

    def recompute_scroll(self, visible_height: int) -> int:
        """Shift ``scroll_offset`` so the cursor row is inside the window."""
        height = max(1, visible_height)
        if self.item_count == 0:
            self.cursor_index = 0
            self.scroll_offset = 0
            return 0
        self.cursor_index = max(0, min(self.cursor_index, self.item_count - 1))
        if self.cursor_index < self.scroll_offset:
            self.scroll_offset = self.cursor_index
        elif self.cursor_index >= self.scroll_offset + height:
            self.scroll_offset = self.cursor_index - height + 1
        # Pull the window back up after a shrink so rows are not wasted.
        max_offset = max(0, self.item_count - height)
        if self.scroll_offset > max_offset:
            self.scroll_offset = max_offset
        return self.scroll_offset


__all__ = ["DEFAULT_PAGE_SIZE", "ViewportCursor"]
