"""``TextSurface`` implementation over a Textual ``TextArea``."""

from __future__ import annotations

from typing import Tuple

from textual.widgets import TextArea
from textual.widgets.text_area import Selection

from vi_editing.buffer import Direction, ensure_offset

Location = Tuple[int, int]


class TextAreaSurface:
    """Expose a ``TextArea`` as code-point offsets.

    ``scroll_by`` receives the session's pixel-like units; ``line_height`` of
    them make one terminal row.
    """

    def __init__(self, widget: TextArea, *, line_height: int = 20) -> None:
        self.widget = widget
        self.line_height = max(1, line_height)

    @property
    def newline(self) -> str:
        return self.widget.document.newline

    def get_text(self) -> str:
        return self.widget.text

    def get_selection(self) -> Tuple[int, int, Direction]:
        text = self.get_text()
        selection = self.widget.selection
        anchor = self.offset_of(text, selection.start)
        caret = self.offset_of(text, selection.end)
        if caret < anchor:
            return caret, anchor, "backward"
        return anchor, caret, "forward"

    def set_selection(self, start: int, end: int, direction: Direction) -> None:
        text = self.get_text()
        ensure_offset(text, start)
        ensure_offset(text, end)
        if start > end:
            start, end = end, start
        low = self.location_of(text, start)
        high = self.location_of(text, end)
        if direction == "backward":
            self.widget.selection = Selection(high, low)
        else:
            self.widget.selection = Selection(low, high)

    def replace_range(self, start: int, end: int, text: str) -> bool:
        if self.widget.read_only:
            return False
        current = self.get_text()
        ensure_offset(current, start)
        ensure_offset(current, end)
        self.widget.replace(
            text,
            self.location_of(current, start),
            self.location_of(current, end),
            maintain_selection_offset=False,
        )
        return True

    def scroll_by(self, dx: int, dy: int) -> None:
        self.widget.scroll_relative(
            x=dx / self.line_height or None,
            y=dy / self.line_height or None,
            animate=False,
        )

    def location_of(self, text: str, offset: int) -> Location:
        newline = self.newline
        row = text.count(newline, 0, offset)
        line_begin = text.rfind(newline, 0, offset)
        if line_begin < 0:
            return row, offset
        return row, offset - line_begin - len(newline)

    def offset_of(self, text: str, location: Location) -> int:
        row, column = location
        newline = self.newline
        offset = 0
        for _ in range(row):
            found = text.find(newline, offset)
            if found < 0:
                return len(text)
            offset = found + len(newline)
        line_stop = text.find(newline, offset)
        if line_stop < 0:
            line_stop = len(text)
        return min(offset + column, line_stop)


__all__ = ["TextAreaSurface"]
