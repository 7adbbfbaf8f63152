"""In-memory text surface used by tests and headless hosts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .state import Direction
from .validation import ensure_offset


@dataclass(slots=True)
class MemorySurface:
    """String plus selection range implementing ``TextSurface``.

    ``version`` increases on every applied replacement; ``scrolls`` records
    the ``(dx, dy)`` pairs passed to ``scroll_by`` so callers can assert on
    viewport requests without a real widget.
    """

    text: str = ""
    selection_start: int = 0
    selection_end: int = 0
    direction: Direction = "forward"
    read_only: bool = False
    version: int = 0
    scrolls: List[Tuple[int, int]] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str, *, cursor: int = 0) -> "MemorySurface":
        ensure_offset(text, cursor)
        return cls(text=text, selection_start=cursor, selection_end=cursor)

    def get_text(self) -> str:
        return self.text

    def get_selection(self) -> Tuple[int, int, Direction]:
        return self.selection_start, self.selection_end, self.direction

    def set_selection(self, start: int, end: int, direction: Direction) -> None:
        ensure_offset(self.text, start)
        ensure_offset(self.text, end)
        if start > end:
            start, end = end, start
        self.selection_start = start
        self.selection_end = end
        self.direction = direction

    def replace_range(self, start: int, end: int, text: str) -> bool:
        if self.read_only:
            return False
        ensure_offset(self.text, start)
        ensure_offset(self.text, end)
        self.text = self.text[:start] + text + self.text[end:]
        caret = start + len(text)
        self.selection_start = self.selection_end = caret
        self.direction = "forward"
        self.version += 1
        return True

    def scroll_by(self, dx: int, dy: int) -> None:
        self.scrolls.append((dx, dy))

    @property
    def caret(self) -> int:
        if self.direction == "backward":
            return self.selection_start
        return self.selection_end

    def type_text(self, text: str) -> None:
        """Simulate host-side typing: replace the selection with ``text``."""

        self.replace_range(self.selection_start, self.selection_end, text)

    def backspace(self, count: int = 1) -> None:
        """Simulate host-side deletion before the caret."""

        if self.selection_start != self.selection_end:
            self.replace_range(self.selection_start, self.selection_end, "")
            return
        start = max(0, self.selection_start - count)
        self.replace_range(start, self.selection_start, "")
