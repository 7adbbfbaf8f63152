"""Cursor, mode names, and repeat tracking state for an editing session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

Direction = Literal["forward", "backward"]
ModeName = Literal["insert", "command", "visual", "visualline"]

MODES: Tuple[str, ...] = ("insert", "command", "visual", "visualline")


@dataclass(slots=True)
class Cursor:
    """Selection expressed as two code-point offsets.

    ``cur`` is where new input lands and ``start`` anchors the selection;
    equal values mean no selection.
    """

    cur: int
    start: int

    @classmethod
    def collapsed(cls, offset: int) -> "Cursor":
        return cls(offset, offset)

    def ordered(self) -> Tuple[int, int, Direction]:
        if self.cur < self.start:
            return self.cur, self.start, "backward"
        return self.start, self.cur, "forward"

    def is_forward(self) -> bool:
        return self.cur >= self.start

    def is_empty(self) -> bool:
        return self.cur == self.start

    def at_start(self) -> "Cursor":
        low, _, _ = self.ordered()
        return Cursor.collapsed(low)

    def at_end(self) -> "Cursor":
        _, high, _ = self.ordered()
        return Cursor.collapsed(high)

    def swapped(self) -> "Cursor":
        return Cursor(self.start, self.cur)

    def copy(self) -> "Cursor":
        return Cursor(self.cur, self.start)


@dataclass(slots=True)
class RepeatState:
    """What ``.`` replays: the last mutating keys and the text typed after them."""

    last_command: Tuple[str, ...] = ()
    last_inserted_text: str = ""
    pending_capture: bool = False

    def record_command(self, keys: Tuple[str, ...], *, capture: bool) -> None:
        self.last_command = keys
        self.last_inserted_text = ""
        self.pending_capture = capture

    def capture_insert(self, text: str) -> None:
        """Store text typed by the host while insert mode was active."""

        if self.pending_capture:
            self.pending_capture = False
            self.last_inserted_text = text
            return
        if text:
            self.last_command = ()
            self.last_inserted_text = text

    def snapshot(self) -> Tuple[Tuple[str, ...], str]:
        return self.last_command, self.last_inserted_text

    def restore(self, snapshot: Tuple[Tuple[str, ...], str]) -> None:
        self.last_command, self.last_inserted_text = snapshot
        self.pending_capture = False


__all__ = ["Cursor", "Direction", "MODES", "ModeName", "RepeatState"]
