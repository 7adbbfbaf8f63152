"""Linear undo/redo history with a merge window."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .state import Cursor


@dataclass(slots=True)
class TextHist:
    """One recorded edit.

    ``range`` is the span of the pre-edit text that ``old_text`` occupied and
    ``new_text`` replaced. ``cursor_before``/``cursor_after`` are stamped by the
    command that produced the edit; diff-derived entries leave them unset.
    Entries sharing a ``group`` came from one command and undo together.
    """

    range: Cursor
    old_text: str
    new_text: str
    cursor_before: Optional[int] = None
    cursor_after: Optional[int] = None
    group: Optional[int] = None

    @property
    def low(self) -> int:
        low, _, _ = self.range.ordered()
        return low

    def undo_cursor(self) -> int:
        if self.cursor_before is not None:
            return self.cursor_before
        return self.low + len(self.old_text)

    def redo_cursor(self) -> int:
        if self.cursor_after is not None:
            return self.cursor_after
        return self.low + len(self.new_text)


@dataclass(slots=True)
class EditHistory:
    """Undo stack, redo stack, and the open/closed state of the merge window."""

    entries: List[TextHist] = field(default_factory=list)
    future: List[TextHist] = field(default_factory=list)
    open: bool = False
    last_known: str = ""
    groups: int = 0

    def close(self, text: str) -> None:
        self.open = False
        self.last_known = text

    def record(self, range: Cursor, old_text: str, new_text: str) -> TextHist:
        """Push an edit, or extend the previous one while the window is open.

        Merging only happens when the new edit starts exactly where the
        previous entry's replacement text ends.
        """

        low, _, _ = range.ordered()
        self.future.clear()
        if self.open and self.entries:
            last = self.entries[-1]
            if last.low + len(last.new_text) == low and not old_text:
                last.new_text += new_text
                return last
        entry = TextHist(range=range.copy(), old_text=old_text, new_text=new_text)
        self.entries.append(entry)
        return entry

    def pop_undo(self) -> Optional[TextHist]:
        if not self.entries:
            return None
        entry = self.entries.pop()
        self.future.append(entry)
        return entry

    def pop_redo(self) -> Optional[TextHist]:
        if not self.future:
            return None
        entry = self.future.pop()
        self.entries.append(entry)
        return entry

    def pop_undo_group(self) -> List[TextHist]:
        """Pop the top entry and every entry below it in the same group.

        Entries come back newest first.
        """

        return _move_group(self.entries, self.future)

    def pop_redo_group(self) -> List[TextHist]:
        return _move_group(self.future, self.entries)

    def next_group(self) -> int:
        self.groups += 1
        return self.groups

    def can_undo(self) -> bool:
        return bool(self.entries)

    def can_redo(self) -> bool:
        return bool(self.future)

    @staticmethod
    def diff(old: str, new: str) -> Optional[TextHist]:
        """Describe ``old -> new`` as one span using common prefix and suffix."""

        if old == new:
            return None
        limit = min(len(old), len(new))
        start = 0
        while start < limit and old[start] == new[start]:
            start += 1
        old_end, new_end = len(old), len(new)
        while (
            old_end > start
            and new_end > start
            and old[old_end - 1] == new[new_end - 1]
        ):
            old_end -= 1
            new_end -= 1
        return TextHist(
            range=Cursor(old_end, start),
            old_text=old[start:old_end],
            new_text=new[start:new_end],
        )



def _move_group(source: List[TextHist], target: List[TextHist]) -> List[TextHist]:
    moved: List[TextHist] = []
    while source:
        top = source[-1]
        if moved and (top.group is None or top.group != moved[0].group):
            break
        moved.append(source.pop())
        target.append(top)
    return moved

__all__ = ["EditHistory", "TextHist"]
