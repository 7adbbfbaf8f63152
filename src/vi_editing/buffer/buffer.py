"""High-level buffer façade combining the host surface, cursor, and history."""

from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from typing import ContextManager, Iterator, Optional

from vi_editing.runtime import telemetry

from .state import Cursor
from .sync import SurfaceSnapshot, TextSurface
from .undo import EditHistory, TextHist
from .validation import clamp_offset, ensure_cursor


class Buffer:
    """Session-side view of one host text surface.

    The text itself always lives in the surface and is re-read on every
    access; the buffer owns the cursor and the edit history.
    """

    def __init__(
        self,
        surface: TextSurface,
        *,
        name: str = "default",
        history: Optional[EditHistory] = None,
    ) -> None:
        self.name = name
        self.surface = surface
        self.history = history or EditHistory()
        self.history.last_known = surface.get_text()
        self.cursor = Cursor.collapsed(0)
        self.sync_cursor()
        self._merging = False

    @property
    def text(self) -> str:
        return self.surface.get_text()

    def sync_cursor(self) -> Cursor:
        """Adopt the host's current selection as the session cursor."""

        start, end, direction = self.surface.get_selection()
        if direction == "backward":
            cursor = Cursor(start, end)
        else:
            cursor = Cursor(end, start)
        self.cursor = ensure_cursor(self.text, cursor)
        return self.cursor

    def set_cursor(self, offset: int) -> Cursor:
        offset = clamp_offset(self.text, offset)
        self.cursor = Cursor.collapsed(offset)
        self.surface.set_selection(offset, offset, "forward")
        return self.cursor

    def set_selection(self, cursor: Cursor) -> Cursor:
        text = self.text
        cursor = Cursor(
            clamp_offset(text, cursor.cur), clamp_offset(text, cursor.start)
        )
        low, high, direction = cursor.ordered()
        self.cursor = cursor
        self.surface.set_selection(low, high, direction)
        return cursor

    def read(self, cursor: Cursor) -> str:
        low, high, _ = cursor.ordered()
        return self.text[low:high]

    def replace(
        self,
        cursor: Cursor,
        text: str,
        *,
        merge: Optional[bool] = None,
        label: str = "replace",
    ) -> bool:
        """Replace the span under ``cursor`` with ``text`` and record it.

        With ``merge`` the history window stays open afterwards, so the next
        adjacent insertion extends this entry instead of pushing a new one.
        """

        merge = self._merging if merge is None else merge
        history = self.history
        was_open = history.open
        history.open = history.open and merge and not history.future
        if not was_open and not history.open:
            history.close(self.text)
        with telemetry.span(
            f"buffer::{label}",
            component=True,
            metadata={"buffer": self.name},
        ):
            modified = self._apply(cursor, text, record=True)
        history.open = merge
        return modified

    def _apply(self, cursor: Cursor, text: str, *, record: bool) -> bool:
        current = self.text
        low, high, _ = cursor.ordered()
        low, high = clamp_offset(current, low), clamp_offset(current, high)
        old = current[low:high]
        if old == text:
            return False
        if not self.surface.replace_range(low, high, text):
            telemetry.record_event(
                "buffer.rejected",
                level="warning",
                data={"buffer": self.name, "start": low, "end": high},
            )
            return False
        if record:
            self.history.record(Cursor(high, low), old, text)
        self.history.last_known = self.text
        self.cursor = Cursor.collapsed(low + len(text))
        return True

    def undo(self) -> bool:
        """Revert the newest command, every entry of its group included."""

        entries = self.history.pop_undo_group()
        if not entries:
            return False
        self.history.close(self.text)
        for entry in entries:
            low = entry.low
            span = Cursor(low + len(entry.new_text), low)
            self._apply(span, entry.old_text, record=False)
        self.history.open = False
        self.set_cursor(entries[-1].undo_cursor())
        telemetry.record_event(
            "history.undo",
            data={
                "buffer": self.name,
                "start": entries[-1].low,
                "entries": len(entries),
            },
            level="debug",
        )
        return True

    def redo(self) -> bool:
        entries = self.history.pop_redo_group()
        if not entries:
            return False
        self.history.close(self.text)
        for entry in entries:
            low = entry.low
            span = Cursor(low + len(entry.old_text), low)
            self._apply(span, entry.new_text, record=False)
        self.history.open = False
        self.set_cursor(entries[-1].redo_cursor())
        telemetry.record_event(
            "history.redo",
            data={
                "buffer": self.name,
                "start": entries[0].low,
                "entries": len(entries),
            },
            level="debug",
        )
        return True

    def release(self) -> None:
        """Hand editing to the host; remember the text to diff against later."""

        self.history.close(self.text)

    def reconcile(self) -> Optional[TextHist]:
        """Record whatever the host changed since ``release`` as one entry."""

        current = self.text
        entry = EditHistory.diff(self.history.last_known, current)
        self.history.last_known = current
        self.history.open = False
        if entry is None:
            return None
        self.history.entries.append(entry)
        self.history.future.clear()
        telemetry.record_event(
            "history.insert_diff",
            level="debug",
            data={
                "buffer": self.name,
                "start": entry.low,
                "length": len(entry.new_text),
            },
        )
        return entry

    @contextmanager
    def merging(self) -> Iterator[None]:
        """Keep the merge window open for every replace inside the block."""

        previous = self._merging
        self._merging = True
        try:
            yield
        finally:
            self._merging = previous
            self.history.open = False

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def scroll_by(self, dx: int, dy: int) -> None:
        self.surface.scroll_by(dx, dy)

    def mirror(
        self, *, mode: str, attributes: Optional[dict[str, str]] = None
    ) -> SurfaceSnapshot:
        return SurfaceSnapshot(
            text=self.text,
            cursor=self.cursor.copy(),
            mode=mode,
            attributes=dict(attributes or {}),
        )


class Transaction(AbstractContextManager["Transaction"]):
    """Span around one command.

    On a clean exit the entries the command created share one undo group, the
    first carries the pre-command cursor and the last the post-command one.
    """

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._before: Optional[int] = None
        self._known: set[int] = set()

    def __enter__(self) -> "Transaction":
        low, _, _ = self.buffer.cursor.ordered()
        self._before = low
        history = self.buffer.history
        self._known = {id(entry) for entry in history.entries + history.future}
        self._span_cm = telemetry.span(
            name=self.label,
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def created(self) -> list[TextHist]:
        return [e for e in self.buffer.history.entries if id(e) not in self._known]

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is None:
                fresh = self.created()
                if fresh:
                    group = self.buffer.history.next_group()
                    for entry in fresh:
                        entry.group = group
                    fresh[0].cursor_before = self._before
                    fresh[-1].cursor_after = self.buffer.cursor.cur
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "Transaction"]
