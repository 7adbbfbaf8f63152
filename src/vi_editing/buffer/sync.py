"""Adapter boundary types for the host text surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Tuple

from .state import Cursor, Direction


@dataclass(slots=True)
class SurfaceSnapshot:
    """Host-friendly view of the session a UI can render."""

    text: str
    cursor: Cursor
    mode: str
    attributes: dict[str, str] = field(default_factory=dict)


class TextSurface(Protocol):
    """The narrow surface the interpreter needs from a host text widget.

    Offsets are code points. The interpreter never caches ``get_text`` across
    an edit, so hosts may mutate the text freely while insert mode is active.
    """

    def get_text(self) -> str:
        """Return the full current text."""
        ...

    def get_selection(self) -> Tuple[int, int, Direction]:
        """Return ``(start, end, direction)`` with ``start <= end``."""
        ...

    def set_selection(self, start: int, end: int, direction: Direction) -> None:
        """Select ``[start, end)``; ``direction`` says which end holds the caret."""
        ...

    def replace_range(self, start: int, end: int, text: str) -> bool:
        """Replace ``[start, end)`` with ``text``; return whether it applied."""
        ...

    def scroll_by(self, dx: int, dy: int) -> None:
        """Scroll the viewport without touching the selection."""
        ...


class SurfaceValidationError(RuntimeError):
    """Raised when a host reports offsets outside the current text."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset
