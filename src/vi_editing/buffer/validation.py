"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .state import Cursor
from .sync import SurfaceValidationError


def ensure_offset(text: str, offset: int) -> int:
    if offset < 0 or offset > len(text):
        raise SurfaceValidationError(
            f"Offset {offset} outside [0, {len(text)}]", offset=offset
        )
    return offset


def ensure_cursor(text: str, cursor: Cursor) -> Cursor:
    ensure_offset(text, cursor.cur)
    ensure_offset(text, cursor.start)
    return cursor


def clamp_offset(text: str, offset: int) -> int:
    return max(0, min(offset, len(text)))
