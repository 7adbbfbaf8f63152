"""Cursor state, host surfaces, clipboard, and undo/redo history."""

from .buffer import Buffer, Transaction
from .clipboard import (
    Clipboard,
    ClipboardFailure,
    MemoryClipboard,
    SystemClipboard,
)
from .document import MemorySurface
from .prompt import Prompt, PromptHistory, ScriptedPrompt
from .state import MODES, Cursor, Direction, ModeName, RepeatState
from .sync import SurfaceSnapshot, SurfaceValidationError, TextSurface
from .undo import EditHistory, TextHist
from .validation import clamp_offset, ensure_cursor, ensure_offset

__all__ = [
    "Buffer",
    "Transaction",
    "Clipboard",
    "ClipboardFailure",
    "MemoryClipboard",
    "SystemClipboard",
    "Prompt",
    "PromptHistory",
    "ScriptedPrompt",
    "MemorySurface",
    "MODES",
    "Cursor",
    "Direction",
    "ModeName",
    "RepeatState",
    "SurfaceSnapshot",
    "SurfaceValidationError",
    "TextSurface",
    "EditHistory",
    "TextHist",
    "clamp_offset",
    "ensure_cursor",
    "ensure_offset",
]
