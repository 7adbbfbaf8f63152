"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from vi_editing.buffer import (
    Buffer,
    Clipboard,
    MemoryClipboard,
    Prompt,
    PromptHistory,
    RepeatState,
)
from vi_editing.runtime.settings import EditorSettings
from vi_editing.text.motions import MotionResolver
from vi_editing.text.search import SearchEngine

from .operator_pipeline import SessionError

ESCAPE_KEYS = frozenset({"escape", "<Esc>", "ESC"})


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes.

    ``key`` is the character for printable keys and a lowercase name such as
    ``"escape"`` or ``"tab"`` otherwise.
    """

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @property
    def ctrl(self) -> bool:
        return "ctrl" in self.modifiers

    @property
    def is_escape(self) -> bool:
        # ctrl+{ is the alternate chord for hosts that reserve Escape.
        return self.key in ESCAPE_KEYS or (self.ctrl and self.key == "{")

    @property
    def is_character(self) -> bool:
        return len(self.key) == 1


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``."""

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None
    modified: bool = False
    error: Optional[SessionError] = None


@dataclass(slots=True)
class ModeContext:
    """Shared services every mode can access."""

    buffer: Buffer
    bus: "ModeBus"
    settings: EditorSettings = field(default_factory=EditorSettings)
    clipboard: Clipboard = field(default_factory=MemoryClipboard)
    prompt: Optional[Prompt] = None
    motions: MotionResolver = field(default_factory=MotionResolver)
    search: SearchEngine = field(default_factory=SearchEngine)
    repeat: RepeatState = field(default_factory=RepeatState)
    prompt_history: PromptHistory = field(default_factory=PromptHistory)
    extras: Dict[str, object] = field(default_factory=dict)

    @property
    def debug(self) -> bool:
        return self.settings.debug


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class Mode:
    """Base class all concrete editor modes inherit from."""

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    @property
    def pending_keys(self) -> str:
        return ""

    def reset(self) -> None:
        """Drop any partially typed command."""

    def on_enter(
        self, previous: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del previous

    def on_exit(
        self, next_mode: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del next_mode

    async def handle_key(
        self, key: KeyInput
    ) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError
