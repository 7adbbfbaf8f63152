"""Factory wiring a host surface into a ready-to-use editing session."""

from __future__ import annotations

from typing import List, Optional

from vi_editing.buffer import (
    Buffer,
    Clipboard,
    Prompt,
    SurfaceSnapshot,
    SystemClipboard,
    TextSurface,
)
from vi_editing.keymaps import KeymapRegistry
from vi_editing.modes import (
    CommandMode,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    ModeManager,
    ModeResult,
    VisualLineMode,
    VisualMode,
)
from vi_editing.runtime import telemetry
from vi_editing.runtime.settings import EditorSettings


class EditingSession:
    """One interpreter attached to one host text surface.

    The host forwards key events through ``handle_key`` and selection changes
    through ``on_selection_changed``; everything else lives on ``manager``.
    """

    def __init__(self, manager: ModeManager) -> None:
        self.manager = manager

    @property
    def context(self) -> ModeContext:
        return self.manager.context

    @property
    def buffer(self) -> Buffer:
        return self.manager.context.buffer

    @property
    def bus(self) -> ModeBus:
        return self.manager.context.bus

    @property
    def mode(self) -> str:
        return self.manager.mode_name

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def pending_keys(self) -> str:
        active = self.manager.active_mode
        return active.pending_keys if active else ""

    async def handle_key(self, key: KeyInput) -> ModeResult:
        return await self.manager.handle_key(key)

    async def feed(self, keys: str) -> List[ModeResult]:
        return await self.manager.feed(keys)

    async def on_selection_changed(self) -> ModeResult:
        return await self.manager.on_selection_changed()

    async def enter_command(self) -> ModeResult:
        return await self.manager.enter_command()

    def snapshot(self) -> SurfaceSnapshot:
        attributes = {"pending": self.pending_keys} if self.pending_keys else {}
        return self.buffer.mirror(mode=self.mode, attributes=attributes)


def create_session(
    surface: TextSurface,
    clipboard: Optional[Clipboard] = None,
    prompt: Optional[Prompt] = None,
    settings: Optional[EditorSettings] = None,
    debug: bool = False,
    *,
    keymap_registry: Optional[KeymapRegistry] = None,
) -> EditingSession:
    """Build a session over ``surface`` that starts in insert mode.

    ``settings`` default to ``EditorSettings.from_env()``; ``debug=True``
    forces the debug flag on top of them. The system clipboard is used unless
    another ``clipboard`` is given.
    """

    settings = settings or EditorSettings.from_env()
    if debug and not settings.debug:
        settings = settings.with_overrides(debug=True)
    context = ModeContext(
        buffer=Buffer(surface),
        bus=ModeBus(),
        settings=settings,
        clipboard=clipboard if clipboard is not None else SystemClipboard(),
        prompt=prompt,
    )
    manager = ModeManager(context, keymap_registry=keymap_registry)
    # The first registered mode becomes active.
    manager.register_mode(InsertMode)
    manager.register_mode(CommandMode)
    manager.register_mode(VisualMode)
    manager.register_mode(VisualLineMode)
    telemetry.record_event(
        "session.created",
        level="debug",
        data={"mode": manager.mode_name, "debug": settings.debug},
    )
    return EditingSession(manager)


__all__ = ["EditingSession", "create_session"]
