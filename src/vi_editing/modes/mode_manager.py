"""Mode manager coordinating the insert, command and visual modes."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Type

from vi_editing.keymaps import KeymapRegistry, KeymapResolver, load_default_keymaps
from vi_editing.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .insert_mode import InsertMode
from .keymap_helpers import key_to_token, parse_keys


class ModeManager:
    """Owns the active mode, handles transitions, and dispatches key events.

    Key events are handled one at a time: a command awaiting the clipboard or
    a prompt holds the lock until it finishes.
    """

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        self._lock = asyncio.Lock()
        self.logger = telemetry.get_logger("vi_editing.modes")
        self.keymap_registry = keymap_registry or KeymapRegistry(
            logger_name="vi_editing.keymaps"
        )
        if load_defaults and keymap_registry is None:
            load_default_keymaps(self.keymap_registry)
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            self.keymap_registry, logger_name="vi_editing.keymaps"
        )
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("mode_manager", self)

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    @property
    def mode_name(self) -> str:
        return self._active or ""

    def mode(self, name: str) -> Mode:
        try:
            return self._modes[name]
        except KeyError as exc:
            raise KeyError(f"Unknown mode '{name}'") from exc

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self.active_mode
        if previous and previous.name == name:
            return
        if previous:
            previous.on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous.name if previous else None)
        self.context.bus.emit("mode.changed", name)
        telemetry.record_event("mode.switch", data={"mode": name})

    async def handle_key(self, key: KeyInput) -> ModeResult:
        async with self._lock:
            return await self._dispatch(key)

    async def feed(self, keys: str) -> List[ModeResult]:
        """Send vim-notation keys such as ``"dw<Esc>"`` one by one."""

        return [await self.handle_key(key) for key in parse_keys(keys)]

    async def on_selection_changed(self) -> ModeResult:
        """Host-side selection change (mouse); picks visual or insert mode."""

        async with self._lock:
            mode = self.active_mode
            if mode is None or mode.name == InsertMode.name:
                return ModeResult(consumed=False, status="ignored")
            buffer = self.context.buffer
            previous = buffer.cursor.copy()
            cursor = buffer.sync_cursor()
            if cursor == previous:
                return ModeResult(consumed=False, status="unchanged")
            for each in self._modes.values():
                each.reset()
            target = "insert" if cursor.is_empty() else "visual"
            if target == "visual" and mode.name == "visualline":
                target = "visualline"
            self.switch_mode(target)
            return ModeResult(consumed=True, status="selection", switch_to=target)

    async def enter_command(self) -> ModeResult:
        """Leave insert mode, recording what the host typed."""

        async with self._lock:
            return self._enter_command()

    async def _dispatch(self, key: KeyInput) -> ModeResult:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        if self.context.debug:
            telemetry.record_event(
                "session.key",
                level="debug",
                data={"key": key_to_token(key), "mode": mode.name},
            )
        if key.is_escape:
            if mode.name == InsertMode.name:
                return self._enter_command()
            return self._escape(mode)
        if mode.name == InsertMode.name:
            return await self._run(mode, key)
        if key.key == "tab" and not key.modifiers:
            if mode.pending_keys:
                return ModeResult(consumed=True, status="ignored")
            self.context.buffer.set_cursor(self.context.buffer.cursor.cur)
            self.switch_mode(InsertMode.name)
            return ModeResult(consumed=False, status="enter_insert")
        if not key.is_character:
            return ModeResult(consumed=True, status="ignored")
        return await self._run(mode, key)

    async def _run(self, mode: Mode, key: KeyInput) -> ModeResult:
        with telemetry.span(
            name=f"mode::{mode.name}",
            component=True,
            metadata={"key": key_to_token(key), "mode": mode.name},
        ):
            result = await mode.handle_key(key)
        return self._after_mode_result(mode, result)

    def _after_mode_result(self, mode: Mode, result: ModeResult) -> ModeResult:
        if result.error is not None:
            error = result.error
            self.context.bus.emit("session.error", error)
            telemetry.record_event(
                "session.error",
                level="warning",
                data={
                    "kind": error.kind.value,
                    "reason": error.reason,
                    "keys": error.keys,
                    "mode": mode.name,
                },
            )
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result

    def _escape(self, mode: Mode) -> ModeResult:
        for each in self._modes.values():
            each.reset()
        buffer = self.context.buffer
        buffer.set_cursor(buffer.cursor.cur)
        self.switch_mode("command")
        return ModeResult(consumed=True, status="escape", message=mode.name)

    def _enter_command(self) -> ModeResult:
        buffer = self.context.buffer
        insert = self._modes.get(InsertMode.name)
        cursor = buffer.sync_cursor()
        typed = insert.typed_text() if isinstance(insert, InsertMode) else ""
        buffer.reconcile()
        self.context.repeat.capture_insert(typed)
        target = "command" if cursor.is_empty() else "visual"
        self.switch_mode(target)
        return ModeResult(consumed=True, status="enter_command", message=target)


__all__ = ["ModeManager"]
