"""Adapter that feeds Textual key events into an editing session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from textual import events

from vi_editing.buffer import SurfaceSnapshot
from vi_editing.modes import KeyInput, ModeResult, SessionError
from vi_editing.session import EditingSession

MODE_LABELS = {
    "insert": "-- INSERT --",
    "command": "-- COMMAND --",
    "visual": "-- VISUAL --",
    "visualline": "-- VISUAL LINE --",
}

# Insert mode belongs to the host; only these reach the session there.
INSERT_MODE_KEYS = frozenset({"escape", "tab", "ctrl+left_curly_bracket"})


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[SurfaceSnapshot], None] = _noop
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


def key_input_from_event(event: events.Key) -> KeyInput:
    """Translate a Textual key event into the session's ``KeyInput``."""

    parts = event.key.split("+")
    modifiers = tuple(part for part in parts[:-1] if part != "shift")
    if event.is_printable and event.character and not modifiers:
        return KeyInput(event.character, text=event.character)
    name = parts[-1]
    if name == "left_curly_bracket":
        name = "{"
    elif name == "space":
        name = " "
    elif len(name) == 1 and "shift" in parts[:-1]:
        name = name.upper()
    return KeyInput(name, modifiers, event.character)


class TextualViAdapter:
    """Bridges an ``EditingSession`` and its bus events to Textual widgets."""

    def __init__(self, session: EditingSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self.last_error: Optional[SessionError] = None
        self._subscribe_events()
        self._refresh()

    def wants(self, event: events.Key) -> bool:
        """Whether ``event`` should reach the session instead of the widget."""

        if self.session.mode != "insert":
            return True
        return event.key in INSERT_MODE_KEYS

    async def handle_key_event(self, event: events.Key) -> Optional[ModeResult]:
        if not self.wants(event):
            return None
        return await self.handle_key(key_input_from_event(event))

    async def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: tuple[str, ...] = (),
    ) -> ModeResult:
        """Dispatch a key given by name, as tests and scripted hosts do."""

        normalized = tuple(str(mod).lower() for mod in modifiers)
        return await self.handle_key(KeyInput(key, normalized, text))

    async def handle_key(self, key: KeyInput) -> ModeResult:
        self._log_state("key ->", key=key.key, mods=key.modifiers or None)
        result = await self.session.handle_key(key)
        self._after_mode_result(result)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            switch_to=result.switch_to,
        )
        return result

    async def selection_changed(self) -> ModeResult:
        result = await self.session.on_selection_changed()
        if result.consumed:
            self._after_mode_result(result)
        return result

    def _after_mode_result(self, result: ModeResult) -> None:
        if result.error is None:
            self.last_error = None
        self._refresh(result)

    def _subscribe_events(self) -> None:
        bus = self.session.bus
        for event in (
            "mode.changed",
            "visual.selection",
            "command.start",
            "history.dump",
            "session.error",
        ):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        if name == "session.error" and isinstance(payload, SessionError):
            self.last_error = payload
        self.hooks.handle_event(name, payload)

    def _refresh(self, result: Optional[ModeResult] = None) -> None:
        self.hooks.update_buffer(self.session.snapshot())
        self.hooks.update_status(self.status_line(result))

    def status_line(self, result: Optional[ModeResult] = None) -> str:
        parts = [MODE_LABELS.get(self.session.mode, self.session.mode)]
        pending = self.session.pending_keys
        if pending:
            parts.append(pending)
        if self.last_error is not None:
            parts.append(f"E: {self.last_error.reason}")
        elif result is not None and result.message:
            parts.append(result.message)
        return "  ".join(parts)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.session.buffer
        return {
            "mode": self.session.mode,
            "cursor": buffer.cursor.cur,
            "anchor": buffer.cursor.start,
            "pending": self.session.pending_keys,
            "buffer": buffer.name,
        }


__all__ = ["TextualUIHooks", "TextualViAdapter", "key_input_from_event"]
