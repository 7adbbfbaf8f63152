"""Insert mode: the host edits the text, the session only watches."""

from __future__ import annotations

from vi_editing.buffer import EditHistory
from vi_editing.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult


class InsertMode(Mode):
    name = "insert"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("vi_editing.modes.insert")
        self._origin = context.buffer.text

    def on_enter(self, previous: str | None) -> None:
        del previous
        buffer = self.context.buffer
        buffer.release()
        self._origin = buffer.text

    def typed_text(self) -> str:
        """Text the host inserted since insert mode was entered."""

        entry = EditHistory.diff(self._origin, self.context.buffer.text)
        return entry.new_text if entry else ""

    async def handle_key(self, key: KeyInput) -> ModeResult:
        if key.key == "tab" and not key.modifiers and self.context.settings.insert_tab:
            buffer = self.context.buffer
            buffer.sync_cursor()
            if buffer.text != buffer.history.last_known:
                buffer.reconcile()
            buffer.replace(buffer.cursor, "\t", merge=True, label="insert_tab")
            buffer.set_cursor(buffer.cursor.cur)
            return ModeResult(consumed=True, status="insert_tab")
        return ModeResult(consumed=False, status="passthrough")


__all__ = ["InsertMode"]
