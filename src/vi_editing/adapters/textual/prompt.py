"""Single-line prompt widget answering ``/``, ``?`` and ``:``."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from textual.binding import Binding
from textual.widget import Widget
from textual.widgets import Input


class TextualPrompt(Input):
    """``Input`` that doubles as the session's prompt collaborator.

    ``ask`` shows the widget, waits for Enter or Escape, then hides it and
    gives focus back. Up and Down walk the history passed in by the session.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("up", "history_previous", "Previous", show=False),
        Binding("down", "history_next", "Next", show=False),
    ]

    DEFAULT_CSS = """
    TextualPrompt {
        display: none;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.kind = ""
        self._future: Optional[asyncio.Future[Optional[str]]] = None
        self._history: List[str] = []
        self._history_index = 0
        self._seed = ""
        self._return_focus: Optional[Widget] = None

    @property
    def active(self) -> bool:
        return self._future is not None and not self._future.done()

    async def ask(
        self, kind: str, *, seed: str = "", history: Sequence[str] = ()
    ) -> Optional[str]:
        if self.active:
            raise RuntimeError("prompt already waiting for an answer")
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self.kind = kind
        self._seed = seed
        self._history = list(history)
        self._history_index = len(self._history)
        self._return_focus = self.app.focused
        self.placeholder = kind
        self.value = seed
        self.display = True
        self.focus()
        try:
            return await self._future
        finally:
            self.display = False
            self.value = ""
            if self._return_focus is not None:
                self._return_focus.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._finish(event.value)

    def action_cancel(self) -> None:
        self._finish(None)

    def action_history_previous(self) -> None:
        if self._history_index > 0:
            self._history_index -= 1
            self._show_history()

    def action_history_next(self) -> None:
        if self._history_index < len(self._history):
            self._history_index += 1
            self._show_history()

    def _show_history(self) -> None:
        if self._history_index == len(self._history):
            self.value = self._seed
        else:
            self.value = self._history[self._history_index]
        self.cursor_position = len(self.value)

    def _finish(self, answer: Optional[str]) -> None:
        if self._future is not None and not self._future.done():
            self._future.set_result(answer)


__all__ = ["TextualPrompt"]
