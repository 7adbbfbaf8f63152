"""Executable Textual app that hosts an editing session."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Optional, Sequence

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static, TextArea

from vi_editing.buffer import Clipboard, MemoryClipboard, SurfaceSnapshot
from vi_editing.runtime import telemetry
from vi_editing.runtime.settings import EditorSettings
from vi_editing.session import EditingSession, create_session

from .controller import TextualUIHooks, TextualViAdapter
from .prompt import TextualPrompt
from .surface import TextAreaSurface


class ViTextArea(TextArea):
    """``TextArea`` that routes keys through a ``TextualViAdapter`` first."""

    def __init__(self, *args, **kwargs) -> None:
        kwargs.setdefault("tab_behavior", "indent")
        super().__init__(*args, **kwargs)
        self.adapter: Optional[TextualViAdapter] = None

    async def _on_key(self, event: events.Key) -> None:
        if self.adapter is None or not self.adapter.wants(event):
            return
        result = await self.adapter.handle_key_event(event)
        if result is not None and result.consumed:
            event.stop()
            event.prevent_default()

    async def on_text_area_selection_changed(
        self, event: TextArea.SelectionChanged
    ) -> None:
        if self.adapter is not None:
            await self.adapter.selection_changed()


def create_editor_session(
    editor: ViTextArea,
    prompt: TextualPrompt,
    *,
    settings: Optional[EditorSettings] = None,
    clipboard: Optional[Clipboard] = None,
) -> EditingSession:
    """Build a session over ``editor`` using ``prompt`` for ``/ ? :``."""

    settings = settings or EditorSettings.from_env()
    surface = TextAreaSurface(editor, line_height=settings.scroll_line_height)
    return create_session(
        surface, clipboard=clipboard, prompt=prompt, settings=settings
    )


class ViEditingApp(App[None]):
    """Minimal Textual UI embedding a vi editing session."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#editor {
		height: 1fr;
		border: round $accent;
	}

	#status-line {
		height: 1;
		padding: 0 1;
		background: $boost;
	}
	"""

    BINDINGS = [Binding("ctrl+q", "quit", "Quit", priority=True)]

    def __init__(
        self,
        text: str = "",
        *,
        settings: Optional[EditorSettings] = None,
        clipboard: Optional[Clipboard] = None,
    ) -> None:
        super().__init__()
        self._initial_text = text
        self._settings = settings
        self._clipboard = clipboard
        self.editor: Optional[ViTextArea] = None
        self.prompt: Optional[TextualPrompt] = None
        self.session: Optional[EditingSession] = None
        self.adapter: Optional[TextualViAdapter] = None
        self._status_widget: Optional[Static] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        self.editor = ViTextArea(self._initial_text, id="editor")
        yield self.editor
        self.prompt = TextualPrompt(id="prompt")
        yield self.prompt
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        assert self.editor is not None and self.prompt is not None
        self.session = create_editor_session(
            self.editor,
            self.prompt,
            settings=self._settings,
            clipboard=self._clipboard,
        )
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            handle_event=self._handle_event,
            log=self._log_line,
        )
        self.adapter = TextualViAdapter(self.session, hooks)
        self.editor.adapter = self.adapter
        self.editor.focus()

    def _update_buffer(self, snapshot: SurfaceSnapshot) -> None:
        self.sub_title = snapshot.mode

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "history.dump" and isinstance(payload, list):
            for row in payload:
                self._log_line(f"history {row!r}")

    def _log_line(self, line: str) -> None:
        self.log(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the vi editing Textual demo.")
    parser.add_argument("path", nargs="?", help="Text file to load into the editor")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=telemetry.env_flag("DEBUG", False),
        help="Record per-key events and enable the history dump (ctrl+h)",
    )
    parser.add_argument(
        "--wrap-width",
        type=int,
        default=None,
        help="Column limit used by gq (default: VI_EDITING_WRAP_WIDTH or 78)",
    )
    parser.add_argument(
        "--memory-clipboard",
        action="store_true",
        help="Keep yanked text in memory instead of the system clipboard",
    )
    parser.add_argument(
        "--log-preset",
        default=telemetry.env_value("LOG_PRESET"),
        choices=telemetry.PRESETS,
        help="telelog preset to configure before starting",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    settings = EditorSettings.from_env()
    overrides: dict[str, object] = {}
    if args.debug:
        overrides["debug"] = True
    if args.wrap_width is not None:
        overrides["wrap_width"] = args.wrap_width
    if overrides:
        settings = settings.with_overrides(**overrides)
    text = Path(args.path).read_text(encoding="utf-8") if args.path else ""
    clipboard = MemoryClipboard() if args.memory_clipboard else None
    app = ViEditingApp(text, settings=settings, clipboard=clipboard)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
