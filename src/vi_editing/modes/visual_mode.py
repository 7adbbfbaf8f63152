"""Visual modes: operators act on the selection, motions extend it."""

from __future__ import annotations

from typing import Sequence

from vi_editing.buffer.state import Cursor
from vi_editing.text.reader import Reader, line_end, line_start

from .base_mode import ModeResult
from .command_mode import KeyedMode
from .keymap_helpers import ActionOutcome, run_action, unknown_command
from .operator_pipeline import Cmd, NeedMore, Ok


class VisualMode(KeyedMode):
    name = "visual"
    keymap_mode = "visual"
    line_wise = False

    def on_enter(self, previous: str | None) -> None:
        super().on_enter(previous)
        self.context.bus.emit("visual.selection", self.context.buffer.cursor.copy())

    async def execute(
        self, keys: Sequence[str], *, replay: bool = False
    ) -> ActionOutcome:
        cmd = Cmd(keys)
        looked_up = self._lookup(cmd)
        if isinstance(looked_up, NeedMore):
            return looked_up
        result, lookup = looked_up
        if result.status != "match" or result.match is None:
            if len(lookup) > 1:
                return unknown_command(lookup)
            return self._extend(keys)
        call = self._call(keys, cmd, result, replay)
        with self.context.buffer.transaction(f"{self.name}::{''.join(keys)}"):
            return await run_action(self.context, result.match, call)

    def _extend(self, keys: Sequence[str]) -> ActionOutcome:
        buffer = self.context.buffer
        text = buffer.text
        work = buffer.cursor.copy()
        cmd = Cmd(keys)
        bad = cmd.number()
        if bad is not None:
            return bad
        _, high, _ = work.ordered()
        if self.line_wise and high > 0 and text[high - 1] == "\n":
            # Motions assume the selection stops before the final newline.
            if work.is_forward():
                work.cur -= 1
            else:
                work.start -= 1
        outcome = self.context.motions.resolve(
            cmd,
            Reader(text, work.cur, False),
            Reader(text, work.cur),
            work,
            mode=self.name,
        )
        if not isinstance(outcome, Ok):
            return outcome
        moved = outcome.value
        if self.line_wise:
            moved = _whole_lines(text, moved)
        buffer.set_selection(moved)
        self.context.bus.emit("visual.selection", moved.copy())
        return ModeResult(consumed=True, status="visual_select")


class VisualLineMode(VisualMode):
    name = "visualline"
    line_wise = True


def _whole_lines(text: str, cursor: Cursor) -> Cursor:
    low, high, direction = cursor.ordered()
    low = line_start(text, low)
    high = line_end(text, high, include_newline=True)
    if direction == "forward":
        return Cursor(high, low)
    return Cursor(low, high)


__all__ = ["VisualLineMode", "VisualMode"]
