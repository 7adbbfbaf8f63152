"""Actions dedicated to Visual mode selection management."""

from __future__ import annotations

from vi_editing.buffer.state import Cursor
from vi_editing.modes.base_mode import ModeContext, ModeResult
from vi_editing.modes.operator_pipeline import Invalid, OperatorCall
from vi_editing.text.reader import line_end, line_start

from .clipboard import read_clipboard, write_clipboard
from .core import ActionOutcome
from .edit import indent_text, join_lines, reflow_range, swap_case, unindent_text


def _selection(context: ModeContext) -> tuple[int, int]:
    low, high, _ = context.buffer.cursor.ordered()
    return low, high


def _finish(
    context: ModeContext,
    offset: int,
    *,
    status: str,
    modified: bool = False,
    switch_to: str = "command",
) -> ModeResult:
    context.buffer.set_cursor(offset)
    return ModeResult(
        consumed=True, switch_to=switch_to, status=status, modified=modified
    )


def select_characters(context: ModeContext, call: OperatorCall) -> ModeResult:
    del context, call
    return ModeResult(consumed=True, switch_to="visual", status="visual_select")


def select_lines(context: ModeContext, call: OperatorCall) -> ModeResult:
    text = call.text
    cursor = context.buffer.cursor
    low, high, direction = cursor.ordered()
    low = line_start(text, low)
    if high <= low or text[high - 1] != "\n":
        high = line_end(text, high, include_newline=True)
    if direction == "forward":
        context.buffer.set_selection(Cursor(high, low))
    else:
        context.buffer.set_selection(Cursor(low, high))
    return ModeResult(consumed=True, switch_to="visualline", status="visual_select")


def swap_anchor(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    buffer = context.buffer
    buffer.set_selection(buffer.cursor.swapped())
    context.bus.emit("visual.selection", buffer.cursor.copy())
    return ModeResult(consumed=True, status="visual_select")


def delete_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    low, high = _selection(context)
    modified = context.buffer.replace(Cursor(high, low), "", label="visual_delete")
    return _finish(context, low, status="delete", modified=modified)


def change_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    low, high = _selection(context)
    modified = context.buffer.replace(Cursor(high, low), "", label="visual_change")
    return _finish(
        context, low, status="change", modified=modified, switch_to="insert"
    )


async def yank_selection(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    del call
    low, high = _selection(context)
    failed = await write_clipboard(context, context.buffer.text[low:high])
    if failed is not None:
        return failed
    return _finish(context, low, status="yank")


async def paste_selection(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    del call
    pasted = await read_clipboard(context)
    if isinstance(pasted, Invalid):
        return pasted
    low, high = _selection(context)
    modified = context.buffer.replace(Cursor(high, low), pasted, label="visual_paste")
    return _finish(context, low + len(pasted), status="paste", modified=modified)


def _rewrite(context: ModeContext, indent: bool) -> ModeResult:
    low, high = _selection(context)
    span = context.buffer.text[low:high]
    updated = indent_text(span) if indent else unindent_text(span)
    modified = context.buffer.replace(Cursor(high, low), updated, label="indent")
    return _finish(context, low + len(updated), status="indent", modified=modified)


def indent_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    return _rewrite(context, True)


def unindent_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    return _rewrite(context, False)


def _join(context: ModeContext, between: str) -> ModeResult:
    low, high = _selection(context)
    joined, join_at = join_lines(context.buffer.text[low:high], between)
    modified = context.buffer.replace(Cursor(high, low), joined, label="join")
    return _finish(context, low + join_at, status="join", modified=modified)


def join_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    return _join(context, " ")


def join_selection_raw(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    return _join(context, "")


def toggle_case_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    low, high = _selection(context)
    updated = swap_case(context.buffer.text[low:high])
    modified = context.buffer.replace(Cursor(high, low), updated, label="swap_case")
    return _finish(context, low + len(updated), status="swap_case", modified=modified)


def format_selection(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    low, high = _selection(context)
    modified = reflow_range(context, low, high)
    return ModeResult(
        consumed=True, switch_to="command", status="format", modified=modified
    )


__all__ = [
    "change_selection",
    "delete_selection",
    "format_selection",
    "indent_selection",
    "join_selection",
    "join_selection_raw",
    "paste_selection",
    "select_characters",
    "select_lines",
    "swap_anchor",
    "toggle_case_selection",
    "unindent_selection",
    "yank_selection",
]
