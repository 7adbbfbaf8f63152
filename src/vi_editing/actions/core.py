"""Core action implementations shared across modes."""

from __future__ import annotations

from typing import Union

from vi_editing.buffer.state import Cursor
from vi_editing.modes.base_mode import ModeContext, ModeResult
from vi_editing.modes.operator_pipeline import (
    ErrorKind,
    Invalid,
    NeedMore,
    Ok,
    OperatorCall,
)
from vi_editing.runtime import telemetry
from vi_editing.text.reader import line_end, line_start

ActionOutcome = Union[ModeResult, NeedMore, Invalid]
RangeOutcome = Union[Ok[Cursor], NeedMore, Invalid]


def operator_range(
    context: ModeContext,
    call: OperatorCall,
    end_line_char: str,
    *,
    change: bool = False,
) -> RangeOutcome:
    """Parse the count and motion that follow an operator key."""

    bad = call.cmd.number()
    if bad is not None:
        return bad
    return context.motions.resolve(
        call.cmd,
        call.br,
        call.fr,
        context.buffer.cursor.copy(),
        mode=call.mode,
        end_line_char=end_line_char,
        change=change,
    )


def whole_lines(text: str, low: int, high: int) -> tuple[int, int]:
    """Widen ``[low, high)`` to full lines, excluding the final newline."""

    low = line_start(text, low)
    if high > low and text[high - 1] == "\n":
        high -= 1
    return low, max(low, line_end(text, high))


def first_nonblank(text: str, offset: int) -> int:
    index = line_start(text, offset)
    while index < len(text) and text[index] in " \t":
        index += 1
    return index


def enter_insert(context: ModeContext, call: OperatorCall) -> ModeResult:
    del context, call
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def insert_line_start(context: ModeContext, call: OperatorCall) -> ModeResult:
    call.br.line(False)
    context.buffer.set_cursor(call.br.offset())
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def append(context: ModeContext, call: OperatorCall) -> ModeResult:
    if call.fr.peek() != "\n":
        call.fr.get()
    context.buffer.set_cursor(call.fr.offset())
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def append_line_end(context: ModeContext, call: OperatorCall) -> ModeResult:
    call.fr.line(False)
    context.buffer.set_cursor(call.fr.offset())
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def open_below(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    fr.line(False)
    had_newline = fr.get() == "\n"
    at = fr.offset()
    buffer = context.buffer
    modified = buffer.replace(Cursor.collapsed(at), "\n", label="open_line")
    # Without a newline to step over, the new line starts after the inserted one.
    buffer.set_cursor(at if had_newline else at + 1)
    return ModeResult(
        consumed=True, switch_to="insert", message="open_line", modified=modified
    )


def open_above(context: ModeContext, call: OperatorCall) -> ModeResult:
    call.br.line(False)
    at = call.br.offset()
    buffer = context.buffer
    modified = buffer.replace(Cursor.collapsed(at), "\n", label="open_line")
    buffer.set_cursor(at)
    return ModeResult(
        consumed=True, switch_to="insert", message="open_line", modified=modified
    )


def enter_visual(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    context.buffer.set_cursor(context.buffer.cursor.cur)
    return ModeResult(consumed=True, switch_to="visual", message="enter_visual")


def enter_visual_line(context: ModeContext, call: OperatorCall) -> ModeResult:
    call.br.line(False)
    call.fr.line(True)
    context.buffer.set_selection(Cursor(call.fr.offset(), call.br.offset()))
    return ModeResult(consumed=True, switch_to="visualline", message="enter_visual")


def undo(context: ModeContext, call: OperatorCall) -> ModeResult:
    changed = 0
    for _ in call.cmd.times():
        if not context.buffer.undo():
            break
        changed += 1
    status = "undo" if changed else "nothing_to_undo"
    return ModeResult(consumed=True, status=status)


def redo(context: ModeContext, call: OperatorCall) -> ModeResult:
    changed = 0
    for _ in call.cmd.times():
        if not context.buffer.redo():
            break
        changed += 1
    status = "redo" if changed else "nothing_to_redo"
    return ModeResult(consumed=True, status=status)


async def repeat_last(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    """Replay the last mutating command followed by the text typed after it.

    Adjacent edits of the replay merge into one entry; either way the
    enclosing command transaction makes the replay a single undo step.
    """

    repeat = context.repeat
    snapshot = repeat.snapshot()
    command, inserted = snapshot
    if not command and not inserted:
        return ModeResult(consumed=True, status="nothing_to_repeat")
    if command and call.dispatcher is None:
        return Invalid(ErrorKind.INVALID_COMMAND, "nothing can replay commands here")
    buffer = context.buffer
    buffer.history.close(buffer.text)
    try:
        with buffer.merging():
            if command:
                outcome = await call.dispatcher.execute(command, replay=True)
                if isinstance(outcome, NeedMore):
                    keys = "".join(command)
                    return Invalid(
                        ErrorKind.INVALID_COMMAND, f"incomplete repeat {keys!r}"
                    )
                if isinstance(outcome, Invalid):
                    return outcome
            if inserted:
                at = buffer.cursor.cur
                buffer.replace(Cursor.collapsed(at), inserted, label="repeat_insert")
                buffer.set_cursor(at + len(inserted))
    finally:
        repeat.restore(snapshot)
    telemetry.record_event(
        "command.repeat",
        level="debug",
        data={"command": "".join(command), "inserted": len(inserted)},
    )
    return ModeResult(consumed=True, status="repeat")


def _scroll(context: ModeContext, lines: int) -> ModeResult:
    context.buffer.scroll_by(0, lines * context.settings.scroll_line_height)
    return ModeResult(consumed=True, status="scroll")


def scroll_half_page_down(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    return _scroll(context, max(context.settings.page_lines // 2, 1))


def scroll_half_page_up(context: ModeContext, call: OperatorCall) -> ModeResult:
    del call
    return _scroll(context, -max(context.settings.page_lines // 2, 1))


def scroll_line_down(context: ModeContext, call: OperatorCall) -> ModeResult:
    return _scroll(context, call.cmd.count)


def scroll_line_up(context: ModeContext, call: OperatorCall) -> ModeResult:
    return _scroll(context, -call.cmd.count)


def scroll_page_down(context: ModeContext, call: OperatorCall) -> ModeResult:
    return _scroll(context, context.settings.page_lines * call.cmd.count)


def scroll_page_up(context: ModeContext, call: OperatorCall) -> ModeResult:
    return _scroll(context, -context.settings.page_lines * call.cmd.count)


def dump_history(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    del call
    if not context.debug:
        return Invalid(ErrorKind.INVALID_COMMAND, "history dump needs debug mode")
    history = context.buffer.history
    rows = [
        {"low": entry.low, "old": entry.old_text, "new": entry.new_text}
        for entry in history.entries
    ]
    for index, row in enumerate(rows):
        telemetry.record_event(
            "history.entry", level="debug", data={"index": index, **row}
        )
    telemetry.record_event(
        "history.dump",
        level="debug",
        data={"entries": len(history.entries), "future": len(history.future)},
    )
    context.bus.emit("history.dump", rows)
    return ModeResult(consumed=True, status="history_dump")


__all__ = [
    "append",
    "append_line_end",
    "dump_history",
    "enter_insert",
    "enter_visual",
    "enter_visual_line",
    "first_nonblank",
    "insert_line_start",
    "open_above",
    "open_below",
    "operator_range",
    "redo",
    "repeat_last",
    "scroll_half_page_down",
    "scroll_half_page_up",
    "scroll_line_down",
    "scroll_line_up",
    "scroll_page_down",
    "scroll_page_up",
    "undo",
    "whole_lines",
]
