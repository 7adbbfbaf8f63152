"""Yank and paste through the host clipboard."""

from __future__ import annotations

from typing import Union

from vi_editing.buffer import ClipboardFailure
from vi_editing.buffer.state import Cursor
from vi_editing.modes.base_mode import ModeContext, ModeResult
from vi_editing.modes.operator_pipeline import (
    ErrorKind,
    Invalid,
    NeedMore,
    OperatorCall,
)
from vi_editing.runtime import telemetry
from vi_editing.text.reader import line_start

from .core import ActionOutcome, operator_range


def _failure(exc: ClipboardFailure) -> Invalid:
    telemetry.record_event(
        "clipboard.failure",
        level="warning",
        data={"operation": exc.operation, "error": str(exc)},
    )
    return Invalid(ErrorKind.CLIPBOARD_FAILURE, f"clipboard {exc.operation}: {exc}")


async def write_clipboard(context: ModeContext, text: str) -> Union[None, Invalid]:
    try:
        await context.clipboard.write(text)
    except ClipboardFailure as exc:
        return _failure(exc)
    return None


async def read_clipboard(context: ModeContext) -> Union[str, Invalid]:
    try:
        return await context.clipboard.read()
    except ClipboardFailure as exc:
        return _failure(exc)


async def yank(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    outcome = operator_range(context, call, "y")
    if isinstance(outcome, (NeedMore, Invalid)):
        return outcome
    failed = await write_clipboard(context, context.buffer.read(outcome.value))
    if failed is not None:
        return failed
    return ModeResult(consumed=True, status="yank")


async def yank_lines(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    call.br.line(False)
    for _ in call.cmd.times():
        call.fr.line(True)
    selected = Cursor(call.fr.offset(), call.br.offset())
    failed = await write_clipboard(context, context.buffer.read(selected))
    if failed is not None:
        return failed
    return ModeResult(consumed=True, status="yank")


async def paste_after(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    """Paste after the cursor, or below the current line for line-wise text."""

    pasted = await read_clipboard(context)
    if isinstance(pasted, Invalid):
        return pasted
    if not pasted:
        return ModeResult(consumed=True, status="paste")
    pasted *= call.cmd.count
    fr = call.fr
    if pasted.endswith("\n"):
        fr.line(False)
        if fr.get() == "\n":
            at = cursor = fr.offset()
        else:
            # Last line without a newline: open one and drop the extra at the end.
            at = fr.offset()
            pasted = "\n" + pasted[:-1]
            cursor = at + 1
    else:
        if fr.peek() not in ("", "\n"):
            fr.get()
        at = cursor = fr.offset()
    buffer = context.buffer
    modified = buffer.replace(Cursor.collapsed(at), pasted, label="paste")
    buffer.set_cursor(cursor)
    return ModeResult(consumed=True, status="paste", modified=modified)


async def paste_before(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    pasted = await read_clipboard(context)
    if isinstance(pasted, Invalid):
        return pasted
    if not pasted:
        return ModeResult(consumed=True, status="paste")
    pasted *= call.cmd.count
    buffer = context.buffer
    at = buffer.cursor.cur
    if pasted.endswith("\n"):
        at = line_start(call.text, at)
    modified = buffer.replace(Cursor.collapsed(at), pasted, label="paste")
    buffer.set_cursor(at)
    return ModeResult(consumed=True, status="paste", modified=modified)


__all__ = [
    "paste_after",
    "paste_before",
    "read_clipboard",
    "write_clipboard",
    "yank",
    "yank_lines",
]
