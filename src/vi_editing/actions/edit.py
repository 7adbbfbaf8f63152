"""Operators that change text: change, delete, indent, join, case and reflow."""

from __future__ import annotations

from typing import Tuple

from vi_editing.buffer.state import Cursor
from vi_editing.modes.base_mode import ModeContext, ModeResult
from vi_editing.modes.operator_pipeline import Invalid, NeedMore, OperatorCall
from vi_editing.text.reader import line_end, line_start
from vi_editing.text.wrap import wrap

from .core import ActionOutcome, first_nonblank, operator_range, whole_lines


def indent_text(text: str) -> str:
    """Prefix every non-empty line with a tab."""

    return "\n".join("\t" + line if line else line for line in text.split("\n"))


def unindent_text(text: str) -> str:
    """Drop one leading tab from every line that has one."""

    return "\n".join(
        line[1:] if line.startswith("\t") else line for line in text.split("\n")
    )


def join_lines(text: str, between: str) -> Tuple[str, int]:
    """Join the lines of ``text``; returns the result and the last join offset.

    Whitespace around each line break collapses into ``between``. A trailing
    newline on ``text`` survives the join.
    """

    trailing = text.endswith("\n")
    lines = (text[:-1] if trailing else text).split("\n")
    result = ""
    join_at = 0
    for index, line in enumerate(lines):
        last = index == len(lines) - 1
        if not last:
            line = line.rstrip() + between
        if index:
            line = line.lstrip()
        result += line
        if not last:
            join_at = len(result) - len(between)
    if trailing:
        result += "\n"
    return result, join_at


def swap_case(text: str) -> str:
    out = []
    for ch in text:
        if ch == ch.upper():
            out.append(ch.lower())
        elif ch == ch.lower():
            out.append(ch.upper())
        else:
            out.append(ch)
    return "".join(out)


def _change_lines(context: ModeContext, low: int, high: int) -> ModeResult:
    """Blank whole lines, keeping the newline that ended the range."""

    buffer = context.buffer
    text = buffer.text
    keep = "\n" if high > low and text[high - 1] == "\n" else ""
    modified = buffer.replace(Cursor(high, low), keep, label="change_lines")
    buffer.set_cursor(low)
    return ModeResult(
        consumed=True, switch_to="insert", message="change", modified=modified
    )


def substitute_chars(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    for _ in call.cmd.times():
        if fr.peek() in ("", "\n"):
            break
        fr.get()
    buffer = context.buffer
    cur = buffer.cursor.cur
    modified = buffer.replace(Cursor(fr.offset(), cur), "", label="substitute")
    buffer.set_cursor(cur)
    return ModeResult(
        consumed=True, switch_to="insert", message="change", modified=modified
    )


def substitute_lines(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    for _ in call.cmd.times():
        fr.line(True)
    low = line_start(call.text, context.buffer.cursor.cur)
    return _change_lines(context, low, fr.offset())


def change_to_line_end(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    for index in call.cmd.times():
        fr.line(False)
        if call.cmd.is_last(index) or not fr.get():
            break
    buffer = context.buffer
    cur = buffer.cursor.cur
    modified = buffer.replace(Cursor(fr.offset(), cur), "", label="change")
    buffer.set_cursor(cur)
    return ModeResult(
        consumed=True, switch_to="insert", message="change", modified=modified
    )


def change(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    bad = call.cmd.number()
    if bad is not None:
        return bad
    linewise = call.cmd.peek() == "c"
    outcome = operator_range(context, call, "c", change=True)
    if isinstance(outcome, (NeedMore, Invalid)):
        return outcome
    low, high, _ = outcome.value.ordered()
    if linewise:
        return _change_lines(context, low, high)
    buffer = context.buffer
    modified = buffer.replace(Cursor(high, low), "", label="change")
    buffer.set_cursor(low)
    return ModeResult(
        consumed=True, switch_to="insert", message="change", modified=modified
    )


def delete_char(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    for _ in call.cmd.times():
        if fr.peek() in ("", "\n"):
            break
        fr.get()
    buffer = context.buffer
    cur = buffer.cursor.cur
    modified = buffer.replace(Cursor(fr.offset(), cur), "", label="delete")
    buffer.set_cursor(cur)
    return ModeResult(consumed=True, status="delete", modified=modified)


def delete_char_before(context: ModeContext, call: OperatorCall) -> ModeResult:
    br = call.br
    for _ in call.cmd.times():
        if br.peek() in ("", "\n"):
            break
        br.get()
    buffer = context.buffer
    modified = buffer.replace(
        Cursor(buffer.cursor.cur, br.offset()), "", label="delete"
    )
    buffer.set_cursor(br.offset())
    return ModeResult(consumed=True, status="delete", modified=modified)


def delete_to_line_end(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    for _ in call.cmd.times():
        fr.line(True)
    buffer = context.buffer
    cur = buffer.cursor.cur
    high = fr.offset()
    keep = "\n" if high > cur and call.text[high - 1] == "\n" else ""
    modified = buffer.replace(Cursor(high, cur), keep, label="delete")
    buffer.set_cursor(cur)
    return ModeResult(consumed=True, status="delete", modified=modified)


def delete(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    bad = call.cmd.number()
    if bad is not None:
        return bad
    linewise = call.cmd.peek() == "d"
    outcome = operator_range(context, call, "d")
    if isinstance(outcome, (NeedMore, Invalid)):
        return outcome
    text = call.text
    low, high, _ = outcome.value.ordered()
    cursor = low
    if linewise and high == len(text) and low > 0 and not text.endswith("\n"):
        # The last line has no newline of its own; take the one before it.
        low -= 1
        cursor = line_start(text, low)
    buffer = context.buffer
    modified = buffer.replace(Cursor(high, low), "", label="delete")
    buffer.set_cursor(cursor)
    return ModeResult(consumed=True, status="delete", modified=modified)


def _reindent(context: ModeContext, call: OperatorCall, key: str) -> ActionOutcome:
    outcome = operator_range(context, call, key)
    if isinstance(outcome, (NeedMore, Invalid)):
        return outcome
    text = call.text
    cursor_low, cursor_high, _ = outcome.value.ordered()
    low, high = whole_lines(text, cursor_low, cursor_high)
    span = text[low:high]
    updated = indent_text(span) if key == ">" else unindent_text(span)
    buffer = context.buffer
    modified = buffer.replace(Cursor(high, low), updated, label="indent")
    buffer.set_cursor(first_nonblank(buffer.text, low))
    return ModeResult(consumed=True, status="indent", modified=modified)


def indent(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    return _reindent(context, call, ">")


def unindent(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    return _reindent(context, call, "<")


def _join(context: ModeContext, call: OperatorCall, between: str) -> ModeResult:
    count = max(call.cmd.count, 2)
    fr = call.fr
    for _ in range(count):
        fr.line(True)
    buffer = context.buffer
    low = buffer.cursor.cur
    high = fr.offset()
    joined, join_at = join_lines(call.text[low:high], between)
    modified = buffer.replace(Cursor(high, low), joined, label="join")
    if modified:
        buffer.set_cursor(low + join_at)
    return ModeResult(consumed=True, status="join", modified=modified)


def join(context: ModeContext, call: OperatorCall) -> ModeResult:
    return _join(context, call, " ")


def join_raw(context: ModeContext, call: OperatorCall) -> ModeResult:
    return _join(context, call, "")


def toggle_case(context: ModeContext, call: OperatorCall) -> ModeResult:
    fr = call.fr
    for _ in call.cmd.times():
        if fr.peek() in ("", "\n"):
            break
        fr.get()
    buffer = context.buffer
    low = buffer.cursor.cur
    updated = swap_case(call.text[low : fr.offset()])
    modified = buffer.replace(Cursor(fr.offset(), low), updated, label="swap_case")
    buffer.set_cursor(low + len(updated))
    return ModeResult(consumed=True, status="swap_case", modified=modified)


def reflow_range(context: ModeContext, low: int, high: int) -> bool:
    """Rewrap whole lines under ``[low, high)``; the cursor lands after them."""

    buffer = context.buffer
    text = buffer.text
    low = line_start(text, low)
    if high <= low or text[high - 1] != "\n":
        high = line_end(text, high, include_newline=True)
    settings = context.settings
    wrapped = wrap(text[low:high], settings.wrap_width, settings.line_prefixes)
    modified = buffer.replace(Cursor(high, low), wrapped, label="format")
    buffer.set_cursor(line_start(buffer.text, low + len(wrapped)))
    return modified


def format_text(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    outcome = operator_range(context, call, "q")
    if isinstance(outcome, (NeedMore, Invalid)):
        return outcome
    low, high, _ = outcome.value.ordered()
    modified = reflow_range(context, low, high)
    return ModeResult(consumed=True, status="format", modified=modified)


__all__ = [
    "change",
    "change_to_line_end",
    "delete",
    "delete_char",
    "delete_char_before",
    "delete_to_line_end",
    "format_text",
    "indent",
    "indent_text",
    "join",
    "join_lines",
    "join_raw",
    "reflow_range",
    "substitute_chars",
    "substitute_lines",
    "swap_case",
    "toggle_case",
    "unindent",
    "unindent_text",
]
