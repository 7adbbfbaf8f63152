"""Ex command line: ``:N`` jumps and ``:[range]s/pat/repl/flags``."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from vi_editing.buffer.state import Cursor
from vi_editing.modes.base_mode import ModeContext, ModeResult
from vi_editing.modes.operator_pipeline import ErrorKind, Invalid, Ok, OperatorCall
from vi_editing.runtime import telemetry
from vi_editing.text.reader import line_end
from vi_editing.text.search import SearchEngine, parse_substitute, substitute_lines

from .core import ActionOutcome, first_nonblank

EX_HISTORY = "ex"
VISUAL_RANGE = "'<,'>"

_ADDRESS = r"\d+|\.|\$"
_RANGE = re.compile(
    rf"\s*(?P<range>%|'<,'>|(?P<first>{_ADDRESS})(?:,(?P<last>{_ADDRESS}))?)?"
    r"\s*(?P<rest>.*)",
    re.DOTALL,
)


@dataclass(slots=True)
class ExRange:
    """Zero-based, inclusive line numbers an ex command applies to."""

    first: int
    last: int
    explicit: bool = False


def line_starts(text: str) -> List[int]:
    starts = [0]
    starts.extend(index + 1 for index, ch in enumerate(text) if ch == "\n")
    return starts


def _line_of(starts: List[int], offset: int) -> int:
    return bisect.bisect_right(starts, offset) - 1


def _address(token: str, current: int, total: int) -> int:
    if token == ".":
        return current
    if token == "$":
        return total - 1
    return max(0, min(int(token) - 1, total - 1))


def parse_range(
    command: str, text: str, cursor: int, selection: Optional[Cursor] = None
) -> Union[Ok[Tuple[ExRange, str]], Invalid]:
    """Split an ex command into its line range and the command after it."""

    match = _RANGE.fullmatch(command)
    if match is None:
        return Invalid(ErrorKind.INVALID_COMMAND, f"bad range in {command!r}")
    starts = line_starts(text)
    total = len(starts)
    current = _line_of(starts, cursor)
    token = match.group("range")
    rest = match.group("rest").strip()
    if token is None:
        return Ok((ExRange(current, current), rest))
    if token == "%":
        return Ok((ExRange(0, total - 1, explicit=True), rest))
    if token == VISUAL_RANGE:
        if selection is None:
            return Invalid(ErrorKind.INVALID_COMMAND, "no visual selection")
        low, high, _ = selection.ordered()
        first = _line_of(starts, low)
        last = _line_of(starts, max(low, high - 1))
        return Ok((ExRange(first, last, explicit=True), rest))
    first = _address(match.group("first"), current, total)
    last_token = match.group("last")
    last = first if last_token is None else _address(last_token, current, total)
    if last < first:
        first, last = last, first
    return Ok((ExRange(first, last, explicit=True), rest))


def _fallback_pattern(search: SearchEngine) -> str:
    state = search.state
    if not state.pattern:
        return ""
    return state.body if state.is_regex else re.escape(state.body)


def run_ex(
    context: ModeContext, command: str, *, selection: Optional[Cursor] = None
) -> ActionOutcome:
    buffer = context.buffer
    text = buffer.text
    parsed = parse_range(command, text, buffer.cursor.cur, selection)
    if isinstance(parsed, Invalid):
        return parsed
    ex_range, rest = parsed.value
    starts = line_starts(text)
    if not rest:
        if not ex_range.explicit:
            return ModeResult(consumed=True, status="ex_noop")
        buffer.set_cursor(first_nonblank(text, starts[ex_range.last]))
        return ModeResult(consumed=True, status="goto_line")
    if not (rest.startswith("s") and len(rest) > 1 and not rest[1].isalnum()):
        return Invalid(ErrorKind.INVALID_COMMAND, f"unknown ex command {rest!r}")

    low = starts[ex_range.first]
    high = line_end(text, starts[ex_range.last])
    outcome = substitute_lines(
        text, low, high, rest, fallback_pattern=_fallback_pattern(context.search)
    )
    if isinstance(outcome, Invalid):
        return outcome
    updated, count = outcome.value
    requested = parse_substitute(rest)
    if isinstance(requested, Ok) and requested.value.pattern:
        context.search.set_regex(requested.value.pattern)
    if not count:
        return Invalid(ErrorKind.INVALID_MOTION, "pattern not found")
    buffer.replace(Cursor(high, low), updated, label="substitute")
    buffer.set_cursor(first_nonblank(buffer.text, low + len(updated)))
    telemetry.record_event(
        "ex.substitute",
        level="debug",
        data={"command": rest, "count": count, "lines": ex_range.last + 1},
    )
    return ModeResult(
        consumed=True, status="substitute", message=f"{count} substitutions"
    )


async def ex_command(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    """Prompt for an ex command; from visual mode it is seeded with ``'<,'>``."""

    prompt = context.prompt
    if prompt is None:
        return Invalid(ErrorKind.INVALID_COMMAND, "no prompt available")
    visual = call.mode != "command"
    selection = context.buffer.cursor.copy() if visual else None
    history = context.prompt_history
    answer = await prompt.ask(
        ":",
        seed=VISUAL_RANGE if visual else "",
        history=history.entries(EX_HISTORY),
    )
    if answer is None:
        return ModeResult(consumed=True, status="cancelled")
    history.add(EX_HISTORY, answer)
    outcome = run_ex(context, answer, selection=selection)
    if isinstance(outcome, ModeResult) and visual:
        if outcome.status == "ex_noop":
            context.buffer.set_cursor(context.buffer.cursor.cur)
        outcome.switch_to = "command"
    return outcome


__all__ = [
    "EX_HISTORY",
    "ExRange",
    "VISUAL_RANGE",
    "ex_command",
    "line_starts",
    "parse_range",
    "run_ex",
]
