"""Search actions: word under cursor, repeat, and prompted patterns."""

from __future__ import annotations

from vi_editing.modes.base_mode import ModeContext, ModeResult
from vi_editing.modes.operator_pipeline import ErrorKind, Invalid, OperatorCall
from vi_editing.runtime import telemetry

from .core import ActionOutcome

SEARCH_HISTORY = "search"


def _jump(context: ModeContext, origin: int, *, reverse: bool) -> ActionOutcome:
    buffer = context.buffer
    found = context.search.find(buffer.text, origin, reverse=reverse)
    if isinstance(found, Invalid):
        return found
    buffer.set_cursor(found.value)
    return ModeResult(consumed=True, status="search")


def _search_word(
    context: ModeContext, call: OperatorCall, *, reverse: bool
) -> ActionOutcome:
    call.br.nonwhitespacepunct()
    call.fr.nonwhitespacepunct()
    low, high = call.br.offset(), call.fr.offset()
    word = call.text[low:high]
    if not word:
        return Invalid(ErrorKind.INVALID_COMMAND, "no word under cursor")
    context.search.seed_word(word, reverse=reverse)
    # Backward searches start at the word so they skip the word itself.
    origin = low if reverse else context.buffer.cursor.cur
    return _jump(context, origin, reverse=False)


def search_word_forward(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    return _search_word(context, call, reverse=False)


def search_word_backward(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    return _search_word(context, call, reverse=True)


def search_next(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    del call
    return _jump(context, context.buffer.cursor.cur, reverse=False)


def search_previous(context: ModeContext, call: OperatorCall) -> ActionOutcome:
    del call
    return _jump(context, context.buffer.cursor.cur, reverse=True)


async def _prompted(
    context: ModeContext, kind: str, *, reverse: bool
) -> ActionOutcome:
    prompt = context.prompt
    if prompt is None:
        return Invalid(ErrorKind.INVALID_COMMAND, "no prompt available")
    history = context.prompt_history
    answer = await prompt.ask(kind, seed="", history=history.entries(SEARCH_HISTORY))
    if answer is None:
        return ModeResult(consumed=True, status="cancelled")
    engine = context.search
    if answer:
        history.add(SEARCH_HISTORY, answer)
        engine.set_regex(answer, reverse=reverse)
    elif engine.state.pattern:
        engine.set_pattern(engine.state.pattern, reverse=reverse)
    else:
        return Invalid(ErrorKind.INVALID_COMMAND, "no previous search")
    compiled = engine.compiled() if engine.state.is_regex else None
    if isinstance(compiled, Invalid):
        return compiled
    telemetry.record_event(
        "search.prompt",
        level="debug",
        data={"kind": kind, "pattern": engine.state.body},
    )
    return _jump(context, context.buffer.cursor.cur, reverse=False)


async def search_prompt_forward(
    context: ModeContext, call: OperatorCall
) -> ActionOutcome:
    del call
    return await _prompted(context, "/", reverse=False)


async def search_prompt_backward(
    context: ModeContext, call: OperatorCall
) -> ActionOutcome:
    del call
    return await _prompted(context, "?", reverse=True)


__all__ = [
    "SEARCH_HISTORY",
    "search_next",
    "search_previous",
    "search_prompt_backward",
    "search_prompt_forward",
    "search_word_backward",
    "search_word_forward",
]
