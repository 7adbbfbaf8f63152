"""Helper utilities for keymap-driven modes."""

from __future__ import annotations

import re
from typing import List, Sequence, Union

from vi_editing.keymaps import KeymapResolver, KeyStroke, ResolutionMatch
from vi_editing.runtime import telemetry

from .base_mode import KeyInput, ModeContext, ModeResult
from .operator_pipeline import (
    ErrorKind,
    Invalid,
    NeedMore,
    OperatorCall,
    SessionError,
)

ActionOutcome = Union[ModeResult, NeedMore, Invalid]

_NAMED_KEYS = {
    "esc": "escape",
    "escape": "escape",
    "tab": "tab",
    "cr": "enter",
    "enter": "enter",
    "bs": "backspace",
    "lt": "<",
    "space": " ",
}
_SPECIAL = re.compile(r"<([A-Za-z]+|[A-Za-z]-.)>")


def key_to_token(key: KeyInput) -> str:
    return KeyStroke(key.key, key.modifiers).token


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def _special_key(name: str) -> KeyInput | None:
    lowered = name.lower()
    if lowered in _NAMED_KEYS:
        key = _NAMED_KEYS[lowered]
        return KeyInput(key, text=key if len(key) == 1 else None)
    if len(name) == 3 and name[1] == "-":
        prefix = name[0].lower()
        modifier = "ctrl" if prefix == "c" else "alt"
        return KeyInput(name[2], (modifier,))
    return None


def parse_keys(text: str) -> List[KeyInput]:
    """Expand vim-style key notation such as ``"dw<Esc><C-r>"`` to key events.

    Unknown ``<...>`` groups are typed literally.
    """

    keys: List[KeyInput] = []
    index = 0
    while index < len(text):
        match = _SPECIAL.match(text, index)
        if match:
            special = _special_key(match.group(1))
            if special is not None:
                keys.append(special)
                index = match.end()
                continue
        ch = text[index]
        if ch == "\n":
            keys.append(KeyInput("enter"))
        elif ch == "\t":
            keys.append(KeyInput("tab"))
        else:
            keys.append(KeyInput(ch, text=ch))
        index += 1
    return keys


async def run_action(
    context: ModeContext, match: ResolutionMatch, call: OperatorCall
) -> ActionOutcome:
    """Invoke the bound handler, awaiting it when it is a coroutine."""

    with telemetry.span(
        "keymaps::execute",
        component="keymaps",
        metadata={
            "binding_id": match.binding.id,
            "action": match.action.telemetry_name,
            "keys": call.key_string,
        },
    ) as handle:
        outcome = match.action(context, call)
        if match.action.is_async:
            outcome = await outcome
        if isinstance(outcome, Invalid):
            handle.add_metadata("invalid", outcome.kind.value)
    if isinstance(outcome, (ModeResult, NeedMore, Invalid)):
        return outcome
    return ModeResult(consumed=True)


def invalid_result(invalid: Invalid, keys: Sequence[str]) -> ModeResult:
    reason = invalid.reason or invalid.kind.value
    return ModeResult(
        consumed=True,
        status="invalid",
        message=reason,
        error=SessionError(invalid.kind, reason, "".join(keys)),
    )


def pending_result() -> ModeResult:
    return ModeResult(consumed=True, status="pending", message="awaiting_keys")


def unknown_command(tokens: Sequence[str]) -> Invalid:
    return Invalid(ErrorKind.INVALID_COMMAND, f"unknown command {' '.join(tokens)}")


__all__ = [
    "ActionOutcome",
    "invalid_result",
    "key_to_token",
    "parse_keys",
    "pending_result",
    "require_keymap_resolver",
    "run_action",
    "unknown_command",
]
