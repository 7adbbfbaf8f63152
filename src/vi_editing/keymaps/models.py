"""Keys, key sequences, actions and the bindings that join them."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Callable, Iterable

# Modifier order used in tokens such as "ctrl+r".
_MODIFIER_ORDER = ("ctrl", "alt", "meta", "shift")


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    cleaned = {m.strip().lower() for m in modifiers if m.strip()}
    known = [m for m in _MODIFIER_ORDER if m in cleaned]
    return tuple(known + sorted(cleaned.difference(_MODIFIER_ORDER)))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """One key press as it appears in a binding, e.g. ``g`` or ``ctrl+r``."""

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "modifiers", _normalize_modifiers(self.modifiers))

    @property
    def token(self) -> str:
        if not self.modifiers:
            return self.key
        return "+".join(self.modifiers + (self.key,))

    @classmethod
    def parse(cls, token: str) -> "KeyStroke":
        """Parse ``"ctrl+r"`` style tokens; a lone ``"+"`` is the plus key."""

        head, sep, key = token[:-1].rpartition("+")
        if not sep:
            return cls(token)
        return cls(key + token[-1], tuple(head.split("+")))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Keys typed one after another to reach a single action."""

    strokes: tuple[KeyStroke, ...]

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def __len__(self) -> int:
        return len(self.strokes)

    @classmethod
    def from_strings(cls, *keys: str) -> "KeySequence":
        return cls(tuple(KeyStroke.parse(key) for key in keys if key))

    @classmethod
    def parse(cls, notation: str) -> "KeySequence":
        """Space separated notation: ``"g q"`` is ``g`` followed by ``q``."""

        return cls.from_strings(*notation.split(" "))


@dataclass(frozen=True, slots=True)
class ActionRef:
    """A named handler ``handler(context, call)`` that bindings point at."""

    id: str
    handler: Callable[..., object]
    description: str = ""
    telemetry_name: str = ""
    is_async: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        if not self.telemetry_name:
            object.__setattr__(self, "telemetry_name", self.id)
        object.__setattr__(
            self, "is_async", inspect.iscoroutinefunction(self.handler)
        )

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """A key sequence bound to an action inside one keymap mode."""

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("binding id cannot be empty")
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not self.action_id:
            raise ValueError("binding action_id cannot be empty")

    @property
    def tokens(self) -> tuple[str, ...]:
        return self.sequence.tokens

    @property
    def key_signature(self) -> str:
        return " ".join(self.tokens)

    @classmethod
    def for_keys(
        cls,
        mode: str,
        notation: str,
        action_id: str,
        *,
        description: str = "",
        source: str | None = None,
    ) -> "Binding":
        """Build ``<mode>.<keys>`` from notation such as ``"g q"`` (id ``g_q``)."""

        return cls(
            id=f"{mode}.{notation.replace(' ', '_')}",
            mode=mode,
            sequence=KeySequence.parse(notation),
            action_id=action_id,
            description=description,
            source=source,
        )


__all__ = [
    "ActionRef",
    "Binding",
    "KeySequence",
    "KeyStroke",
]
