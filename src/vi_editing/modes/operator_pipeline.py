"""Command token buffer and the tagged outcomes of incremental parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    Iterator,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from vi_editing.text.reader import Reader

if TYPE_CHECKING:  # pragma: no cover - typing only
    from vi_editing.keymaps import ResolutionMatch

T = TypeVar("T")

# Counts beyond this are rejected rather than looped over.
MAX_COUNT = 100_000


class ErrorKind(str, Enum):
    INVALID_NUMBER = "invalid_number"
    NO_NUMBER_ALLOWED = "no_number_allowed"
    INVALID_MOTION = "invalid_motion"
    INVALID_COMMAND = "invalid_command"
    CLIPBOARD_FAILURE = "clipboard_failure"
    SEARCH_PATTERN_ERROR = "search_pattern_error"


@dataclass(frozen=True, slots=True)
class NeedMore:
    """The buffered keys are a valid prefix; wait for the next key."""

    pending: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Invalid:
    """The buffered keys can never form a command; discard them."""

    kind: ErrorKind
    reason: str = ""


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


Outcome = Union[Ok[T], NeedMore, Invalid]


@dataclass(frozen=True, slots=True)
class SessionError:
    """Payload of the ``session.error`` bus event."""

    kind: ErrorKind
    reason: str
    keys: str


class Cmd:
    """Keys typed so far, consumed front to back by the grammar.

    Each key is a token: a single character, or a chord such as ``ctrl+r``.
    ``count`` starts at 1 and every call to ``number`` multiplies it, so a
    count before the operator composes with one before the motion.
    """

    __slots__ = ("_keys", "_pos", "count", "counted")

    def __init__(self, keys: Sequence[str]) -> None:
        self._keys: Tuple[str, ...] = tuple(keys)
        self._pos = 0
        self.count = 1
        self.counted = False

    def __repr__(self) -> str:
        return f"Cmd({''.join(self.remaining)!r}, count={self.count})"

    @property
    def keys(self) -> Tuple[str, ...]:
        return self._keys

    @property
    def remaining(self) -> Tuple[str, ...]:
        return self._keys[self._pos :]

    def peek(self) -> Optional[str]:
        if self._pos >= len(self._keys):
            return None
        return self._keys[self._pos]

    def get(self) -> Optional[str]:
        key = self.peek()
        if key is not None:
            self._pos += 1
        return key

    def number(self) -> Optional[Invalid]:
        """Parse an optional count; a leading ``0`` never starts one."""

        digits = ""
        while True:
            key = self.peek()
            if key is None or len(key) != 1:
                break
            if not ("1" <= key <= "9" or (digits and key == "0")):
                break
            digits += key
            self._pos += 1
        if not digits:
            return None
        value = int(digits)
        if value <= 0 or value * self.count > MAX_COUNT:
            return Invalid(ErrorKind.INVALID_NUMBER, f"bad count {digits}")
        self.count *= value
        self.counted = True
        return None

    def no_number(self) -> bool:
        """True when no count is in effect."""

        return self.count == 1

    def times(self) -> Iterator[int]:
        return iter(range(self.count))

    def is_last(self, index: int) -> bool:
        return index == self.count - 1


@dataclass(slots=True)
class OperatorCall:
    """Everything an action handler needs about the keys that selected it."""

    keys: Tuple[str, ...]
    cmd: Cmd
    br: Reader
    fr: Reader
    mode: str
    match: Optional["ResolutionMatch"] = None
    replay: bool = False
    dispatcher: Any = None

    @property
    def text(self) -> str:
        return self.fr.text

    @property
    def key_string(self) -> str:
        return "".join(self.keys)


def need_more(cmd: Cmd) -> NeedMore:
    return NeedMore(cmd.keys)


__all__ = [
    "Cmd",
    "ErrorKind",
    "Invalid",
    "MAX_COUNT",
    "NeedMore",
    "Ok",
    "OperatorCall",
    "Outcome",
    "SessionError",
    "need_more",
]
