"""Bidirectional scanning over an immutable text snapshot."""

from __future__ import annotations

import unicodedata
from typing import Callable, List, Tuple

Predicate = Callable[[str], bool]


def is_space(ch: str) -> bool:
    return ch.isspace()


def is_punct(ch: str, exclude: str = "") -> bool:
    """Unicode punctuation (category P*), minus any character in ``exclude``."""

    if not ch or ch in exclude:
        return False
    return unicodedata.category(ch).startswith("P")


class Reader:
    """Cursor that consumes characters forward or backward from ``origin``.

    A backward reader sees ``text[offset - 1]`` as its next character, so
    ``offset()`` is always a valid caret position in ``[0, len(text)]``.
    """

    __slots__ = ("text", "origin", "is_forward", "consumed", "exclude_punct")

    def __init__(
        self,
        text: str,
        origin: int,
        forward: bool = True,
        *,
        exclude_punct: str = "",
    ) -> None:
        self.text = text
        self.origin = max(0, min(origin, len(text)))
        self.is_forward = forward
        self.consumed = 0
        self.exclude_punct = exclude_punct

    def __repr__(self) -> str:
        arrow = "->" if self.is_forward else "<-"
        return f"Reader({self.offset()} {arrow})"

    def offset(self) -> int:
        if self.is_forward:
            return self.origin + self.consumed
        return self.origin - self.consumed

    def peek(self) -> str:
        pos = self.offset()
        if self.is_forward:
            return self.text[pos] if pos < len(self.text) else ""
        return self.text[pos - 1] if pos > 0 else ""

    def get(self) -> str:
        ch = self.peek()
        if ch:
            self.consumed += 1
        return ch

    def unget(self, count: int = 1) -> "Reader":
        self.consumed = max(0, self.consumed - count)
        return self

    def _spawn(self, origin: int, forward: bool) -> "Reader":
        return Reader(self.text, origin, forward, exclude_punct=self.exclude_punct)

    def from_origin(self) -> "Reader":
        """Fresh reader over the same text, restarting at ``origin``."""

        return self._spawn(self.origin, self.is_forward)

    def forward(self) -> "Reader":
        return self._spawn(self.offset(), True)

    def backward(self) -> "Reader":
        return self._spawn(self.offset(), False)

    def line(self, include_newline: bool) -> Tuple[str, bool]:
        """Consume up to the line boundary in the reading direction.

        Returns the line's characters in text order (never the newline) and
        whether the end of the text was hit without reading anything.
        """

        chars: List[str] = []
        eof = False
        while True:
            ch = self.peek()
            if not ch:
                eof = not chars
                break
            if ch == "\n":
                if include_newline:
                    self.get()
                break
            chars.append(self.get())
        if not self.is_forward:
            chars.reverse()
        return "".join(chars), eof

    def gather(
        self, predicate: Predicate, *, width: int = 1, around: bool = False
    ) -> "Reader":
        """Slide a ``width``-character window while ``predicate`` holds.

        The window is joined in reading order. When the predicate fails the
        window is put back, unless ``around`` is set, in which case the
        failing window stays consumed.
        """

        window: List[str] = []
        while True:
            while len(window) < width:
                ch = self.get()
                if not ch:
                    return self
                window.append(ch)
            if not predicate("".join(window)):
                if not around:
                    self.unget(len(window))
                return self
            window.pop(0)

    def whitespace(self, newline: bool) -> "Reader":
        if newline:
            return self.gather(is_space)
        return self.gather(lambda c: is_space(c) and c != "\n")

    def nonwhitespace(self) -> "Reader":
        return self.gather(lambda c: not is_space(c))

    def whitespacepunct(self, newline: bool) -> "Reader":
        exclude = self.exclude_punct
        if newline:
            return self.gather(lambda c: is_space(c) or is_punct(c, exclude))
        return self.gather(
            lambda c: (is_space(c) and c != "\n") or is_punct(c, exclude)
        )

    def nonwhitespacepunct(self) -> "Reader":
        exclude = self.exclude_punct
        return self.gather(lambda c: not is_space(c) and not is_punct(c, exclude))

    def punctuation(self) -> "Reader":
        exclude = self.exclude_punct
        return self.gather(lambda c: is_punct(c, exclude))


def line_start(text: str, offset: int) -> int:
    reader = Reader(text, offset, False)
    reader.line(False)
    return reader.offset()


def line_end(text: str, offset: int, *, include_newline: bool = False) -> int:
    reader = Reader(text, offset, True)
    reader.line(include_newline)
    return reader.offset()


__all__ = ["Reader", "Predicate", "is_punct", "is_space", "line_end", "line_start"]
