"""Motion grammar: turns buffered keys into a cursor or an expanded selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from vi_editing.buffer.state import Cursor
from vi_editing.modes.operator_pipeline import (
    Cmd,
    ErrorKind,
    Invalid,
    NeedMore,
    Ok,
    need_more,
)

from .reader import Reader, line_end, line_start

MotionOutcome = Union[Ok[Cursor], NeedMore, Invalid]

BRACKET_OPEN = "{[(<"
BRACKET_CLOSE = "}])>"

# Text objects delimited by a pair of characters: (opening, closing).
_PAIR_OBJECTS = {
    "'": ("'", "'"),
    '"': ('"', '"'),
    "(": ("(", ")"),
    ")": ("(", ")"),
    "b": ("(", ")"),
    "<": ("<", ">"),
    ">": ("<", ">"),
    "B": ("{", "}"),
}


@dataclass(slots=True)
class CharSearch:
    """Last ``f``/``F``/``t``/``T`` target, replayed by ``;`` and ``,``."""

    char: str = ""
    forward: bool = True
    before: bool = False


def _invalid(reason: str) -> Invalid:
    return Invalid(ErrorKind.INVALID_MOTION, reason)


def _first_nonblank(text: str, offset: int) -> int:
    return Reader(text, line_start(text, offset)).whitespace(False).offset()


def _walk_column(text: str, start: int, column: int) -> int:
    reader = Reader(text, start)
    for _ in range(column):
        ch = reader.peek()
        if not ch or ch == "\n":
            break
        reader.get()
    return reader.offset()


def match_bracket(text: str, offset: int) -> int:
    """Offset of the bracket matching the first one at or after ``offset``.

    Only the rest of the current line is scanned for the starting bracket.
    Returns -1 when there is none or it is unbalanced.
    """

    end = line_end(text, offset)
    pos = offset
    while pos < end and text[pos] not in BRACKET_OPEN + BRACKET_CLOSE:
        pos += 1
    if pos >= end:
        return -1
    ch = text[pos]
    if ch in BRACKET_OPEN:
        opening, closing = ch, BRACKET_CLOSE[BRACKET_OPEN.index(ch)]
        step, index = 1, pos + 1
    else:
        opening, closing = ch, BRACKET_OPEN[BRACKET_CLOSE.index(ch)]
        step, index = -1, pos - 1
    depth = 1
    while 0 <= index < len(text):
        current = text[index]
        if current == opening:
            depth += 1
        elif current == closing:
            depth -= 1
            if depth == 0:
                return index
        index += step
    return -1


class MotionResolver:
    """Resolves motions against a pair of readers anchored at the cursor.

    One resolver lives per session because ``;`` and ``,`` replay the
    character search remembered from an earlier ``f``/``F``/``t``/``T``.
    """

    def __init__(self) -> None:
        self.char_search = CharSearch()

    def resolve(
        self,
        cmd: Cmd,
        br: Reader,
        fr: Reader,
        cursor: Cursor,
        *,
        mode: str,
        end_line_char: str = "",
        change: bool = False,
    ) -> MotionOutcome:
        """Consume one motion from ``cmd``.

        Simple motions move ``cur`` and keep ``start``; text objects expand the
        selection in both directions. ``end_line_char`` is the operator key
        whose repetition means "whole lines" (``dd``). With ``change`` the
        last ``w``/``W`` repetition keeps the whitespace after the word.
        """

        key = cmd.get()
        if key is None:
            return need_more(cmd)
        text = fr.text

        def moved(offset: int) -> Ok[Cursor]:
            return Ok(Cursor(offset, cursor.start))

        if key == "0":
            br.line(False)
            return moved(br.offset())
        if key == "$":
            if not cmd.no_number():
                return Invalid(ErrorKind.NO_NUMBER_ALLOWED, "no count before $")
            fr.line(mode != "command")
            return moved(fr.offset())
        if key == "^":
            return moved(_first_nonblank(text, fr.offset()))
        if key == "-":
            for _ in cmd.times():
                br.line(True)
            return moved(_first_nonblank(text, br.offset()))
        if key == "+":
            for _ in cmd.times():
                fr.line(True)
            return moved(_first_nonblank(text, fr.offset()))
        if key in ("w", "W"):
            for index in cmd.times():
                if key == "w":
                    origin = fr.offset()
                    fr.nonwhitespacepunct()
                    if origin == fr.offset():
                        fr.punctuation()
                else:
                    fr.nonwhitespace()
                if not (change and cmd.is_last(index)):
                    fr.whitespace(True)
            return moved(fr.offset())
        if key == "b":
            for _ in cmd.times():
                br.whitespace(True)
                origin = br.offset()
                br.nonwhitespacepunct()
                if origin == br.offset():
                    br.punctuation()
            return moved(br.offset())
        if key == "B":
            for _ in cmd.times():
                br.whitespace(True)
                br.nonwhitespace()
            return moved(br.offset())
        if key == "e":
            for _ in cmd.times():
                fr.whitespace(True)
                origin = fr.offset()
                fr.nonwhitespacepunct()
                if origin == fr.offset():
                    fr.punctuation()
            return moved(fr.offset())
        if key == "E":
            for _ in cmd.times():
                fr.whitespace(True)
                fr.nonwhitespace()
            return moved(fr.offset())
        if key in ("h", "l"):
            reader = br if key == "h" else fr
            for _ in cmd.times():
                ch = reader.peek()
                if ch and ch != "\n":
                    reader.get()
            return moved(reader.offset())
        if key in ("j", "k"):
            return self._vertical(cmd, text, cursor, down=key == "j")
        if key == "(":
            return moved(self._sentence_back(cmd, text, br.offset()))
        if key == ")":
            return moved(self._sentence_forward(cmd, fr))
        if key in ("f", "t", "F", "T", ";", ","):
            return self._char_search(cmd, key, br, fr, cursor)
        if key in ("i", "a"):
            return self._text_object(cmd, key == "a", br, fr, cursor)
        if key == "G":
            return moved(self._goto_line(cmd, text))
        if key == "%":
            if not cmd.no_number():
                return Invalid(ErrorKind.NO_NUMBER_ALLOWED, "no count before %")
            target = match_bracket(text, fr.offset())
            if target < 0:
                return _invalid("no matching bracket")
            return moved(target)
        if key == "{":
            for _ in cmd.times():
                br.line(False)
                while True:
                    origin = br.offset()
                    br.get()
                    br.line(False)
                    if not br.peek() or br.offset() == origin - 1:
                        break
            return moved(br.offset())
        if key == "}":
            for _ in cmd.times():
                while True:
                    fr.get()
                    fr.line(True)
                    ch = fr.peek()
                    if not ch or ch == "\n":
                        break
            return moved(fr.offset())
        if end_line_char and key == end_line_char:
            br.line(False)
            for _ in cmd.times():
                fr.line(True)
            return Ok(Cursor(fr.offset(), br.offset()))
        return _invalid(f"unknown motion {key!r}")

    def _vertical(
        self, cmd: Cmd, text: str, cursor: Cursor, *, down: bool
    ) -> MotionOutcome:
        start = line_start(text, cursor.cur)
        column = cursor.cur - start
        target = start
        for _ in cmd.times():
            if down:
                end = line_end(text, target)
                if end >= len(text):
                    break
                target = end + 1
            else:
                if target == 0:
                    break
                target = line_start(text, target - 1)
        if target == start:
            return Ok(Cursor(cursor.cur, cursor.start))
        return Ok(Cursor(_walk_column(text, target, column), cursor.start))

    def _sentence_back(self, cmd: Cmd, text: str, origin: int) -> int:
        # Approximation: a sentence starts after "." or a blank line.
        offset = origin
        for _ in cmd.times():
            br = Reader(text, offset, False)
            br.get()
            br.gather(lambda w: w != "\n\n" and w[1] != ".", width=2)
            offset = br.forward().whitespace(True).offset()
            if offset >= origin:
                offset = br.offset()
        return offset

    def _sentence_forward(self, cmd: Cmd, fr: Reader) -> int:
        for _ in cmd.times():
            fr.get()
            fr.gather(lambda w: w != "\n\n" and w[0] != ".", width=2)
            if fr.peek() == ".":
                fr.get()
                fr.whitespace(True)
            else:
                fr.get()
                fr.gather(lambda c: c in " \t")
        return fr.offset()

    def _goto_line(self, cmd: Cmd, text: str) -> int:
        if not cmd.counted:
            return max(len(text) - 1, 0)
        offset = 0
        for _ in range(cmd.count - 1):
            end = line_end(text, offset)
            if end >= len(text):
                break
            offset = end + 1
        return offset

    def _char_search(
        self, cmd: Cmd, key: str, br: Reader, fr: Reader, cursor: Cursor
    ) -> MotionOutcome:
        if key not in (";", ","):
            target = cmd.get()
            if target is None:
                return need_more(cmd)
            if len(target) != 1:
                return _invalid(f"cannot search for {target!r}")
            self.char_search = CharSearch(
                char=target, forward=key in ("f", "t"), before=key in ("t", "T")
            )
        search = self.char_search
        if not search.char:
            return _invalid("no previous character search")
        forward = search.forward if key != "," else not search.forward
        char = search.char
        reader = fr if forward else br
        origin = reader.offset()
        if forward and search.before:
            # Stepping over a target right next to the cursor.
            first, second = reader.get(), reader.get()
            if first and first != "\n" and second == char:
                reader.unget(1)
            else:
                reader.unget(len(first) + len(second))

        def not_target(ch: str) -> bool:
            return ch != char and ch != "\n"

        for index in cmd.times():
            if reader.peek() != "\n":
                reader.get()
            around = (not forward and not search.before) or not cmd.is_last(index)
            reader.gather(not_target, around=around)
        if forward or search.before:
            found = reader.peek() == char
        else:
            found = reader.forward().peek() == char
        if not found:
            return _invalid(f"{char!r} not found on line")
        if forward and search.before and origin != reader.offset():
            reader.unget(1)
        return Ok(Cursor(reader.offset(), cursor.start))

    def _text_object(
        self, cmd: Cmd, around: bool, br: Reader, fr: Reader, cursor: Cursor
    ) -> MotionOutcome:
        kind = cmd.get()
        if kind is None:
            return need_more(cmd)
        if kind == "w":
            br.nonwhitespacepunct()
            for index in cmd.times():
                origin = fr.offset()
                fr.nonwhitespacepunct()
                if origin == fr.offset():
                    fr.punctuation()
                if around or not cmd.is_last(index):
                    fr.whitespace(True)
        elif kind == "W":
            br.nonwhitespace()
            for index in cmd.times():
                fr.nonwhitespace()
                if around or not cmd.is_last(index):
                    fr.whitespace(False)
        elif kind == "s":
            br.gather(lambda w: w != "\n\n" and w[1] != ".", width=2)
            for index in cmd.times():
                if index > 0:
                    fr.get()
                fr.gather(lambda c: c != ".", around=True)
                paragraph = fr.from_origin().gather(
                    lambda w: w != "\n\n", width=2, around=True
                )
                if paragraph.offset() < fr.offset():
                    fr = paragraph
                if around or not cmd.is_last(index):
                    fr.whitespace(True)
        elif kind == "p":
            br.gather(lambda w: w != "\n\n", width=2)
            br = br.forward().gather(lambda c: c == "\n")
            for _ in cmd.times():
                fr.gather(lambda w: w != "\n\n", width=2)
            while fr.peek() == "\n":
                fr.get()
                if not around:
                    break
        elif kind in _PAIR_OBJECTS:
            opening, closing = _PAIR_OBJECTS[kind]
            br.gather(lambda c: c != opening, around=around)
            fr.gather(lambda c: c != closing, around=around)
        elif kind == "t":
            return _invalid("tag text objects are not implemented")
        else:
            return _invalid(f"unknown text object {kind!r}")
        return Ok(_expand(cursor, fr.offset(), br.offset()))


def _expand(cursor: Cursor, cur: int, start: int) -> Cursor:
    """Move ``cur`` and widen ``start`` without flipping the direction."""

    if cur >= start:
        return Cursor(cur, min(cursor.start, start))
    return Cursor(cur, max(cursor.start, start))


__all__ = [
    "BRACKET_CLOSE",
    "BRACKET_OPEN",
    "CharSearch",
    "MotionResolver",
    "match_bracket",
]
