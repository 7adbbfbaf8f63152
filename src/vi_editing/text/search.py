"""Literal and regular-expression search plus the ex substitute helpers.

A stored pattern starts with a marker character: ``/`` means the rest is a
regular expression, anything else means a literal string. Forward searches
start one character after the cursor and wrap to the top; backward searches
look before the cursor first and then wrap to the rest of the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple, Union

from vi_editing.modes.operator_pipeline import ErrorKind, Invalid, Ok
from vi_editing.runtime import telemetry

REGEX_MARKER = "/"
LITERAL_MARKER = " "

Replacement = Callable[["re.Match[str]"], str]

_ESCAPES = {"n": "\n", "t": "\t"}


@dataclass(slots=True)
class SearchState:
    pattern: str = ""
    reverse_default: bool = False
    compiled: Optional[Pattern[str]] = None
    compiled_source: str = ""

    @property
    def is_regex(self) -> bool:
        return self.pattern.startswith(REGEX_MARKER)

    @property
    def body(self) -> str:
        return self.pattern[1:]


class SearchEngine:
    """Holds the last search and finds its next occurrence in a text."""

    def __init__(self) -> None:
        self.state = SearchState()

    def set_pattern(self, pattern: str, *, reverse: bool = False) -> None:
        self.state.pattern = pattern
        self.state.reverse_default = reverse

    def set_regex(self, expression: str, *, reverse: bool = False) -> None:
        self.set_pattern(REGEX_MARKER + expression, reverse=reverse)

    def set_literal(self, needle: str, *, reverse: bool = False) -> None:
        self.set_pattern(LITERAL_MARKER + needle, reverse=reverse)

    def seed_word(self, word: str, *, reverse: bool) -> None:
        """Whole-word search as used by ``*`` and ``#``."""

        self.set_regex(r"\b" + re.escape(word) + r"\b", reverse=reverse)

    def compiled(self) -> Union[Ok[Pattern[str]], Invalid]:
        state = self.state
        source = state.body
        if state.compiled is None or source != state.compiled_source:
            try:
                state.compiled = re.compile(source)
            except re.error as exc:
                state.compiled = None
                telemetry.record_event(
                    "search.compile",
                    level="warning",
                    data={"pattern": source, "error": str(exc)},
                )
                return Invalid(ErrorKind.SEARCH_PATTERN_ERROR, str(exc))
            state.compiled_source = source
            telemetry.record_event(
                "search.compile", level="debug", data={"pattern": source}
            )
        return Ok(state.compiled)

    def find(
        self, text: str, cursor: int, *, reverse: Optional[bool] = None
    ) -> Union[Ok[int], Invalid]:
        """Offset of the next match; ``reverse`` defaults to the stored direction.

        ``reverse`` is relative to the direction the search was started with,
        so ``n`` passes ``False`` and ``N`` passes ``True``.
        """

        if not self.state.pattern:
            return Invalid(ErrorKind.INVALID_COMMAND, "no previous search")
        backward = self.state.reverse_default != bool(reverse)
        if not self.state.is_regex:
            offset = find_literal(text, self.state.body, cursor, backward)
        else:
            outcome = self.compiled()
            if isinstance(outcome, Invalid):
                return outcome
            offset = find_regex(text, outcome.value, cursor, backward)
        if offset < 0:
            return Invalid(
                ErrorKind.INVALID_MOTION, f"pattern not found: {self.state.body}"
            )
        return Ok(offset)


def find_literal(text: str, needle: str, cursor: int, backward: bool) -> int:
    if not needle:
        return -1
    after = cursor + 1
    if backward:
        index = text[:cursor].rfind(needle)
        if index >= 0:
            return index
        index = text[after:].rfind(needle)
        return after + index if index >= 0 else -1
    index = text[after:].find(needle)
    if index >= 0:
        return after + index
    return text[:cursor].find(needle)


def find_regex(text: str, pattern: Pattern[str], cursor: int, backward: bool) -> int:
    after = cursor + 1
    if backward:
        for start, end in ((0, cursor), (after, len(text))):
            last = None
            if start <= end:
                for last in pattern.finditer(text, start, end):
                    pass
            if last is not None:
                return last.start()
        return -1
    if after <= len(text):
        match = pattern.search(text, after)
        if match:
            return match.start()
    match = pattern.search(text, 0, max(cursor, 0))
    return match.start() if match else -1


@dataclass(slots=True)
class Substitution:
    """Compiled ``s/pattern/replacement/flags`` command."""

    pattern: Pattern[str]
    replacement: Replacement
    global_: bool = False
    source: str = ""

    def apply(self, text: str) -> Tuple[str, int]:
        """Substitute line by line; returns the new text and the match count."""

        count = 0 if self.global_ else 1
        lines: List[str] = []
        total = 0
        for line in text.split("\n"):
            line, hits = self.pattern.subn(self.replacement, line, count=count)
            lines.append(line)
            total += hits
        return "\n".join(lines), total


@dataclass(slots=True)
class SubstituteSpec:
    pattern: str
    replacement: str
    flags: str = ""


def _split_delimited(body: str, delimiter: str) -> List[str]:
    parts: List[str] = []
    current = ""
    index = 0
    while index < len(body):
        ch = body[index]
        if ch == "\\" and index + 1 < len(body):
            nxt = body[index + 1]
            # An escaped delimiter is just the delimiter character.
            current += nxt if nxt == delimiter else ch + nxt
            index += 2
            continue
        if ch == delimiter and len(parts) < 2:
            parts.append(current)
            current = ""
        else:
            current += ch
        index += 1
    parts.append(current)
    return parts


def parse_substitute(command: str) -> Union[Ok[SubstituteSpec], Invalid]:
    """Split ``s/pat/repl/flags``; the trailing delimiter is optional."""

    if len(command) < 2 or command[0] != "s":
        return Invalid(ErrorKind.INVALID_COMMAND, f"not a substitute: {command}")
    delimiter = command[1]
    if delimiter.isalnum() or delimiter.isspace() or delimiter == "\\":
        return Invalid(ErrorKind.INVALID_COMMAND, f"bad delimiter {delimiter!r}")
    parts = _split_delimited(command[2:], delimiter)
    pattern = parts[0]
    replacement = parts[1] if len(parts) > 1 else ""
    flags = parts[2] if len(parts) > 2 else ""
    unknown = set(flags) - set("gi")
    if unknown:
        return Invalid(
            ErrorKind.INVALID_COMMAND, f"unknown flags {''.join(sorted(unknown))}"
        )
    return Ok(SubstituteSpec(pattern, replacement, flags))


def _replacement_pieces(replacement: str) -> Tuple[Union[str, int], ...]:
    pieces: List[Union[str, int]] = []
    literal = ""
    index = 0
    while index < len(replacement):
        ch = replacement[index]
        if ch == "&":
            pieces.extend((literal, 0))
            literal = ""
        elif ch == "\\" and index + 1 < len(replacement):
            index += 1
            nxt = replacement[index]
            if nxt in "0123456789":
                pieces.extend((literal, int(nxt)))
                literal = ""
            else:
                literal += _ESCAPES.get(nxt, nxt)
        else:
            literal += ch
        index += 1
    pieces.append(literal)
    return tuple(piece for piece in pieces if piece != "")


def translate_replacement(replacement: str) -> Replacement:
    """Turn vi replacement syntax into a callable for ``re.sub``.

    ``&`` is the whole match and ``\\1``..``\\9`` are groups; ``\\&`` is a
    literal ampersand, ``\\n`` a newline, ``\\t`` a tab and ``\\\\`` a backslash.
    """

    pieces = _replacement_pieces(replacement)

    def expand(match: "re.Match[str]") -> str:
        out = []
        for piece in pieces:
            if isinstance(piece, int):
                out.append(match.group(piece) or "")
            else:
                out.append(piece)
        return "".join(out)

    return expand


def compile_substitute(
    substitute: SubstituteSpec, *, fallback_pattern: str = ""
) -> Union[Ok[Substitution], Invalid]:
    """Compile a parsed substitute; an empty pattern reuses ``fallback_pattern``."""

    source = substitute.pattern or fallback_pattern
    if not source:
        return Invalid(ErrorKind.INVALID_COMMAND, "no previous pattern")
    flags = re.IGNORECASE if "i" in substitute.flags else 0
    try:
        pattern = re.compile(source, flags)
    except re.error as exc:
        return Invalid(ErrorKind.SEARCH_PATTERN_ERROR, str(exc))
    pieces = _replacement_pieces(substitute.replacement)
    groups = [piece for piece in pieces if isinstance(piece, int)]
    if groups and max(groups) > pattern.groups:
        return Invalid(
            ErrorKind.SEARCH_PATTERN_ERROR, f"no group {max(groups)} in {source}"
        )
    return Ok(
        Substitution(
            pattern=pattern,
            replacement=translate_replacement(substitute.replacement),
            global_="g" in substitute.flags,
            source=source,
        )
    )


def substitute_lines(
    text: str, low: int, high: int, command: str, *, fallback_pattern: str = ""
) -> Union[Ok[Tuple[str, int]], Invalid]:
    """Run ``command`` over ``text[low:high]``; returns the new span text."""

    parsed = parse_substitute(command)
    if isinstance(parsed, Invalid):
        return parsed
    compiled = compile_substitute(parsed.value, fallback_pattern=fallback_pattern)
    if isinstance(compiled, Invalid):
        return compiled
    return Ok(compiled.value.apply(text[low:high]))


__all__ = [
    "LITERAL_MARKER",
    "REGEX_MARKER",
    "SearchEngine",
    "SearchState",
    "SubstituteSpec",
    "Substitution",
    "compile_substitute",
    "find_literal",
    "find_regex",
    "parse_substitute",
    "substitute_lines",
    "translate_replacement",
]
