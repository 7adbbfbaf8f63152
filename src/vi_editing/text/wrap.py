"""Paragraph reflow used by ``gq``.

The input is tokenized into words, explicit newlines and leading-whitespace
runs. Output is rebuilt token by token, looking ahead to decide whether a
soft line break is merged away and looking at the current line length to
decide where to break.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from vi_editing.runtime.settings import DEFAULT_LINE_PREFIXES

Token = Tuple[str, str]

LIST_MARKER = "-"
LIST_INDENT = "  "

_BLANKS = re.compile(r"[ \t]+")


def _match_prefix(line: str, prefixes: Sequence[str]) -> Optional[str]:
    for prefix in prefixes:
        if not line.startswith(prefix):
            continue
        rest = line[len(prefix) :]
        if not rest or rest[0] in " \t":
            return prefix
    return None


def tokenize(text: str, prefixes: Iterable[str] = DEFAULT_LINE_PREFIXES) -> List[Token]:
    """Split ``text`` into ``word``, ``newline`` and ``leadws`` tokens.

    Line-prefix tokens at the start of a line (after optional indentation and
    followed by whitespace) become part of that line's ``leadws``. Lines made of
    whitespace only lose it.
    """

    ordered = sorted({p for p in prefixes if p}, key=len, reverse=True)
    tokens: List[Token] = []
    for index, line in enumerate(text.split("\n")):
        if index:
            tokens.append(("newline", "\n"))
        body = line.lstrip(" \t")
        lead = line[: len(line) - len(body)]
        prefixed = False
        while True:
            prefix = _match_prefix(body, ordered)
            if prefix is None:
                break
            rest = body[len(prefix) :]
            body = rest.lstrip(" \t")
            lead += prefix + rest[: len(rest) - len(body)]
            prefixed = True
        if not body:
            lead = lead.rstrip(" \t") if prefixed else ""
        if lead:
            tokens.append(("leadws", lead))
        for word in _BLANKS.split(body):
            if word:
                tokens.append(("word", word))
    return tokens


def wrap(
    text: str,
    width: int = 78,
    prefixes: Iterable[str] = DEFAULT_LINE_PREFIXES,
) -> str:
    """Reflow ``text`` so no line reaches ``width`` characters.

    Leading whitespace (including any line prefix) of a paragraph's first line
    is repeated on every line produced from it, and items starting with ``-``
    get a two-space hanging indent. A word longer than the width is never
    split.

    A continuation line never starts with ``-`` or a bare prefix token, since
    wrapping the output again would read it as a new item. The words before
    such a token move down with it; when only the line's first word is left
    the token stays on the line past the width.
    """

    prefixes = tuple(prefixes)
    guarded = {LIST_MARKER, *(p for p in prefixes if p)}
    tokens = tokenize(text, prefixes)
    out: List[Token] = []
    line: List[str] = []
    linelen = 0
    lineleadws = ""
    moreleadws = ""
    input_line_start = True

    def token_at(position: int) -> Token:
        if 0 <= position < len(tokens):
            return tokens[position]
        return ("", "")

    i = 0
    while i < len(tokens):
        kind, value = tokens[i]
        prev_kind, _ = token_at(i - 1)
        next_kind, next_value = token_at(i + 1)
        after_kind, after_value = token_at(i + 2)
        i += 1

        if kind == "word":
            carried: List[str] = []
            if line and linelen + len(value) + 1 >= width:
                split = len(line)
                while split > 0 and (line + [value])[split] in guarded:
                    split -= 1
                if split:
                    carried = line[split:]
                    # Each carried word sits behind a space token.
                    del out[len(out) - 2 * len(carried) :]
                    out.append(("newline", "\n"))
                    lead = lineleadws + moreleadws
                    if lead:
                        out.append(("leadws", lead))
                    linelen = len(lead)
                    line = []
            for word in carried + [value]:
                if line:
                    out.append(("space", " "))
                    linelen += 1
                out.append(("word", word))
                line.append(word)
                linelen += len(word)
            if value == LIST_MARKER and input_line_start:
                moreleadws = LIST_INDENT
            input_line_start = False
        elif kind == "newline":
            continues = prev_kind == "word" and (
                (next_kind == "word" and next_value != LIST_MARKER)
                or (
                    next_kind == "leadws"
                    and next_value in (lineleadws, lineleadws + moreleadws)
                    and not (after_kind == "word" and after_value == LIST_MARKER)
                )
            )
            if continues:
                if next_kind == "leadws":
                    i += 1
                continue
            lineleadws = ""
            moreleadws = ""
            out.append(("newline", "\n"))
            linelen = 0
            line = []
            input_line_start = True
        elif kind == "leadws":
            lineleadws = value
            moreleadws = ""
            out.append(("leadws", value))
            linelen = len(value)
    return "".join(value for _, value in out)


__all__ = ["LIST_INDENT", "LIST_MARKER", "tokenize", "wrap"]
