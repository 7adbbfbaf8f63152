from __future__ import annotations

import re

from vi_editing.modes import ErrorKind, Invalid, Ok
from vi_editing.text.search import (
    SearchEngine,
    find_literal,
    find_regex,
    parse_substitute,
    substitute_lines,
    translate_replacement,
)


def test_forward_search_starts_after_cursor_and_wraps() -> None:
    text = "foo bar foo"

    assert find_literal(text, "foo", 0, False) == 8
    assert find_literal(text, "foo", 8, False) == 0
    assert find_regex(text, re.compile("fo+"), 0, False) == 8


def test_backward_search_looks_before_cursor_first() -> None:
    text = "foo bar foo"

    assert find_literal(text, "foo", 8, True) == 0
    assert find_literal(text, "foo", 0, True) == 8
    assert find_regex(text, re.compile("foo"), 8, True) == 0
    assert find_regex(text, re.compile("foo"), 0, True) == 8


def test_engine_remembers_direction() -> None:
    engine = SearchEngine()
    engine.set_regex("ba.", reverse=True)
    text = "bar baz bat"

    first = engine.find(text, 10)
    flipped = engine.find(text, 4, reverse=True)

    assert first == Ok(4)
    assert flipped == Ok(8)


def test_engine_literal_search() -> None:
    engine = SearchEngine()
    engine.set_literal("a.c")

    assert engine.find("abc a.c", 0) == Ok(4)


def test_engine_reports_bad_patterns_and_misses() -> None:
    engine = SearchEngine()
    missing = engine.find("abc", 0)
    assert isinstance(missing, Invalid)

    engine.set_regex("(")
    broken = engine.find("abc", 0)
    assert isinstance(broken, Invalid)
    assert broken.kind is ErrorKind.SEARCH_PATTERN_ERROR

    engine.set_regex("zzz")
    absent = engine.find("abc", 0)
    assert isinstance(absent, Invalid)
    assert absent.kind is ErrorKind.INVALID_MOTION


def test_seed_word_matches_whole_words() -> None:
    engine = SearchEngine()
    engine.seed_word("foo", reverse=False)

    assert engine.find("foo food foo", 0) == Ok(9)


def test_parse_substitute() -> None:
    parsed = parse_substitute("s#a\\#b#c#g")

    assert isinstance(parsed, Ok)
    assert parsed.value.pattern == "a#b"
    assert parsed.value.replacement == "c"
    assert parsed.value.flags == "g"

    assert isinstance(parse_substitute("sxaxbx"), Invalid)
    assert isinstance(parse_substitute("s/a/b/z"), Invalid)


def test_replacement_syntax() -> None:
    expand = translate_replacement(r"<&>\1\&\t")
    match = re.search("(b)c", "abcd")

    assert match is not None
    assert expand(match) == "<bc>b&\t"


def test_substitute_lines_counts_matches() -> None:
    text = "foo\nboo\nxyz"

    outcome = substitute_lines(text, 0, 7, "s/o/0/g")
    first_only = substitute_lines(text, 0, 7, "s/o/0")

    assert outcome == Ok(("f00\nb00", 4))
    assert first_only == Ok(("f0o\nb0o", 2))


def test_substitute_reuses_fallback_pattern() -> None:
    outcome = substitute_lines("abc", 0, 3, "s//X/", fallback_pattern="b")
    missing = substitute_lines("abc", 0, 3, "s//X/")

    assert outcome == Ok(("aXc", 1))
    assert isinstance(missing, Invalid)


def test_substitute_rejects_unknown_groups() -> None:
    outcome = substitute_lines("abc", 0, 3, r"s/b/\2/")

    assert isinstance(outcome, Invalid)
    assert outcome.kind is ErrorKind.SEARCH_PATTERN_ERROR


def test_case_insensitive_flag() -> None:
    assert substitute_lines("ABC", 0, 3, "s/b/x/i") == Ok(("AxC", 1))
