from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from vi_editing import EditingSession, create_session
from vi_editing.actions.command import ExRange, parse_range
from vi_editing.buffer import Cursor, MemoryClipboard, MemorySurface, ScriptedPrompt
from vi_editing.buffer.prompt import PromptHistory
from vi_editing.modes import ErrorKind, ModeResult, Ok
from vi_editing.runtime.settings import EditorSettings


def make_session(
    text: str,
    answers: Sequence[Optional[str]] = (),
    *,
    cursor: int = 0,
) -> tuple[EditingSession, MemorySurface, ScriptedPrompt]:
    surface = MemorySurface.from_text(text, cursor=cursor)
    prompt = ScriptedPrompt(answers)
    session = create_session(
        surface,
        clipboard=MemoryClipboard(),
        prompt=prompt,
        settings=EditorSettings(),
    )
    feed(session, "<Esc>")
    return session, surface, prompt


def feed(session: EditingSession, keys: str) -> List[ModeResult]:
    return asyncio.run(session.feed(keys))


def test_star_searches_word_under_cursor() -> None:
    session, _, _ = make_session("foo bar foo baz")

    feed(session, "*")
    assert session.buffer.cursor.cur == 8

    feed(session, "n")
    assert session.buffer.cursor.cur == 0


def test_hash_searches_backward() -> None:
    session, _, _ = make_session("foo bar foo", cursor=8)

    feed(session, "#")

    assert session.buffer.cursor.cur == 0


def test_prompted_search_and_repeat() -> None:
    session, _, prompt = make_session("foo bar foo baz", ["ba"])

    feed(session, "/")
    assert session.buffer.cursor.cur == 4
    assert prompt.requests == [("/", "", ())]

    feed(session, "n")
    assert session.buffer.cursor.cur == 12

    feed(session, "N")
    assert session.buffer.cursor.cur == 4


def test_backward_prompted_search() -> None:
    session, _, _ = make_session("foo bar foo", ["foo"])

    feed(session, "?")

    assert session.buffer.cursor.cur == 8


def test_empty_answer_reuses_last_pattern() -> None:
    session, _, prompt = make_session("foo bar foo", ["foo", ""])

    feed(session, "/")
    assert session.buffer.cursor.cur == 8

    feed(session, "?")
    assert session.buffer.cursor.cur == 0
    assert prompt.requests[-1] == ("?", "", ("foo",))


def test_cancelled_prompt_changes_nothing() -> None:
    session, _, _ = make_session("foo bar", [None])

    results = feed(session, "/")

    assert results[-1].status == "cancelled"
    assert session.mode == "command"
    assert session.buffer.cursor.cur == 0


def test_bad_pattern_is_reported() -> None:
    session, _, _ = make_session("foo", ["("])

    results = feed(session, "/")

    assert results[-1].error is not None
    assert results[-1].error.kind is ErrorKind.SEARCH_PATTERN_ERROR


def test_search_without_prompt_is_invalid() -> None:
    surface = MemorySurface.from_text("foo")
    session = create_session(
        surface, clipboard=MemoryClipboard(), settings=EditorSettings()
    )
    feed(session, "<Esc>")

    results = feed(session, "/")

    assert results[-1].status == "invalid"


def test_substitute_whole_buffer() -> None:
    session, surface, _ = make_session("foo\nboo", ["%s/o/0/g"])

    results = feed(session, ":")

    assert surface.text == "f00\nb00"
    assert results[-1].message == "4 substitutions"
    assert session.buffer.cursor.cur == 4


def test_substitute_current_line_only() -> None:
    session, surface, _ = make_session("foo\nfoo", ["s/foo/bar/"], cursor=5)

    feed(session, ":")

    assert surface.text == "foo\nbar"


def test_substitute_reuses_search_pattern() -> None:
    session, surface, _ = make_session("foo\nfoo", ["o", "s//0/g"])

    feed(session, "/:")

    assert surface.text == "f00\nfoo"


def test_substitute_without_match_is_invalid() -> None:
    session, surface, _ = make_session("foo", ["s/x/y/"])

    results = feed(session, ":")

    assert results[-1].error is not None
    assert results[-1].error.kind is ErrorKind.INVALID_MOTION
    assert surface.text == "foo"


def test_goto_line_lands_on_first_nonblank() -> None:
    session, _, prompt = make_session("a\nb\n  c", ["3", "1"])

    feed(session, ":")
    assert session.buffer.cursor.cur == 6

    feed(session, ":")
    assert session.buffer.cursor.cur == 0
    assert prompt.requests[-1] == (":", "", ("3",))


def test_unknown_ex_command() -> None:
    session, _, _ = make_session("abc", ["wq"])

    results = feed(session, ":")

    assert results[-1].error is not None
    assert results[-1].error.kind is ErrorKind.INVALID_COMMAND


def test_visual_ex_command_uses_selection_range() -> None:
    session, surface, prompt = make_session("one\none\none", ["s/one/two/"])

    feed(session, "Vj:")

    assert prompt.requests[-1][1] == "'<,'>"
    assert surface.text == "two\ntwo\none"
    assert session.mode == "command"


def test_parse_range_addresses() -> None:
    text = "a\nb\nc\nd"

    assert parse_range("2,$s/a/b/", text, 0) == Ok((ExRange(1, 3, True), "s/a/b/"))
    assert parse_range(".", text, 4) == Ok((ExRange(2, 2, True), ""))
    assert parse_range("s/x/y/", text, 2) == Ok((ExRange(1, 1), "s/x/y/"))
    assert parse_range("3,1", text, 0) == Ok((ExRange(0, 2, True), ""))

    selection = Cursor(6, 2)
    assert parse_range("'<,'>", text, 0, selection) == Ok(
        (ExRange(1, 2, True), "")
    )


def test_prompt_history_moves_repeats_to_the_end() -> None:
    history = PromptHistory(limit=2)

    history.add("search", "/foo")
    history.add("search", "")
    history.add("search", "/bar")
    history.add("search", "/foo")
    history.add("command", "5")

    assert history.entries("search") == ("/bar", "/foo")
    assert history.entries("command") == ("5",)
    assert history.entries("other") == ()

    history.add("search", "/baz")
    assert history.entries("search") == ("/foo", "/baz")
