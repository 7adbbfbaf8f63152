from __future__ import annotations

import asyncio
from typing import List

from vi_editing import EditingSession, create_session
from vi_editing.buffer import MemoryClipboard, MemorySurface
from vi_editing.modes import ErrorKind, ModeResult, SessionError
from vi_editing.runtime.settings import EditorSettings


def make_session(
    text: str,
    *,
    cursor: int = 0,
    clipboard: MemoryClipboard | None = None,
    settings: EditorSettings | None = None,
) -> tuple[EditingSession, MemorySurface, MemoryClipboard]:
    surface = MemorySurface.from_text(text, cursor=cursor)
    if clipboard is None:
        clipboard = MemoryClipboard()
    session = create_session(
        surface, clipboard=clipboard, settings=settings or EditorSettings()
    )
    feed(session, "<Esc>")
    return session, surface, clipboard


def feed(session: EditingSession, keys: str) -> List[ModeResult]:
    return asyncio.run(session.feed(keys))


def test_delete_word() -> None:
    session, surface, _ = make_session("one two three")

    feed(session, "dw")

    assert surface.text == "two three"
    assert session.buffer.cursor.cur == 0
    assert session.mode == "command"


def test_counts_before_operator_and_motion_multiply() -> None:
    session, surface, _ = make_session("a b c d e f g")

    feed(session, "2d3w")

    assert surface.text == "g"


def test_partial_command_reports_pending() -> None:
    session, surface, _ = make_session("one two")

    results = feed(session, "d")

    assert results[-1].status == "pending"
    assert session.pending_keys == "d"
    assert surface.text == "one two"


def test_undo_restores_text_and_cursor() -> None:
    session, surface, _ = make_session("one two three")

    feed(session, "wdw")
    assert surface.text == "one three"

    feed(session, "0u")
    assert surface.text == "one two three"
    assert session.buffer.cursor.cur == 4

    feed(session, "<C-r>")
    assert surface.text == "one three"
    assert session.buffer.cursor.cur == 4


def test_undo_with_count() -> None:
    session, surface, _ = make_session("abc")

    feed(session, "xx")
    assert surface.text == "c"

    feed(session, "2u")
    assert surface.text == "abc"
    assert session.buffer.cursor.cur == 0

    feed(session, "<C-r>")
    assert surface.text == "bc"


def test_undo_with_empty_history() -> None:
    session, _, _ = make_session("abc")

    results = feed(session, "u")

    assert results[-1].status == "nothing_to_undo"


def test_host_typing_is_one_undo_step() -> None:
    surface = MemorySurface.from_text("abc")
    session = create_session(
        surface, clipboard=MemoryClipboard(), settings=EditorSettings()
    )
    assert session.mode == "insert"

    surface.type_text("hi ")
    feed(session, "<Esc>")
    feed(session, "u")

    assert surface.text == "abc"
    assert session.buffer.cursor.cur == 0

    feed(session, "<C-r>")
    assert surface.text == "hi abc"
    assert session.buffer.cursor.cur == 3


def test_repeat_last_command() -> None:
    session, surface, _ = make_session("one two three")

    feed(session, "dw.")

    assert surface.text == "three"


def test_repeat_replays_change_and_typed_text() -> None:
    session, surface, _ = make_session("one two three")

    feed(session, "cw")
    assert session.mode == "insert"
    surface.type_text("ONE")
    feed(session, "<Esc>w.")

    assert surface.text == "ONE ONE three"
    assert session.buffer.cursor.cur == 7

    feed(session, "u")
    assert surface.text == "ONE two three"
    assert session.buffer.cursor.cur == 4


def test_repeat_of_open_line_is_one_undo_step() -> None:
    session, surface, _ = make_session("aa\nbb")

    feed(session, "o")
    surface.type_text("xx")
    feed(session, "<Esc>k.")
    assert surface.text == "aa\nxx\nxx\nbb"

    feed(session, "u")
    assert surface.text == "aa\nxx\nbb"

    feed(session, "<C-r>")
    assert surface.text == "aa\nxx\nxx\nbb"


def test_repeat_of_line_change_is_one_undo_step() -> None:
    session, surface, _ = make_session("aa\nbb\ncc")

    feed(session, "cc")
    surface.type_text("XY")
    feed(session, "<Esc>j")
    cursor = session.buffer.cursor.cur
    feed(session, ".")
    assert surface.text == "XY\nXY\ncc"

    feed(session, "u")
    assert surface.text == "XY\nbb\ncc"
    assert session.buffer.cursor.cur == cursor

    feed(session, "<C-r>")
    assert surface.text == "XY\nXY\ncc"


def test_single_undo_restores_text_and_cursor() -> None:
    cases = [
        ("one two three", "", "dw"),
        ("one two three", "w", "2x"),
        ("a\nb\nc", "j", "dd"),
        ("a\nb", "", "J"),
        ("abc", "", "3~"),
        ("a\nb", "j", ">>"),
        ("one two", "w", "D"),
        ("one two three", "dw", "."),
        ("ab cd ef", "x", "."),
    ]

    for text, setup, keys in cases:
        session, surface, _ = make_session(text)
        feed(session, setup)
        before = (surface.text, session.buffer.cursor.cur)

        feed(session, keys)
        assert surface.text != before[0], keys

        feed(session, "u")
        assert (surface.text, session.buffer.cursor.cur) == before, keys


def test_repeat_replays_plain_typing() -> None:
    surface = MemorySurface.from_text("abc")
    session = create_session(
        surface, clipboard=MemoryClipboard(), settings=EditorSettings()
    )

    surface.type_text("hi ")
    feed(session, "<Esc>.")

    assert surface.text == "hi hi abc"


def test_delete_characters_stay_on_line() -> None:
    session, surface, _ = make_session("ab\ncd", cursor=2)

    results = feed(session, "x")
    assert surface.text == "ab\ncd"
    assert results[-1].modified is False

    feed(session, "X")
    assert surface.text == "a\ncd"
    assert session.buffer.cursor.cur == 1


def test_delete_lines() -> None:
    session, surface, _ = make_session("a\nb\nc")

    feed(session, "dd")
    assert surface.text == "b\nc"

    feed(session, ".")
    assert surface.text == "c"


def test_delete_last_line_takes_previous_newline() -> None:
    session, surface, _ = make_session("one\ntwo")

    feed(session, "jdd")

    assert surface.text == "one"
    assert session.buffer.cursor.cur == 0


def test_delete_to_line_end_keeps_newline() -> None:
    session, surface, _ = make_session("abc\ndef", cursor=1)

    feed(session, "D")

    assert surface.text == "a\ndef"
    assert session.buffer.cursor.cur == 1


def test_change_commands_enter_insert() -> None:
    session, surface, _ = make_session("abc\ndef", cursor=1)
    feed(session, "C")
    assert surface.text == "a\ndef"
    assert session.mode == "insert"

    session, surface, _ = make_session("one\ntwo", cursor=1)
    feed(session, "S")
    assert surface.text == "\ntwo"
    assert session.buffer.cursor.cur == 0

    session, surface, _ = make_session("abc")
    feed(session, "2s")
    assert surface.text == "c"
    assert session.mode == "insert"

    session, surface, _ = make_session("one\ntwo")
    feed(session, "cc")
    assert surface.text == "\ntwo"


def test_change_word_keeps_following_space() -> None:
    session, surface, _ = make_session("one two")

    feed(session, "cw")

    assert surface.text == " two"


def test_insert_entry_points() -> None:
    session, surface, _ = make_session("ab")
    feed(session, "a")
    assert surface.caret == 1

    session, surface, _ = make_session("ab")
    feed(session, "A")
    assert surface.caret == 2

    session, surface, _ = make_session("  ab", cursor=3)
    feed(session, "I")
    assert surface.caret == 0
    assert session.mode == "insert"


def test_open_lines() -> None:
    session, surface, _ = make_session("one\ntwo")
    feed(session, "o")
    assert surface.text == "one\n\ntwo"
    assert surface.caret == 4

    session, surface, _ = make_session("one\ntwo", cursor=5)
    feed(session, "O")
    assert surface.text == "one\n\ntwo"
    assert surface.caret == 4

    session, surface, _ = make_session("one")
    feed(session, "o")
    assert surface.text == "one\n"
    assert surface.caret == 4


def test_yank_line_and_paste_below() -> None:
    session, surface, clipboard = make_session("one\ntwo")

    feed(session, "yyp")

    assert clipboard.writes == ["one\n"]
    assert surface.text == "one\none\ntwo"
    assert session.buffer.cursor.cur == 4


def test_paste_line_after_last_line() -> None:
    clipboard = MemoryClipboard(text="new\n")
    session, surface, _ = make_session("one\ntwo", cursor=4, clipboard=clipboard)

    feed(session, "p")

    assert surface.text == "one\ntwo\nnew"
    assert session.buffer.cursor.cur == 8


def test_paste_before_and_with_count() -> None:
    clipboard = MemoryClipboard(text="X\n")
    session, surface, _ = make_session("one\ntwo", cursor=5, clipboard=clipboard)
    feed(session, "P")
    assert surface.text == "one\nX\ntwo"
    assert session.buffer.cursor.cur == 4

    clipboard = MemoryClipboard(text="x")
    session, surface, _ = make_session("ab", clipboard=clipboard)
    feed(session, "3p")
    assert surface.text == "axxxb"


def test_yank_lines_with_capital_y() -> None:
    session, _, clipboard = make_session("one\ntwo\nthree")

    feed(session, "2Y")

    assert clipboard.text == "one\ntwo\n"


def test_clipboard_failure_is_reported() -> None:
    clipboard = MemoryClipboard(fail_writes=True)
    session, surface, _ = make_session("one two", clipboard=clipboard)
    errors: List[object] = []
    session.bus.subscribe("session.error", errors.append)

    results = feed(session, "yw")

    result = results[-1]
    assert result.status == "invalid"
    assert result.error is not None
    assert result.error.kind is ErrorKind.CLIPBOARD_FAILURE
    assert isinstance(errors[0], SessionError)
    assert errors[0].keys == "yw"
    assert surface.text == "one two"
    assert session.mode == "command"


def test_paste_read_failure_leaves_text_alone() -> None:
    clipboard = MemoryClipboard(text="x", fail_reads=True)
    session, surface, _ = make_session("ab", clipboard=clipboard)

    results = feed(session, "p")

    assert results[-1].error is not None
    assert surface.text == "ab"


def test_indent_and_unindent_lines() -> None:
    session, surface, _ = make_session("a\nb")
    feed(session, ">>")
    assert surface.text == "\ta\nb"
    assert session.buffer.cursor.cur == 1

    session, surface, _ = make_session("\t\ta\nb")
    feed(session, "<<")
    assert surface.text == "\ta\nb"


def test_join_lines() -> None:
    session, surface, _ = make_session("one\n  two\nthree")
    feed(session, "J")
    assert surface.text == "one two\nthree"
    assert session.buffer.cursor.cur == 3

    session, surface, _ = make_session("one\n  two\nthree")
    feed(session, "gJ")
    assert surface.text == "onetwo\nthree"


def test_toggle_case_with_count() -> None:
    session, surface, _ = make_session("abc")

    feed(session, "2~")

    assert surface.text == "ABc"
    assert session.buffer.cursor.cur == 2


def test_format_line() -> None:
    settings = EditorSettings(wrap_width=10)
    session, surface, _ = make_session("aaa bbb ccc ddd", settings=settings)

    feed(session, "gqq")

    assert surface.text == "aaa bbb\nccc ddd"
    assert session.buffer.cursor.cur == 8


def test_unknown_sequence_is_invalid() -> None:
    session, surface, _ = make_session("abc")

    results = feed(session, "gx")

    assert results[0].status == "pending"
    assert results[-1].status == "invalid"
    assert results[-1].error is not None
    assert results[-1].error.kind is ErrorKind.INVALID_COMMAND
    assert session.pending_keys == ""
    assert surface.text == "abc"


def test_scroll_commands_use_settings() -> None:
    settings = EditorSettings(scroll_line_height=10, page_lines=8)
    session, surface, _ = make_session("abc", settings=settings)

    feed(session, "<C-d>3<C-e><C-b>")

    assert surface.scrolls == [(0, 40), (0, 30), (0, -80)]
