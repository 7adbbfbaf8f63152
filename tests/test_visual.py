from __future__ import annotations

import asyncio
from typing import List

from vi_editing import EditingSession, create_session
from vi_editing.buffer import Cursor, MemoryClipboard, MemorySurface
from vi_editing.modes import ModeResult
from vi_editing.runtime.settings import EditorSettings


def make_session(
    text: str, *, cursor: int = 0, clipboard: MemoryClipboard | None = None
) -> tuple[EditingSession, MemorySurface, MemoryClipboard]:
    surface = MemorySurface.from_text(text, cursor=cursor)
    if clipboard is None:
        clipboard = MemoryClipboard()
    session = create_session(surface, clipboard=clipboard, settings=EditorSettings())
    feed(session, "<Esc>")
    return session, surface, clipboard


def feed(session: EditingSession, keys: str) -> List[ModeResult]:
    return asyncio.run(session.feed(keys))


def test_motions_extend_selection() -> None:
    session, surface, _ = make_session("hello world")

    feed(session, "vll")

    assert session.mode == "visual"
    assert surface.get_selection() == (0, 2, "forward")


def test_delete_selection_returns_to_command() -> None:
    session, surface, _ = make_session("hello world")

    feed(session, "vlld")

    assert surface.text == "llo world"
    assert session.mode == "command"
    assert session.buffer.cursor == Cursor.collapsed(0)


def test_deleting_selected_word_undoes_in_one_step() -> None:
    session, surface, _ = make_session("foo bar baz")

    feed(session, "wvlll")
    assert surface.get_selection() == (4, 7, "forward")

    feed(session, "d")
    assert surface.text == "foo  baz"
    assert session.mode == "command"

    results = feed(session, "u")
    assert results[-1].status == "undo"
    assert surface.text == "foo bar baz"
    assert session.buffer.cursor.cur == 4


def test_yank_selection_copies_text() -> None:
    session, surface, clipboard = make_session("hello world")

    feed(session, "vey")

    assert clipboard.text == "hello"
    assert surface.text == "hello world"
    assert session.mode == "command"


def test_change_selection_enters_insert() -> None:
    session, surface, _ = make_session("hello world")

    feed(session, "vec")

    assert surface.text == " world"
    assert session.mode == "insert"


def test_paste_replaces_selection() -> None:
    clipboard = MemoryClipboard(text="XY")
    session, surface, _ = make_session("abcd", clipboard=clipboard)

    feed(session, "vlp")

    assert surface.text == "XYbcd"
    assert session.buffer.cursor.cur == 2


def test_swap_anchor() -> None:
    session, surface, _ = make_session("abcdef", cursor=1)

    feed(session, "vllo")

    assert surface.get_selection() == (1, 3, "backward")
    assert session.buffer.cursor.cur == 1


def test_visual_line_selects_whole_lines() -> None:
    session, surface, _ = make_session("one\ntwo\nthree", cursor=1)

    feed(session, "V")
    assert session.mode == "visualline"
    assert surface.get_selection() == (0, 4, "forward")

    feed(session, "j")
    assert surface.get_selection() == (0, 8, "forward")

    feed(session, "d")
    assert surface.text == "three"
    assert session.mode == "command"


def test_switching_to_line_wise_keeps_direction() -> None:
    session, surface, _ = make_session("one\ntwo\nthree", cursor=6)

    feed(session, "vkV")

    assert session.mode == "visualline"
    assert surface.get_selection() == (0, 8, "backward")


def test_indent_selected_lines() -> None:
    session, surface, _ = make_session("a\nb\nc")

    feed(session, "Vj>")

    assert surface.text == "\ta\n\tb\nc"
    assert session.mode == "command"


def test_join_and_toggle_case_selection() -> None:
    session, surface, _ = make_session("one\ntwo\nthree")
    feed(session, "VjJ")
    assert surface.text == "one two\nthree"
    assert session.buffer.cursor.cur == 3

    session, surface, _ = make_session("abc def")
    feed(session, "ve~")
    assert surface.text == "ABC def"


def test_visual_edits_are_not_repeated() -> None:
    session, surface, _ = make_session("one two three")

    feed(session, "dw")
    feed(session, "vld")
    feed(session, ".")

    assert surface.text == "three"


def test_escape_collapses_selection() -> None:
    session, surface, _ = make_session("hello")

    results = feed(session, "vll<Esc>")

    assert results[-1].status == "escape"
    assert session.mode == "command"
    assert surface.get_selection() == (2, 2, "forward")
