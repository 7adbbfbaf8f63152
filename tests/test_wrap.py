from __future__ import annotations

from vi_editing.text.wrap import tokenize, wrap


def test_wrap_breaks_before_reaching_width() -> None:
    assert wrap("aaa bbb ccc", 8) == "aaa bbb\nccc"


def test_wrap_merges_soft_line_breaks() -> None:
    assert wrap("aaa\nbbb", 78) == "aaa bbb"


def test_wrap_keeps_paragraph_breaks() -> None:
    assert wrap("aaa\n\nbbb", 78) == "aaa\n\nbbb"


def test_wrap_repeats_line_prefix() -> None:
    assert wrap("# aaa bbb ccc", 10) == "# aaa bbb\n# ccc"


def test_wrap_merges_lines_sharing_a_prefix() -> None:
    assert wrap("> aaa\n> bbb", 78) == "> aaa bbb"


def test_wrap_hangs_list_items() -> None:
    assert wrap("- aaa bbb ccc", 10) == "- aaa bbb\n  ccc"


def test_wrap_does_not_merge_list_items() -> None:
    assert wrap("- aaa\n- bbb", 78) == "- aaa\n- bbb"


def test_wrap_never_splits_long_words() -> None:
    assert wrap("abcdefghij xy", 5) == "abcdefghij\nxy"


def test_tokenize_classifies_leading_whitespace() -> None:
    tokens = tokenize("  // note\n   \nx")

    assert tokens == [
        ("leadws", "  // "),
        ("word", "note"),
        ("newline", "\n"),
        ("newline", "\n"),
        ("word", "x"),
    ]


def test_custom_prefixes() -> None:
    assert wrap("; aaa bbb", 7, prefixes=(";",)) == "; aaa\n; bbb"


def test_wrap_moves_dash_down_with_the_word_before_it() -> None:
    assert wrap("aaaa bbbb cccc dddd - eeee ffff", 20) == (
        "aaaa bbbb cccc\ndddd - eeee ffff"
    )
    assert wrap("aaaa bbbb cccc dddd # eeee", 20) == "aaaa bbbb cccc\ndddd # eeee"


def test_wrap_keeps_dash_when_only_one_word_precedes_it() -> None:
    assert wrap("aaaaaaaaaaaaaaaaaaa - b", 20) == "aaaaaaaaaaaaaaaaaaa -\nb"


def test_wrap_is_idempotent() -> None:
    samples = [
        "aaaa bbbb cccc dddd - eeee ffff",
        "  - aaaa bbbb - cccc dddd eeee",
        "  x - eeeeeeeee dddd a - bb cc - - dd",
        "# aaa bbb > ccc # ddd eee fff ggg hhh",
        "- one two three\n- four five six seven eight\n\n> nine ten - eleven",
        "aaaaaaaaaaaaaaaaaaa - b - c",
    ]

    for text in samples:
        for width in (8, 12, 20):
            once = wrap(text, width)
            assert wrap(once, width) == once, (text, width)


def test_ninety_character_line_wraps_into_two() -> None:
    text = " ".join(f"word{n:02d}" for n in range(13))
    assert len(text) == 90

    wrapped = wrap(text, 78)
    lines = wrapped.split("\n")

    assert len(lines) == 2
    assert all(len(line) <= 78 for line in lines)
    assert not lines[1].startswith(" ")
    assert wrapped.split() == text.split()
