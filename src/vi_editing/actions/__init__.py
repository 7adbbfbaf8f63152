"""Editing verbs bound to keys by the default keymaps."""

from . import clipboard, command, core, edit, search, visual
from .command import run_ex
from .edit import indent_text, join_lines, swap_case, unindent_text

__all__ = [
    "clipboard",
    "command",
    "core",
    "edit",
    "search",
    "visual",
    "indent_text",
    "join_lines",
    "run_ex",
    "swap_case",
    "unindent_text",
]
