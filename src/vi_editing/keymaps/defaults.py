"""Built-in keymaps that seed each mode with the vi command language."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from vi_editing.actions import clipboard as clipboard_actions
from vi_editing.actions import command as command_actions
from vi_editing.actions import core as core_actions
from vi_editing.actions import edit as edit_actions
from vi_editing.actions import search as search_actions
from vi_editing.actions import visual as visual_actions

from .models import ActionRef, Binding
from .registry import KeymapRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="core.enter_insert",
        handler=core_actions.enter_insert,
        description="Insert before the cursor",
    ),
    ActionRef(
        id="core.insert_line_start",
        handler=core_actions.insert_line_start,
        description="Insert at the start of the line",
    ),
    ActionRef(
        id="core.append",
        handler=core_actions.append,
        description="Append after the cursor",
    ),
    ActionRef(
        id="core.append_line_end",
        handler=core_actions.append_line_end,
        description="Append at the end of the line",
    ),
    ActionRef(
        id="core.open_below",
        handler=core_actions.open_below,
        description="Open a line below",
    ),
    ActionRef(
        id="core.open_above",
        handler=core_actions.open_above,
        description="Open a line above",
    ),
    ActionRef(
        id="core.enter_visual",
        handler=core_actions.enter_visual,
        description="Enter visual mode",
    ),
    ActionRef(
        id="core.enter_visual_line",
        handler=core_actions.enter_visual_line,
        description="Enter line-wise visual mode",
    ),
    ActionRef(
        id="core.undo",
        handler=core_actions.undo,
        description="Undo the last change",
    ),
    ActionRef(
        id="core.redo",
        handler=core_actions.redo,
        description="Redo the last undone change",
    ),
    ActionRef(
        id="core.repeat",
        handler=core_actions.repeat_last,
        description="Repeat the last change",
    ),
    ActionRef(
        id="core.scroll_half_down",
        handler=core_actions.scroll_half_page_down,
        description="Scroll half a page down",
    ),
    ActionRef(
        id="core.scroll_half_up",
        handler=core_actions.scroll_half_page_up,
        description="Scroll half a page up",
    ),
    ActionRef(
        id="core.scroll_line_down",
        handler=core_actions.scroll_line_down,
        description="Scroll the view down by lines",
    ),
    ActionRef(
        id="core.scroll_line_up",
        handler=core_actions.scroll_line_up,
        description="Scroll the view up by lines",
    ),
    ActionRef(
        id="core.scroll_page_down",
        handler=core_actions.scroll_page_down,
        description="Scroll a page down",
    ),
    ActionRef(
        id="core.scroll_page_up",
        handler=core_actions.scroll_page_up,
        description="Scroll a page up",
    ),
    ActionRef(
        id="core.dump_history",
        handler=core_actions.dump_history,
        description="Log the edit history (debug sessions only)",
    ),
    ActionRef(
        id="edit.substitute_chars",
        handler=edit_actions.substitute_chars,
        description="Replace characters and insert",
    ),
    ActionRef(
        id="edit.substitute_lines",
        handler=edit_actions.substitute_lines,
        description="Replace lines and insert",
    ),
    ActionRef(
        id="edit.change_to_line_end",
        handler=edit_actions.change_to_line_end,
        description="Change to the end of the line",
    ),
    ActionRef(
        id="edit.change",
        handler=edit_actions.change,
        description="Change over a motion",
    ),
    ActionRef(
        id="edit.delete_char",
        handler=edit_actions.delete_char,
        description="Delete characters under the cursor",
    ),
    ActionRef(
        id="edit.delete_char_before",
        handler=edit_actions.delete_char_before,
        description="Delete characters before the cursor",
    ),
    ActionRef(
        id="edit.delete_to_line_end",
        handler=edit_actions.delete_to_line_end,
        description="Delete to the end of the line",
    ),
    ActionRef(
        id="edit.delete",
        handler=edit_actions.delete,
        description="Delete over a motion",
    ),
    ActionRef(
        id="edit.unindent",
        handler=edit_actions.unindent,
        description="Unindent lines over a motion",
    ),
    ActionRef(
        id="edit.indent",
        handler=edit_actions.indent,
        description="Indent lines over a motion",
    ),
    ActionRef(
        id="edit.join",
        handler=edit_actions.join,
        description="Join lines with a space",
    ),
    ActionRef(
        id="edit.join_raw",
        handler=edit_actions.join_raw,
        description="Join lines without a separator",
    ),
    ActionRef(
        id="edit.toggle_case",
        handler=edit_actions.toggle_case,
        description="Swap the case of characters",
    ),
    ActionRef(
        id="edit.format",
        handler=edit_actions.format_text,
        description="Reflow lines over a motion",
    ),
    ActionRef(
        id="clipboard.yank",
        handler=clipboard_actions.yank,
        description="Copy over a motion",
    ),
    ActionRef(
        id="clipboard.yank_lines",
        handler=clipboard_actions.yank_lines,
        description="Copy whole lines",
    ),
    ActionRef(
        id="clipboard.paste_after",
        handler=clipboard_actions.paste_after,
        description="Paste after the cursor",
    ),
    ActionRef(
        id="clipboard.paste_before",
        handler=clipboard_actions.paste_before,
        description="Paste before the cursor",
    ),
    ActionRef(
        id="search.word_forward",
        handler=search_actions.search_word_forward,
        description="Search forward for the word under the cursor",
    ),
    ActionRef(
        id="search.word_backward",
        handler=search_actions.search_word_backward,
        description="Search backward for the word under the cursor",
    ),
    ActionRef(
        id="search.next",
        handler=search_actions.search_next,
        description="Repeat the last search",
    ),
    ActionRef(
        id="search.previous",
        handler=search_actions.search_previous,
        description="Repeat the last search in reverse",
    ),
    ActionRef(
        id="search.prompt_forward",
        handler=search_actions.search_prompt_forward,
        description="Prompt for a forward search",
    ),
    ActionRef(
        id="search.prompt_backward",
        handler=search_actions.search_prompt_backward,
        description="Prompt for a backward search",
    ),
    ActionRef(
        id="command.ex",
        handler=command_actions.ex_command,
        description="Prompt for an ex command",
    ),
    ActionRef(
        id="visual.select_characters",
        handler=visual_actions.select_characters,
        description="Switch to character-wise selection",
    ),
    ActionRef(
        id="visual.select_lines",
        handler=visual_actions.select_lines,
        description="Switch to line-wise selection",
    ),
    ActionRef(
        id="visual.swap_anchor",
        handler=visual_actions.swap_anchor,
        description="Swap selection anchor",
    ),
    ActionRef(
        id="visual.delete",
        handler=visual_actions.delete_selection,
        description="Delete current selection",
    ),
    ActionRef(
        id="visual.change",
        handler=visual_actions.change_selection,
        description="Change current selection",
    ),
    ActionRef(
        id="visual.yank",
        handler=visual_actions.yank_selection,
        description="Copy current selection",
    ),
    ActionRef(
        id="visual.paste",
        handler=visual_actions.paste_selection,
        description="Replace selection with the clipboard",
    ),
    ActionRef(
        id="visual.indent",
        handler=visual_actions.indent_selection,
        description="Indent selected lines",
    ),
    ActionRef(
        id="visual.unindent",
        handler=visual_actions.unindent_selection,
        description="Unindent selected lines",
    ),
    ActionRef(
        id="visual.join",
        handler=visual_actions.join_selection,
        description="Join selected lines with a space",
    ),
    ActionRef(
        id="visual.join_raw",
        handler=visual_actions.join_selection_raw,
        description="Join selected lines without a separator",
    ),
    ActionRef(
        id="visual.toggle_case",
        handler=visual_actions.toggle_case_selection,
        description="Swap the case of the selection",
    ),
    ActionRef(
        id="visual.format",
        handler=visual_actions.format_selection,
        description="Reflow selected lines",
    ),
)

_SCROLL_KEYS: tuple[tuple[str, str], ...] = (
    ("ctrl+d", "core.scroll_half_down"),
    ("ctrl+u", "core.scroll_half_up"),
    ("ctrl+e", "core.scroll_line_down"),
    ("ctrl+y", "core.scroll_line_up"),
    ("ctrl+f", "core.scroll_page_down"),
    ("ctrl+b", "core.scroll_page_up"),
)

# Key sequences are space separated so "g q" is the two-key sequence g, q.
COMMAND_KEYS: tuple[tuple[str, str], ...] = (
    ("i", "core.enter_insert"),
    ("I", "core.insert_line_start"),
    ("a", "core.append"),
    ("A", "core.append_line_end"),
    ("o", "core.open_below"),
    ("O", "core.open_above"),
    ("v", "core.enter_visual"),
    ("V", "core.enter_visual_line"),
    ("u", "core.undo"),
    ("ctrl+r", "core.redo"),
    (".", "core.repeat"),
    ("ctrl+h", "core.dump_history"),
    ("s", "edit.substitute_chars"),
    ("S", "edit.substitute_lines"),
    ("C", "edit.change_to_line_end"),
    ("c", "edit.change"),
    ("x", "edit.delete_char"),
    ("X", "edit.delete_char_before"),
    ("D", "edit.delete_to_line_end"),
    ("d", "edit.delete"),
    ("<", "edit.unindent"),
    (">", "edit.indent"),
    ("J", "edit.join"),
    ("g J", "edit.join_raw"),
    ("~", "edit.toggle_case"),
    ("g q", "edit.format"),
    ("y", "clipboard.yank"),
    ("Y", "clipboard.yank_lines"),
    ("p", "clipboard.paste_after"),
    ("P", "clipboard.paste_before"),
    ("*", "search.word_forward"),
    ("#", "search.word_backward"),
    ("n", "search.next"),
    ("N", "search.previous"),
    ("/", "search.prompt_forward"),
    ("?", "search.prompt_backward"),
    (":", "command.ex"),
) + _SCROLL_KEYS

VISUAL_KEYS: tuple[tuple[str, str], ...] = (
    ("v", "visual.select_characters"),
    ("V", "visual.select_lines"),
    ("o", "visual.swap_anchor"),
    ("d", "visual.delete"),
    ("s", "visual.change"),
    ("c", "visual.change"),
    ("y", "visual.yank"),
    ("p", "visual.paste"),
    ("<", "visual.unindent"),
    (">", "visual.indent"),
    ("J", "visual.join"),
    ("g J", "visual.join_raw"),
    ("~", "visual.toggle_case"),
    ("g q", "visual.format"),
    (":", "command.ex"),
) + _SCROLL_KEYS

_DESCRIPTIONS = {action.id: action.description for action in DEFAULT_ACTIONS}


def _bindings(mode: str, table: Sequence[tuple[str, str]]) -> tuple[Binding, ...]:
    return tuple(
        Binding.for_keys(
            mode,
            keys,
            action_id,
            description=_DESCRIPTIONS[action_id],
            source="defaults",
        )
        for keys, action_id in table
    )


DEFAULT_BINDINGS: tuple[Binding, ...] = (
    _bindings("command", COMMAND_KEYS) + _bindings("visual", VISUAL_KEYS)
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode."""

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    for action in DEFAULT_ACTIONS:
        if not _selected(action.id, allowed_actions):
            continue
        registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if not _selected(binding.id, allowed_bindings):
            continue
        if not registry.has_action(binding.action_id):
            continue
        registry.register_binding(binding, replace=replace)

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)

    if per_mode_overrides:
        for mode, bindings in per_mode_overrides.items():
            for binding in bindings:
                if binding.mode != mode:
                    raise ValueError(
                        f"Override binding '{binding.id}' must target mode '{mode}'"
                    )
                registry.register_binding(binding, replace=True)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = [
    "COMMAND_KEYS",
    "DEFAULT_ACTIONS",
    "DEFAULT_BINDINGS",
    "VISUAL_KEYS",
    "load_default_keymaps",
]
