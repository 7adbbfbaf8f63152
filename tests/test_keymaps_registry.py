import pytest

from vi_editing.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeyStroke,
    KeymapConflictError,
    KeymapRegistry,
    load_default_keymaps,
)
from vi_editing.keymaps.defaults import DEFAULT_ACTIONS, DEFAULT_BINDINGS


def make_action(action_id: str = "core.test") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "command",
    sequence: KeySequence | None = None,
    action_id: str = "core.test",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("g", "q"),
        action_id=action_id,
    )


def test_keystroke_parsing() -> None:
    assert KeyStroke.parse("ctrl+r").token == "ctrl+r"
    assert KeyStroke.parse("ctrl+r").modifiers == ("ctrl",)
    assert KeyStroke.parse("+").key == "+"
    assert KeyStroke.parse("shift+ctrl+x").token == "ctrl+shift+x"


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    action = make_action()
    registry.register_action(action)
    binding = make_binding(binding_id="command.gq")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(mode="command")) == [binding]


def test_register_binding_requires_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="command.gq"))


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding = make_binding(binding_id="command.gq")
    registry.register_binding(binding)

    with pytest.raises(KeymapConflictError):
        registry.register_binding(make_binding(binding_id="command.gq.duplicate"))


def test_same_keys_in_other_modes_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_binding(binding_id="command.gq"))
    registry.register_binding(make_binding(binding_id="visual.gq", mode="visual"))

    assert registry.stats().binding_count == 2
    assert registry.stats().modes == ("command", "visual")


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_update_binding_changes_sequence() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)
    before = registry.revision()

    updated = registry.update_binding(
        "binding", sequence=make_sequence("d", "d"), description="delete line"
    )

    assert updated.sequence.tokens == ("d", "d")
    assert updated.description == "delete line"
    assert registry.revision() == before + 1


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)

    removed = registry.unregister_binding("binding")

    assert removed == binding
    assert registry.stats().binding_count == 0
    assert registry.unregister_binding("binding") is None


def test_load_default_keymaps_registers_everything() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    stats = registry.stats()
    assert stats.action_count == len(DEFAULT_ACTIONS)
    assert stats.binding_count == len(DEFAULT_BINDINGS)
    assert stats.modes == ("command", "visual")
    assert registry.get_binding("command.g_J").sequence.tokens == ("g", "J")
    assert registry.get_binding("command.ctrl+r").action_id == "core.redo"


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(
        registry,
        include_actions=("core.enter_insert",),
        include_bindings=("command.i",),
    )

    assert registry.stats().binding_count == 1
    assert registry.get_binding("command.i").action_id == "core.enter_insert"


def test_load_default_keymaps_skips_bindings_of_excluded_actions() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, exclude_actions=("core.undo",))

    assert not registry.has_action("core.undo")
    with pytest.raises(KeyError):
        registry.get_binding("command.u")


def test_load_default_keymaps_per_mode_override() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="command.i",
        mode="command",
        sequence=KeySequence.from_strings("a"),
        action_id="core.enter_insert",
    )

    load_default_keymaps(
        registry,
        per_mode_overrides={"command": (custom_binding,)},
    )

    binding = registry.get_binding("command.i")
    assert binding.sequence.tokens == ("a",)
    with pytest.raises(KeyError):
        registry.get_binding("command.a")


def test_per_mode_override_must_match_mode() -> None:
    registry = KeymapRegistry()
    stray = Binding(
        id="visual.i",
        mode="visual",
        sequence=KeySequence.from_strings("i"),
        action_id="core.enter_insert",
    )

    with pytest.raises(ValueError):
        load_default_keymaps(registry, per_mode_overrides={"command": (stray,)})


def test_binding_from_notation() -> None:
    binding = Binding.for_keys("visual", "g q", "visual.format")

    assert binding.id == "visual.g_q"
    assert binding.tokens == ("g", "q")
    assert binding.key_signature == "g q"
    assert KeySequence.parse("ctrl+r").tokens == ("ctrl+r",)


def test_action_ref_detects_coroutine_handlers() -> None:
    async def handler(context: object, call: object) -> None:
        del context, call

    assert ActionRef(id="core.async", handler=handler).is_async
    assert not make_action().is_async
    assert make_action().telemetry_name == "core.test"
