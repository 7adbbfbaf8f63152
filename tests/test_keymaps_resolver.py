from __future__ import annotations

from vi_editing.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "command",
    keys: tuple[str, ...] = ("g", "q"),
    action_id: str = "core.test",
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    action_ids = {binding.action_id for binding in bindings}
    for action_id in action_ids:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("command.gq")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("command", ("g", "q"))

    assert result.status == "match"
    assert result.consumed == 2
    assert result.match is not None
    assert result.match.binding.id == binding.id
    assert result.match.action.id == "core.test"


def test_resolver_reports_pending_for_prefix() -> None:
    registry = build_registry(
        [
            make_binding("command.gq"),
            make_binding("command.gJ", keys=("g", "J"), action_id="core.join"),
        ]
    )
    resolver = KeymapResolver(registry)

    result = resolver.resolve("command", ("g",))

    assert result.status == "pending"
    assert result.next_expected == ("J", "q")


def test_resolver_misses_unknown_keys_and_modes() -> None:
    registry = build_registry([make_binding("command.gq")])
    resolver = KeymapResolver(registry)

    assert resolver.resolve("command", ("g", "x")).status == "miss"
    assert resolver.resolve("command", ("g", "x")).consumed == 1
    assert resolver.resolve("visual", ("g", "q")).status == "miss"


def test_shorter_binding_wins_over_longer_prefix() -> None:
    registry = build_registry(
        [
            make_binding("command.d", keys=("d",), action_id="edit.delete"),
            make_binding("command.dd", keys=("d", "d"), action_id="edit.line"),
        ]
    )
    resolver = KeymapResolver(registry)

    result = resolver.resolve("command", ("d",))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == "command.d"


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("command", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("command.x", keys=("x",), action_id="core.x")
    registry.register_action(make_action("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("command", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id

    registry.unregister_binding("command.x")
    assert resolver.resolve("command", ("x",)).status == "miss"
