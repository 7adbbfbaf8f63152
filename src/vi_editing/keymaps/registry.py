"""Registry of actions and of the key bindings of every keymap mode."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple

from vi_editing.runtime.telemetry import span

from .models import ActionRef, Binding

Tokens = Tuple[str, ...]


@dataclass(slots=True)
class RegistryStats:
    """Counts describing what a registry currently holds."""

    action_count: int
    binding_count: int
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """Raised when a binding reuses keys already bound in the same mode."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        names = ", ".join(conflict.id for conflict in self.conflicts)
        super().__init__(
            f"Binding '{binding.id}' ({binding.key_signature}) conflicts with {names}"
        )


class KeymapRegistry:
    """Actions by id and bindings indexed by ``(mode, tokens)``.

    A mode holds at most one binding per key sequence. ``revision`` increases
    on every binding change so resolvers can rebuild their tries lazily.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._by_keys: Dict[str, Dict[Tokens, str]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def has_action(self, action_id: str) -> bool:
        return action_id in self._actions

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with span(
            "keymaps::register_action",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"action_id": action.id},
        ):
            if action.id in self._actions and not replace:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        """Add ``binding``; with ``replace`` it evicts whatever it collides with."""

        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            self._require_action(binding)
            conflicts = self.detect_conflicts(binding, ignore=(binding.id,))
            if not replace:
                if conflicts:
                    handle.add_metadata("conflicts", _ids(conflicts))
                    raise KeymapConflictError(binding, conflicts)
                if binding.id in self._bindings:
                    raise ValueError(f"Binding id '{binding.id}' already registered")
            for stale in conflicts:
                self._drop(stale.id)
            self._drop(binding.id)
            self._store(binding)
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with span(
            "keymaps::unregister_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ):
            removed = self._drop(binding_id)
            if removed is not None:
                self._revision += 1
            return removed

    def update_binding(self, binding_id: str, **changes: object) -> Binding:
        """Rebind an existing id, e.g. ``update_binding(id, sequence=...)``."""

        with span(
            "keymaps::update_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ) as handle:
            current = self._bindings.get(binding_id)
            if current is None:
                handle.fail("missing_binding")
                raise KeyError(f"Binding '{binding_id}' not found")
            updated = replace(current, **changes)
            self._require_action(updated)
            conflicts = self.detect_conflicts(updated, ignore=(binding_id,))
            if conflicts:
                handle.add_metadata("conflicts", _ids(conflicts))
                raise KeymapConflictError(updated, conflicts)
            self._drop(binding_id)
            self._store(updated)
            return updated

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for binding_id in self._by_keys.get(mode, {}).values():
            yield self._bindings[binding_id]

    def detect_conflicts(
        self, binding: Binding, *, ignore: Sequence[str] = ()
    ) -> list[Binding]:
        bound = self._by_keys.get(binding.mode, {}).get(binding.tokens)
        if bound is None or bound in ignore:
            return []
        return [self._bindings[bound]]

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._by_keys)),
        )

    def _require_action(self, binding: Binding) -> None:
        if binding.action_id not in self._actions:
            raise KeyError(
                f"Binding '{binding.id}' references unknown action "
                f"'{binding.action_id}'"
            )

    def _store(self, binding: Binding) -> None:
        self._bindings[binding.id] = binding
        self._by_keys.setdefault(binding.mode, {})[binding.tokens] = binding.id
        self._revision += 1

    def _drop(self, binding_id: str) -> Optional[Binding]:
        binding = self._bindings.pop(binding_id, None)
        if binding is None:
            return None
        keys = self._by_keys.get(binding.mode, {})
        if keys.get(binding.tokens) == binding_id:
            del keys[binding.tokens]
        if not keys:
            self._by_keys.pop(binding.mode, None)
        return binding


def _ids(bindings: Iterable[Binding]) -> str:
    return ",".join(binding.id for binding in bindings)


__all__ = [
    "KeymapConflictError",
    "KeymapRegistry",
    "RegistryStats",
]
