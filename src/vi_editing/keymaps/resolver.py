"""Per-mode key tries answering "is this a command, a prefix, or nothing?"."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from vi_editing.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry


@dataclass(slots=True)
class TrieNode:
    binding_id: Optional[str] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))


@dataclass(slots=True)
class KeymapTrie:
    """Trie of one mode's bindings, valid for one registry revision."""

    mode: str
    revision: int
    root: TrieNode = field(default_factory=TrieNode)

    def add(self, binding: Binding) -> None:
        node = self.root
        for token in binding.tokens:
            node = node.children.setdefault(token, TrieNode())
        node.binding_id = binding.id

    def walk(self, tokens: Sequence[str]) -> tuple[Optional[TrieNode], int]:
        """Follow ``tokens``; returns the last node reached (None on a miss)."""

        node = self.root
        for consumed, token in enumerate(tokens):
            child = node.children.get(token)
            if child is None:
                return None, consumed
            node = child
        return node, len(tokens)


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of resolving typed tokens against a mode's keymap.

    ``pending`` means the tokens are a strict prefix of at least one binding;
    there is no timeout, the caller simply waits for another key. A node that
    is both bound and a prefix resolves as ``match``.
    """

    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()


class KeymapResolver:
    """Resolves token sequences, rebuilding a mode's trie when the registry changes."""

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, KeymapTrie] = {}

    @property
    def registry(self) -> KeymapRegistry:
        return self._registry

    def resolve(self, mode: str, tokens: Sequence[str]) -> ResolutionResult:
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "length": len(tokens)},
        ) as handle:
            node, consumed = self._trie(mode).walk(tokens)
            result = self._result(node, consumed)
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            return result

    def reset(self, mode: Optional[str] = None) -> None:
        if mode is None:
            self._tries.clear()
        else:
            self._tries.pop(mode, None)

    def _result(self, node: Optional[TrieNode], consumed: int) -> ResolutionResult:
        if node is None:
            return ResolutionResult(status="miss", consumed=consumed)
        if node.binding_id is not None:
            binding = self._registry.get_binding(node.binding_id)
            match = ResolutionMatch(
                binding=binding, action=self._registry.get_action(binding.action_id)
            )
            return ResolutionResult(status="match", match=match, consumed=consumed)
        if node.children:
            return ResolutionResult(
                status="pending", consumed=consumed, next_expected=node.next_tokens()
            )
        return ResolutionResult(status="miss", consumed=consumed)

    def _trie(self, mode: str) -> KeymapTrie:
        revision = self._registry.revision()
        trie = self._tries.get(mode)
        if trie is None or trie.revision != revision:
            trie = KeymapTrie(mode=mode, revision=revision)
            for binding in self._registry.iter_bindings(mode):
                trie.add(binding)
            self._tries[mode] = trie
        return trie


__all__ = [
    "KeymapResolver",
    "ResolutionMatch",
    "ResolutionResult",
]
