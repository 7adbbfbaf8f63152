"""Prompt collaborator behind ``/``, ``?`` and ``:``."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple


class Prompt(Protocol):
    """Single-line sub-input used by ``/``, ``?`` and ``:``.

    Returns the submitted string, or ``None`` when the user cancels. History
    navigation inside the prompt is the implementation's business.
    """

    async def ask(
        self, kind: str, *, seed: str = "", history: Sequence[str] = ()
    ) -> Optional[str]: ...


class PromptHistory:
    """Per-kind list of submitted prompt answers, oldest first."""

    def __init__(self, limit: int = 100) -> None:
        self.limit = limit
        self._entries: Dict[str, List[str]] = {}

    def add(self, kind: str, answer: str) -> None:
        if not answer:
            return
        entries = self._entries.setdefault(kind, [])
        if answer in entries:
            entries.remove(answer)
        entries.append(answer)
        del entries[: -self.limit]

    def entries(self, kind: str) -> Tuple[str, ...]:
        return tuple(self._entries.get(kind, ()))


class ScriptedPrompt:
    """Prompt answering from a queue; ``None`` entries simulate cancellation."""

    def __init__(self, answers: Iterable[Optional[str]] = ()) -> None:
        self._answers: Deque[Optional[str]] = deque(answers)
        self.requests: List[Tuple[str, str, Tuple[str, ...]]] = []

    def push(self, answer: Optional[str]) -> None:
        self._answers.append(answer)

    async def ask(
        self, kind: str, *, seed: str = "", history: Sequence[str] = ()
    ) -> Optional[str]:
        self.requests.append((kind, seed, tuple(history)))
        if not self._answers:
            return None
        answer = self._answers.popleft()
        if answer is None:
            return None
        return seed + answer


__all__ = ["Prompt", "PromptHistory", "ScriptedPrompt"]
