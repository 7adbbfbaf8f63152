"""Register-less clipboard collaborators.

The interpreter has exactly one yank/paste target: the host clipboard. Both
directions are asynchronous suspension points; implementations raise
``ClipboardFailure`` for permission, availability or runtime problems.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Protocol

import pyperclip

from vi_editing.runtime import telemetry


class ClipboardFailure(RuntimeError):
    """Raised when the host clipboard cannot be read or written."""

    def __init__(self, message: str, *, operation: str) -> None:
        super().__init__(message)
        self.operation = operation


class Clipboard(Protocol):
    async def write(self, text: str) -> None: ...

    async def read(self) -> str: ...


@dataclass(slots=True)
class MemoryClipboard:
    """Process-local clipboard; ``fail_reads``/``fail_writes`` simulate denials."""

    text: str = ""
    fail_reads: bool = False
    fail_writes: bool = False
    writes: List[str] = field(default_factory=list)

    async def write(self, text: str) -> None:
        if self.fail_writes:
            raise ClipboardFailure("clipboard write denied", operation="write")
        self.text = text
        self.writes.append(text)

    async def read(self) -> str:
        if self.fail_reads:
            raise ClipboardFailure("clipboard read denied", operation="read")
        return self.text


class SystemClipboard:
    """System clipboard backed by pyperclip, run off the event loop."""

    def __init__(self, *, logger_name: str = "vi_editing.clipboard") -> None:
        self.logger = telemetry.get_logger(logger_name)

    async def write(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as exc:
            telemetry.record_event(
                "clipboard.failure",
                level="warning",
                data={"operation": "write", "error": str(exc)},
            )
            raise ClipboardFailure(str(exc), operation="write") from exc

    async def read(self) -> str:
        try:
            value = await asyncio.to_thread(pyperclip.paste)
        except pyperclip.PyperclipException as exc:
            telemetry.record_event(
                "clipboard.failure",
                level="warning",
                data={"operation": "read", "error": str(exc)},
            )
            raise ClipboardFailure(str(exc), operation="read") from exc
        return value or ""


__all__ = [
    "Clipboard",
    "ClipboardFailure",
    "MemoryClipboard",
    "SystemClipboard",
]
