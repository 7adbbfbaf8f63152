"""Command mode: the incremental vi command dispatcher."""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from vi_editing.keymaps import ResolutionResult
from vi_editing.runtime import telemetry
from vi_editing.text.reader import Reader

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import (
    ActionOutcome,
    invalid_result,
    key_to_token,
    pending_result,
    require_keymap_resolver,
    run_action,
    unknown_command,
)
from .operator_pipeline import Cmd, Invalid, NeedMore, Ok, OperatorCall, need_more


class KeyedMode(Mode):
    """Buffers keys and re-parses the whole buffer after every key.

    Subclasses implement ``execute``; nothing is mutated until the buffered
    keys form a complete command, so re-parsing from scratch is safe.
    """

    keymap_mode: str = ""

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(f"vi_editing.modes.{self.name}")
        self._resolver = require_keymap_resolver(context)
        self._pending: List[str] = []

    @property
    def pending_keys(self) -> str:
        return "".join(self._pending)

    def reset(self) -> None:
        self._pending.clear()

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._pending.clear()

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self._pending.clear()

    async def handle_key(self, key: KeyInput) -> ModeResult:
        self._pending.append(key_to_token(key))
        keys = tuple(self._pending)
        outcome = await self.execute(keys)
        if isinstance(outcome, NeedMore):
            return pending_result()
        self._pending.clear()
        if isinstance(outcome, Invalid):
            return invalid_result(outcome, keys)
        return outcome

    async def execute(
        self, keys: Sequence[str], *, replay: bool = False
    ) -> ActionOutcome:  # pragma: no cover - abstract override
        raise NotImplementedError

    def _lookup(
        self, cmd: Cmd
    ) -> Union[Tuple[ResolutionResult, List[str]], NeedMore]:
        """Resolve bound keys from ``cmd``, pulling more while they are a prefix."""

        key = cmd.get()
        if key is None:
            return need_more(cmd)
        lookup = [key]
        mode = self.keymap_mode or self.name
        result = self._resolver.resolve(mode, lookup)
        while result.status == "pending":
            key = cmd.get()
            if key is None:
                return need_more(cmd)
            lookup.append(key)
            result = self._resolver.resolve(mode, lookup)
        return result, lookup

    def _call(
        self, keys: Sequence[str], cmd: Cmd, result: ResolutionResult, replay: bool
    ) -> OperatorCall:
        buffer = self.context.buffer
        text = buffer.text
        cur = buffer.cursor.cur
        return OperatorCall(
            keys=tuple(keys),
            cmd=cmd,
            br=Reader(text, cur, False),
            fr=Reader(text, cur),
            mode=self.name,
            match=result.match,
            replay=replay,
            dispatcher=self,
        )


class CommandMode(KeyedMode):
    name = "command"

    def on_enter(self, previous: str | None) -> None:
        super().on_enter(previous)
        self.context.bus.emit("command.start", previous)

    async def execute(
        self, keys: Sequence[str], *, replay: bool = False
    ) -> ActionOutcome:
        """Run ``keys`` as one command, or report that more keys are needed.

        With ``replay`` the command is being re-run by ``.`` and is not
        recorded as the new last command.
        """

        cmd = Cmd(keys)
        bad = cmd.number()
        if bad is not None:
            return bad
        looked_up = self._lookup(cmd)
        if isinstance(looked_up, NeedMore):
            return looked_up
        result, lookup = looked_up
        if result.status != "match" or result.match is None:
            if len(lookup) > 1:
                return unknown_command(lookup)
            return self._move(keys)

        buffer = self.context.buffer
        call = self._call(keys, cmd, result, replay)
        with buffer.transaction(f"command::{''.join(keys)}"):
            outcome = await run_action(self.context, result.match, call)
        if isinstance(outcome, ModeResult) and outcome.modified and not replay:
            self.context.repeat.record_command(
                tuple(keys), capture=outcome.switch_to == "insert"
            )
        return outcome

    def _move(self, keys: Sequence[str]) -> ActionOutcome:
        buffer = self.context.buffer
        text = buffer.text
        cursor = buffer.cursor.copy()
        cmd = Cmd(keys)
        bad = cmd.number()
        if bad is not None:
            return bad
        outcome = self.context.motions.resolve(
            cmd,
            Reader(text, cursor.cur, False),
            Reader(text, cursor.cur),
            cursor,
            mode=self.name,
        )
        if not isinstance(outcome, Ok):
            return outcome
        buffer.set_cursor(outcome.value.cur)
        return ModeResult(consumed=True, status="motion")


__all__ = ["CommandMode", "KeyedMode"]
