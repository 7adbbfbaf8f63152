"""Mode manager, command grammar, and dispatch logic."""

from .operator_pipeline import (
    Cmd,
    ErrorKind,
    Invalid,
    NeedMore,
    Ok,
    OperatorCall,
    SessionError,
)
from .base_mode import KeyInput, Mode, ModeBus, ModeContext, ModeResult
from .keymap_helpers import key_to_token, parse_keys
from .command_mode import CommandMode, KeyedMode
from .visual_mode import VisualLineMode, VisualMode
from .insert_mode import InsertMode
from .mode_manager import ModeManager

__all__ = [
    "Cmd",
    "ErrorKind",
    "Invalid",
    "NeedMore",
    "Ok",
    "OperatorCall",
    "SessionError",
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "key_to_token",
    "parse_keys",
    "CommandMode",
    "KeyedMode",
    "VisualLineMode",
    "VisualMode",
    "InsertMode",
    "ModeManager",
]
