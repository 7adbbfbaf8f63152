"""Textual host: ``TextArea`` surface, key adapter, prompt and demo app."""

from .controller import TextualUIHooks, TextualViAdapter, key_input_from_event
from .prompt import TextualPrompt
from .surface import TextAreaSurface

__all__ = [
    "TextAreaSurface",
    "TextualPrompt",
    "TextualUIHooks",
    "TextualViAdapter",
    "key_input_from_event",
]
