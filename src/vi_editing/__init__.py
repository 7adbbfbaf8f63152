"""Modal vi-style editing layered over a host text widget."""

from . import modes  # noqa: F401  (modes must load before keymaps and actions)
from . import actions, buffer, keymaps, runtime, text  # noqa: F401
from .session import EditingSession, create_session

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "keymaps",
    "modes",
    "runtime",
    "text",
    "EditingSession",
    "create_session",
]

__version__ = "0.1.0"
