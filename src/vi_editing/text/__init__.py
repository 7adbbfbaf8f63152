"""Text scanning, motions, search, and reflow primitives."""

from .reader import Reader, is_punct, is_space, line_end, line_start

__all__ = ["Reader", "is_punct", "is_space", "line_end", "line_start"]
