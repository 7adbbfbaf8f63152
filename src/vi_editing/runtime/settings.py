"""Session settings with environment overrides."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Tuple

from .telemetry import env_flag, env_value

DEFAULT_LINE_PREFIXES: Tuple[str, ...] = ("#", ">", "//")


def _env_int(name: str, fallback: int) -> int:
    raw = env_value(name)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


@dataclass(frozen=True, slots=True)
class EditorSettings:
    """Knobs shared by every mode of one editing session."""

    wrap_width: int = 78
    line_prefixes: Tuple[str, ...] = field(default=DEFAULT_LINE_PREFIXES)
    scroll_line_height: int = 20
    page_lines: int = 20
    insert_tab: bool = True
    debug: bool = False

    def __post_init__(self) -> None:
        if self.wrap_width < 2:
            raise ValueError("wrap_width must be at least 2")
        if self.scroll_line_height <= 0 or self.page_lines <= 0:
            raise ValueError("scroll sizes must be positive")

    @classmethod
    def from_env(cls) -> "EditorSettings":
        defaults = cls()
        prefixes = env_value("LINE_PREFIXES")
        return cls(
            wrap_width=_env_int("WRAP_WIDTH", defaults.wrap_width),
            line_prefixes=(
                tuple(p.strip() for p in prefixes.split(",") if p.strip())
                if prefixes is not None
                else defaults.line_prefixes
            ),
            scroll_line_height=_env_int(
                "SCROLL_LINE_HEIGHT", defaults.scroll_line_height
            ),
            page_lines=_env_int("PAGE_LINES", defaults.page_lines),
            insert_tab=env_flag("INSERT_TAB", defaults.insert_tab),
            debug=env_flag("DEBUG", defaults.debug),
        )

    def with_overrides(self, **changes: object) -> "EditorSettings":
        return replace(self, **changes)  # type: ignore[arg-type]


__all__ = ["DEFAULT_LINE_PREFIXES", "EditorSettings"]
