from __future__ import annotations

import pytest

from vi_editing.runtime import telemetry
from vi_editing.runtime.settings import DEFAULT_LINE_PREFIXES, EditorSettings


def test_defaults() -> None:
    settings = EditorSettings()

    assert settings.wrap_width == 78
    assert settings.line_prefixes == DEFAULT_LINE_PREFIXES
    assert settings.insert_tab is True
    assert settings.debug is False


def test_from_env_reads_prefixed_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VI_EDITING_WRAP_WIDTH", "40")
    monkeypatch.setenv("VI_EDITING_LINE_PREFIXES", "--, ;")
    monkeypatch.setenv("VI_EDITING_DEBUG", "yes")
    monkeypatch.setenv("VI_EDITING_INSERT_TAB", "0")

    settings = EditorSettings.from_env()

    assert settings.wrap_width == 40
    assert settings.line_prefixes == ("--", ";")
    assert settings.debug is True
    assert settings.insert_tab is False


def test_from_env_ignores_malformed_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VI_EDITING_PAGE_LINES", "many")
    monkeypatch.delenv("VI_EDITING_WRAP_WIDTH", raising=False)

    settings = EditorSettings.from_env()

    assert settings.page_lines == 20
    assert settings.wrap_width == 78


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValueError):
        EditorSettings(wrap_width=1)
    with pytest.raises(ValueError):
        EditorSettings(page_lines=0)


def test_with_overrides_returns_new_settings() -> None:
    settings = EditorSettings()

    debug = settings.with_overrides(debug=True, wrap_width=60)

    assert debug.debug is True
    assert debug.wrap_width == 60
    assert settings.debug is False


def test_env_flag_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VI_EDITING_SAMPLE", "On")
    assert telemetry.env_flag("SAMPLE", False) is True

    monkeypatch.setenv("VI_EDITING_SAMPLE", "off")
    assert telemetry.env_flag("SAMPLE", True) is False

    monkeypatch.delenv("VI_EDITING_SAMPLE")
    assert telemetry.env_flag("SAMPLE", True) is True


def test_unknown_log_preset_is_rejected() -> None:
    assert telemetry.PRESETS == ("development", "production", "performance")

    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")
