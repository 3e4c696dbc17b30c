# tests/modpeek/core/test_settings.py
from __future__ import annotations
import logging

import pytest

from modpeek.core.settings import (
    DEFAULT_SETTINGS,
    SETTINGS_ENV_VAR,
    deepMerge,
    loadSettings,
    loadUserSettings,
    settings,
    settingsBool,
    userSettingsPath,
)


# -------- deepMerge --------

def test_deepMerge_nestedObjects() -> None:
    first = {"logging": {"level": "WARNING", "format": "dev"}, "output": {"alwaysPrint": False}}
    second = {"logging": {"level": "DEBUG"}, "extra": 1}
    merged = deepMerge(first, second)
    assert merged == {
        "logging": {"level": "DEBUG", "format": "dev"},
        "output": {"alwaysPrint": False},
        "extra": 1,
    }
    # inputs are left alone
    assert first["logging"]["level"] == "WARNING"


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ({"a": 1}, [1, 2], [1, 2]),
        ([1, 2], {"a": 1}, {"a": 1}),
        ({"a": {"b": 1}}, {"a": None}, {"a": None}),
        ({"a": [1]}, {"a": [2, 3]}, {"a": [2, 3]}),
        ("x", "y", "y"),
    ],
)
def test_deepMerge_nonObjectsReplace(first, second, expected) -> None:
    assert deepMerge(first, second) == expected


# -------- loading --------

def test_defaultSettings() -> None:
    assert DEFAULT_SETTINGS["logging"] == {"level": "WARNING", "format": "dev"}
    assert DEFAULT_SETTINGS["output"] == {"alwaysPrint": False}


def test_userSettingsPath_honorsEnvironment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    target = tmp_path / "custom.json5"
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(target))
    assert userSettingsPath() == target


def test_userSettingsPath_defaultsToHome(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert userSettingsPath() == tmp_path / ".modpeek" / "modpeek.json5"


def test_loadUserSettings_missingFile(tmp_path) -> None:
    assert loadUserSettings(tmp_path / "nope.json5") == {}


def test_loadUserSettings_json5(tmp_path) -> None:
    path = tmp_path / "modpeek.json5"
    path.write_text("{ // comment\n output: { alwaysPrint: true, }, }", encoding="utf-8")
    assert loadUserSettings(path) == {"output": {"alwaysPrint": True}}


@pytest.mark.parametrize("text", ["{ broken", "[1, 2]"])
def test_loadUserSettings_unusableFileIsIgnored(tmp_path, caplog: pytest.LogCaptureFixture, text: str) -> None:
    path = tmp_path / "modpeek.json5"
    path.write_text(text, encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="modpeek.core.settings"):
        assert loadUserSettings(path) == {}
    assert str(path) in caplog.text


# -------- accessors --------

def test_settings_defaults() -> None:
    assert settings("logging.level") == "WARNING"
    assert settings("logging.missing", "fallback") == "fallback"
    assert settingsBool("output.alwaysPrint") is False


def test_settings_userOverrides(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    path = tmp_path / "modpeek.json5"
    path.write_text('{ logging: { level: "DEBUG" }, output: { alwaysPrint: 1 } }', encoding="utf-8")
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
    loadSettings.cache_clear()

    assert settings("logging.level") == "DEBUG"
    assert settings("logging.format") == "dev"
    assert settingsBool("output.alwaysPrint") is True
    assert settingsBool("output.missing", True) is True


def test_loadSettings_isCached(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    first = loadSettings()
    path = tmp_path / "later.json5"
    path.write_text('{ logging: { level: "DEBUG" } }', encoding="utf-8")
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
    assert loadSettings() is first
