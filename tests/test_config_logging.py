"""Tests for configuration validation and log output gating."""

import pytest

from tilefarm.config import Config
from tilefarm.logging_utils import (
    LOG_TAG_ERROR,
    LOG_TAG_SUCCESS,
    LOG_TAG_WARNING,
    Color,
    colored,
    log_error,
    log_info,
    log_success,
    log_warning,
)


def test_config_defaults_are_valid():
    Config.validate()
    assert "Tilefarm Configuration" in Config.display()


@pytest.mark.parametrize(
    "attribute, value",
    [
        ("AUTOSAVE_INTERVAL_MS", 0),
        ("GROWTH_REFRESH_MS", -1),
        ("AREA_SIZE", 0),
        ("STARTING_COINS", -10),
        ("SAVE_RETRY_ATTEMPTS", 0),
        ("LOG_LEVEL", "LOUD"),
    ],
)
def test_config_rejects_unusable_values(monkeypatch, attribute, value):
    monkeypatch.setattr(Config, attribute, value)
    with pytest.raises(ValueError):
        Config.validate()


def test_colored_respects_no_color(monkeypatch):
    monkeypatch.delenv("TILEFARM_NO_COLOR", raising=False)
    assert colored("hi", Color.GREEN).startswith(Color.GREEN.value)

    monkeypatch.setenv("TILEFARM_NO_COLOR", "1")
    assert colored("hi", Color.GREEN) == "hi"


def test_log_tags(monkeypatch, capsys):
    monkeypatch.setenv("TILEFARM_NO_COLOR", "1")
    monkeypatch.setattr(Config, "LOG_LEVEL", "INFO")

    log_success("[Saves] Game saved")
    log_warning("[Saves] version mismatch")
    log_error("[Saves] Failed")

    out = capsys.readouterr().out.splitlines()
    assert out == [
        f"{LOG_TAG_SUCCESS} [Saves] Game saved",
        f"{LOG_TAG_WARNING} [Saves] version mismatch",
        f"{LOG_TAG_ERROR} [Saves] Failed",
    ]


def test_log_level_suppresses_chatter(monkeypatch, capsys):
    monkeypatch.setenv("TILEFARM_NO_COLOR", "1")

    monkeypatch.setattr(Config, "LOG_LEVEL", "WARNING")
    log_info("hidden")
    log_success("hidden")
    log_warning("shown")

    monkeypatch.setattr(Config, "LOG_LEVEL", "ERROR")
    log_warning("hidden")
    log_error("always")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out
    assert "always" in out
