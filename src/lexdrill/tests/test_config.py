"""Tests for configuration settings."""
from datetime import date

import pytest

from lexdrill.config import SchedulerSettings, Settings, settings


def test_settings_defaults():
    """Test default scheduling values."""
    assert settings.scheduler.session_size == 20
    assert settings.scheduler.wrong_ratio == 0.4
    assert settings.scheduler.new_ratio == 0.4
    assert settings.scheduler.stale_after_days == 7
    assert settings.scheduler.review_intervals == [1, 3, 7]
    assert settings.scheduler.never_correct_date == date(2000, 1, 1)


def test_settings_from_env(monkeypatch):
    """Test that settings can be overridden by environment variables."""
    monkeypatch.setenv("SESSION_SIZE", "30")
    monkeypatch.setenv("STALE_AFTER_DAYS", "14")

    # Field defaults are read when the module is imported, so reload it
    import importlib

    import lexdrill.config as config

    reloaded = importlib.reload(config)
    try:
        assert reloaded.Settings().scheduler.session_size == 30
        assert reloaded.Settings().scheduler.stale_after_days == 14
    finally:
        monkeypatch.undo()
        importlib.reload(config)


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"session_size": 0}, "SESSION_SIZE"),
        ({"wrong_ratio": 1.5}, "WRONG_RATIO"),
        ({"new_ratio": -0.1}, "NEW_RATIO"),
        ({"wrong_ratio": 0.6, "new_ratio": 0.6}, "cannot exceed 1"),
        ({"stale_after_days": -1}, "STALE_AFTER_DAYS"),
        ({"review_intervals": []}, "cannot be empty"),
        ({"review_intervals": [1, 3, 3]}, "strictly increasing"),
    ],
)
def test_validate_rejects_bad_values(overrides, message):
    invalid = Settings(scheduler=SchedulerSettings(**overrides))
    with pytest.raises(ValueError, match=message):
        invalid.validate()
