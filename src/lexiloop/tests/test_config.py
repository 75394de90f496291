"""Tests for configuration settings."""
import pytest

from lexiloop.config import (
    DATA_DIR,
    LearningSettings,
    Settings,
    ensure_directories,
    settings,
)


def test_data_directory_exists():
    """Test that the data directory is created."""
    ensure_directories()
    assert DATA_DIR.exists()


def test_settings_defaults():
    """Test default settings values."""
    assert settings.learning.min_pool_size == 20
    assert settings.learning.lesson_size == 7
    assert settings.learning.practice_size == 10
    assert settings.learning.flashcard_size == 20
    assert settings.learning.review_window_days == 7
    assert settings.learning.free_daily_limit == 5
    assert settings.database.url.startswith("sqlite:///")


def test_database_url_from_env(monkeypatch):
    """Test that the database url can be overridden by environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite:///other.db")
    assert Settings().database.url == "sqlite:///other.db"


@pytest.mark.parametrize(
    "field, value",
    [
        ("min_pool_size", 0),
        ("lesson_size", 0),
        ("review_window_days", -1),
        ("free_daily_limit", -1),
    ],
)
def test_validate_rejects_bad_values(field, value):
    learning = LearningSettings()
    setattr(learning, field, value)
    with pytest.raises(ValueError):
        Settings(learning=learning).validate()
