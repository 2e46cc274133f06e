"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from remotesync.core.config import Settings


def test_urls_and_log_level_are_normalized():
    """Trailing slashes are stripped and log levels upper-cased."""
    settings = Settings(
        GITHUB_API_URL="https://ghe.example.com/api/v3/",
        GOOGLE_DRIVE_UPLOAD_URL="https://drive.example.com/upload/",
        LOG_LEVEL="debug",
    )

    assert settings.GITHUB_API_URL == "https://ghe.example.com/api/v3"
    assert settings.GOOGLE_DRIVE_UPLOAD_URL == "https://drive.example.com/upload"
    assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("delay", [-0.1, 1.5, 30])
def test_settle_delay_is_bounded(delay):
    """The post-create wait can never exceed one second."""
    with pytest.raises(ValidationError):
        Settings(SETTLE_DELAY_SECONDS=delay)


def test_defaults():
    """Defaults match the public provider endpoints."""
    settings = Settings(
        GITHUB_API_URL="https://api.github.com",
        DRIVE_MULTIPART_BOUNDARY="-------314159265358979323846",
    )

    assert settings.GITHUB_API_VERSION == "2022-11-28"
    assert settings.GITHUB_REPO_AUTO_INIT is True
    assert settings.GITHUB_REPO_PRIVATE is False
    assert settings.DRIVE_HISTORY_FILE_NAME == "search_history.json"
    assert 0 <= settings.SETTLE_DELAY_SECONDS <= 1.0
