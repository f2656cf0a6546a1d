"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from bullpen.config.settings import Settings, get_database_url


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_PROGRESS_DENOMINATOR", raising=False)
        monkeypatch.delenv("RECENT_THROWS_LIMIT", raising=False)

        settings = Settings(_env_file=None)

        assert settings.default_progress_denominator == 30
        assert settings.recent_throws_limit == 5
        assert settings.service_timeout_seconds == 10.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PROGRESS_DENOMINATOR", "40")
        monkeypatch.setenv("CALENDAR_SERVICE_URL", "https://calendar.example.com/api/")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.default_progress_denominator == 40
        assert settings.calendar_service_url == "https://calendar.example.com/api"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        assert Settings(_env_file=None).log_level == "INFO"

    def test_non_positive_denominator_rejected(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PROGRESS_DENOMINATOR", "0")

        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)


class TestDatabaseUrl:
    def test_env_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://bullpen@db/bullpen")

        assert get_database_url() == "postgresql://bullpen@db/bullpen"

    def test_sqlite_fallback(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        url = get_database_url()

        assert url.startswith("sqlite:///")
        assert url.endswith("bullpen.db")
