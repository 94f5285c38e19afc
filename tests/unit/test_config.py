"""Unit tests for settings."""

import pytest
from pydantic import ValidationError

from kindle.core.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch) -> None:
        """Test default values without environment overrides."""
        for name in ("KINDLE_LOG_LEVEL", "KINDLE_SCAN_WORKERS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.kindle_log_level == "INFO"
        assert settings.kindle_debug is False
        assert settings.kindle_log_dir is None
        assert settings.kindle_extension_group == "kindle.extensions"
        assert settings.kindle_extensions == []
        assert settings.kindle_task_group == "kindle.tasks"
        assert settings.kindle_source_globs == ["**/*.py"]
        assert settings.kindle_scan_workers == 8
        assert settings.kindle_compile_workers == 1

    def test_environment_override(self, monkeypatch) -> None:
        """Test that environment variables are read."""
        monkeypatch.setenv("KINDLE_SCAN_WORKERS", "2")
        monkeypatch.setenv("KINDLE_EXTENSIONS", '["app.audit:Audit"]')

        settings = Settings(_env_file=None)

        assert settings.kindle_scan_workers == 2
        assert settings.kindle_extensions == ["app.audit:Audit"]

    def test_worker_bounds(self) -> None:
        """Test that out-of-range worker counts are rejected."""
        with pytest.raises(ValidationError):
            Settings(kindle_scan_workers=0)

    def test_invalid_log_level(self) -> None:
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            Settings(kindle_log_level="LOUD")


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch) -> None:
        first = get_settings()
        monkeypatch.setenv("KINDLE_SCAN_WORKERS", "3")

        clear_settings_cache()

        assert get_settings() is not first
        assert get_settings().kindle_scan_workers == 3
