"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError as ModelValidationError

from expense_tracker.config import (
    AppSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self, monkeypatch):
        """Test the out-of-the-box storage configuration."""
        for name in ("BACKEND", "PATH", "KEY"):
            monkeypatch.delenv(f"LEDGER_STORAGE_{name}", raising=False)
        settings = StorageSettings()
        assert settings.backend == "file"
        assert settings.key == "transactions"
        assert settings.resolved_path == Path.home() / ".expense_tracker" / "ledger.json"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        """Test the LEDGER_STORAGE_ prefix."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("LEDGER_STORAGE_PATH", str(tmp_path / "x.json"))
        monkeypatch.setenv("LEDGER_STORAGE_KEY", "ledger")
        settings = StorageSettings()
        assert settings.backend == "memory"
        assert settings.resolved_path == tmp_path / "x.json"
        assert settings.key == "ledger"

    def test_unknown_backend_rejected(self, monkeypatch):
        """Test that only known backends are accepted."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "sheets")
        with pytest.raises(ModelValidationError):
            StorageSettings()


class TestAppSettings:
    """Tests for AppSettings."""

    def test_log_level_normalized(self, monkeypatch):
        """Test that log levels are upper-cased."""
        monkeypatch.setenv("LOG_LEVEL", " debug ")
        assert AppSettings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        """Test that unknown levels are rejected."""
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ModelValidationError):
            AppSettings()

    def test_debug_mode_forces_debug_level(self, monkeypatch):
        """Test that debug mode overrides the configured level."""
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.delenv("DEBUG_MODE", raising=False)
        assert AppSettings().effective_log_level == "WARNING"

        monkeypatch.setenv("DEBUG_MODE", "true")
        assert AppSettings().effective_log_level == "DEBUG"


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_all_valid(self, monkeypatch):
        """Test a clean environment."""
        monkeypatch.delenv("LEDGER_STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert validate_all_settings() == {"storage": True, "app": True}

    def test_reports_broken_section(self, monkeypatch):
        """Test that a bad section is reported, not raised."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "sheets")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
        assert results["app"] is True
