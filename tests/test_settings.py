"""Tests for environment-driven configuration."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from shopledger.audit import configure_logging
from shopledger.config import (
    AppSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)
from shopledger.session import LedgerSession


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    """Tests for the local store configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SHOPLEDGER_STORAGE_STATE_KEY", raising=False)
        settings = StorageSettings()
        assert settings.state_key == "biashara_master_v1"
        assert settings.snapshots_key == "biashara_boutique_snapshots"
        assert settings.max_snapshots == 10

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHOPLEDGER_STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("SHOPLEDGER_STORAGE_MAX_SNAPSHOTS", "3")
        settings = StorageSettings()
        assert settings.data_dir == Path(tmp_path)
        assert settings.max_snapshots == 3

    def test_keys_must_differ(self):
        with pytest.raises(ValidationError):
            StorageSettings(state_key="same", snapshots_key="same")

    def test_max_snapshots_bounds(self):
        with pytest.raises(ValidationError):
            StorageSettings(max_snapshots=0)


class TestServiceSettings:
    """Tests for the optional peripheral services."""

    def test_gemini_key_is_optional(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert GeminiSettings().api_key is None

    def test_gemini_temperature_bounds(self):
        with pytest.raises(ValidationError):
            GeminiSettings(temperature=1.5)

    def test_sheets_requires_spreadsheet(self, monkeypatch, tmp_path):
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        with pytest.raises(ValidationError):
            GoogleSheetsSettings(credentials_path=str(tmp_path))

    def test_sheets_warns_on_missing_credentials(self, tmp_path):
        with pytest.warns(UserWarning):
            GoogleSheetsSettings(
                credentials_path=str(tmp_path / "missing.json"),
                spreadsheet_id="sheet-id",
            )


class TestAppSettings:
    """Tests for display settings."""

    def test_format_amount(self):
        settings = AppSettings(currency="KES")
        assert settings.format_amount(1234567.4) == "KES 1,234,567"

    def test_validate_all_reports_each_section(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


class TestDebugMode:
    """Tests for applying AppSettings.debug_mode to logging."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        yield
        configure_logging(debug=False)

    def test_session_from_settings_applies_debug_mode(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DEBUG_MODE", "true")
        monkeypatch.setenv("SHOPLEDGER_STORAGE_DATA_DIR", str(tmp_path))

        LedgerSession.from_settings()

        assert logging.getLogger().getEffectiveLevel() == logging.DEBUG

    def test_debug_mode_off_logs_at_info(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DEBUG_MODE", "false")
        monkeypatch.setenv("SHOPLEDGER_STORAGE_DATA_DIR", str(tmp_path))
        configure_logging(debug=True)

        LedgerSession.from_settings()

        assert logging.getLogger().getEffectiveLevel() == logging.INFO

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
