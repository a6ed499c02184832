"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from finance_tracker.config import AppSettings, GeminiSettings, validate_all_settings


class TestAppSettings:
    """Tests for application settings."""

    def test_defaults(self, monkeypatch):
        for name in ["STORAGE_BACKEND", "DEFAULT_CURRENCY", "LOCAL_STORE_PATH"]:
            monkeypatch.delenv(name, raising=False)
        settings = AppSettings(_env_file=None)

        assert settings.storage_backend == "local"
        assert settings.default_currency == "BRL"
        assert settings.local_store_file.name == "finance_tracker.json"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("DEFAULT_CURRENCY", "EUR")
        settings = AppSettings(_env_file=None)

        assert settings.storage_backend == "memory"
        assert settings.default_currency == "EUR"

    @pytest.mark.parametrize("name, value", [
        ("STORAGE_BACKEND", "postgres"),
        ("DEFAULT_CURRENCY", "JPY"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_rejects_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)


class TestGeminiSettings:
    """Tests for assistant settings."""

    def test_api_key_required(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ValidationError):
            GeminiSettings()

    def test_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        monkeypatch.setenv("GEMINI_TEMPERATURE", "0.7")
        settings = GeminiSettings()
        assert settings.api_key == "secret"
        assert settings.temperature == 0.7


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_reports_missing_sections(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)

        results = validate_all_settings()

        assert results["app"] is True
        assert results["gemini"] is False
        assert results["google_sheets"] is False
        assert "gemini_error" in results
