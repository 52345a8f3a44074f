"""
Tests for configuration loading
"""

import pytest
from pathlib import Path

from homebooks.config import (
    AppSettings,
    EmailSettings,
    InvoiceSettings,
    Settings,
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
        """Test the storage defaults."""
        monkeypatch.delenv("HOMEBOOKS_STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("HOMEBOOKS_STORAGE_DATA_DIR", raising=False)
        settings = StorageSettings()
        assert settings.backend == "file"
        assert settings.data_dir == Path("data")
        assert settings.invoice_key == "invoice_history"
        assert settings.wealth_key == "family-wealth-data"

    def test_environment_override(self, monkeypatch):
        """Test environment variable overrides."""
        monkeypatch.setenv("HOMEBOOKS_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("HOMEBOOKS_STORAGE_INVOICE_KEY", "invoices")
        settings = StorageSettings()
        assert settings.backend == "memory"
        assert settings.invoice_key == "invoices"

    def test_rejects_unknown_backend(self):
        """Test that an unknown backend is rejected."""
        with pytest.raises(ValueError):
            StorageSettings(backend="s3")

    def test_rejects_path_in_key(self):
        """Test that a key containing a path is rejected."""
        with pytest.raises(ValueError):
            StorageSettings(wealth_key="../wealth")


class TestInvoiceSettings:
    """Tests for InvoiceSettings."""

    def test_defaults(self):
        """Test the invoice defaults."""
        settings = InvoiceSettings()
        assert settings.default_tax_rate == 10.0
        assert settings.default_due_days == 30
        assert settings.currency_symbol == "$"

    def test_tax_rate_bounds(self):
        """Test that the tax rate must be a percentage."""
        with pytest.raises(ValueError):
            InvoiceSettings(default_tax_rate=120)


class TestEmailSettings:
    """Tests for EmailSettings."""

    def test_unconfigured_by_default(self, monkeypatch):
        """Test that email is unconfigured without a host."""
        monkeypatch.delenv("SMTP_HOST", raising=False)
        assert not EmailSettings().is_configured

    def test_sender_falls_back_to_username(self):
        """Test that the username is the fallback sender."""
        settings = EmailSettings(host="smtp.test", username="me@test.example")
        assert settings.is_configured
        assert settings.resolved_sender == "me@test.example"

    def test_explicit_sender_wins(self):
        """Test that an explicit sender takes precedence."""
        settings = EmailSettings(username="me@test.example", sender="books@test.example")
        assert settings.resolved_sender == "books@test.example"


class TestAppSettings:
    """Tests for AppSettings."""

    def test_log_level_normalized(self):
        """Test that the log level is normalised."""
        assert AppSettings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level(self):
        """Test that an unknown log level is rejected."""
        with pytest.raises(ValueError):
            AppSettings(log_level="LOUD")

    def test_only_log_level_is_configurable(self):
        """Test that log_level is the only application setting."""
        assert set(AppSettings.model_fields) == {"log_level"}


class TestSettings:
    """Tests for the root settings container."""

    def test_get_settings_is_cached(self):
        """Test that get_settings returns one cached instance."""
        assert get_settings() is get_settings()

    def test_sub_settings(self):
        """Test that every settings group is loaded."""
        settings = Settings()
        assert isinstance(settings.storage, StorageSettings)
        assert isinstance(settings.invoice, InvoiceSettings)
        assert isinstance(settings.email, EmailSettings)
        assert isinstance(settings.app, AppSettings)

    def test_validate_all_settings(self):
        """Test validation of all settings groups."""
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["invoice"] is True

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        """Test that an invalid group is reported, not raised."""
        monkeypatch.setenv("HOMEBOOKS_STORAGE_BACKEND", "s3")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
