"""
Configuration Management for Homebooks

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage keys, invoice defaults and mail delivery are all visible
in one place and validated on first access.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Backing store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HOMEBOOKS_STORAGE_",
        extra="ignore"
    )

    backend: Literal["memory", "file"] = Field(
        default="file",
        description="Which key-value backend to persist to"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per storage key"
    )

    # Storage keys (same names the browser build used)
    invoice_key: str = Field(
        default="invoice_history",
        min_length=1,
        description="Key holding the invoice collection"
    )
    wealth_key: str = Field(
        default="family-wealth-data",
        min_length=1,
        description="Key holding the wealth composite object"
    )

    @field_validator('invoice_key', 'wealth_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so no path separators."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"Invalid storage key: {v!r}")
        return v


class InvoiceSettings(BaseSettings):
    """Defaults applied to freshly drafted invoices."""

    model_config = SettingsConfigDict(
        env_prefix="HOMEBOOKS_INVOICE_",
        extra="ignore"
    )

    default_tax_rate: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Tax rate (percent) for new invoices"
    )
    default_due_days: int = Field(
        default=30,
        ge=0,
        le=365,
        description="Days between invoice date and due date"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol used when formatting amounts in emails"
    )
    default_business_name: str = Field(
        default="Your Business",
        description="Fallback business name for email subjects"
    )


class EmailSettings(BaseSettings):
    """SMTP delivery configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore"
    )

    host: Optional[str] = Field(
        default=None,
        description="SMTP server host. Unset means log-only delivery"
    )
    port: int = Field(
        default=587,
        ge=1,
        le=65535,
    )
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = Field(
        default=None,
        description="From address. Falls back to username"
    )
    use_tls: bool = True
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    @property
    def resolved_sender(self) -> Optional[str]:
        return self.sender or self.username


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def invoice(self) -> InvoiceSettings:
        return InvoiceSettings()

    @property
    def email(self) -> EmailSettings:
        return EmailSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    extra "<name>_error" entry for each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "invoice", "email", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
