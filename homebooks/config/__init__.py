"""Configuration package."""

from homebooks.config.settings import (
    AppSettings,
    EmailSettings,
    InvoiceSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "EmailSettings",
    "InvoiceSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
