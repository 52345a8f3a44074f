"""
Storage Services Package

Provides the key-value store abstraction, its backends, and the two
storage adapters (invoices, wealth) built on top of it.
"""

from homebooks.services.storage.interface import (
    KeyValueStore,
    NotFoundError,
    QuotaExceededError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from homebooks.services.storage.backends import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from homebooks.services.storage.invoices import DEFAULT_INVOICE_KEY, InvoiceStorage
from homebooks.services.storage.wealth import DEFAULT_WEALTH_KEY, WealthStorage

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "NotFoundError",
    "QuotaExceededError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Backends
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Adapters
    "DEFAULT_INVOICE_KEY",
    "DEFAULT_WEALTH_KEY",
    "InvoiceStorage",
    "WealthStorage",
]
