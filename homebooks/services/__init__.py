"""Services package."""

from homebooks.services.mail import (
    EmailDeliveryError,
    EmailTransport,
    EmailValidationError,
    InvoiceEmail,
    InvoiceMailer,
    LoggingEmailTransport,
    SmtpEmailTransport,
)
from homebooks.services.storage import (
    InMemoryKeyValueStore,
    InvoiceStorage,
    JsonFileKeyValueStore,
    KeyValueStore,
    NotFoundError,
    QuotaExceededError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    WealthStorage,
)

__all__ = [
    # Email services
    "EmailDeliveryError",
    "EmailTransport",
    "EmailValidationError",
    "InvoiceEmail",
    "InvoiceMailer",
    "LoggingEmailTransport",
    "SmtpEmailTransport",
    # Storage services
    "InMemoryKeyValueStore",
    "InvoiceStorage",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "NotFoundError",
    "QuotaExceededError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "WealthStorage",
]
