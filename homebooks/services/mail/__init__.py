"""Invoice email delivery package."""

from homebooks.services.mail.mailer import (
    EmailDeliveryError,
    EmailError,
    EmailTransport,
    EmailValidationError,
    InvoiceEmail,
    InvoiceMailer,
    LoggingEmailTransport,
    SmtpEmailTransport,
    default_transport,
)

__all__ = [
    "EmailDeliveryError",
    "EmailError",
    "EmailTransport",
    "EmailValidationError",
    "InvoiceEmail",
    "InvoiceMailer",
    "LoggingEmailTransport",
    "SmtpEmailTransport",
    "default_transport",
]
