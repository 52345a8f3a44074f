"""
Invoice Email Delivery

DESIGN DECISION: Sending is a pluggable capability. The mailer composes
and validates the message; an EmailTransport does the delivery and
reports success or failure.

Transports:
1. LoggingEmailTransport - logs the message and reports success.
   The default when no SMTP host is configured.
2. SmtpEmailTransport - real delivery over SMTP, retried with backoff.
"""

import re
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage as MimeMessage
from typing import Optional

import structlog
from pydantic import BaseModel, Field
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from homebooks.config import EmailSettings, InvoiceSettings, get_settings
from homebooks.models.invoice import Invoice


logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailError(Exception):
    """Base exception for email delivery."""
    pass


class EmailValidationError(EmailError):
    """The message is missing a recipient or subject."""
    pass


class EmailDeliveryError(EmailError):
    """The transport could not deliver the message."""
    pass


class InvoiceEmail(BaseModel):
    """A composed invoice email, editable before sending."""

    to: str = ""
    subject: str = ""
    body: str = ""
    invoice_id: Optional[str] = Field(
        default=None,
        description="Invoice this email is about"
    )


class EmailTransport(ABC):
    """Delivers a composed email."""

    @abstractmethod
    def send(self, message: InvoiceEmail) -> bool:
        """
        Deliver a message.

        Returns:
            True if delivered

        Raises:
            EmailDeliveryError: If delivery failed
        """
        pass


class LoggingEmailTransport(EmailTransport):
    """Logs instead of sending. Always succeeds."""

    def __init__(self):
        self.sent: list[InvoiceEmail] = []

    def send(self, message: InvoiceEmail) -> bool:
        logger.info(
            "email_not_sent_logging_transport",
            to=message.to,
            subject=message.subject,
            invoice_id=message.invoice_id,
        )
        self.sent.append(message)
        return True


class SmtpEmailTransport(EmailTransport):
    """Sends through an SMTP server configured via SMTP_* settings."""

    def __init__(self, settings: Optional[EmailSettings] = None):
        self._settings = settings or get_settings().email
        if not self._settings.is_configured:
            raise EmailDeliveryError("SMTP host is not configured")
        if not self._settings.resolved_sender:
            raise EmailDeliveryError("No sender configured. Set SMTP_SENDER or SMTP_USERNAME")

    def _build(self, message: InvoiceEmail) -> MimeMessage:
        mime = MimeMessage()
        mime["From"] = self._settings.resolved_sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content(message.body)
        return mime

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((smtplib.SMTPException, OSError)),
        reraise=True,
    )
    def _deliver(self, mime: MimeMessage) -> None:
        settings = self._settings
        with smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout_seconds) as smtp:
            if settings.use_tls:
                smtp.starttls()
            if settings.username and settings.password:
                smtp.login(settings.username, settings.password)
            smtp.send_message(mime)

    def send(self, message: InvoiceEmail) -> bool:
        try:
            self._deliver(self._build(message))
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery failed: {e}") from e
        logger.info("email_sent", to=message.to, host=self._settings.host)
        return True


def default_transport(settings: Optional[EmailSettings] = None) -> EmailTransport:
    """SMTP when a host is configured, otherwise log-only."""
    settings = settings or get_settings().email
    if settings.is_configured:
        return SmtpEmailTransport(settings)
    return LoggingEmailTransport()


class InvoiceMailer:
    """Composes invoice emails and hands them to a transport."""

    def __init__(
        self,
        transport: Optional[EmailTransport] = None,
        invoice_settings: Optional[InvoiceSettings] = None,
    ):
        self._transport = transport or LoggingEmailTransport()
        self._invoice_settings = invoice_settings or InvoiceSettings()

    def compose(self, invoice: Invoice) -> InvoiceEmail:
        """Default message, pre-filled the way the send dialog opens."""
        business = invoice.business_name or self._invoice_settings.default_business_name
        client = invoice.client_name or "Valued Client"
        currency = self._invoice_settings.currency_symbol
        due = invoice.due_date

        body = (
            f"Dear {client},\n\n"
            f"Please find attached your invoice #{invoice.invoice_number} "
            f"for the amount of {currency}{invoice.total:.2f}.\n\n"
            f"Payment is due by {due:%B} {due.day}, {due.year}.\n\n"
            f"Thank you for your business!\n\n"
            f"Best regards,\n"
            f"{business}"
        )
        return InvoiceEmail(
            to=invoice.client_email,
            subject=f"Invoice {invoice.invoice_number} from {business}",
            body=body,
            invoice_id=invoice.id,
        )

    @staticmethod
    def validate(message: InvoiceEmail) -> None:
        """Raise EmailValidationError if the message cannot be sent."""
        if not message.to.strip():
            raise EmailValidationError("Please enter a recipient email address")
        if not EMAIL_PATTERN.match(message.to.strip()):
            raise EmailValidationError(f"Invalid recipient email address: {message.to}")
        if not message.subject.strip():
            raise EmailValidationError("Please enter an email subject")

    def send(self, message: InvoiceEmail) -> bool:
        """
        Validate, then deliver.

        Raises:
            EmailValidationError: Missing/invalid recipient or subject
            EmailDeliveryError: Transport failure
        """
        self.validate(message)
        return self._transport.send(message)
