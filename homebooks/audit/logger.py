"""
Audit Logger

DESIGN DECISION: Every mutation of stored data is logged as a
structured event. This provides:
1. Traceability of what changed and when
2. Debugging capability when a stored blob turns out corrupt
3. A visible record of swallowed read failures

The audit logger:
- Writes structured JSON through structlog
- Never raises (a logging failure must not break a save)
- Supports correlation IDs to tie events from one user action together
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from homebooks.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output to stderr at the given level.

    structlog renders the JSON line; the stdlib handler only
    prints the message.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Pass one instance to the storage adapters and flows; they call
    log() for every event. Omit it and they log nothing extra.
    """

    def __init__(self, logger_name: str = "homebooks.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log call itself failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Broken handler/renderer: drop the event rather than the write
            return False

        return True

    def log_invoice_saved(
        self,
        invoice_id: str,
        invoice_number: str,
        total: str,
        is_new: bool,
    ) -> None:
        """Log invoice insert or replace."""
        self.log(AuditEventBuilder.invoice_saved(
            invoice_id=invoice_id,
            invoice_number=invoice_number,
            total=total,
            is_new=is_new,
        ))

    def log_storage_load_failed(self, storage_key: str, error_message: str) -> None:
        """Log a stored value that could not be parsed."""
        self.log(AuditEventBuilder.storage_load_failed(storage_key, error_message))

    def log_storage_write_failed(self, storage_key: str, error_message: str) -> None:
        """Log a failed collection write."""
        self.log(AuditEventBuilder.storage_write_failed(storage_key, error_message))

    def log_validation_failed(
        self,
        record_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected form."""
        self.log(AuditEventBuilder.validation_failed(
            record_type=record_type,
            issues=issues,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., a form submit).
    """
    return uuid4()
