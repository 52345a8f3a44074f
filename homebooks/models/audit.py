"""
Audit Models for Homebooks

Every mutation of stored data, and every storage or delivery
failure, produces one AuditEvent. Events are written to the
structured log; they are never stored alongside the records.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from homebooks.models.common import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Invoices
    INVOICE_SAVED = "invoice_saved"
    INVOICE_STATUS_CHANGED = "invoice_status_changed"
    INVOICE_DELETED = "invoice_deleted"

    # Wealth records
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"

    # Input
    VALIDATION_FAILED = "validation_failed"

    # Storage
    STORAGE_LOAD_FAILED = "storage_load_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"

    # Email
    EMAIL_SENT = "email_sent"
    EMAIL_FAILED = "email_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Kind of record (e.g., 'invoice', 'goal')"
    )
    entity_id: Optional[str] = None

    # Ties together events from one user action
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.invoice_saved(invoice_id, number, total)
        event = AuditEventBuilder.record_deleted("goal", goal_id)
    """

    @staticmethod
    def invoice_saved(
        invoice_id: str,
        invoice_number: str,
        total: str,
        is_new: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_SAVED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {invoice_number} {'created' if is_new else 'updated'}",
            details={
                "invoice_number": invoice_number,
                "total": total,
                "is_new": is_new,
            },
        )

    @staticmethod
    def invoice_status_changed(
        invoice_id: str,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_STATUS_CHANGED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice marked as {new_status}",
            details={
                "old_status": old_status,
                "new_status": new_status,
            },
        )

    @staticmethod
    def invoice_deleted(invoice_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_DELETED,
            entity_type="invoice",
            entity_id=invoice_id,
            description="Invoice deleted",
        )

    @staticmethod
    def record_added(entity_type: str, entity_id: str, label: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Added {entity_type}: {label}",
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Updated {entity_type}",
            details={"fields": fields},
        )

    @staticmethod
    def record_deleted(entity_type: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Deleted {entity_type}",
        )

    @staticmethod
    def validation_failed(
        record_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            correlation_id=correlation_id,
            description=f"{record_type} form rejected with {len(issues)} issue(s)",
            details={"issues": issues},
        )

    @staticmethod
    def storage_load_failed(storage_key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Could not read '{storage_key}', treating as empty",
            details={"storage_key": storage_key},
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(storage_key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Failed to write '{storage_key}'",
            details={"storage_key": storage_key},
            error_message=error_message,
        )

    @staticmethod
    def email_sent(invoice_id: Optional[str], recipient: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMAIL_SENT,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice emailed to {recipient}",
            details={"recipient": recipient},
        )

    @staticmethod
    def email_failed(
        invoice_id: Optional[str],
        recipient: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMAIL_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Failed to email invoice to {recipient}",
            details={"recipient": recipient},
            error_message=error_message,
        )
