"""
Main Orchestrator for Homebooks

Ties storage, validation, email and audit together into the user
actions a front end calls:
1. Invoices (draft → save → mark paid/unpaid → email → delete)
2. Wealth records (form submit → validate → add; update; delete)

DESIGN DECISION: Flows never raise into the UI. Each action returns
an ActionResult whose message can be shown as-is. Storage and email
exceptions are caught here, at the outermost boundary, and nowhere else.
"""

from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

import structlog

from homebooks.audit import AuditLogger, configure_logging, create_correlation_id
from homebooks.config import Settings, get_settings
from homebooks.models.audit import AuditEventBuilder
from homebooks.models.common import ActionResult, RecordModel, utc_now
from homebooks.models.invoice import Invoice, InvoiceStatus, new_invoice
from homebooks.models.wealth import (
    FamilyMemberCreate,
    FamilyMemberPatch,
    IncomeStreamCreate,
    IncomeStreamPatch,
    InvestmentCreate,
    InvestmentPatch,
    OpportunityCreate,
    OpportunityPatch,
    WealthData,
    WealthGoalCreate,
    WealthGoalPatch,
    WealthStats,
)
from homebooks.queries import InvoiceHistory, InvoiceHistoryQuery, InvoiceHistoryResult
from homebooks.services.mail import (
    EmailDeliveryError,
    EmailValidationError,
    InvoiceEmail,
    InvoiceMailer,
    default_transport,
)
from homebooks.services.storage import (
    InMemoryKeyValueStore,
    InvoiceStorage,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageError,
    WealthStorage,
)
from homebooks.validation import RecordValidator


logger = structlog.get_logger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


class InvoiceFlow:
    """
    Orchestrates invoice actions.

    Flow:
    1. Draft → new_draft() with configured tax rate and due days
    2. Edit → Invoice.with_item / update_item / with_tax_rate
    3. Save → warnings reported, never blocking
    4. Track → mark paid / unpaid, history with read-time overdue
    5. Send → compose, edit, send through the mail transport
    """

    def __init__(
        self,
        storage: InvoiceStorage,
        validator: Optional[RecordValidator] = None,
        mailer: Optional[InvoiceMailer] = None,
        audit_logger: Optional[AuditLogger] = None,
        tax_rate: float = 10.0,
        due_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage
        self._validator = validator or RecordValidator()
        self._mailer = mailer or InvoiceMailer()
        self._audit_logger = audit_logger
        self._history = InvoiceHistory(storage)
        self._tax_rate = tax_rate
        self._due_days = due_days
        self._clock = clock

    def new_draft(self) -> Invoice:
        """Blank invoice as the creator form opens."""
        return new_invoice(
            tax_rate=self._tax_rate,
            due_days=self._due_days,
            now=self._clock(),
        )

    def save_invoice(self, invoice: Invoice) -> ActionResult:
        """Save (insert or replace) an invoice."""
        validation = self._validator.validate_invoice(invoice)

        try:
            stored = self._storage.save(
                invoice.model_copy(update={"updated_at": self._clock()})
            )
        except StorageError as e:
            logger.error("invoice_save_failed", invoice_id=invoice.id, error=str(e))
            return ActionResult(
                success=False,
                message="Failed to save invoice",
                record_id=invoice.id,
            )

        return ActionResult(
            success=True,
            message="Invoice saved successfully!",
            record_id=stored.id,
            issues=validation.messages,
        )

    def mark_status(
        self,
        invoice_id: str,
        status: Union[InvoiceStatus, str],
    ) -> ActionResult:
        """Mark an invoice paid, unpaid or overdue."""
        try:
            status = InvoiceStatus(status)
        except ValueError:
            return ActionResult(success=False, message=f"Unknown invoice status: {status}", record_id=invoice_id)
        try:
            updated = self._storage.update_status(invoice_id, status)
        except StorageError as e:
            logger.error("invoice_status_failed", invoice_id=invoice_id, error=str(e))
            return ActionResult(
                success=False,
                message="Failed to update invoice status",
                record_id=invoice_id,
            )

        if updated is None:
            return ActionResult(
                success=False,
                message="Invoice not found",
                record_id=invoice_id,
            )
        return ActionResult(
            success=True,
            message=f"Invoice marked as {status.value}",
            record_id=invoice_id,
        )

    def delete_invoice(self, invoice_id: str) -> ActionResult:
        try:
            removed = self._storage.delete(invoice_id)
        except StorageError as e:
            logger.error("invoice_delete_failed", invoice_id=invoice_id, error=str(e))
            return ActionResult(
                success=False,
                message="Failed to delete invoice",
                record_id=invoice_id,
            )

        if not removed:
            return ActionResult(
                success=False,
                message="Invoice not found",
                record_id=invoice_id,
            )
        return ActionResult(
            success=True,
            message="Invoice deleted successfully",
            record_id=invoice_id,
        )

    def history(
        self,
        query: Optional[InvoiceHistoryQuery] = None,
    ) -> InvoiceHistoryResult:
        """Filtered, newest-first invoice list with stats."""
        return self._history.execute(query, now=self._clock())

    def compose_email(self, invoice: Invoice) -> InvoiceEmail:
        """Pre-filled message for the send dialog."""
        return self._mailer.compose(invoice)

    def send_invoice_email(self, message: InvoiceEmail) -> ActionResult:
        """Validate and deliver a (possibly user-edited) invoice email."""
        try:
            self._mailer.send(message)
        except EmailValidationError as e:
            return ActionResult(
                success=False,
                message=str(e),
                record_id=message.invoice_id,
            )
        except EmailDeliveryError as e:
            logger.error("invoice_email_failed", invoice_id=message.invoice_id, error=str(e))
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.email_failed(
                    invoice_id=message.invoice_id,
                    recipient=message.to,
                    error_message=str(e),
                ))
            return ActionResult(
                success=False,
                message="Failed to send email. Please try again.",
                record_id=message.invoice_id,
            )

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.email_sent(
                invoice_id=message.invoice_id,
                recipient=message.to,
            ))
        return ActionResult(
            success=True,
            message="Invoice sent successfully!",
            record_id=message.invoice_id,
        )


# record_type -> (create model, patch model, user-facing noun)
WEALTH_RECORDS: dict[str, tuple[type[RecordModel], type[RecordModel], str]] = {
    "income_stream": (IncomeStreamCreate, IncomeStreamPatch, "income stream"),
    "investment": (InvestmentCreate, InvestmentPatch, "investment"),
    "goal": (WealthGoalCreate, WealthGoalPatch, "goal"),
    "opportunity": (OpportunityCreate, OpportunityPatch, "opportunity"),
    "family_member": (FamilyMemberCreate, FamilyMemberPatch, "family member"),
}


class WealthFlow:
    """
    Orchestrates the wealth dashboard's form submissions.

    Flow per form:
    1. Validate raw input (nothing is written on failure)
    2. Build the typed Create payload
    3. Add through WealthStorage (id assigned there)
    4. Report success or failure as an ActionResult
    """

    def __init__(
        self,
        storage: WealthStorage,
        validator: Optional[RecordValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or RecordValidator()
        self._audit_logger = audit_logger

        self._adders = {
            "income_stream": storage.add_income_stream,
            "investment": storage.add_investment,
            "goal": storage.add_goal,
            "opportunity": storage.add_opportunity,
            "family_member": storage.add_family_member,
        }
        self._updaters = {
            "income_stream": storage.update_income_stream,
            "investment": storage.update_investment,
            "goal": storage.update_goal,
            "opportunity": storage.update_opportunity,
            "family_member": storage.update_family_member,
        }
        self._deleters = {
            "income_stream": storage.delete_income_stream,
            "investment": storage.delete_investment,
            "goal": storage.delete_goal,
            "opportunity": storage.delete_opportunity,
            "family_member": storage.delete_family_member,
        }

    @staticmethod
    def _record_info(record_type: str):
        try:
            return WEALTH_RECORDS[record_type]
        except KeyError:
            raise ValueError(f"Unknown record type: {record_type}") from None

    def submit(self, record_type: str, form: Mapping[str, Any]) -> ActionResult:
        """Validate a form and add the record it describes."""
        create_cls, _, noun = self._record_info(record_type)
        correlation_id = create_correlation_id()

        validation = self._validator.validate_form(record_type, form)
        if not validation.is_valid:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(
                    record_type=record_type,
                    issues=[issue.model_dump() for issue in validation.issues],
                    correlation_id=correlation_id,
                )
            return ActionResult(
                success=False,
                message=REQUIRED_FIELDS_MESSAGE,
                issues=validation.messages,
            )

        payload = create_cls.model_validate(validation.cleaned)
        try:
            record = self._adders[record_type](payload)
        except StorageError as e:
            logger.error(
                "wealth_record_add_failed",
                record_type=record_type,
                correlation_id=str(correlation_id),
                error=str(e),
            )
            return ActionResult(success=False, message=f"Failed to add {noun}")

        return ActionResult(
            success=True,
            message=f"{noun.capitalize()} added successfully!",
            record_id=record.id,
        )

    def add_income_stream(self, form: Mapping[str, Any]) -> ActionResult:
        return self.submit("income_stream", form)

    def add_investment(self, form: Mapping[str, Any]) -> ActionResult:
        return self.submit("investment", form)

    def add_goal(self, form: Mapping[str, Any]) -> ActionResult:
        return self.submit("goal", form)

    def add_opportunity(self, form: Mapping[str, Any]) -> ActionResult:
        return self.submit("opportunity", form)

    def add_family_member(self, form: Mapping[str, Any]) -> ActionResult:
        return self.submit("family_member", form)

    def update(
        self,
        record_type: str,
        record_id: str,
        changes: Mapping[str, Any],
    ) -> ActionResult:
        """Apply a partial update. Unknown ids report "not found"."""
        _, patch_cls, noun = self._record_info(record_type)

        try:
            patch = patch_cls.model_validate(dict(changes))
            updated = self._updaters[record_type](record_id, patch)
        except ValueError as e:
            # pydantic ValidationError is a ValueError
            return ActionResult(
                success=False,
                message=f"Invalid {noun} update",
                record_id=record_id,
                issues=[str(e)],
            )
        except StorageError as e:
            logger.error("wealth_record_update_failed", record_id=record_id, error=str(e))
            return ActionResult(
                success=False,
                message=f"Failed to update {noun}",
                record_id=record_id,
            )

        if updated is None:
            return ActionResult(
                success=False,
                message=f"{noun.capitalize()} not found",
                record_id=record_id,
            )
        return ActionResult(
            success=True,
            message=f"{noun.capitalize()} updated successfully!",
            record_id=record_id,
        )

    def delete(self, record_type: str, record_id: str) -> ActionResult:
        _, _, noun = self._record_info(record_type)
        try:
            removed = self._deleters[record_type](record_id)
        except StorageError as e:
            logger.error("wealth_record_delete_failed", record_id=record_id, error=str(e))
            return ActionResult(
                success=False,
                message=f"Failed to delete {noun}",
                record_id=record_id,
            )

        if not removed:
            return ActionResult(
                success=False,
                message=f"{noun.capitalize()} not found",
                record_id=record_id,
            )
        return ActionResult(
            success=True,
            message=f"{noun.capitalize()} deleted",
            record_id=record_id,
        )

    def dashboard(self) -> tuple[WealthData, WealthStats]:
        """Everything the dashboard renders, read fresh from storage."""
        return self._storage.get_data(), self._storage.get_wealth_stats()


def build_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """Backing store selected by HOMEBOOKS_STORAGE_BACKEND."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(storage_settings.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
) -> tuple[InvoiceFlow, WealthFlow]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (defaults to get_settings())
        store: Backing store override, e.g. an in-memory store in tests

    Returns:
        (invoice_flow, wealth_flow)
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    store = store or build_store(settings)
    storage_settings = settings.storage
    invoice_settings = settings.invoice
    audit_logger = AuditLogger()

    invoice_storage = InvoiceStorage(
        store,
        storage_key=storage_settings.invoice_key,
        audit_logger=audit_logger,
    )
    wealth_storage = WealthStorage(
        store,
        storage_key=storage_settings.wealth_key,
        audit_logger=audit_logger,
    )

    mailer = InvoiceMailer(
        transport=default_transport(settings.email),
        invoice_settings=invoice_settings,
    )

    invoice_flow = InvoiceFlow(
        invoice_storage,
        mailer=mailer,
        audit_logger=audit_logger,
        tax_rate=invoice_settings.default_tax_rate,
        due_days=invoice_settings.default_due_days,
    )
    wealth_flow = WealthFlow(wealth_storage, audit_logger=audit_logger)

    return invoice_flow, wealth_flow
