"""
Invoice Storage

All invoices live in one JSON array under a single key
("invoice_history" by default). Every mutation reads the array,
changes one element, and writes the whole array back.

Insertion order is preserved. Sorting for display is the
history query's job, not storage's.
"""

from datetime import datetime
from typing import Callable, Optional, Union

import structlog

from homebooks.audit import AuditLogger
from homebooks.models.audit import AuditEventBuilder
from homebooks.models.common import utc_now
from homebooks.models.invoice import Invoice, InvoiceStats, InvoiceStatus
from homebooks.services.storage.document import JsonDocumentStorage
from homebooks.services.storage.interface import KeyValueStore, NotFoundError


DEFAULT_INVOICE_KEY = "invoice_history"

logger = structlog.get_logger(__name__)


class InvoiceStorage(JsonDocumentStorage):
    """
    Storage adapter for the invoice collection.

    Args:
        store: Backing key-value store
        storage_key: Key holding the JSON array
        clock: Returns "now"; injectable for tests
        audit_logger: Optional audit sink
    """

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str = DEFAULT_INVOICE_KEY,
        clock: Callable[[], datetime] = utc_now,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(store, storage_key, audit_logger)
        self._clock = clock

    def _load(self, strict: bool = False) -> list[Invoice]:
        return self._parse_records(
            Invoice, self._read_document(strict=strict), "invoices"
        )

    def _persist(self, invoices: list[Invoice]) -> None:
        self._write_document([invoice.to_storage() for invoice in invoices])

    def get_all(self) -> list[Invoice]:
        """All invoices in stored order. Empty if absent or unreadable."""
        return self._load()

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        return next((inv for inv in self._load() if inv.id == invoice_id), None)

    def get_required(self, invoice_id: str) -> Invoice:
        """Like get_by_id but raises NotFoundError."""
        invoice = self.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice not found: {invoice_id}")
        return invoice

    def save(self, invoice: Invoice) -> Invoice:
        """
        Insert a new invoice or replace the one with the same id.

        Replacing stamps updated_at. Returns the invoice as stored.

        Raises:
            StorageWriteError: If the collection could not be written
        """
        invoices = self._load(strict=True)

        index = next(
            (i for i, existing in enumerate(invoices) if existing.id == invoice.id),
            None,
        )
        if index is None:
            stored = invoice
            invoices.append(stored)
        else:
            stored = invoice.model_copy(update={"updated_at": self._clock()})
            invoices[index] = stored

        self._persist(invoices)

        logger.info(
            "invoice_saved",
            invoice_id=stored.id,
            invoice_number=stored.invoice_number,
            is_new=index is None,
        )
        if self._audit:
            self._audit.log_invoice_saved(
                invoice_id=stored.id,
                invoice_number=stored.invoice_number,
                total=str(stored.total),
                is_new=index is None,
            )
        return stored

    def update_status(
        self,
        invoice_id: str,
        status: Union[InvoiceStatus, str],
    ) -> Optional[Invoice]:
        """
        Set an invoice's status. No-op (returns None) if the id is unknown.

        Marking paid stamps paid_at; any other status clears it.
        """
        status = InvoiceStatus(status)
        invoices = self._load(strict=True)

        for index, invoice in enumerate(invoices):
            if invoice.id != invoice_id:
                continue

            now = self._clock()
            updated = invoice.model_copy(update={
                "status": status,
                "updated_at": now,
                "paid_at": now if status == InvoiceStatus.PAID else None,
            })
            invoices[index] = updated
            self._persist(invoices)

            if self._audit:
                self._audit.log(AuditEventBuilder.invoice_status_changed(
                    invoice_id=invoice_id,
                    old_status=invoice.status.value,
                    new_status=status.value,
                ))
            return updated

        return None

    def delete(self, invoice_id: str) -> bool:
        """
        Remove an invoice. Returns True if something was removed.

        The collection is rewritten either way.
        """
        invoices = self._load(strict=True)
        remaining = [inv for inv in invoices if inv.id != invoice_id]
        self._persist(remaining)

        removed = len(remaining) < len(invoices)
        if removed and self._audit:
            self._audit.log(AuditEventBuilder.invoice_deleted(invoice_id))
        return removed

    def get_stats(self, now: Optional[datetime] = None) -> InvoiceStats:
        """Aggregate figures, computed fresh from storage on every call."""
        return InvoiceStats.from_invoices(self._load(), now or self._clock())
