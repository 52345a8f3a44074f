"""
Invoice History Queries

Read-only view over the invoice collection: filter, search and sort
for display. Nothing here writes to storage.

Overdue classification happens here at read time. The stored status
of an unpaid, past-due invoice stays "unpaid"; only the returned
copies read "overdue".
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from homebooks.models.common import utc_now
from homebooks.models.invoice import Invoice, InvoiceStats
from homebooks.services.storage import InvoiceStorage


class InvoiceHistoryQuery(BaseModel):
    """Filters applied to the history list."""

    status: Literal["all", "paid", "unpaid", "overdue"] = "all"
    search: Optional[str] = Field(
        default=None,
        description="Matches invoice number, client name or client email"
    )
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @model_validator(mode='after')
    def validate_range(self) -> 'InvoiceHistoryQuery':
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        return self


class InvoiceHistoryResult(BaseModel):
    """Filtered invoices plus the unfiltered stats for the header cards."""

    invoices: list[Invoice] = Field(default_factory=list)
    count: int = Field(ge=0)
    total_count: int = Field(ge=0)
    stats: InvoiceStats

    @property
    def is_filtered_empty(self) -> bool:
        """Invoices exist but none match the filters."""
        return self.count == 0 and self.total_count > 0


class InvoiceHistory:
    """Executes history queries against invoice storage."""

    def __init__(self, storage: InvoiceStorage):
        self._storage = storage

    def load(self, now: Optional[datetime] = None) -> list[Invoice]:
        """All invoices with display status applied."""
        now = now or utc_now()
        return [
            invoice.model_copy(update={"status": invoice.display_status(now)})
            for invoice in self._storage.get_all()
        ]

    def execute(
        self,
        query: Optional[InvoiceHistoryQuery] = None,
        now: Optional[datetime] = None,
    ) -> InvoiceHistoryResult:
        query = query or InvoiceHistoryQuery()
        now = now or utc_now()

        invoices = self.load(now)
        filtered = list(invoices)

        if query.status != "all":
            filtered = [inv for inv in filtered if inv.status.value == query.status]

        if query.search:
            term = query.search.strip().lower()
            filtered = [
                inv for inv in filtered
                if term in inv.invoice_number.lower()
                or term in inv.client_name.lower()
                or term in inv.client_email.lower()
            ]

        if query.date_from:
            filtered = [inv for inv in filtered if inv.issue_date >= query.date_from]
        if query.date_to:
            filtered = [inv for inv in filtered if inv.issue_date <= query.date_to]

        # Newest first
        filtered.sort(key=lambda inv: inv.created_at, reverse=True)

        return InvoiceHistoryResult(
            invoices=filtered,
            count=len(filtered),
            total_count=len(invoices),
            stats=self._storage.get_stats(now),
        )
