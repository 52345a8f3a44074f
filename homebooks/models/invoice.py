"""
Invoice Models

An invoice is a flat record with its line items embedded.
The whole invoice collection is persisted as one JSON array.

INVARIANTS (enforced on every validation, never trusted from input):
- item.amount = quantity x rate
- subtotal = sum of item amounts
- tax = subtotal x taxRate / 100
- total = subtotal + tax

"Overdue" is NOT a stored transition. It is decided at read time
from the due date, see Invoice.is_overdue().
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import Field, field_validator, model_validator

from homebooks.models.common import (
    ZERO,
    Money,
    RecordModel,
    as_utc,
    new_record_id,
    to_decimal,
    utc_now,
)


class InvoiceStatus(str, Enum):
    """Invoice payment status."""
    PAID = "paid"
    UNPAID = "unpaid"
    OVERDUE = "overdue"


class InvoiceEditError(ValueError):
    """An edit that would leave the invoice in an unusable state."""
    pass


def calculate_totals(
    items: Iterable["InvoiceItem"],
    tax_rate,
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Compute (subtotal, tax, total) for a set of line items.

    Example: items (2 x 50) and (1 x 30) at 10% tax
    gives (130, 13, 143).
    """
    subtotal = sum((item.amount for item in items), ZERO)
    tax = subtotal * to_decimal(tax_rate) / 100
    return subtotal, tax, subtotal + tax


class InvoiceItem(RecordModel):
    """A single billable line."""

    id: str = Field(default_factory=lambda: new_record_id("item"))
    description: str = Field(default="", max_length=500)
    quantity: Money = Field(default=Decimal("1"), ge=0)
    rate: Money = Field(default=ZERO, ge=0)
    amount: Money = Field(default=ZERO, ge=0)

    @model_validator(mode='after')
    def compute_amount(self) -> 'InvoiceItem':
        self.amount = self.quantity * self.rate
        return self


class Invoice(RecordModel):
    """
    A stored invoice.

    Edits return a new Invoice (with_item, update_item, remove_item,
    with_tax_rate) so totals are always recomputed through validation.
    """

    id: str = Field(default_factory=lambda: new_record_id("inv"))
    invoice_number: str = Field(..., min_length=1, max_length=50)
    issue_date: date = Field(..., alias="date")
    due_date: date

    # Business info
    business_name: str = ""
    business_email: str = ""
    business_address: str = ""

    # Client info
    client_name: str = ""
    client_email: str = ""
    client_address: str = ""

    items: list[InvoiceItem] = Field(default_factory=list)
    tax_rate: Money = Field(default=Decimal("10"), ge=0, le=100)
    notes: str = ""

    # Derived, recomputed on validation
    subtotal: Money = ZERO
    tax: Money = ZERO
    total: Money = ZERO

    # Status & tracking
    status: InvoiceStatus = InvoiceStatus.UNPAID
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    paid_at: Optional[datetime] = None

    @field_validator('created_at', 'updated_at', 'paid_at')
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @model_validator(mode='after')
    def compute_totals(self) -> 'Invoice':
        self.subtotal, self.tax, self.total = calculate_totals(
            self.items, self.tax_rate
        )
        return self

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Not paid and the due date (midnight UTC) has passed."""
        if self.is_paid:
            return False
        now = as_utc(now or utc_now())
        due = datetime.combine(self.due_date, time.min, tzinfo=timezone.utc)
        return due < now

    def display_status(self, now: Optional[datetime] = None) -> InvoiceStatus:
        """Status as shown in history: unpaid and past due reads as overdue."""
        if self.status == InvoiceStatus.UNPAID and self.is_overdue(now):
            return InvoiceStatus.OVERDUE
        return self.status

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _rebuild(self, **updates) -> 'Invoice':
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)

    def with_item(
        self,
        description: str = "",
        quantity=1,
        rate=0,
    ) -> 'Invoice':
        item = InvoiceItem(description=description, quantity=quantity, rate=rate)
        return self._rebuild(items=[*self.items, item])

    def update_item(self, item_id: str, **changes) -> 'Invoice':
        if not any(item.id == item_id for item in self.items):
            raise InvoiceEditError(f"Item not found: {item_id}")
        changes.pop("id", None)
        items = [
            {**item.model_dump(), **changes} if item.id == item_id else item.model_dump()
            for item in self.items
        ]
        return self._rebuild(items=items)

    def remove_item(self, item_id: str) -> 'Invoice':
        if len(self.items) <= 1:
            raise InvoiceEditError("Cannot remove the last item")
        remaining = [item for item in self.items if item.id != item_id]
        if len(remaining) == len(self.items):
            raise InvoiceEditError(f"Item not found: {item_id}")
        return self._rebuild(items=remaining)

    def with_tax_rate(self, tax_rate) -> 'Invoice':
        return self._rebuild(tax_rate=tax_rate)


def new_invoice(
    tax_rate=10,
    due_days: int = 30,
    now: Optional[datetime] = None,
) -> Invoice:
    """
    Draft a blank invoice the way the creator form opens.

    One empty line item, status unpaid, due `due_days` after today.
    """
    now = now or utc_now()
    today = now.date()
    return Invoice(
        id=new_record_id("inv"),
        invoice_number=f"INV-{int(now.timestamp() * 1000)}",
        issue_date=today,
        due_date=today + timedelta(days=due_days),
        items=[InvoiceItem()],
        tax_rate=tax_rate,
        status=InvoiceStatus.UNPAID,
        created_at=now,
        updated_at=now,
    )


class InvoiceStats(RecordModel):
    """
    Aggregate figures over the invoice collection.

    Derived on every call, never stored.
    """

    total: int = 0
    paid: int = 0
    unpaid: int = 0
    overdue: int = 0
    total_amount: Money = ZERO
    paid_amount: Money = ZERO
    pending_amount: Money = ZERO

    @classmethod
    def from_invoices(
        cls,
        invoices: list[Invoice],
        now: Optional[datetime] = None,
    ) -> 'InvoiceStats':
        now = now or utc_now()
        paid = [inv for inv in invoices if inv.is_paid]
        pending = [inv for inv in invoices if not inv.is_paid]
        return cls(
            total=len(invoices),
            paid=len(paid),
            unpaid=sum(1 for inv in invoices if inv.status == InvoiceStatus.UNPAID),
            overdue=sum(1 for inv in invoices if inv.is_overdue(now)),
            total_amount=sum((inv.total for inv in invoices), ZERO),
            paid_amount=sum((inv.total for inv in paid), ZERO),
            pending_amount=sum((inv.total for inv in pending), ZERO),
        )
