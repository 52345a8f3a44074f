"""Invoice history queries."""

from homebooks.queries.invoice_history import (
    InvoiceHistory,
    InvoiceHistoryQuery,
    InvoiceHistoryResult,
)

__all__ = ["InvoiceHistory", "InvoiceHistoryQuery", "InvoiceHistoryResult"]
