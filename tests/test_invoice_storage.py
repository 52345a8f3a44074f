"""
Tests for InvoiceStorage

All tests run against InMemoryKeyValueStore with a fixed clock.
"""

import json
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from homebooks.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from homebooks.services.storage import (
    DEFAULT_INVOICE_KEY,
    InMemoryKeyValueStore,
    InvoiceStorage,
    KeyValueStore,
    NotFoundError,
    QuotaExceededError,
    StorageReadError,
    StorageWriteError,
)


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class UnreadableStore(KeyValueStore):
    """Backend whose reads always fail."""

    def __init__(self):
        self.writes = 0

    def get_item(self, key):
        raise StorageReadError("disk unavailable")

    def set_item(self, key, value):
        self.writes += 1

    def remove_item(self, key):
        pass

    def keys(self):
        return []


def make_invoice(invoice_id="inv-1", **overrides) -> Invoice:
    data = {
        "id": invoice_id,
        "invoice_number": "INV-1001",
        "issue_date": date(2026, 3, 1),
        "due_date": date(2026, 3, 31),
        "business_name": "Studio",
        "client_name": "Acme Ltd",
        "client_email": "billing@acme.test",
        "items": [
            InvoiceItem(id="item-1", description="Design", quantity=2, rate=50),
            InvoiceItem(id="item-2", description="Hosting", quantity=1, rate=30),
        ],
        "tax_rate": 10,
        "notes": "Thanks",
        "created_at": NOW - timedelta(days=14),
        "updated_at": NOW - timedelta(days=14),
    }
    data.update(overrides)
    return Invoice(**data)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def storage(store):
    return InvoiceStorage(store, clock=lambda: NOW)


class TestInvoiceStorageReads:
    """Tests for reading the invoice collection."""

    def test_absent_key_is_empty(self, storage):
        """Test that a missing key reads as no invoices."""
        assert storage.get_all() == []

    def test_save_then_get_all_round_trips(self, storage):
        """Test that a saved invoice loads back equal."""
        invoice = make_invoice()
        storage.save(invoice)

        loaded = storage.get_all()

        assert len(loaded) == 1
        assert loaded[0] == invoice
        assert loaded[0].total == Decimal("143")

    def test_stored_document_is_json_array(self, storage, store):
        """Test that the collection is stored as a JSON array."""
        storage.save(make_invoice())
        document = json.loads(store.get_item(DEFAULT_INVOICE_KEY))
        assert isinstance(document, list)
        assert document[0]["invoiceNumber"] == "INV-1001"

    def test_insertion_order_preserved(self, storage):
        """Test that invoices come back in the order they were added."""
        storage.save(make_invoice("inv-1"))
        storage.save(make_invoice("inv-2"))
        storage.save(make_invoice("inv-3"))
        assert [inv.id for inv in storage.get_all()] == ["inv-1", "inv-2", "inv-3"]

    def test_corrupt_json_reads_as_empty(self, storage, store):
        """Test that unparseable JSON reads as no invoices."""
        store.set_item(DEFAULT_INVOICE_KEY, "{not json")
        assert storage.get_all() == []

    def test_non_list_document_reads_as_empty(self, storage, store):
        """Test that a JSON object instead of an array reads as no invoices."""
        store.set_item(DEFAULT_INVOICE_KEY, json.dumps({"invoices": []}))
        assert storage.get_all() == []

    def test_malformed_record_is_skipped(self, storage, store):
        """Test that one bad record does not hide the others."""
        good = make_invoice().to_storage()
        store.set_item(DEFAULT_INVOICE_KEY, json.dumps([{"id": "broken"}, good]))

        loaded = storage.get_all()

        assert [inv.id for inv in loaded] == ["inv-1"]

    def test_unreadable_backend_reads_as_empty(self):
        """Test that a failing backend reads as no invoices."""
        storage = InvoiceStorage(UnreadableStore())
        assert storage.get_all() == []
        assert storage.get_stats(NOW).total == 0

    def test_get_by_id(self, storage):
        """Test lookup by id."""
        storage.save(make_invoice("inv-1"))
        storage.save(make_invoice("inv-2", client_name="Globex"))
        assert storage.get_by_id("inv-2").client_name == "Globex"
        assert storage.get_by_id("inv-missing") is None

    def test_get_required_raises_for_unknown_id(self, storage):
        """Test that get_required raises NotFoundError."""
        with pytest.raises(NotFoundError):
            storage.get_required("inv-missing")


class TestInvoiceStorageWrites:
    """Tests for save, status updates and delete."""

    def test_save_replaces_same_id_and_stamps_updated_at(self, storage):
        """Test that saving an existing id replaces it in place."""
        storage.save(make_invoice())
        storage.save(make_invoice(client_name="Acme Holdings"))

        loaded = storage.get_all()

        assert len(loaded) == 1
        assert loaded[0].client_name == "Acme Holdings"
        assert loaded[0].updated_at == NOW

    def test_mark_paid_sets_paid_at(self, storage):
        """Test that marking paid records the payment time."""
        storage.save(make_invoice())

        updated = storage.update_status("inv-1", InvoiceStatus.PAID)

        assert updated.status == InvoiceStatus.PAID
        assert updated.paid_at == NOW
        stored = storage.get_by_id("inv-1")
        assert stored.status == InvoiceStatus.PAID
        assert stored.paid_at == NOW

    def test_mark_unpaid_clears_paid_at(self, storage):
        """Test that marking unpaid clears the payment time."""
        storage.save(make_invoice())
        storage.update_status("inv-1", "paid")

        storage.update_status("inv-1", "unpaid")

        stored = storage.get_by_id("inv-1")
        assert stored.status == InvoiceStatus.UNPAID
        assert stored.paid_at is None

    def test_status_update_unknown_id_is_noop(self, storage, store):
        """Test that an unknown id leaves storage untouched."""
        storage.save(make_invoice())
        before = store.get_item(DEFAULT_INVOICE_KEY)

        assert storage.update_status("inv-missing", "paid") is None
        assert store.get_item(DEFAULT_INVOICE_KEY) == before

    def test_invalid_status_rejected(self, storage):
        """Test that only paid, unpaid and overdue are accepted."""
        storage.save(make_invoice())
        with pytest.raises(ValueError):
            storage.update_status("inv-1", "cancelled")

    def test_delete(self, storage):
        """Test deleting one invoice."""
        storage.save(make_invoice("inv-1"))
        storage.save(make_invoice("inv-2"))

        assert storage.delete("inv-1") is True
        assert [inv.id for inv in storage.get_all()] == ["inv-2"]

    def test_delete_unknown_id_is_noop(self, storage):
        """Test that deleting an unknown id changes nothing."""
        storage.save(make_invoice())
        assert storage.delete("inv-missing") is False
        assert len(storage.get_all()) == 1

    def test_write_failure_raises(self):
        """Test that a quota failure surfaces and nothing is stored."""
        storage = InvoiceStorage(InMemoryKeyValueStore(quota_bytes=64))
        with pytest.raises(StorageWriteError) as exc_info:
            storage.save(make_invoice())
        assert isinstance(exc_info.value, QuotaExceededError)
        assert storage.get_all() == []

    def test_unreadable_backend_refuses_to_write(self):
        """Test that an unreadable collection is never overwritten."""
        store = UnreadableStore()
        storage = InvoiceStorage(store)
        with pytest.raises(StorageReadError):
            storage.save(make_invoice())
        assert store.writes == 0

    def test_custom_storage_key(self, store):
        """Test saving under a custom key."""
        storage = InvoiceStorage(store, storage_key="client-invoices")
        storage.save(make_invoice())
        assert store.keys() == ["client-invoices"]

    def test_invalid_storage_key_rejected(self, store):
        """Test that a path-like key is refused."""
        with pytest.raises(ValueError):
            InvoiceStorage(store, storage_key="../escape")


class TestInvoiceStorageStats:
    """Tests for get_stats."""

    def test_empty_stats(self, storage):
        """Test stats for an empty collection."""
        stats = storage.get_stats(NOW)
        assert stats.total == 0
        assert stats.total_amount == 0

    def test_overdue_counted_while_stored_status_stays_unpaid(self, storage):
        """Test that overdue is derived without rewriting the stored status."""
        storage.save(make_invoice("inv-1", due_date=date(2026, 3, 1)))
        storage.save(make_invoice("inv-2", status=InvoiceStatus.PAID))

        stats = storage.get_stats(NOW)

        assert stats.total == 2
        assert stats.overdue == 1
        assert stats.paid == 1
        assert stats.paid_amount == Decimal("143")
        assert stats.pending_amount == Decimal("143")
        assert storage.get_by_id("inv-1").status == InvoiceStatus.UNPAID

    def test_stats_default_to_storage_clock(self, storage):
        """Test that stats use the storage clock when no time is given."""
        storage.save(make_invoice(due_date=date(2026, 3, 14)))
        assert storage.get_stats().overdue == 1
