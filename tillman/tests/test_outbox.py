"""Tests for outbox stores."""

from datetime import timedelta

import pytest
from django.utils import timezone

from tillman.adapters.outbox_db import DatabaseOutbox
from tillman.adapters.outbox_memory import InMemoryOutbox
from tillman.models import OutboxEntry, OutboxStatus
from tillman.protocols.outbox import OutboxStore
from tillman.protocols.sales import Sale, SaleStatus


pytestmark = pytest.mark.django_db


@pytest.fixture(params=["db", "memory"])
def store(request):
    if request.param == "db":
        return DatabaseOutbox()
    return InMemoryOutbox()


class TestOutboxStore:
    """Behaviour shared by every OutboxStore."""

    def test_implements_protocol(self, store):
        """Test store implements OutboxStore."""
        assert isinstance(store, OutboxStore)

    def test_append_is_idempotent(self, store, make_sale):
        """Test appending the same sale twice."""
        sale = make_sale()
        assert store.append(sale) is True
        assert store.append(sale) is False
        assert store.pending_count() == 1

    def test_list_pending_fifo(self, store, make_sale):
        """Test pending sales come back in enqueue order."""
        sales = [make_sale() for _ in range(3)]
        for sale in sales:
            store.append(sale)
        assert [s.id for s in store.list_pending()] == [s.id for s in sales]

    def test_mark_settled_removes_from_pending(self, store, make_sale):
        """Test settled sale is no longer pending."""
        first, second = make_sale(), make_sale()
        store.append(first)
        store.append(second)

        store.mark_settled(first.id)

        assert [s.id for s in store.list_pending()] == [second.id]

    def test_settled_sale_not_requeued(self, store, make_sale):
        """Test settled sale cannot be queued again."""
        sale = make_sale()
        store.append(sale)
        store.mark_settled(sale.id)

        assert store.append(sale) is False
        assert store.pending_count() == 0

    def test_pending_sales_are_queued(self, store, make_sale):
        """Test pending sales carry the queued status."""
        store.append(make_sale().with_status(SaleStatus.SETTLED))
        assert store.list_pending()[0].status == SaleStatus.QUEUED


class TestDatabaseOutbox:
    """Tests specific to the database outbox."""

    def test_payload_round_trip(self, make_sale):
        """Test payload deserializes to the same sale."""
        sale = make_sale(points_used=20, cash_received=None)
        DatabaseOutbox().append(sale)

        entry = OutboxEntry.objects.get(sale_ref=sale.id)
        assert entry.payload["pointsUsed"] == 20
        assert Sale.from_dict(entry.payload) == sale

    def test_record_failure(self, make_sale):
        """Test failed attempts are counted."""
        outbox = DatabaseOutbox()
        sale = make_sale()
        outbox.append(sale)

        outbox.record_failure(sale.id, "timeout")
        outbox.record_failure(sale.id, "503")

        entry = OutboxEntry.objects.get(sale_ref=sale.id)
        assert entry.attempts == 2
        assert entry.last_error == "503"
        assert entry.last_attempt_at is not None

    def test_mark_settled_unknown(self, caplog):
        """Test settling an unknown sale logs a warning."""
        DatabaseOutbox().mark_settled("missing")
        assert "unknown sale" in caplog.text

    def test_survives_new_instance(self, make_sale):
        """Test queue persists across outbox instances."""
        sale = make_sale()
        DatabaseOutbox().append(sale)
        assert [s.id for s in DatabaseOutbox().list_pending()] == [sale.id]

    def test_missing_currency_uses_default(self, settings, make_sale):
        """Test payload without currency falls back to DEFAULT_CURRENCY."""
        settings.TILLMAN = {"DEFAULT_CURRENCY": "USD"}
        payload = make_sale().as_dict()
        del payload["currency"]

        assert Sale.from_dict(payload).currency == "USD"


class TestCleanup:
    """Tests for OutboxEntry.cleanup_settled."""

    def test_removes_old_settled_only(self, make_sale):
        """Test only old settled rows are removed."""
        outbox = DatabaseOutbox()
        old, recent, queued = make_sale(), make_sale(), make_sale()
        for sale in (old, recent, queued):
            outbox.append(sale)
        outbox.mark_settled(old.id)
        outbox.mark_settled(recent.id)
        OutboxEntry.objects.filter(sale_ref=old.id).update(
            settled_at=timezone.now() - timedelta(days=100)
        )

        deleted, _ = OutboxEntry.cleanup_settled(days=90)

        assert deleted == 1
        assert set(OutboxEntry.objects.values_list("sale_ref", flat=True)) == {
            recent.id,
            queued.id,
        }

    def test_queued_never_removed(self, make_sale):
        """Test queued rows are never removed."""
        outbox = DatabaseOutbox()
        sale = make_sale()
        outbox.append(sale)
        OutboxEntry.objects.update(enqueued_at=timezone.now() - timedelta(days=400))

        OutboxEntry.cleanup_settled(days=1)

        assert OutboxEntry.objects.filter(status=OutboxStatus.QUEUED).count() == 1

    def test_removed_sale_can_be_queued_again(self, make_sale):
        """Test a cleaned-up sale id is accepted by the outbox again."""
        outbox = DatabaseOutbox()
        sale = make_sale()
        outbox.append(sale)
        outbox.mark_settled(sale.id)
        assert outbox.append(sale) is False

        OutboxEntry.objects.update(settled_at=timezone.now() - timedelta(days=100))
        OutboxEntry.cleanup_settled(days=90)

        assert outbox.append(sale) is True
        assert outbox.pending_count() == 1
