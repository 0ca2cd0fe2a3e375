"""Database-backed OutboxStore."""

import logging

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from tillman.models import OutboxEntry, OutboxStatus
from tillman.protocols.sales import Sale, SaleStatus

logger = logging.getLogger(__name__)


class DatabaseOutbox:
    """
    OutboxStore persisted in the OutboxEntry table.

    Survives terminal restarts. Configuration in settings.py:
        TILLMAN = {
            "OUTBOX_BACKEND": "tillman.adapters.outbox_db.DatabaseOutbox",
        }
    """

    def append(self, sale: Sale) -> bool:
        if OutboxEntry.objects.filter(sale_ref=sale.id).exists():
            logger.debug("Outbox: %s already enqueued", sale.id)
            return False

        # Unique sale_ref turns a concurrent duplicate into IntegrityError
        try:
            with transaction.atomic():
                OutboxEntry.objects.create(
                    sale_ref=sale.id,
                    store_ref=sale.store_ref,
                    customer_ref=sale.customer_ref,
                    payload=sale.with_status(SaleStatus.QUEUED).as_dict(),
                )
        except IntegrityError:
            if OutboxEntry.objects.filter(sale_ref=sale.id).exists():
                return False
            raise
        return True

    def list_pending(self) -> list[Sale]:
        entries = OutboxEntry.objects.filter(status=OutboxStatus.QUEUED).order_by("id")
        return [Sale.from_dict(entry.payload) for entry in entries]

    def mark_settled(self, sale_ref: str) -> None:
        with transaction.atomic():
            entry = (
                OutboxEntry.objects.select_for_update()
                .filter(sale_ref=sale_ref)
                .first()
            )
            if entry is None:
                logger.warning("Outbox: cannot settle unknown sale %s", sale_ref)
                return
            if entry.is_settled:
                return

            entry.status = OutboxStatus.SETTLED
            entry.settled_at = timezone.now()
            entry.payload = {**entry.payload, "status": SaleStatus.SETTLED.value}
            entry.save(update_fields=["status", "settled_at", "payload"])

    def record_failure(self, sale_ref: str, error: str) -> None:
        OutboxEntry.objects.filter(
            sale_ref=sale_ref,
            status=OutboxStatus.QUEUED,
        ).update(
            attempts=F("attempts") + 1,
            last_error=error,
            last_attempt_at=timezone.now(),
        )

    def pending_count(self) -> int:
        return OutboxEntry.objects.filter(status=OutboxStatus.QUEUED).count()
