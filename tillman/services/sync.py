"""Outbox replay: pushes queued sales to the remote store in FIFO order."""

import logging
import threading
from dataclasses import dataclass, field

from tillman.exceptions import ReplayError, TransientError
from tillman.protocols.outbox import OutboxStore
from tillman.protocols.remote import RemoteBackend
from tillman.protocols.sales import SaleStatus
from tillman.services.backends import get_outbox, get_remote_backend
from tillman.services.checkout import CheckoutService
from tillman.signals import sale_replay_failed, sale_settled

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Sale ids settled and failed during one replay pass."""

    settled: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return not self.settled and not self.failed


class SyncService:
    """
    Replays the outbox.

    The local ledger already holds every queued sale's delta, so replay
    only writes to the remote store. A sale that fails again stays queued
    and does not block the ones after it.
    """

    _lock = threading.Lock()

    @classmethod
    def replay(
        cls,
        remote: RemoteBackend | None = None,
        outbox: OutboxStore | None = None,
    ) -> SyncReport:
        """
        Attempt every queued sale once, oldest first.

        Returns an empty report when another replay is already running.
        """
        report = SyncReport()
        if not cls._lock.acquire(blocking=False):
            logger.debug("Sync: replay already running, skipping")
            return report

        try:
            remote = remote or get_remote_backend()
            outbox = outbox or get_outbox()

            pending = outbox.list_pending()
            if pending:
                logger.info("Sync: replaying %d queued sale(s)", len(pending))

            for sale in pending:
                try:
                    CheckoutService.remote_commit(sale, remote)
                except TransientError as exc:
                    error = ReplayError("REPLAY_FAILED", sale_ref=sale.id, cause=exc.code)
                    outbox.record_failure(sale.id, exc.message)
                    report.failed.append(sale.id)
                    logger.warning("Sync: sale %s still queued (%s)", sale.id, exc.code)
                    sale_replay_failed.send(sender=cls, sale=sale, error=error)
                    continue

                outbox.mark_settled(sale.id)
                report.settled.append(sale.id)
                sale_settled.send(
                    sender=cls,
                    sale=sale.with_status(SaleStatus.SETTLED),
                    replayed=True,
                )
        finally:
            cls._lock.release()

        if report.settled or report.failed:
            logger.info(
                "Sync: %d settled, %d still queued",
                len(report.settled),
                len(report.failed),
            )
        return report

    @classmethod
    def pending_count(cls, outbox: OutboxStore | None = None) -> int:
        return (outbox or get_outbox()).pending_count()


def replay_on_reconnect(sender, online=False, **kwargs):
    """connectivity_changed receiver: replay when the remote comes back."""
    from tillman.conf import tillman_settings

    if online and tillman_settings.SYNC_ON_RECONNECT:
        SyncService.replay()
