"""Tillman models.

- LedgerAccount / LedgerEntry: local mirror of per-store points balances
- OutboxEntry: durable queue of sales not yet committed remotely
"""

from tillman.models.ledger import EntryType, LedgerAccount, LedgerEntry
from tillman.models.outbox import OutboxEntry, OutboxStatus

__all__ = [
    # Ledger
    "EntryType",
    "LedgerAccount",
    "LedgerEntry",
    # Offline queue
    "OutboxEntry",
    "OutboxStatus",
]
