"""Outbox storage protocol for sales that could not be committed."""

from typing import Protocol, runtime_checkable

from tillman.protocols.sales import Sale


@runtime_checkable
class OutboxStore(Protocol):
    """
    Durable, ordered queue of queued sales keyed by sale id.

    Implemented by adapters/outbox_db.py (durable) and
    adapters/outbox_memory.py (tests, ephemeral terminals).
    """

    def append(self, sale: Sale) -> bool:
        """Enqueue sale. Returns False if its id was already enqueued."""
        ...

    def list_pending(self) -> list[Sale]:
        """Queued sales, oldest first."""
        ...

    def mark_settled(self, sale_ref: str) -> None:
        """Settle a queued sale; it is never listed as pending again."""
        ...

    def record_failure(self, sale_ref: str, error: str) -> None:
        """Note a failed replay attempt; the sale stays queued."""
        ...

    def pending_count(self) -> int:
        ...
