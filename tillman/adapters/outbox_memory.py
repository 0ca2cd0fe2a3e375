"""In-memory OutboxStore for tests and terminals without a database."""

from dataclasses import dataclass

from tillman.protocols.sales import Sale, SaleStatus


@dataclass
class _Slot:
    sale: Sale
    attempts: int = 0
    last_error: str = ""


class InMemoryOutbox:
    """OutboxStore kept in a dict; insertion order is enqueue order."""

    def __init__(self):
        self._slots: dict[str, _Slot] = {}

    def append(self, sale: Sale) -> bool:
        if sale.id in self._slots:
            return False
        self._slots[sale.id] = _Slot(sale.with_status(SaleStatus.QUEUED))
        return True

    def list_pending(self) -> list[Sale]:
        return [s.sale for s in self._slots.values() if not s.sale.is_settled]

    def mark_settled(self, sale_ref: str) -> None:
        slot = self._slots.get(sale_ref)
        if slot:
            slot.sale = slot.sale.with_status(SaleStatus.SETTLED)

    def record_failure(self, sale_ref: str, error: str) -> None:
        slot = self._slots.get(sale_ref)
        if slot and not slot.sale.is_settled:
            slot.attempts += 1
            slot.last_error = error

    def pending_count(self) -> int:
        return len(self.list_pending())

    def attempts(self, sale_ref: str) -> int:
        slot = self._slots.get(sale_ref)
        return slot.attempts if slot else 0
