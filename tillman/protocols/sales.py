"""Sale record: the transactional unit sent to the remote store and queued offline."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from django.utils import timezone


class SaleStatus(str, Enum):
    QUEUED = "queued"
    SETTLED = "settled"


@dataclass(frozen=True)
class SaleItem:
    """Committed line item with name and price snapshots."""

    product_ref: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    def as_dict(self) -> dict:
        return {
            "productId": self.product_ref,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": str(self.unit_price),
            "totalPrice": str(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SaleItem":
        return cls(
            product_ref=data["productId"],
            product_name=data.get("productName", ""),
            quantity=int(data["quantity"]),
            unit_price=Decimal(str(data["unitPrice"])),
            line_total=Decimal(str(data["totalPrice"])),
        )


@dataclass(frozen=True)
class Sale:
    """
    A frozen sale.

    Totals are locked when the sale is created; only status transitions,
    through with_status(). The id is client-generated and doubles as the
    idempotency key for remote commits and ledger application.
    """

    store_ref: str
    cashier_ref: str
    customer_ref: str
    items: tuple[SaleItem, ...]
    subtotal: Decimal
    discount: Decimal
    points_used: int
    points_earned: int
    total: Decimal
    payment_method: str
    currency: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: SaleStatus = SaleStatus.QUEUED
    created_at: datetime = field(default_factory=timezone.now)
    cash_received: Decimal | None = None
    change: Decimal | None = None

    @property
    def ledger_delta(self) -> int:
        """Net points effect on the customer's store balance."""
        return self.points_earned - self.points_used

    @property
    def is_settled(self) -> bool:
        return self.status == SaleStatus.SETTLED

    def with_status(self, status: SaleStatus) -> "Sale":
        return replace(self, status=status)

    def as_dict(self) -> dict:
        """Serialize to the persisted outbox layout."""
        return {
            "id": self.id,
            "storeId": self.store_ref,
            "cashierId": self.cashier_ref,
            "customerId": self.customer_ref,
            "items": [item.as_dict() for item in self.items],
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "pointsUsed": self.points_used,
            "pointsEarned": self.points_earned,
            "total": str(self.total),
            "paymentMethod": self.payment_method,
            "currency": self.currency,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "cashReceived": None if self.cash_received is None else str(self.cash_received),
            "change": None if self.change is None else str(self.change),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        from tillman.conf import tillman_settings

        cash_received = data.get("cashReceived")
        change = data.get("change")
        return cls(
            id=data["id"],
            store_ref=data["storeId"],
            cashier_ref=data.get("cashierId", ""),
            customer_ref=data["customerId"],
            items=tuple(SaleItem.from_dict(i) for i in data.get("items", [])),
            subtotal=Decimal(str(data["subtotal"])),
            discount=Decimal(str(data["discount"])),
            points_used=int(data["pointsUsed"]),
            points_earned=int(data["pointsEarned"]),
            total=Decimal(str(data["total"])),
            payment_method=data["paymentMethod"],
            currency=data.get("currency", tillman_settings.DEFAULT_CURRENCY),
            status=SaleStatus(data.get("status", SaleStatus.QUEUED.value)),
            created_at=datetime.fromisoformat(data["createdAt"]),
            cash_received=None if cash_received is None else Decimal(str(cash_received)),
            change=None if change is None else Decimal(str(change)),
        )
