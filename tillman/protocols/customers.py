"""Customer directory protocol."""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class CustomerInfo:
    """Customer identity plus the remote view of per-store balances."""

    ref: str
    name: str
    email: str = ""
    phone: str = ""
    points_balance: dict[str, int] = field(default_factory=dict)

    @property
    def total_points(self) -> int:
        return sum(self.points_balance.values())


@runtime_checkable
class CustomerDirectory(Protocol):
    """Protocol for resolving a customer by id, email or phone."""

    def lookup_customer(self, identifier: str) -> CustomerInfo | None:
        """Return the customer or None if unknown."""
        ...
