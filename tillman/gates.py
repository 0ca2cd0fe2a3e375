"""
Tillman Gates - Checkout validation rules.

G1: CartNotEmpty - A sale needs at least one line
G2: PointsAvailable - Redeemed points cannot exceed the store balance
G3: CashTendered - Cash received must cover the total
G4: PaymentMethod - Payment method must be supported
G5: TierTable - Tier ranges should be well-formed and disjoint

A failing gate is fatal to the checkout attempt only: the sale goes back
to drafting for correction and is never queued.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from tillman.exceptions import ValidationError
from tillman.points import Tier

logger = logging.getLogger(__name__)


class GateError(ValidationError):
    """Gate validation error."""

    def __init__(self, gate_name: str, code: str, message: str | None = None, **data):
        self.gate_name = gate_name
        super().__init__(code, message, **data)
        self.args = (f"[{gate_name}] {self.message}",)


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Tillman validation gates."""

    # =========================================================================
    # G1: Cart Not Empty
    # =========================================================================

    @classmethod
    def cart_not_empty(cls, line_count: int) -> GateResult:
        """
        G1: A sale must have at least one line.

        Raises:
            GateError: If the cart is empty
        """
        if line_count <= 0:
            raise GateError("G1_CartNotEmpty", "EMPTY_CART")
        return GateResult(True, "G1_CartNotEmpty")

    # =========================================================================
    # G2: Points Available
    # =========================================================================

    @classmethod
    def points_available(cls, requested: int, balance: int) -> GateResult:
        """
        G2: Requested points cannot exceed the current ledger balance.

        Args:
            requested: Points the customer asked to redeem
            balance: Current balance at the sale's store

        Raises:
            GateError: If the balance does not cover the request
        """
        if requested < 0 or requested > balance:
            raise GateError(
                "G2_PointsAvailable",
                "INSUFFICIENT_POINTS",
                available=balance,
                requested=requested,
            )
        return GateResult(True, "G2_PointsAvailable")

    @classmethod
    def check_points_available(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.points_available(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # G3: Cash Tendered
    # =========================================================================

    @classmethod
    def cash_tendered(cls, total: Decimal, received: Decimal | None) -> GateResult:
        """
        G3: Cash received must be at least the sale total.

        Raises:
            GateError: If no cash amount was given or it is short
        """
        if received is None or received < total:
            raise GateError(
                "G3_CashTendered",
                "INSUFFICIENT_CASH",
                total=str(total),
                received=None if received is None else str(received),
                missing=str(total - (received or Decimal("0"))),
            )
        return GateResult(True, "G3_CashTendered")

    @classmethod
    def check_cash_tendered(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.cash_tendered(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # G4: Payment Method
    # =========================================================================

    @classmethod
    def payment_method(cls, method: str) -> GateResult:
        """
        G4: Payment method must be one of PAYMENT_METHODS.

        Raises:
            GateError: If the method is not supported
        """
        from tillman.conf import tillman_settings

        allowed = tuple(tillman_settings.PAYMENT_METHODS)
        if method not in allowed:
            raise GateError(
                "G4_PaymentMethod",
                "INVALID_PAYMENT_METHOD",
                method=method,
                allowed=list(allowed),
            )
        return GateResult(True, "G4_PaymentMethod")

    # =========================================================================
    # G5: Tier Table
    # =========================================================================

    @classmethod
    def tier_table(cls, tiers: tuple[Tier, ...] | list[Tier]) -> GateResult:
        """
        G5: Tier ranges are well-formed (min <= max) and do not overlap.

        Tier resolution still works on a bad table (first match wins), so
        this gate is a configuration check, not part of checkout.

        Raises:
            GateError: On an inverted or overlapping range
        """
        for index, tier in enumerate(tiers):
            if tier.min_amount > tier.max_amount:
                raise GateError(
                    "G5_TierTable",
                    "INVALID_TIER",
                    message="Tier minimum is greater than its maximum.",
                    index=index,
                )

        ordered = sorted(tiers, key=lambda t: t.min_amount)
        for lower, upper in zip(ordered, ordered[1:]):
            if upper.min_amount <= lower.max_amount:
                raise GateError(
                    "G5_TierTable",
                    "OVERLAPPING_TIERS",
                    message="Tier ranges overlap; the first listed tier wins.",
                    lower=[str(lower.min_amount), str(lower.max_amount)],
                    upper=[str(upper.min_amount), str(upper.max_amount)],
                )
        return GateResult(True, "G5_TierTable")

    @classmethod
    def check_tier_table(cls, tiers) -> bool:
        """Check without raising; logs the problem instead."""
        try:
            cls.tier_table(tiers)
            return True
        except GateError as exc:
            logger.warning("Tier table check failed: %s", exc.message)
            return False
