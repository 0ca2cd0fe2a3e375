"""Points rules: tier resolution and redemption discounts.

Both calculators are pure functions over immutable configuration values.
Totals for a sale are computed exactly once, at freeze time, by
freeze_totals(); nothing downstream recomputes them.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Any

from tillman.cart import CartSnapshot


@dataclass(frozen=True)
class Tier:
    """Inclusive amount range mapped to a fixed points award."""

    min_amount: Decimal
    max_amount: Decimal
    points: int

    def contains(self, amount: Decimal) -> bool:
        return self.min_amount <= amount <= self.max_amount

    @classmethod
    def from_dict(cls, data: dict) -> "Tier":
        return cls(
            min_amount=Decimal(str(data.get("min_amount", data.get("minAmount")))),
            max_amount=Decimal(str(data.get("max_amount", data.get("maxAmount")))),
            points=int(data["points"]),
        )


@dataclass(frozen=True)
class PointsConfig:
    """
    Points program configuration for a store.

    discount_rate is the currency discount granted per redeemed point.
    Tiers are checked in the given order; the first match wins.
    """

    currency: str
    tiers: tuple[Tier, ...]
    discount_rate: Decimal = Decimal("1")
    minimum_points_to_redeem: int = 10

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PointsConfig":
        """
        Build config from a settings dict.

        Accepts discount_rate directly or the percentage form used by
        older store configs (discountPercentage=100 means 1 unit per point).
        """
        if "discount_rate" in data:
            rate = Decimal(str(data["discount_rate"]))
        elif "discountPercentage" in data:
            rate = Decimal(str(data["discountPercentage"])) / 100
        else:
            rate = Decimal("1")

        minimum = data.get(
            "minimum_points_to_redeem", data.get("minimumPointsToRedeem", 10)
        )
        from tillman.conf import tillman_settings

        return cls(
            currency=data.get("currency", tillman_settings.DEFAULT_CURRENCY),
            tiers=tuple(Tier.from_dict(t) for t in data.get("tiers", [])),
            discount_rate=rate,
            minimum_points_to_redeem=int(minimum),
        )


@dataclass(frozen=True)
class SaleTotals:
    """Totals frozen at checkout confirmation."""

    subtotal: Decimal
    discount: Decimal
    total: Decimal
    points_earned: int
    points_used: int


def resolve_points(amount: Decimal, tiers: tuple[Tier, ...] | list[Tier]) -> int:
    """Points for the first tier containing amount; 0 when none does."""
    if amount < 0:
        return 0
    for tier in tiers:
        if tier.contains(amount):
            return tier.points
    return 0


def discount_for_points(points: int, config: PointsConfig) -> Decimal:
    """
    Currency discount for redeeming points.

    Returns 0 below the redeem minimum. The caller must clamp points to
    the customer's balance first; this function does not know it.
    """
    if points <= 0 or points < config.minimum_points_to_redeem:
        return Decimal("0")
    discount = (Decimal(points) * config.discount_rate).to_integral_value(
        rounding=ROUND_FLOOR
    )
    return max(Decimal("0"), discount)


def freeze_totals(
    snapshot: CartSnapshot,
    config: PointsConfig,
    points_to_use: int = 0,
) -> SaleTotals:
    """Run both calculators once and lock the sale totals."""
    subtotal = snapshot.subtotal
    points_earned = resolve_points(subtotal, config.tiers)
    discount = discount_for_points(points_to_use, config)
    # No points burned for a redemption that grants nothing
    points_used = points_to_use if discount > 0 else 0

    return SaleTotals(
        subtotal=subtotal,
        discount=discount,
        total=max(Decimal("0"), subtotal - discount),
        points_earned=points_earned,
        points_used=points_used,
    )


def get_points_config(store_ref: str | None = None) -> PointsConfig:
    """
    Points config for store_ref, falling back to the default program.

    Overlapping or inverted tier ranges are logged (G5); resolution still
    uses the first matching tier.
    """
    from tillman.conf import tillman_settings
    from tillman.gates import Gates

    overrides = tillman_settings.STORE_POINTS_CONFIG
    if store_ref and store_ref in overrides:
        config = PointsConfig.from_dict(overrides[store_ref])
    else:
        config = PointsConfig.from_dict(tillman_settings.POINTS_CONFIG)
    Gates.check_tier_table(config.tiers)
    return config
