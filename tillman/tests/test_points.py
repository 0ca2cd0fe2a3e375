"""Tests for tier resolution and redemption discounts."""

from decimal import Decimal

import pytest

from tillman.cart import Cart
from tillman.points import (
    PointsConfig,
    Tier,
    discount_for_points,
    freeze_totals,
    get_points_config,
    resolve_points,
)


def _tiers(*rows):
    return tuple(Tier(Decimal(lo), Decimal(hi), pts) for lo, hi, pts in rows)


class TestResolvePoints:
    """Tests for tier resolution."""

    def test_scenario_a_lowest_tier(self, points_config):
        """Test 1,050 MZN earns 10 points."""
        assert resolve_points(Decimal("1050"), points_config.tiers) == 10

    def test_below_lowest_minimum_earns_nothing(self, points_config):
        """Test amount below the first tier."""
        assert resolve_points(Decimal("499.99"), points_config.tiers) == 0

    def test_bounds_are_inclusive(self, points_config):
        """Test tier bounds are inclusive."""
        assert resolve_points(Decimal("500"), points_config.tiers) == 10
        assert resolve_points(Decimal("4999"), points_config.tiers) == 10
        assert resolve_points(Decimal("5000"), points_config.tiers) == 20

    def test_above_highest_maximum_earns_nothing(self, points_config):
        """Test amount above the last tier."""
        assert resolve_points(Decimal("1000000"), points_config.tiers) == 0

    def test_negative_amount_earns_nothing(self, points_config):
        """Test negative amount."""
        assert resolve_points(Decimal("-10"), points_config.tiers) == 0

    def test_first_matching_tier_wins(self):
        """Test overlapping tiers resolve to the first listed."""
        tiers = _tiers(("0", "100", 5), ("50", "200", 9))
        assert resolve_points(Decimal("75"), tiers) == 5

    def test_monotonic_over_default_table(self, points_config):
        """Test earned points never decrease with the amount."""
        amounts = [Decimal(a) for a in range(0, 60000, 250)]
        earned = [resolve_points(a, points_config.tiers) for a in amounts]
        assert earned == sorted(earned)

    def test_empty_table(self):
        """Test empty tier table."""
        assert resolve_points(Decimal("1000"), ()) == 0


class TestDiscountForPoints:
    """Tests for the redemption calculator."""

    def test_scenario_b_discount(self, points_config):
        """Test 50 points give 50 MZN."""
        assert discount_for_points(50, points_config) == Decimal("50")

    def test_scenario_c_below_minimum(self, points_config):
        """Test 5 points give no discount."""
        assert discount_for_points(5, points_config) == Decimal("0")

    @pytest.mark.parametrize("points", [0, 1, 9])
    def test_below_minimum_is_zero(self, points_config, points):
        """Test any amount below the minimum gives no discount."""
        assert discount_for_points(points, points_config) == 0

    def test_fractional_rate_floors(self):
        """Test discount is floored to whole units."""
        config = PointsConfig(currency="MZN", tiers=(), discount_rate=Decimal("0.5"))
        assert discount_for_points(25, config) == Decimal("12")

    def test_negative_points(self, points_config):
        """Test negative points give no discount."""
        assert discount_for_points(-20, points_config) == 0


class TestFreezeTotals:
    """Tests for freezing sale totals."""

    def test_totals(self, points_config, rice, bread):
        """Test totals without redemption."""
        cart = Cart()
        cart.add(rice, 2)
        totals = freeze_totals(cart.snapshot(), points_config)

        assert totals.subtotal == Decimal("1050.00")
        assert totals.points_earned == 10
        assert totals.discount == 0
        assert totals.total == Decimal("1050.00")
        assert totals.points_used == 0

    def test_scenario_c_total_unchanged(self, points_config, rice):
        """Test total is unchanged below the minimum."""
        cart = Cart()
        cart.add(rice)
        totals = freeze_totals(cart.snapshot(), points_config, points_to_use=5)

        assert totals.discount == 0
        assert totals.total == Decimal("525.00")
        assert totals.points_used == 0

    def test_total_never_negative(self, points_config, bread):
        """Test total floors at zero."""
        cart = Cart()
        cart.add(bread)
        totals = freeze_totals(cart.snapshot(), points_config, points_to_use=100)

        assert totals.discount == Decimal("100")
        assert totals.total == Decimal("0")
        assert totals.points_used == 100


class TestPointsConfig:
    """Tests for config parsing."""

    def test_discount_percentage_form(self):
        """Test camelCase and percentage config keys."""
        config = PointsConfig.from_dict({
            "currency": "MZN",
            "tiers": [{"minAmount": 500, "maxAmount": 4999, "points": 10}],
            "discountPercentage": 50,
            "minimumPointsToRedeem": 20,
        })
        assert config.discount_rate == Decimal("0.5")
        assert config.minimum_points_to_redeem == 20
        assert config.tiers[0].min_amount == Decimal("500")

    def test_store_override(self, settings):
        """Test per-store config override."""
        settings.TILLMAN = {
            "STORE_POINTS_CONFIG": {
                "store-9": {"currency": "USD", "tiers": [], "discount_rate": "0.1"},
            },
        }
        assert get_points_config("store-9").currency == "USD"
        assert get_points_config("store-1").currency == "MZN"

    def test_overlapping_tiers_logged_on_load(self, settings, caplog):
        """Test loading a config with overlapping tiers logs a warning."""
        settings.TILLMAN = {
            "POINTS_CONFIG": {
                "currency": "MZN",
                "tiers": [
                    {"min_amount": 0, "max_amount": 100, "points": 5},
                    {"min_amount": 50, "max_amount": 200, "points": 9},
                ],
            },
        }
        config = get_points_config()

        assert "Tier table check failed" in caplog.text
        assert resolve_points(Decimal("75"), config.tiers) == 5

    def test_default_config_logs_nothing(self, caplog):
        """Test the default tier table loads without warnings."""
        get_points_config()
        assert "Tier table check failed" not in caplog.text

    def test_currency_defaults_to_setting(self, settings):
        """Test missing currency falls back to DEFAULT_CURRENCY."""
        settings.TILLMAN = {"DEFAULT_CURRENCY": "USD"}
        assert PointsConfig.from_dict({"tiers": []}).currency == "USD"
