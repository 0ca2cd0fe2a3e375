"""
Tillman configuration.

Usage in settings.py:
    TILLMAN = {
        "REMOTE_BASE_URL": "https://hq.example.com/api",
        "REMOTE_API_KEY": "...",
        "STORE_POINTS_CONFIG": {
            "store-1": {"currency": "MZN", "tiers": [...], "discount_rate": "1"},
        },
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


DEFAULT_POINTS_CONFIG: dict[str, Any] = {
    "currency": "MZN",
    "tiers": [
        {"min_amount": 500, "max_amount": 4999, "points": 10},
        {"min_amount": 5000, "max_amount": 12999, "points": 20},
        {"min_amount": 13000, "max_amount": 25999, "points": 30},
        {"min_amount": 26000, "max_amount": 33999, "points": 40},
        {"min_amount": 34000, "max_amount": 41999, "points": 50},
        {"min_amount": 42000, "max_amount": 46999, "points": 60},
        {"min_amount": 47000, "max_amount": 999999, "points": 80},
    ],
    # 1 point = 1 MZN
    "discount_rate": "1",
    "minimum_points_to_redeem": 10,
}


@dataclass
class TillmanSettings:
    """Tillman configuration settings."""

    # Points program
    POINTS_CONFIG: dict = field(default_factory=lambda: dict(DEFAULT_POINTS_CONFIG))
    STORE_POINTS_CONFIG: dict = field(default_factory=dict)
    DEFAULT_CURRENCY: str = "MZN"
    PAYMENT_METHODS: tuple = ("cash", "card", "mobile")

    # Remote store
    REMOTE_BACKEND: str = "tillman.adapters.http_remote.HttpRemoteBackend"
    REMOTE_BASE_URL: str = ""
    REMOTE_API_KEY: str = ""
    REMOTE_TIMEOUT_SECONDS: float = 10.0

    # Offline outbox
    OUTBOX_BACKEND: str = "tillman.adapters.outbox_db.DatabaseOutbox"
    CONNECTIVITY_CHECK_INTERVAL: int = 30
    SYNC_ON_RECONNECT: bool = True
    SETTLED_CLEANUP_DAYS: int = 90


def get_tillman_settings() -> TillmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "TILLMAN", {})
    return TillmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_tillman_settings(), name)


tillman_settings = _LazySettings()
