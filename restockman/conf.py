"""
Restockman configuration.

Usage in settings.py:
    RESTOCKMAN = {
        "BUSINESS_TIMEZONE": "Asia/Manila",
        "EXPIRING_WINDOW_DAYS": 7,
        "ATOMIC_RESTOCK": True,
        "COST_METHOD": "latest",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class RestockmanSettings:
    """Restockman configuration settings."""

    # IANA zone that defines "today" for every date rule
    BUSINESS_TIMEZONE: str = "Asia/Manila"

    # Days to expiration (inclusive) that count as "expiring"
    EXPIRING_WINDOW_DAYS: int = 7

    # Defaults for lazily created inventory positions
    DEFAULT_LOW_STOCK_THRESHOLD: int = 10
    DEFAULT_MIN_STOCK_LEVEL: int = 10
    DEFAULT_LOCATION: str = "Main Storage"

    # Restock input bounds
    MAX_QUANTITY: int = 1_000_000
    MAX_COST_PER_UNIT: int = 1_000_000
    MAX_SHELF_LIFE_DAYS: int = 365 * 5
    MAX_RECEIVED_AGE_DAYS: int = 365

    # Run restock steps inside one database transaction
    ATOMIC_RESTOCK: bool = True

    # "latest" or "weighted_average"
    COST_METHOD: str = "latest"

    # Whole-restock deadline in seconds (0 = no deadline)
    RESTOCK_DEADLINE_SECONDS: float = 30

    # Product validation backend (dotted path)
    PRODUCT_VALIDATOR: str = "restockman.adapters.availability.AvailabilityProductValidator"

    # Permission required to retire a batch ("" = any authenticated user)
    RETIRE_PERMISSION: str = "restockman.retire_batch"


def get_restockman_settings() -> RestockmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "RESTOCKMAN", {})
    return RestockmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in RestockmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_restockman_settings(), name)


restockman_settings = _LazySettings()
