"""
Expiration math for batches, judged in the business timezone.

Every rule uses RESTOCKMAN["BUSINESS_TIMEZONE"], never the server or
caller clock, so "today" is the same for every user of the dashboard.

Examples (window = 7 days, today = 2024-03-01):
    - expires 2024-02-29 → -1 days, expired
    - expires 2024-03-01 →  0 days, expiring
    - expires 2024-03-08 →  7 days, expiring
    - expires 2024-03-09 →  8 days, fresh
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from restockman.conf import restockman_settings
from restockman.models.enums import ExpirationStatus


def business_today() -> date:
    """Current calendar date in the business timezone."""
    tz = ZoneInfo(restockman_settings.BUSINESS_TIMEZONE)
    return datetime.now(tz).date()


def days_until(expiration_date: date, today: date | None = None) -> int:
    """
    Whole days from today until expiration_date.

    Dates carry no time part, so the difference is already the
    ceiling of the elapsed days. Negative once the date has passed.
    """
    today = today or business_today()
    return (expiration_date - today).days


def status_for_days(days: int, window: int | None = None) -> ExpirationStatus:
    """Classify a days-until-expiration value."""
    if window is None:
        window = restockman_settings.EXPIRING_WINDOW_DAYS
    if days < 0:
        return ExpirationStatus.EXPIRED
    if days <= window:
        return ExpirationStatus.EXPIRING
    return ExpirationStatus.FRESH


def expiration_status(expiration_date: date, today: date | None = None) -> ExpirationStatus:
    return status_for_days(days_until(expiration_date, today))
