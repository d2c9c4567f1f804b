"""Calendar helpers."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def business_days_between(start: date, end: date) -> int:
    """Count Monday-Friday dates in the inclusive range ``[start, end]``.

    Returns 0 when ``end`` is before ``start``.
    """
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def today_in(timezone: str) -> date:
    """Return the current calendar date in ``timezone``."""
    return datetime.now(ZoneInfo(timezone)).date()
