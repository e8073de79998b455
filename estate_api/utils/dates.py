"""
Date range helpers for dashboard filters.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare against timezone-aware columns."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def end_of_day(value: datetime) -> datetime:
    """Move a datetime to the last microsecond of its calendar day."""
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)


def inclusive_range(
    date_from: Optional[datetime],
    date_to: Optional[datetime]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Normalize an optional ``[from, to]`` filter.

    The upper bound always covers its whole calendar day, so ``to=2024-03-01``
    includes records created at any time on March 1st. Either bound may be
    omitted.
    """
    lower = as_utc(date_from) if date_from is not None else None
    upper = as_utc(end_of_day(date_to)) if date_to is not None else None
    return lower, upper
