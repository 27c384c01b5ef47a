"""Date helpers shared by the voting engine."""

from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime read from the store to aware UTC.

    Some backends (SQLite) hand back naive datetimes; those are stored in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def age_on(birth_date: Optional[date], today: date) -> Optional[int]:
    """Completed years between birth_date and today, or None when unknown."""
    if birth_date is None:
        return None
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years
