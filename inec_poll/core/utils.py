"""General utility functions."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def has_ended(end_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Check whether a poll's voting window has closed.

    A poll without an end date never ends. A poll whose end date equals the
    current instant counts as ended (voting requires end_date strictly after now).

    Args:
        end_date: Poll end date (timezone-aware or naive, assumed UTC if naive)
        now: Reference time, defaults to the current UTC time

    Returns:
        bool: True if the poll can no longer accept votes
    """
    if end_date is None:
        return False
    now = to_utc(now) if now is not None else utcnow()
    return to_utc(end_date) <= now
