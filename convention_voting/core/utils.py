"""General utility functions."""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime.

    Services accept ``now`` as a parameter and only fall back to this when the
    caller did not supply one.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert datetime to UTC timezone."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        # Assume UTC if no timezone (SQLite drops tzinfo on the way back)
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    """ISO 8601 string of an aware UTC datetime, or None."""
    dt = to_utc(dt)
    return dt.isoformat() if dt is not None else None
