"""Activity logging for quorum tracking.

Rows are plain (user, path, timestamp) records. They are tied to meetings
only at query time, by pool membership and the meeting's time range.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from convention_voting.core.constants import MAX_ACTIVITY_PATH_LENGTH
from convention_voting.core.logging_config import get_logger
from convention_voting.core.utils import to_utc, utc_now
from convention_voting.db.models import ActivityLog
from convention_voting.db.session import get_db_context, transaction

logger = get_logger(__name__)


def log_activity(
    db: Session,
    user_id: str,
    url_path: str,
    now: Optional[datetime] = None,
    max_path_length: int = MAX_ACTIVITY_PATH_LENGTH,
) -> ActivityLog:
    """Append one activity row. The path is truncated to the column width."""
    entry = ActivityLog(
        user_id=user_id,
        url_path=url_path[:max_path_length],
        created_at=to_utc(now) if now is not None else utc_now(),
    )
    with transaction(db):
        db.add(entry)
    return entry


def record_activity_safely(
    user_id: str,
    url_path: str,
    now: Optional[datetime] = None,
    max_path_length: int = MAX_ACTIVITY_PATH_LENGTH,
    session_factory=None,
) -> bool:
    """Fire-and-forget wrapper around ``log_activity``.

    Opens its own session so it can run after the response is sent. Any
    failure is logged and swallowed; the request that triggered it has
    already completed. Returns whether the row was written.
    """
    try:
        with (session_factory or get_db_context)() as db:
            log_activity(db, user_id, url_path, now=now, max_path_length=max_path_length)
        return True
    except Exception as e:
        logger.warning(
            "activity_log_failed",
            user_id=user_id,
            path=url_path[:max_path_length],
            error=str(e),
            exception_type=type(e).__name__,
        )
        return False
