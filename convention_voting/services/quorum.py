"""Quorum calculation.

A meeting's quorum counts the distinct members of its quorum pool with any
activity between the meeting start and the cutoff. The cutoff is
``quorum_called_at`` once quorum has been called, otherwise the current
time, so live reports move forward on every call.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from convention_voting.core.exceptions import NotFoundError
from convention_voting.core.logging_config import get_logger
from convention_voting.core.utils import isoformat, to_utc
from convention_voting.db.models import ActivityLog, Meeting, Pool, User, UserPool
from convention_voting.db.session import transaction

logger = get_logger(__name__)


def _get_meeting(db: Session, meeting_id: int) -> Meeting:
    meeting = db.query(Meeting).filter(Meeting.id == meeting_id).first()
    if meeting is None:
        raise NotFoundError(f"Meeting with ID {meeting_id} not found")
    return meeting


def quorum_cutoff(meeting: Meeting, now: datetime) -> datetime:
    if meeting.quorum_called_at is not None:
        return to_utc(meeting.quorum_called_at)
    return to_utc(now)


def quorum_percentage(active: int, total: int) -> float:
    if total == 0:
        return 0.0
    return active / total * 100


def _active_filter(meeting: Meeting, cutoff: datetime):
    return (
        UserPool.pool_id == meeting.quorum_voting_pool_id,
        ActivityLog.created_at >= to_utc(meeting.start_date),
        ActivityLog.created_at <= cutoff,
    )


def get_quorum_report(db: Session, meeting_id: int, now: datetime) -> Dict[str, Any]:
    """Live or frozen quorum figures for a meeting.

    Raises:
        NotFoundError: If the meeting does not exist
    """
    meeting = _get_meeting(db, meeting_id)
    cutoff = quorum_cutoff(meeting, now)

    total_eligible = (
        db.query(func.count(func.distinct(UserPool.user_id)))
        .filter(UserPool.pool_id == meeting.quorum_voting_pool_id)
        .scalar()
    ) or 0

    active = (
        db.query(func.count(func.distinct(ActivityLog.user_id)))
        .select_from(ActivityLog)
        .join(UserPool, UserPool.user_id == ActivityLog.user_id)
        .filter(*_active_filter(meeting, cutoff))
        .scalar()
    ) or 0

    pool_name = db.query(Pool.pool_name).filter(Pool.id == meeting.quorum_voting_pool_id).scalar()

    return {
        "meeting_id": meeting.id,
        "meeting_name": meeting.name,
        "quorum_voting_pool_id": meeting.quorum_voting_pool_id,
        "quorum_voting_pool_name": pool_name,
        "total_eligible_voters": total_eligible,
        "active_voter_count": active,
        "active_voter_percentage": quorum_percentage(active, total_eligible),
        "quorum_called_at": isoformat(meeting.quorum_called_at),
        "is_frozen": meeting.quorum_called_at is not None,
        "cutoff_time": isoformat(cutoff),
        "meeting_start_date": isoformat(meeting.start_date),
    }


def get_active_voters_for_quorum(db: Session, meeting_id: int, now: datetime) -> List[Dict[str, Any]]:
    """Pool members counted toward quorum, most recently active first."""
    meeting = _get_meeting(db, meeting_id)
    cutoff = quorum_cutoff(meeting, now)

    last_activity = func.max(ActivityLog.created_at).label("last_activity")
    rows = (
        db.query(User.id, User.username, User.first_name, User.last_name, last_activity)
        .join(UserPool, UserPool.user_id == User.id)
        .join(ActivityLog, ActivityLog.user_id == User.id)
        .filter(*_active_filter(meeting, cutoff))
        .group_by(User.id, User.username, User.first_name, User.last_name)
        .order_by(last_activity.desc(), User.username)
        .all()
    )

    return [
        {
            "user_id": row.id,
            "username": row.username,
            "first_name": row.first_name,
            "last_name": row.last_name,
            "last_activity": isoformat(row.last_activity),
        }
        for row in rows
    ]


def call_quorum(db: Session, meeting_id: int, called_at: Optional[datetime]) -> Meeting:
    """Freeze quorum at ``called_at``, or resume live counting with None.

    Raises:
        NotFoundError: If the meeting does not exist
    """
    meeting = _get_meeting(db, meeting_id)
    with transaction(db):
        meeting.quorum_called_at = to_utc(called_at)
    db.refresh(meeting)

    if called_at is None:
        logger.info("quorum_cleared", meeting_id=meeting_id)
    else:
        logger.info("quorum_called", meeting_id=meeting_id, quorum_called_at=isoformat(called_at))
    return meeting
