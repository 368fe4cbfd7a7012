"""Meeting business logic."""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from convention_voting.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from convention_voting.core.exceptions import NotFoundError, ValidationError
from convention_voting.core.logging_config import get_logger
from convention_voting.core.utils import isoformat, to_utc
from convention_voting.db.models import Meeting, Pool
from convention_voting.db.session import transaction

logger = get_logger(__name__)

EDITABLE_MEETING_FIELDS = ("name", "description", "start_date", "end_date", "quorum_voting_pool_id")


def _ensure_pool_exists(db: Session, pool_id: int) -> None:
    if db.query(Pool.id).filter(Pool.id == pool_id).first() is None:
        raise NotFoundError(f"Pool with ID {pool_id} does not exist")


def _check_dates(start_date: datetime, end_date: datetime) -> None:
    if to_utc(end_date) <= to_utc(start_date):
        raise ValidationError("End date must be after start date")


def serialize_meeting(meeting: Meeting) -> Dict[str, Any]:
    return {
        "id": meeting.id,
        "name": meeting.name,
        "description": meeting.description,
        "start_date": isoformat(meeting.start_date),
        "end_date": isoformat(meeting.end_date),
        "quorum_voting_pool_id": meeting.quorum_voting_pool_id,
        "quorum_voting_pool_name": meeting.quorum_pool.pool_name if meeting.quorum_pool else None,
        "quorum_called_at": isoformat(meeting.quorum_called_at),
        "created_at": isoformat(meeting.created_at),
        "updated_at": isoformat(meeting.updated_at),
    }


def create_meeting(
    db: Session,
    name: str,
    start_date: datetime,
    end_date: datetime,
    quorum_voting_pool_id: int,
    description: Optional[str] = None,
) -> Meeting:
    """Create a new meeting.

    Raises:
        NotFoundError: If the quorum pool does not exist
        ValidationError: If the end date is not after the start date
    """
    _ensure_pool_exists(db, quorum_voting_pool_id)
    _check_dates(start_date, end_date)

    meeting = Meeting(
        name=name,
        description=description,
        start_date=to_utc(start_date),
        end_date=to_utc(end_date),
        quorum_voting_pool_id=quorum_voting_pool_id,
    )
    with transaction(db):
        db.add(meeting)
    db.refresh(meeting)

    logger.info("meeting_created", meeting_id=meeting.id, quorum_voting_pool_id=quorum_voting_pool_id)
    return meeting


def get_meeting(db: Session, meeting_id: int) -> Meeting:
    meeting = (
        db.query(Meeting)
        .options(joinedload(Meeting.quorum_pool))
        .filter(Meeting.id == meeting_id)
        .first()
    )
    if meeting is None:
        raise NotFoundError(f"Meeting with ID {meeting_id} not found")
    return meeting


def list_meetings(
    db: Session,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Meeting], int]:
    """One page of meetings, newest start date first, and the total count."""
    total = db.query(Meeting).count()
    meetings = (
        db.query(Meeting)
        .options(joinedload(Meeting.quorum_pool))
        .order_by(Meeting.start_date.desc(), Meeting.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return meetings, total


def update_meeting(db: Session, meeting_id: int, **updates) -> Meeting:
    changes = {key: value for key, value in updates.items() if key in EDITABLE_MEETING_FIELDS}
    if not changes:
        raise ValidationError("No fields to update")

    meeting = get_meeting(db, meeting_id)
    if "quorum_voting_pool_id" in changes:
        _ensure_pool_exists(db, changes["quorum_voting_pool_id"])
    for key in ("start_date", "end_date"):
        if key in changes:
            changes[key] = to_utc(changes[key])
    _check_dates(changes.get("start_date", meeting.start_date), changes.get("end_date", meeting.end_date))

    with transaction(db):
        for key, value in changes.items():
            setattr(meeting, key, value)
    db.refresh(meeting)

    logger.info("meeting_updated", meeting_id=meeting_id, fields=sorted(changes))
    return meeting


def delete_meeting(db: Session, meeting_id: int) -> None:
    """Delete a meeting and everything under it."""
    meeting = get_meeting(db, meeting_id)
    with transaction(db):
        db.delete(meeting)
    logger.info("meeting_deleted", meeting_id=meeting_id)
