"""Voter eligibility.

Whether a user may vote on a motion, and if not, the first reason that
applies. Reasons are checked in ``IneligibilityReason`` declaration order:
already voted, not in the effective pool, motion not active, window ended.
"""
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional

from sqlalchemy import exists, func
from sqlalchemy.orm import Session, joinedload

from convention_voting.core.constants import IneligibilityReason, MotionStatus
from convention_voting.core.exceptions import NotFoundError
from convention_voting.core.utils import isoformat
from convention_voting.db.models import Meeting, Motion, Pool, UserPool, Vote
from convention_voting.services.time_window import VotingWindow, format_remaining, window_for_motion


class Eligibility(NamedTuple):
    can_vote: bool
    reason: Optional[IneligibilityReason] = None


ELIGIBLE = Eligibility(can_vote=True)


def effective_pool_id(motion: Motion) -> int:
    """The motion's own pool, or its meeting's quorum pool."""
    if motion.voting_pool_id is not None:
        return motion.voting_pool_id
    return motion.meeting.quorum_voting_pool_id


def has_user_voted(db: Session, user_id: str, motion_id: int) -> bool:
    return db.query(Vote.id).filter(Vote.user_id == user_id, Vote.motion_id == motion_id).first() is not None


def is_user_in_pool(db: Session, user_id: str, pool_id: int) -> bool:
    return db.query(UserPool.user_id).filter(UserPool.user_id == user_id, UserPool.pool_id == pool_id).first() is not None


def load_motion(db: Session, motion_id: int, for_update: bool = False) -> Motion:
    """Fetch a motion with its meeting, or raise NotFoundError."""
    query = db.query(Motion).options(joinedload(Motion.meeting)).filter(Motion.id == motion_id)
    if for_update:
        query = query.with_for_update(of=Motion)
    motion = query.first()
    if motion is None:
        raise NotFoundError("Motion not found")
    return motion


def evaluate_eligibility(
    db: Session,
    user_id: str,
    motion: Motion,
    now: datetime,
    window: Optional[VotingWindow] = None,
) -> Eligibility:
    """Decide whether ``user_id`` may vote on ``motion`` at ``now``.

    Pass ``window`` when the caller already computed it for the same ``now``
    so one request never observes two different clocks.
    """
    if has_user_voted(db, user_id, motion.id):
        return Eligibility(False, IneligibilityReason.ALREADY_VOTED)

    if not is_user_in_pool(db, user_id, effective_pool_id(motion)):
        return Eligibility(False, IneligibilityReason.NOT_IN_POOL)

    if motion.status != MotionStatus.VOTING_ACTIVE:
        return Eligibility(False, IneligibilityReason.NOT_ACTIVE)

    if window is None:
        window = window_for_motion(motion, now)
    if window.is_expired:
        return Eligibility(False, IneligibilityReason.VOTING_ENDED)

    return ELIGIBLE


def _pool_name(db: Session, pool_id: int) -> Optional[str]:
    return db.query(Pool.pool_name).filter(Pool.id == pool_id).scalar()


def _window_fields(window: VotingWindow) -> Dict[str, Any]:
    return {
        "voting_ends_at": isoformat(window.ends_at),
        "remaining_seconds": window.remaining_seconds,
        "overtime_seconds": window.overtime_seconds,
        "is_urgent": window.is_urgent,
        "is_expired": window.is_expired,
        "time_remaining": format_remaining(window),
    }


def get_motion_for_voting(db: Session, motion_id: int, user_id: str, now: datetime) -> Dict[str, Any]:
    """Motion details, ordered choices and the user's vote status.

    Raises:
        NotFoundError: If the motion does not exist
    """
    motion = load_motion(db, motion_id)
    window = window_for_motion(motion, now)
    eligibility = evaluate_eligibility(db, user_id, motion, now, window=window)

    result = {
        "id": motion.id,
        "name": motion.name,
        "description": motion.description,
        "planned_duration": motion.planned_duration,
        "seat_count": motion.seat_count,
        "status": MotionStatus(motion.status).value,
        "voting_pool_name": _pool_name(db, effective_pool_id(motion)),
        "meeting_id": motion.meeting_id,
        "meeting_name": motion.meeting.name,
        "voting_started_at": isoformat(motion.voting_started_at),
        "choices": [
            {"id": choice.id, "name": choice.name, "sort_order": choice.sort_order}
            for choice in motion.choices
        ],
        "has_voted": eligibility.reason == IneligibilityReason.ALREADY_VOTED,
        "can_vote": eligibility.can_vote,
        "voting_ended_reason": eligibility.reason.value if eligibility.reason else None,
    }
    result.update(_window_fields(window))
    return result


def get_open_motions_for_user(db: Session, user_id: str, now: datetime) -> List[Dict[str, Any]]:
    """Active motions in the user's effective pools that they have not voted on.

    Ordered by when voting started, oldest first.
    """
    already_voted = exists().where(Vote.motion_id == Motion.id, Vote.user_id == user_id)
    motions = (
        db.query(Motion)
        .join(Meeting, Motion.meeting_id == Meeting.id)
        .join(UserPool, UserPool.pool_id == func.coalesce(Motion.voting_pool_id, Meeting.quorum_voting_pool_id))
        .options(joinedload(Motion.meeting))
        .filter(
            Motion.status == MotionStatus.VOTING_ACTIVE,
            UserPool.user_id == user_id,
            ~already_voted,
        )
        .order_by(Motion.voting_started_at.asc(), Motion.id.asc())
        .all()
    )

    results = []
    for motion in motions:
        window = window_for_motion(motion, now)
        item = {
            "id": motion.id,
            "name": motion.name,
            "description": motion.description,
            "planned_duration": motion.planned_duration,
            "seat_count": motion.seat_count,
            "voting_pool_name": _pool_name(db, effective_pool_id(motion)),
            "meeting_id": motion.meeting_id,
            "meeting_name": motion.meeting.name,
            "voting_started_at": isoformat(motion.voting_started_at),
        }
        item.update(_window_fields(window))
        results.append(item)
    return results
