"""Read-only reports for watchers.

Watchers see participation and, once voting is complete, final tallies.
They never see which choice an individual voted for.
"""
from datetime import datetime
from typing import Any, Dict, List, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from convention_voting.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MotionStatus
from convention_voting.core.exceptions import ConflictError, NotFoundError
from convention_voting.core.utils import isoformat
from convention_voting.db.models import Meeting, Motion, Pool, User, UserPool, Vote
from convention_voting.services.eligibility import effective_pool_id
from convention_voting.services.meeting import get_meeting, list_meetings
from convention_voting.services.quorum import get_active_voters_for_quorum, get_quorum_report
from convention_voting.services.tally import tally_motion
from convention_voting.services.time_window import format_remaining, window_for_motion

NOT_COMPLETED = "not_completed"


def _load_motion(db: Session, motion_id: int) -> Motion:
    motion = (
        db.query(Motion)
        .options(joinedload(Motion.meeting), joinedload(Motion.voting_pool))
        .filter(Motion.id == motion_id)
        .first()
    )
    if motion is None:
        raise NotFoundError(f"Motion with ID {motion_id} not found")
    return motion


def _require_complete(motion: Motion, what: str) -> None:
    if motion.status != MotionStatus.VOTING_COMPLETE:
        raise ConflictError(
            f"{what} only available for completed motions (status: voting_complete)",
            reason=NOT_COMPLETED,
        )


def _motion_summaries(db: Session, meeting_id: int) -> List[Dict[str, Any]]:
    vote_counts = (
        db.query(
            Vote.motion_id,
            func.count(Vote.id),
            func.sum(case((Vote.is_abstain.is_(True), 1), else_=0)),
        )
        .join(Motion, Motion.id == Vote.motion_id)
        .filter(Motion.meeting_id == meeting_id)
        .group_by(Vote.motion_id)
        .all()
    )
    counts = {motion_id: (int(total), int(abstentions or 0)) for motion_id, total, abstentions in vote_counts}

    motions = (
        db.query(Motion)
        .options(joinedload(Motion.voting_pool))
        .filter(Motion.meeting_id == meeting_id)
        .order_by(Motion.created_at.asc(), Motion.id.asc())
        .all()
    )

    summaries = []
    for motion in motions:
        total, abstentions = counts.get(motion.id, (0, 0))
        status = MotionStatus(motion.status)
        summaries.append({
            "motion_id": motion.id,
            "motion_name": motion.name,
            "status": status.value,
            "voting_pool_name": motion.voting_pool.pool_name if motion.voting_pool else None,
            "total_votes_cast": total,
            "total_abstentions": abstentions,
            "voting_started_at": isoformat(motion.voting_started_at),
            "voting_ended_at": isoformat(motion.voting_ended_at),
            "result": tally_motion(db, motion) if status == MotionStatus.VOTING_COMPLETE else None,
        })
    return summaries


def _meeting_report(db: Session, meeting: Meeting) -> Dict[str, Any]:
    return {
        "meeting_id": meeting.id,
        "meeting_name": meeting.name,
        "description": meeting.description,
        "start_date": isoformat(meeting.start_date),
        "end_date": isoformat(meeting.end_date),
        "quorum_pool_name": meeting.quorum_pool.pool_name if meeting.quorum_pool else None,
        "quorum_called_at": isoformat(meeting.quorum_called_at),
        "motion_summaries": _motion_summaries(db, meeting.id),
    }


def get_watcher_meetings(
    db: Session,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Dict[str, Any]], int]:
    meetings, total = list_meetings(db, page=page, limit=limit)
    return [_meeting_report(db, meeting) for meeting in meetings], total


def get_watcher_meeting_report(db: Session, meeting_id: int) -> Dict[str, Any]:
    return _meeting_report(db, get_meeting(db, meeting_id))


def get_watcher_quorum_report(db: Session, meeting_id: int, now: datetime) -> Dict[str, Any]:
    return get_quorum_report(db, meeting_id, now)


def get_watcher_quorum_voters(db: Session, meeting_id: int, now: datetime) -> List[Dict[str, Any]]:
    return get_active_voters_for_quorum(db, meeting_id, now)


def get_watcher_motion_result(db: Session, motion_id: int) -> Dict[str, Any]:
    """Final tally of a completed motion.

    Raises:
        NotFoundError: If the motion does not exist
        ConflictError: If voting on the motion is not complete
    """
    motion = _load_motion(db, motion_id)
    _require_complete(motion, "Results are")
    return tally_motion(db, motion)


def get_watcher_motion_voters(db: Session, motion_id: int) -> List[Dict[str, Any]]:
    """Who voted on a completed motion, by name. Choices are never included."""
    motion = _load_motion(db, motion_id)
    _require_complete(motion, "Voter list is")

    rows = (
        db.query(User.first_name, User.last_name, Vote.created_at)
        .join(Vote, Vote.user_id == User.id)
        .filter(Vote.motion_id == motion_id)
        .order_by(User.last_name.asc(), User.first_name.asc())
        .all()
    )
    return [
        {"first_name": first, "last_name": last, "voted_at": isoformat(voted_at)}
        for first, last, voted_at in rows
    ]


def get_watcher_motion_detail(db: Session, motion_id: int, now: datetime) -> Dict[str, Any]:
    """Motion report page: window, participation and, when complete, results."""
    motion = _load_motion(db, motion_id)
    status = MotionStatus(motion.status)
    window = window_for_motion(motion, now)
    pool_id = effective_pool_id(motion)

    eligible = (
        db.query(func.count(UserPool.user_id)).filter(UserPool.pool_id == pool_id).scalar()
    ) or 0
    pool_name = db.query(Pool.pool_name).filter(Pool.id == pool_id).scalar()

    total_votes = None
    if status != MotionStatus.NOT_YET_STARTED:
        total_votes = db.query(func.count(Vote.id)).filter(Vote.motion_id == motion_id).scalar() or 0

    return {
        "id": motion.id,
        "name": motion.name,
        "description": motion.description,
        "status": status.value,
        "seat_count": motion.seat_count,
        "planned_duration": motion.planned_duration,
        "meeting_id": motion.meeting_id,
        "meeting_name": motion.meeting.name,
        "voting_pool_name": pool_name,
        "voting_started_at": isoformat(motion.voting_started_at),
        "voting_ended_at": isoformat(motion.voting_ended_at),
        "end_override": isoformat(motion.end_override),
        "voting_ends_at": isoformat(window.ends_at),
        "time_remaining": format_remaining(window),
        "eligible_voter_count": eligible,
        "total_votes_cast": total_votes,
        "result": tally_motion(db, motion) if status == MotionStatus.VOTING_COMPLETE else None,
    }
