"""Motion business logic.

Status changes follow ``VALID_STATUS_TRANSITIONS``: one step forward at a
time, never backward. The transition itself is a single conditional UPDATE
on the status observed when the request started, so two admins advancing the
same motion cannot both succeed.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from convention_voting.core.constants import INITIAL_SORT_ORDER, VALID_STATUS_TRANSITIONS, MotionStatus
from convention_voting.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from convention_voting.core.logging_config import get_logger
from convention_voting.core.utils import isoformat, to_utc, utc_now
from convention_voting.db.models import Choice, Meeting, Motion, Pool
from convention_voting.db.session import transaction
from convention_voting.services.eligibility import load_motion
from convention_voting.services.time_window import format_remaining, window_for_motion

logger = get_logger(__name__)

CHOICES_LOCKED = "choices_locked"


def _parse_status(status) -> MotionStatus:
    try:
        return MotionStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown motion status: '{status}'")


def check_status_transition(current, requested) -> None:
    """Raise InvalidTransitionError unless ``current -> requested`` is allowed."""
    current = MotionStatus(current)
    requested = _parse_status(requested)
    if requested not in VALID_STATUS_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Invalid status transition: cannot change from '{current.value}' to '{requested.value}'",
            current=current.value,
            requested=requested.value,
        )


def _ensure_pool_exists(db: Session, pool_id: Optional[int]) -> None:
    if pool_id is None:
        return
    if db.query(Pool.id).filter(Pool.id == pool_id).first() is None:
        raise NotFoundError(f"Pool with ID {pool_id} does not exist")


def _validate_motion_numbers(planned_duration: Optional[int], seat_count: Optional[int]) -> None:
    if planned_duration is not None and planned_duration <= 0:
        raise ValidationError("Planned duration must be a positive number of minutes")
    if seat_count is not None and seat_count < 1:
        raise ValidationError("Seat count must be at least 1")


def serialize_motion(motion: Motion, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Admin view of a motion, including the countdown at ``now``."""
    window = window_for_motion(motion, now or utc_now())
    return {
        "id": motion.id,
        "meeting_id": motion.meeting_id,
        "name": motion.name,
        "description": motion.description,
        "planned_duration": motion.planned_duration,
        "seat_count": motion.seat_count,
        "voting_pool_id": motion.voting_pool_id,
        "status": MotionStatus(motion.status).value,
        "end_override": isoformat(motion.end_override),
        "voting_started_at": isoformat(motion.voting_started_at),
        "voting_ended_at": isoformat(motion.voting_ended_at),
        "voting_ends_at": isoformat(window.ends_at),
        "time_remaining": format_remaining(window),
        "is_urgent": window.is_urgent,
        "is_expired": window.is_expired,
        "created_at": isoformat(motion.created_at),
        "updated_at": isoformat(motion.updated_at),
    }


def serialize_choice(choice: Choice) -> Dict[str, Any]:
    return {
        "id": choice.id,
        "motion_id": choice.motion_id,
        "name": choice.name,
        "sort_order": choice.sort_order,
    }


# ---------------------------------------------------------------------------
# Motions
# ---------------------------------------------------------------------------

def create_motion(
    db: Session,
    meeting_id: int,
    name: str,
    planned_duration: int,
    seat_count: int = 1,
    description: Optional[str] = None,
    voting_pool_id: Optional[int] = None,
) -> Motion:
    """Create a motion in ``not_yet_started``.

    Raises:
        NotFoundError: If the meeting or the voting pool does not exist
        ValidationError: If duration or seat count is out of range
    """
    if db.query(Meeting.id).filter(Meeting.id == meeting_id).first() is None:
        raise NotFoundError(f"Meeting with ID {meeting_id} does not exist")
    _ensure_pool_exists(db, voting_pool_id)
    _validate_motion_numbers(planned_duration, seat_count)

    motion = Motion(
        meeting_id=meeting_id,
        name=name,
        description=description,
        planned_duration=planned_duration,
        seat_count=seat_count,
        voting_pool_id=voting_pool_id,
        status=MotionStatus.NOT_YET_STARTED,
    )
    with transaction(db):
        db.add(motion)
    db.refresh(motion)

    logger.info("motion_created", motion_id=motion.id, meeting_id=meeting_id)
    return motion


def get_motion(db: Session, motion_id: int) -> Motion:
    motion = db.query(Motion).filter(Motion.id == motion_id).first()
    if motion is None:
        raise NotFoundError(f"Motion with ID {motion_id} not found")
    return motion


def list_motions_for_meeting(db: Session, meeting_id: int) -> List[Motion]:
    if db.query(Meeting.id).filter(Meeting.id == meeting_id).first() is None:
        raise NotFoundError(f"Meeting with ID {meeting_id} not found")
    return db.query(Motion).filter(Motion.meeting_id == meeting_id).order_by(Motion.id).all()


# Fields an admin may edit directly; status and timestamps have their own paths
EDITABLE_MOTION_FIELDS = ("name", "description", "planned_duration", "seat_count", "voting_pool_id")


def update_motion(db: Session, motion_id: int, **updates) -> Motion:
    """Update editable motion fields. Only keys present in ``updates`` change."""
    changes = {key: value for key, value in updates.items() if key in EDITABLE_MOTION_FIELDS}
    if not changes:
        raise ValidationError("No fields to update")

    motion = get_motion(db, motion_id)
    if "voting_pool_id" in changes:
        _ensure_pool_exists(db, changes["voting_pool_id"])
    _validate_motion_numbers(changes.get("planned_duration"), changes.get("seat_count"))

    with transaction(db):
        for key, value in changes.items():
            setattr(motion, key, value)
    db.refresh(motion)

    logger.info("motion_updated", motion_id=motion_id, fields=sorted(changes))
    return motion


def delete_motion(db: Session, motion_id: int) -> None:
    """Delete a motion with its choices and votes."""
    motion = get_motion(db, motion_id)
    with transaction(db):
        db.delete(motion)
    logger.info("motion_deleted", motion_id=motion_id)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def update_motion_status(
    db: Session,
    motion_id: int,
    status,
    now: datetime,
    end_override: Optional[datetime] = None,
) -> Motion:
    """Advance a motion one step through its lifecycle.

    Entering ``voting_active`` stamps ``voting_started_at``; entering
    ``voting_complete`` stamps ``voting_ended_at``. ``end_override`` is only
    accepted together with the move into ``voting_active``.

    Raises:
        NotFoundError: If the motion does not exist
        InvalidTransitionError: If the transition or the override is not allowed
        ConflictError: If another request changed the status first
    """
    requested = _parse_status(status)
    motion = get_motion(db, motion_id)
    current = MotionStatus(motion.status)

    check_status_transition(current, requested)

    if end_override is not None and requested != MotionStatus.VOTING_ACTIVE:
        raise InvalidTransitionError(
            "end_override can only be set when status is 'voting_active'",
            current=current.value,
            requested=requested.value,
        )

    now = to_utc(now)
    values = {Motion.status: requested, Motion.updated_at: now}
    if requested == MotionStatus.VOTING_ACTIVE:
        values[Motion.voting_started_at] = now
    elif requested == MotionStatus.VOTING_COMPLETE:
        values[Motion.voting_ended_at] = now
    if end_override is not None:
        values[Motion.end_override] = to_utc(end_override)

    with transaction(db):
        updated = (
            db.query(Motion)
            .filter(Motion.id == motion_id, Motion.status == current)
            .update(values, synchronize_session=False)
        )
        if updated == 0:
            if db.query(Motion.id).filter(Motion.id == motion_id).first() is None:
                raise NotFoundError(f"Motion with ID {motion_id} not found")
            raise ConflictError(
                f"Motion status changed concurrently; it is no longer '{current.value}'"
            )
    db.refresh(motion)

    logger.info(
        "motion_status_changed",
        motion_id=motion_id,
        from_status=current.value,
        to_status=requested.value,
        end_override=isoformat(motion.end_override),
    )
    return motion


def set_motion_end_override(
    db: Session,
    motion_id: int,
    end_override: Optional[datetime],
    now: datetime,
) -> Motion:
    """Set or clear the end override of an active motion.

    Raises:
        NotFoundError: If the motion does not exist
        InvalidTransitionError: If the motion is not ``voting_active``
    """
    with transaction(db):
        updated = (
            db.query(Motion)
            .filter(Motion.id == motion_id, Motion.status == MotionStatus.VOTING_ACTIVE)
            .update(
                {Motion.end_override: to_utc(end_override), Motion.updated_at: to_utc(now)},
                synchronize_session=False,
            )
        )
        if updated == 0:
            motion = db.query(Motion).filter(Motion.id == motion_id).first()
            if motion is None:
                raise NotFoundError(f"Motion with ID {motion_id} not found")
            raise InvalidTransitionError(
                "end_override can only be set when motion status is 'voting_active'",
                current=MotionStatus(motion.status).value,
                requested=MotionStatus.VOTING_ACTIVE.value,
            )

    motion = get_motion(db, motion_id)
    logger.info("motion_end_override_set", motion_id=motion_id, end_override=isoformat(end_override))
    return motion


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------

def ensure_choices_mutable(db: Session, motion_id: int) -> Motion:
    """Lock the motion row and check its choices may still change.

    Must be called inside the transaction that modifies the choices.
    """
    motion = load_motion(db, motion_id, for_update=True)
    if motion.status != MotionStatus.NOT_YET_STARTED:
        raise ConflictError("Cannot modify choices after voting has started", reason=CHOICES_LOCKED)
    return motion


def _get_choice(db: Session, choice_id: int) -> Choice:
    choice = db.query(Choice).filter(Choice.id == choice_id).first()
    if choice is None:
        raise NotFoundError(f"Choice with ID {choice_id} not found")
    return choice


def list_choices(db: Session, motion_id: int) -> List[Choice]:
    get_motion(db, motion_id)
    return (
        db.query(Choice)
        .filter(Choice.motion_id == motion_id)
        .order_by(Choice.sort_order, Choice.id)
        .all()
    )


def _place_choice(db: Session, motion_id: int, choice: Choice, position: Optional[int]) -> None:
    """Put ``choice`` at ``position`` and renumber the motion's choices densely.

    ``None`` appends. Out-of-range positions are clamped to the ends.
    """
    others = [
        c
        for c in db.query(Choice)
        .filter(Choice.motion_id == motion_id)
        .order_by(Choice.sort_order, Choice.id)
        .all()
        if c is not choice
    ]
    if position is None:
        position = len(others)
    position = max(0, min(position, len(others)))
    others.insert(position, choice)
    for index, other in enumerate(others, start=INITIAL_SORT_ORDER):
        other.sort_order = index


def create_choice(db: Session, motion_id: int, name: str, sort_order: Optional[int] = None) -> Choice:
    """Add a choice. Without ``sort_order`` it goes after the last one."""
    with transaction(db):
        ensure_choices_mutable(db, motion_id)
        choice = Choice(motion_id=motion_id, name=name, sort_order=INITIAL_SORT_ORDER)
        _place_choice(db, motion_id, choice, sort_order)
        db.add(choice)
    db.refresh(choice)

    logger.info("choice_created", choice_id=choice.id, motion_id=motion_id)
    return choice


def update_choice(
    db: Session,
    choice_id: int,
    name: Optional[str] = None,
    sort_order: Optional[int] = None,
) -> Choice:
    if name is None and sort_order is None:
        raise ValidationError("No fields to update")

    choice = _get_choice(db, choice_id)
    with transaction(db):
        ensure_choices_mutable(db, choice.motion_id)
        if name is not None:
            choice.name = name
        if sort_order is not None:
            _place_choice(db, choice.motion_id, choice, sort_order)
    db.refresh(choice)
    return choice


def reorder_choices(db: Session, motion_id: int, choice_ids: Sequence[int]) -> List[Choice]:
    """Give each listed choice its list position as sort order.

    ``choice_ids`` must name every choice of the motion exactly once.
    """
    with transaction(db):
        ensure_choices_mutable(db, motion_id)
        choices = {c.id: c for c in db.query(Choice).filter(Choice.motion_id == motion_id).all()}

        if len(set(choice_ids)) != len(choice_ids) or set(choice_ids) != set(choices):
            raise ValidationError("Choice list must contain every choice of the motion exactly once")

        for position, choice_id in enumerate(choice_ids):
            choices[choice_id].sort_order = position

    logger.info("choices_reordered", motion_id=motion_id, count=len(choice_ids))
    return list_choices(db, motion_id)


def delete_choice(db: Session, choice_id: int) -> None:
    """Delete a choice and close the gap it leaves in the sort order."""
    choice = _get_choice(db, choice_id)
    motion_id = choice.motion_id

    with transaction(db):
        ensure_choices_mutable(db, motion_id)
        db.delete(choice)
        db.flush()
        remaining = (
            db.query(Choice)
            .filter(Choice.motion_id == motion_id)
            .order_by(Choice.sort_order, Choice.id)
            .all()
        )
        for position, other in enumerate(remaining):
            other.sort_order = position

    logger.info("choice_deleted", choice_id=choice_id, motion_id=motion_id)
