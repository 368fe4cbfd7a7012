from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from convention_voting.core.constants import MotionStatus
from convention_voting.db.models import (
    ActivityLog,
    Choice,
    Meeting,
    Motion,
    Pool,
    User,
    UserPool,
    Vote,
    VoteChoice,
)


def create_user(session: Session, username: str, first_name: str = "", last_name: str = "") -> User:
    user = User(username=username, first_name=first_name, last_name=last_name)
    session.add(user)
    session.commit()
    return user


def create_pool(session: Session, pool_key: str, pool_name: str) -> Pool:
    pool = Pool(pool_key=pool_key, pool_name=pool_name)
    session.add(pool)
    session.commit()
    return pool


def add_to_pool(session: Session, user: User, pool: Pool) -> None:
    session.add(UserPool(user_id=user.id, pool_id=pool.id))
    session.commit()


def create_meeting(
    session: Session,
    pool: Pool,
    start_date: datetime,
    end_date: Optional[datetime] = None,
    name: str = "Spring Convention",
) -> Meeting:
    meeting = Meeting(
        name=name,
        start_date=start_date,
        end_date=end_date or start_date + timedelta(hours=8),
        quorum_voting_pool_id=pool.id,
    )
    session.add(meeting)
    session.commit()
    return meeting


def create_motion(
    session: Session,
    meeting: Meeting,
    name: str = "Adopt the agenda",
    planned_duration: int = 10,
    seat_count: int = 1,
    voting_pool: Optional[Pool] = None,
) -> Motion:
    motion = Motion(
        meeting_id=meeting.id,
        name=name,
        planned_duration=planned_duration,
        seat_count=seat_count,
        voting_pool_id=voting_pool.id if voting_pool else None,
        status=MotionStatus.NOT_YET_STARTED,
    )
    session.add(motion)
    session.commit()
    return motion


def create_choices(session: Session, motion: Motion, names: List[str]) -> List[Choice]:
    choices = [Choice(motion_id=motion.id, name=name, sort_order=i) for i, name in enumerate(names)]
    session.add_all(choices)
    session.commit()
    return choices


def start_motion(session: Session, motion: Motion, started_at: datetime, end_override: Optional[datetime] = None) -> Motion:
    motion.status = MotionStatus.VOTING_ACTIVE
    motion.voting_started_at = started_at
    motion.end_override = end_override
    session.commit()
    return motion


def complete_motion(session: Session, motion: Motion, ended_at: datetime) -> Motion:
    motion.status = MotionStatus.VOTING_COMPLETE
    motion.voting_ended_at = ended_at
    session.commit()
    return motion


def record_vote(session: Session, user: User, motion: Motion, choices: List[Choice], abstain: bool = False) -> Vote:
    """Insert a ballot directly, bypassing eligibility checks."""
    vote = Vote(user_id=user.id, motion_id=motion.id, is_abstain=abstain)
    session.add(vote)
    session.flush()
    for choice in choices:
        session.add(VoteChoice(vote_id=vote.id, choice_id=choice.id))
    session.commit()
    return vote


def log_activity_at(session: Session, user: User, when: datetime, path: str = "/api/v1/voter/motions/open") -> None:
    session.add(ActivityLog(user_id=user.id, url_path=path, created_at=when))
    session.commit()
