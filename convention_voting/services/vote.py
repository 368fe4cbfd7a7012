"""Vote business logic."""
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from convention_voting.core.constants import IneligibilityReason
from convention_voting.core.exceptions import ConflictError, ForbiddenError
from convention_voting.core.logging_config import get_logger
from convention_voting.core.utils import isoformat, to_utc
from convention_voting.db.models import Vote, VoteChoice
from convention_voting.db.models.vote import VOTE_UNIQUE_CONSTRAINT
from convention_voting.db.session import transaction
from convention_voting.services.eligibility import evaluate_eligibility, load_motion
from convention_voting.services.vote_validator import validate_vote

logger = get_logger(__name__)

ELIGIBILITY_MESSAGES = {
    IneligibilityReason.ALREADY_VOTED: "You have already voted on this motion",
    IneligibilityReason.NOT_IN_POOL: "You are not eligible to vote on this motion",
    IneligibilityReason.NOT_ACTIVE: "This motion is not currently open for voting",
    IneligibilityReason.VOTING_ENDED: "Voting has ended for this motion",
}


def _already_voted() -> ConflictError:
    return ConflictError(
        ELIGIBILITY_MESSAGES[IneligibilityReason.ALREADY_VOTED],
        reason=IneligibilityReason.ALREADY_VOTED.value,
    )


def _is_duplicate_vote(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    # SQLite reports the columns rather than the constraint name
    return VOTE_UNIQUE_CONSTRAINT in message or "votes.user_id, votes.motion_id" in message


def cast_vote(
    db: Session,
    user_id: str,
    motion_id: int,
    choice_ids: Sequence[int],
    abstain: bool,
    now: datetime,
) -> Vote:
    """Record a user's ballot on a motion.

    Eligibility is re-checked inside the write transaction with the motion
    row locked. The ``votes_unique_user_motion`` constraint is what finally
    decides concurrent duplicates: the losing insert becomes a conflict.

    Raises:
        NotFoundError: If the motion does not exist
        ConflictError: If the user already voted (reason ``already_voted``)
        ForbiddenError: If the user may not vote (reason is the eligibility code)
        ValidationError: If the ballot is malformed
    """
    try:
        with transaction(db):
            motion = load_motion(db, motion_id, for_update=True)

            eligibility = evaluate_eligibility(db, user_id, motion, now)
            if eligibility.reason == IneligibilityReason.ALREADY_VOTED:
                raise _already_voted()
            if not eligibility.can_vote:
                raise ForbiddenError(ELIGIBILITY_MESSAGES[eligibility.reason], reason=eligibility.reason.value)

            selected = validate_vote(
                motion.seat_count,
                [choice.id for choice in motion.choices],
                choice_ids,
                abstain,
            )

            vote = Vote(user_id=user_id, motion_id=motion_id, is_abstain=abstain, created_at=to_utc(now))
            db.add(vote)
            db.flush()

            for choice_id in selected:
                db.add(VoteChoice(vote_id=vote.id, choice_id=choice_id, created_at=to_utc(now)))
    except IntegrityError as e:
        if _is_duplicate_vote(e):
            logger.info("duplicate_vote_rejected", motion_id=motion_id, user_id=user_id)
            raise _already_voted() from e
        raise

    db.refresh(vote)
    logger.info(
        "vote_cast",
        motion_id=motion_id,
        user_id=user_id,
        abstain=abstain,
        choice_count=len(selected),
    )
    return vote


def get_user_vote(db: Session, user_id: str, motion_id: int) -> Optional[Dict[str, Any]]:
    """The user's ballot on a motion, or None if they have not voted."""
    vote = db.query(Vote).filter(Vote.user_id == user_id, Vote.motion_id == motion_id).first()
    if vote is None:
        return None

    return {
        "id": vote.id,
        "motion_id": vote.motion_id,
        "is_abstain": vote.is_abstain,
        "choice_ids": sorted(vc.choice_id for vc in vote.choices),
        "created_at": isoformat(vote.created_at),
    }
