"""Result tallying.

Counts are per choice over non-abstaining ballots. Ranking is by count
descending, then choice name ascending; the first ``seat_count`` ranked
choices win. No status check happens here: callers gate on completion.
"""
from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from convention_voting.db.models import Choice, Motion, Vote, VoteChoice


def rank_choices(counts: Iterable[Tuple[int, str, int]], seat_count: int) -> List[Dict[str, Any]]:
    """Rank ``(choice_id, choice_name, vote_count)`` rows and mark winners."""
    ranked = sorted(counts, key=lambda row: (-row[2], row[1]))
    return [
        {
            "choice_id": choice_id,
            "choice_name": name,
            "vote_count": vote_count,
            "is_winner": index < seat_count,
        }
        for index, (choice_id, name, vote_count) in enumerate(ranked)
    ]


def count_votes(db: Session, motion_id: int) -> Tuple[int, int]:
    """Total ballots and abstentions recorded for a motion."""
    total, abstentions = (
        db.query(
            func.count(Vote.id),
            func.coalesce(func.sum(case((Vote.is_abstain.is_(True), 1), else_=0)), 0),
        )
        .filter(Vote.motion_id == motion_id)
        .one()
    )
    return int(total or 0), int(abstentions or 0)


def tally_motion(db: Session, motion: Motion) -> Dict[str, Any]:
    """Aggregate the recorded votes of ``motion`` into ranked results."""
    counts = (
        db.query(Choice.id, Choice.name, func.count(VoteChoice.id))
        .outerjoin(VoteChoice, VoteChoice.choice_id == Choice.id)
        .filter(Choice.motion_id == motion.id)
        .group_by(Choice.id, Choice.name)
        .all()
    )
    total_votes, total_abstentions = count_votes(db, motion.id)

    return {
        "motion_id": motion.id,
        "seat_count": motion.seat_count,
        "total_votes": total_votes,
        "total_abstentions": total_abstentions,
        "choices": rank_choices(counts, motion.seat_count),
    }
