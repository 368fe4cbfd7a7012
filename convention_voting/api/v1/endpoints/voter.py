"""Voter endpoints."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from convention_voting.api.deps import AuthUser, get_db, get_now, require_voter
from convention_voting.core.rate_limit import limiter, RATE_LIMITS
from convention_voting.schemas import (
    ERROR_RESPONSES,
    CastVoteRequest,
    MotionForVoting,
    OpenMotionsResponse,
    VoteResponse,
)
from convention_voting.services.eligibility import get_motion_for_voting, get_open_motions_for_user
from convention_voting.services.vote import cast_vote, get_user_vote

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/motions/open", response_model=OpenMotionsResponse)
@limiter.limit(RATE_LIMITS["voter_read"])
async def open_motions_endpoint(
    request: Request,
    user: AuthUser = Depends(require_voter),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    List motions the current voter can still vote on.

    Only ``voting_active`` motions in one of the voter's pools (the motion's
    own pool, or the meeting's quorum pool when the motion has none) that the
    voter has not voted on yet. Oldest voting start first.
    """
    return {"motions": get_open_motions_for_user(db, user.user_id, now)}


@router.get("/motions/{motion_id}", response_model=MotionForVoting)
@limiter.limit(RATE_LIMITS["voter_read"])
async def motion_for_voting_endpoint(
    request: Request,
    motion_id: int,
    user: AuthUser = Depends(require_voter),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Get a motion for the voting page.

    Returns the ordered choices, the countdown and whether the voter can vote.
    When ``can_vote`` is false, ``voting_ended_reason`` is one of
    ``already_voted``, ``not_in_pool``, ``not_active`` or ``voting_ended``.

    Raises:
        404: Motion not found
    """
    return get_motion_for_voting(db, motion_id, user.user_id, now)


@router.post("/motions/{motion_id}/vote", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["vote"])
async def cast_vote_endpoint(
    request: Request,
    motion_id: int,
    ballot: CastVoteRequest,
    user: AuthUser = Depends(require_voter),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Cast a vote on a motion.

    Send either one to ``seat_count`` choice ids, or ``abstain: true`` with
    no choices. Votes are final.

    Example:
        Request:
            POST /api/v1/voter/motions/7/vote
            Authorization: Bearer eyJhbGc...
            {"choice_ids": [21], "abstain": false}

        Response (201):
            {"id": 3, "motion_id": 7, "is_abstain": false, "choice_ids": [21], "created_at": "..."}

        Response (409):
            {"success": false, "error": {"code": "conflict", "message": "You have already voted on this motion", "reason": "already_voted"}}

    Raises:
        400: Ballot is malformed (too many choices, unknown choice, abstain with choices)
        403: Voter is not eligible (reason gives the eligibility code)
        404: Motion not found
        409: Voter already voted
    """
    cast_vote(db, user.user_id, motion_id, ballot.choice_ids, ballot.abstain, now)
    return get_user_vote(db, user.user_id, motion_id)


@router.get("/motions/{motion_id}/vote", response_model=Optional[VoteResponse])
@limiter.limit(RATE_LIMITS["voter_read"])
async def my_vote_endpoint(
    request: Request,
    motion_id: int,
    user: AuthUser = Depends(require_voter),
    db: Session = Depends(get_db),
):
    """Get the current voter's own ballot on a motion, or null."""
    return get_user_vote(db, user.user_id, motion_id)
