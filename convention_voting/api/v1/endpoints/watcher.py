"""Watcher endpoints. Read-only."""
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from convention_voting.api.deps import get_db, get_now, require_watcher
from convention_voting.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from convention_voting.core.rate_limit import limiter, RATE_LIMITS
from convention_voting.schemas import (
    ERROR_RESPONSES,
    ActiveVoter,
    MotionResult,
    MotionVoter,
    QuorumReport,
    WatcherMeetingList,
    WatcherMeetingReport,
    WatcherMotionDetail,
)
from convention_voting.services import watcher as watcher_service

router = APIRouter(dependencies=[Depends(require_watcher)], responses=ERROR_RESPONSES)


@router.get("/meetings", response_model=WatcherMeetingList)
@limiter.limit(RATE_LIMITS["watcher_read"])
async def list_meetings_endpoint(
    request: Request,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """Meetings with per-motion participation summaries, newest first."""
    meetings, total = watcher_service.get_watcher_meetings(db, page=page, limit=limit)
    return {"meetings": meetings, "total": total, "page": page, "limit": limit}


@router.get("/meetings/{meeting_id}", response_model=WatcherMeetingReport)
@limiter.limit(RATE_LIMITS["watcher_read"])
async def meeting_report_endpoint(request: Request, meeting_id: int, db: Session = Depends(get_db)):
    return watcher_service.get_watcher_meeting_report(db, meeting_id)


@router.get("/meetings/{meeting_id}/quorum", response_model=QuorumReport)
@limiter.limit(RATE_LIMITS["watcher_read"])
async def quorum_report_endpoint(
    request: Request,
    meeting_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Quorum for a meeting.

    Live until quorum is called; after that the figures are frozen at
    ``quorum_called_at``.
    """
    return watcher_service.get_watcher_quorum_report(db, meeting_id, now)


@router.get("/meetings/{meeting_id}/quorum/voters", response_model=List[ActiveVoter])
@limiter.limit(RATE_LIMITS["watcher_read"])
async def quorum_voters_endpoint(
    request: Request,
    meeting_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return watcher_service.get_watcher_quorum_voters(db, meeting_id, now)


@router.get("/motions/{motion_id}", response_model=WatcherMotionDetail)
@limiter.limit(RATE_LIMITS["watcher_read"])
async def motion_detail_endpoint(
    request: Request,
    motion_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return watcher_service.get_watcher_motion_detail(db, motion_id, now)


@router.get("/motions/{motion_id}/voters", response_model=List[MotionVoter])
@limiter.limit(RATE_LIMITS["watcher_read"])
async def motion_voters_endpoint(request: Request, motion_id: int, db: Session = Depends(get_db)):
    """
    Who voted on a completed motion.

    Names and timestamps only; individual choices are never exposed.

    Raises:
        404: Motion not found
        409: Motion is not complete (reason ``not_completed``)
    """
    return watcher_service.get_watcher_motion_voters(db, motion_id)


@router.get("/motions/{motion_id}/results", response_model=MotionResult)
@limiter.limit(RATE_LIMITS["watcher_read"])
async def motion_results_endpoint(request: Request, motion_id: int, db: Session = Depends(get_db)):
    """
    Final tally of a completed motion.

    Choices are ranked by vote count, ties broken by name; the first
    ``seat_count`` are winners.

    Raises:
        404: Motion not found
        409: Motion is not complete (reason ``not_completed``)
    """
    return watcher_service.get_watcher_motion_result(db, motion_id)
