"""Admin endpoints."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from convention_voting.api.deps import get_db, get_now, require_admin
from convention_voting.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from convention_voting.core.rate_limit import limiter, RATE_LIMITS
from convention_voting.schemas import (
    ERROR_RESPONSES,
    ChoiceCreate,
    ChoiceReorder,
    ChoiceResponse,
    ChoiceUpdate,
    EndOverrideUpdate,
    MeetingCreate,
    MeetingListResponse,
    MeetingResponse,
    MeetingUpdate,
    MotionCreate,
    MotionResponse,
    MotionResult,
    MotionStatusUpdate,
    MotionUpdate,
    QuorumCallRequest,
    QuorumReport,
    SuccessResponse,
)
from convention_voting.services import meeting as meeting_service
from convention_voting.services import motion as motion_service
from convention_voting.services.quorum import call_quorum, get_quorum_report
from convention_voting.services.watcher import get_watcher_motion_result

router = APIRouter(dependencies=[Depends(require_admin)], responses=ERROR_RESPONSES)


# ---------------------------------------------------------------------------
# Meetings
# ---------------------------------------------------------------------------

@router.post("/meetings", response_model=MeetingResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["admin_write"])
async def create_meeting_endpoint(request: Request, meeting: MeetingCreate, db: Session = Depends(get_db)):
    """
    Create a meeting.

    Raises:
        400: End date is not after start date
        404: Quorum pool does not exist
    """
    created = meeting_service.create_meeting(
        db,
        name=meeting.name,
        description=meeting.description,
        start_date=meeting.start_date,
        end_date=meeting.end_date,
        quorum_voting_pool_id=meeting.quorum_voting_pool_id,
    )
    return meeting_service.serialize_meeting(created)


@router.get("/meetings", response_model=MeetingListResponse)
async def list_meetings_endpoint(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    meetings, total = meeting_service.list_meetings(db, page=page, limit=limit)
    return {
        "meetings": [meeting_service.serialize_meeting(m) for m in meetings],
        "total": total,
        "page": page,
        "limit": limit,
    }


@router.get("/meetings/{meeting_id}", response_model=MeetingResponse)
async def get_meeting_endpoint(meeting_id: int, db: Session = Depends(get_db)):
    return meeting_service.serialize_meeting(meeting_service.get_meeting(db, meeting_id))


@router.put("/meetings/{meeting_id}", response_model=MeetingResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def update_meeting_endpoint(
    request: Request,
    meeting_id: int,
    updates: MeetingUpdate,
    db: Session = Depends(get_db),
):
    """Update meeting fields. Only fields present in the body change."""
    updated = meeting_service.update_meeting(db, meeting_id, **updates.model_dump(exclude_unset=True))
    return meeting_service.serialize_meeting(updated)


@router.delete("/meetings/{meeting_id}", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def delete_meeting_endpoint(request: Request, meeting_id: int, db: Session = Depends(get_db)):
    """Delete a meeting with all of its motions, choices and votes."""
    meeting_service.delete_meeting(db, meeting_id)
    return SuccessResponse()


@router.get("/meetings/{meeting_id}/quorum", response_model=QuorumReport)
async def quorum_report_endpoint(meeting_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return get_quorum_report(db, meeting_id, now)


@router.post("/meetings/{meeting_id}/quorum", response_model=QuorumReport)
@limiter.limit(RATE_LIMITS["admin_write"])
async def call_quorum_endpoint(
    request: Request,
    meeting_id: int,
    body: Optional[QuorumCallRequest] = None,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Call quorum: freeze the quorum count at ``called_at`` (default: now).

    Activity after the freeze no longer counts until quorum is cleared.
    """
    called_at = body.called_at if body and body.called_at else now
    call_quorum(db, meeting_id, called_at)
    return get_quorum_report(db, meeting_id, now)


@router.delete("/meetings/{meeting_id}/quorum", response_model=QuorumReport)
@limiter.limit(RATE_LIMITS["admin_write"])
async def clear_quorum_endpoint(
    request: Request,
    meeting_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Clear a called quorum and go back to live counting."""
    call_quorum(db, meeting_id, None)
    return get_quorum_report(db, meeting_id, now)


# ---------------------------------------------------------------------------
# Motions
# ---------------------------------------------------------------------------

@router.post("/meetings/{meeting_id}/motions", response_model=MotionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["admin_write"])
async def create_motion_endpoint(
    request: Request,
    meeting_id: int,
    motion: MotionCreate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Create a motion. New motions always start in ``not_yet_started``."""
    created = motion_service.create_motion(db, meeting_id, **motion.model_dump())
    return motion_service.serialize_motion(created, now)


@router.get("/meetings/{meeting_id}/motions", response_model=List[MotionResponse])
async def list_motions_endpoint(meeting_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    motions = motion_service.list_motions_for_meeting(db, meeting_id)
    return [motion_service.serialize_motion(m, now) for m in motions]


@router.get("/motions/{motion_id}", response_model=MotionResponse)
async def get_motion_endpoint(motion_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return motion_service.serialize_motion(motion_service.get_motion(db, motion_id), now)


@router.put("/motions/{motion_id}", response_model=MotionResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def update_motion_endpoint(
    request: Request,
    motion_id: int,
    updates: MotionUpdate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    updated = motion_service.update_motion(db, motion_id, **updates.model_dump(exclude_unset=True))
    return motion_service.serialize_motion(updated, now)


@router.delete("/motions/{motion_id}", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def delete_motion_endpoint(request: Request, motion_id: int, db: Session = Depends(get_db)):
    motion_service.delete_motion(db, motion_id)
    return SuccessResponse()


@router.patch("/motions/{motion_id}/status", response_model=MotionResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def update_motion_status_endpoint(
    request: Request,
    motion_id: int,
    body: MotionStatusUpdate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Move a motion to its next status.

    ``not_yet_started`` -> ``voting_active`` -> ``voting_complete``. An
    ``end_override`` may accompany the move into ``voting_active``.

    Raises:
        404: Motion not found
        409: Transition not allowed (code ``invalid_transition``) or lost to a
             concurrent change (code ``conflict``)
    """
    motion = motion_service.update_motion_status(db, motion_id, body.status, now, end_override=body.end_override)
    return motion_service.serialize_motion(motion, now)


@router.put("/motions/{motion_id}/end-override", response_model=MotionResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def set_end_override_endpoint(
    request: Request,
    motion_id: int,
    body: EndOverrideUpdate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Set or clear (``null``) the end override of an active motion."""
    motion = motion_service.set_motion_end_override(db, motion_id, body.end_override, now)
    return motion_service.serialize_motion(motion, now)


@router.get("/motions/{motion_id}/results", response_model=MotionResult)
async def motion_results_endpoint(motion_id: int, db: Session = Depends(get_db)):
    return get_watcher_motion_result(db, motion_id)


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------

@router.post("/motions/{motion_id}/choices", response_model=ChoiceResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["admin_write"])
async def create_choice_endpoint(
    request: Request,
    motion_id: int,
    choice: ChoiceCreate,
    db: Session = Depends(get_db),
):
    """
    Add a choice to a motion that has not started.

    Raises:
        404: Motion not found
        409: Voting has started (reason ``choices_locked``)
    """
    created = motion_service.create_choice(db, motion_id, choice.name, sort_order=choice.sort_order)
    return motion_service.serialize_choice(created)


@router.get("/motions/{motion_id}/choices", response_model=List[ChoiceResponse])
async def list_choices_endpoint(motion_id: int, db: Session = Depends(get_db)):
    return [motion_service.serialize_choice(c) for c in motion_service.list_choices(db, motion_id)]


@router.put("/motions/{motion_id}/choices/reorder", response_model=List[ChoiceResponse])
@limiter.limit(RATE_LIMITS["admin_write"])
async def reorder_choices_endpoint(
    request: Request,
    motion_id: int,
    body: ChoiceReorder,
    db: Session = Depends(get_db),
):
    choices = motion_service.reorder_choices(db, motion_id, body.choice_ids)
    return [motion_service.serialize_choice(c) for c in choices]


@router.put("/choices/{choice_id}", response_model=ChoiceResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def update_choice_endpoint(
    request: Request,
    choice_id: int,
    updates: ChoiceUpdate,
    db: Session = Depends(get_db),
):
    updated = motion_service.update_choice(db, choice_id, name=updates.name, sort_order=updates.sort_order)
    return motion_service.serialize_choice(updated)


@router.delete("/choices/{choice_id}", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def delete_choice_endpoint(request: Request, choice_id: int, db: Session = Depends(get_db)):
    motion_service.delete_choice(db, choice_id)
    return SuccessResponse()
