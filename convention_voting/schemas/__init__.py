"""Pydantic schemas for request/response validation."""
from convention_voting.schemas.common import ERROR_RESPONSES, ErrorDetail, ErrorResponse, SuccessResponse
from convention_voting.schemas.meeting import (
    MeetingCreate,
    MeetingListResponse,
    MeetingResponse,
    MeetingUpdate,
    QuorumCallRequest,
)
from convention_voting.schemas.motion import (
    ChoiceCreate,
    ChoiceReorder,
    ChoiceResponse,
    ChoiceUpdate,
    EndOverrideUpdate,
    MotionCreate,
    MotionForVoting,
    MotionResponse,
    MotionStatusUpdate,
    MotionUpdate,
    OpenMotion,
    OpenMotionsResponse,
)
from convention_voting.schemas.report import (
    ActiveVoter,
    ChoiceTally,
    MotionResult,
    MotionSummary,
    MotionVoter,
    QuorumReport,
    WatcherMeetingList,
    WatcherMeetingReport,
    WatcherMotionDetail,
)
from convention_voting.schemas.vote import CastVoteRequest, VoteResponse

__all__ = [
    "ERROR_RESPONSES",
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
    "MeetingCreate",
    "MeetingListResponse",
    "MeetingResponse",
    "MeetingUpdate",
    "QuorumCallRequest",
    "ChoiceCreate",
    "ChoiceReorder",
    "ChoiceResponse",
    "ChoiceUpdate",
    "EndOverrideUpdate",
    "MotionCreate",
    "MotionForVoting",
    "MotionResponse",
    "MotionStatusUpdate",
    "MotionUpdate",
    "OpenMotion",
    "OpenMotionsResponse",
    "ActiveVoter",
    "ChoiceTally",
    "MotionResult",
    "MotionSummary",
    "MotionVoter",
    "QuorumReport",
    "WatcherMeetingList",
    "WatcherMeetingReport",
    "WatcherMotionDetail",
    "CastVoteRequest",
    "VoteResponse",
]
