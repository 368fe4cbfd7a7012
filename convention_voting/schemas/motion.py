"""Motion and choice schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from convention_voting.core.constants import DEFAULT_SEAT_COUNT, MotionStatus
from convention_voting.core.sanitization import sanitize_description, sanitize_name


class MotionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    planned_duration: int = Field(..., gt=0)
    seat_count: int = Field(DEFAULT_SEAT_COUNT, ge=1)
    voting_pool_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_name(v, "Motion name")

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_description(v)


class MotionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    planned_duration: Optional[int] = Field(None, gt=0)
    seat_count: Optional[int] = Field(None, ge=1)
    voting_pool_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_name(v, "Motion name") if v is not None else None

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_description(v)


class MotionStatusUpdate(BaseModel):
    status: MotionStatus
    end_override: Optional[datetime] = None


class EndOverrideUpdate(BaseModel):
    """``null`` clears the override."""
    end_override: Optional[datetime] = None


class MotionResponse(BaseModel):
    id: int
    meeting_id: int
    name: str
    description: Optional[str] = None
    planned_duration: int
    seat_count: int
    voting_pool_id: Optional[int] = None
    status: MotionStatus
    end_override: Optional[str] = None
    voting_started_at: Optional[str] = None
    voting_ended_at: Optional[str] = None
    voting_ends_at: Optional[str] = None
    time_remaining: str = ""
    is_urgent: bool = False
    is_expired: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ChoiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_name(v, "Choice name")


class ChoiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_name(v, "Choice name") if v is not None else None


class ChoiceReorder(BaseModel):
    choice_ids: List[int] = Field(..., min_length=1)


class ChoiceResponse(BaseModel):
    id: int
    motion_id: int
    name: str
    sort_order: int


class ChoiceOption(BaseModel):
    id: int
    name: str
    sort_order: int


class VotingWindowFields(BaseModel):
    voting_ends_at: Optional[str] = None
    remaining_seconds: int = 0
    overtime_seconds: int = 0
    is_urgent: bool = False
    is_expired: bool = False
    time_remaining: str = ""


class OpenMotion(VotingWindowFields):
    id: int
    name: str
    description: Optional[str] = None
    planned_duration: int
    seat_count: int
    voting_pool_name: Optional[str] = None
    meeting_id: int
    meeting_name: str
    voting_started_at: Optional[str] = None


class OpenMotionsResponse(BaseModel):
    motions: List[OpenMotion]


class MotionForVoting(OpenMotion):
    status: MotionStatus
    choices: List[ChoiceOption]
    has_voted: bool
    can_vote: bool
    voting_ended_reason: Optional[str] = None
