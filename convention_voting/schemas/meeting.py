"""Meeting schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from convention_voting.core.sanitization import sanitize_description, sanitize_name


class MeetingCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    quorum_voting_pool_id: int

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_name(v, "Meeting name")

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_description(v)


class MeetingUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    quorum_voting_pool_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_name(v, "Meeting name") if v is not None else None

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_description(v)


class MeetingResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: str
    end_date: str
    quorum_voting_pool_id: int
    quorum_voting_pool_name: Optional[str] = None
    quorum_called_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MeetingListResponse(BaseModel):
    meetings: List[MeetingResponse]
    total: int
    page: int
    limit: int


class QuorumCallRequest(BaseModel):
    """Freeze quorum at ``called_at``; the server time is used when omitted."""
    called_at: Optional[datetime] = None
