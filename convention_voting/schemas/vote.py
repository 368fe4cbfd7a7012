"""Vote schemas."""
from typing import List
from pydantic import BaseModel, Field


class CastVoteRequest(BaseModel):
    choice_ids: List[int] = Field(default_factory=list, max_length=100)
    abstain: bool = False


class VoteResponse(BaseModel):
    id: int
    motion_id: int
    is_abstain: bool
    choice_ids: List[int]
    created_at: str
