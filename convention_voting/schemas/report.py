"""Watcher report and quorum schemas."""
from typing import List, Optional
from pydantic import BaseModel

from convention_voting.core.constants import MotionStatus


class ChoiceTally(BaseModel):
    choice_id: int
    choice_name: str
    vote_count: int
    is_winner: bool


class MotionResult(BaseModel):
    motion_id: int
    seat_count: int
    total_votes: int
    total_abstentions: int
    choices: List[ChoiceTally]


class MotionSummary(BaseModel):
    motion_id: int
    motion_name: str
    status: MotionStatus
    voting_pool_name: Optional[str] = None
    total_votes_cast: int
    total_abstentions: int
    voting_started_at: Optional[str] = None
    voting_ended_at: Optional[str] = None
    result: Optional[MotionResult] = None


class WatcherMeetingReport(BaseModel):
    meeting_id: int
    meeting_name: str
    description: Optional[str] = None
    start_date: str
    end_date: str
    quorum_pool_name: Optional[str] = None
    quorum_called_at: Optional[str] = None
    motion_summaries: List[MotionSummary]


class WatcherMeetingList(BaseModel):
    meetings: List[WatcherMeetingReport]
    total: int
    page: int
    limit: int


class WatcherMotionDetail(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: MotionStatus
    seat_count: int
    planned_duration: int
    meeting_id: int
    meeting_name: str
    voting_pool_name: Optional[str] = None
    voting_started_at: Optional[str] = None
    voting_ended_at: Optional[str] = None
    end_override: Optional[str] = None
    voting_ends_at: Optional[str] = None
    time_remaining: str = ""
    eligible_voter_count: int
    total_votes_cast: Optional[int] = None
    result: Optional[MotionResult] = None


class MotionVoter(BaseModel):
    first_name: str
    last_name: str
    voted_at: str


class QuorumReport(BaseModel):
    meeting_id: int
    meeting_name: str
    quorum_voting_pool_id: int
    quorum_voting_pool_name: Optional[str] = None
    total_eligible_voters: int
    active_voter_count: int
    active_voter_percentage: float
    quorum_called_at: Optional[str] = None
    is_frozen: bool
    cutoff_time: str
    meeting_start_date: str


class ActiveVoter(BaseModel):
    user_id: str
    username: str
    first_name: str
    last_name: str
    last_activity: str
