"""Database models."""
from convention_voting.db.models.user import User
from convention_voting.db.models.pool import Pool, UserPool
from convention_voting.db.models.meeting import Meeting
from convention_voting.db.models.motion import Motion
from convention_voting.db.models.choice import Choice
from convention_voting.db.models.vote import Vote, VoteChoice
from convention_voting.db.models.activity_log import ActivityLog

__all__ = [
    "User",
    "Pool",
    "UserPool",
    "Meeting",
    "Motion",
    "Choice",
    "Vote",
    "VoteChoice",
    "ActivityLog",
]
