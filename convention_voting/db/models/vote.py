"""Vote and VoteChoice models."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from convention_voting.db.base import Base

# Name of the constraint that makes the storage layer the duplicate-vote authority
VOTE_UNIQUE_CONSTRAINT = "votes_unique_user_motion"


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    motion_id = Column(Integer, ForeignKey("motions.id", ondelete="CASCADE"), nullable=False)
    is_abstain = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    user = relationship("User", back_populates="votes")
    motion = relationship("Motion", back_populates="votes")
    choices = relationship("VoteChoice", back_populates="vote", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("user_id", "motion_id", name=VOTE_UNIQUE_CONSTRAINT),
        Index("idx_votes_motion_id", "motion_id"),
    )


class VoteChoice(Base):
    __tablename__ = "vote_choices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vote_id = Column(Integer, ForeignKey("votes.id", ondelete="CASCADE"), nullable=False)
    choice_id = Column(Integer, ForeignKey("choices.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    vote = relationship("Vote", back_populates="choices")
    choice = relationship("Choice", back_populates="vote_choices")

    __table_args__ = (
        UniqueConstraint("vote_id", "choice_id", name="vote_choices_unique"),
        Index("idx_vote_choices_choice_id", "choice_id"),
    )
