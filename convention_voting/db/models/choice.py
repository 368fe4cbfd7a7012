"""Choice model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from convention_voting.db.base import Base


class Choice(Base):
    __tablename__ = "choices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    motion_id = Column(Integer, ForeignKey("motions.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)  # 0-indexed
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc),
                        onupdate=lambda: datetime.now(tz.utc))

    # Relationships
    motion = relationship("Motion", back_populates="choices")
    vote_choices = relationship("VoteChoice", back_populates="choice", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_choices_motion_sort_order", "motion_id", "sort_order"),
    )
