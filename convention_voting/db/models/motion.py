"""Motion model."""
from datetime import datetime, timezone as tz
from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from convention_voting.core.constants import DEFAULT_SEAT_COUNT, MotionStatus
from convention_voting.db.base import Base


class Motion(Base):
    __tablename__ = "motions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meeting_id = Column(Integer, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    planned_duration = Column(Integer, nullable=False)  # minutes
    seat_count = Column(Integer, nullable=False, default=DEFAULT_SEAT_COUNT)
    # Falls back to the meeting's quorum pool when NULL
    voting_pool_id = Column(Integer, ForeignKey("pools.id", ondelete="RESTRICT"), nullable=True)
    status = Column(
        Enum(MotionStatus, name="motion_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=MotionStatus.NOT_YET_STARTED,
    )
    end_override = Column(DateTime(timezone=True), nullable=True)
    voting_started_at = Column(DateTime(timezone=True), nullable=True)
    voting_ended_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc),
                        onupdate=lambda: datetime.now(tz.utc))

    # Relationships
    meeting = relationship("Meeting", back_populates="motions")
    voting_pool = relationship("Pool", foreign_keys=[voting_pool_id])
    choices = relationship("Choice", back_populates="motion", cascade="all, delete-orphan",
                           order_by="Choice.sort_order")
    votes = relationship("Vote", back_populates="motion", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("planned_duration > 0", name="motions_valid_duration"),
        CheckConstraint("seat_count >= 1", name="motions_valid_seat_count"),
        Index("idx_motions_meeting_id", "meeting_id"),
        Index("idx_motions_status_voting_started_at", "status", "voting_started_at"),
        Index("idx_motions_voting_pool", "voting_pool_id"),
    )
