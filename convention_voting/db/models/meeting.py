"""Meeting model."""
from datetime import datetime, timezone as tz
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from convention_voting.db.base import Base


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    quorum_voting_pool_id = Column(Integer, ForeignKey("pools.id", ondelete="RESTRICT"), nullable=False, index=True)
    # NULL means live counting; set means quorum is frozen at that instant
    quorum_called_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc),
                        onupdate=lambda: datetime.now(tz.utc))

    # Relationships
    quorum_pool = relationship("Pool", foreign_keys=[quorum_voting_pool_id])
    motions = relationship("Motion", back_populates="meeting", cascade="all, delete-orphan",
                           order_by="Motion.id")

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="meetings_valid_dates"),
    )
