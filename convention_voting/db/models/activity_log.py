"""ActivityLog model. Append-only; read only in aggregate for quorum."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from convention_voting.core.constants import MAX_ACTIVITY_PATH_LENGTH
from convention_voting.db.base import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    url_path = Column(String(MAX_ACTIVITY_PATH_LENGTH), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    user = relationship("User", back_populates="activity_logs")

    __table_args__ = (
        Index("idx_activity_logs_created_at", "created_at"),
        Index("idx_activity_logs_user_created", "user_id", "created_at"),
    )
