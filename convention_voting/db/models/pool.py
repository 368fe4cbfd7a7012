"""Pool and pool membership models."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from convention_voting.db.base import Base


class Pool(Base):
    __tablename__ = "pools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pool_key = Column(String(255), unique=True, nullable=False, index=True)
    pool_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_disabled = Column(Boolean, nullable=False, default=False)

    # Relationships
    members = relationship("UserPool", back_populates="pool", cascade="all, delete-orphan")


class UserPool(Base):
    __tablename__ = "user_pools"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    pool_id = Column(Integer, ForeignKey("pools.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    user = relationship("User", back_populates="memberships")
    pool = relationship("Pool", back_populates="members")

    __table_args__ = (
        Index("idx_user_pools_pool_id", "pool_id"),
        Index("idx_user_pools_user_id", "user_id"),
    )
