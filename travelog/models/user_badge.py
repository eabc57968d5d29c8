"""
UserBadge — the durable record that a user earned a badge.

Insert-only. One row per (user_id, badge_id): the unique constraint is the
real at-most-once guard, concurrent dispatches included.

progress_snapshot: JSON-encoded dict stored as Text, the final progress
numbers at award time for count/location badges.
"""
from datetime import datetime
from sqlalchemy import Integer, Text, DateTime, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from travelog.db.base import Base


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    badge_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    progress_snapshot: Mapped[str | None] = mapped_column(Text, nullable=True)
    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
