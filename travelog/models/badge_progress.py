"""
BadgeProgress — advisory partial-completion state for count/location badges.

Upserted by the progress tracker, deleted by the ledger in the same
transaction that inserts the UserBadge. Never coexists with a UserBadge
for the same (user_id, badge_id).
"""
from datetime import datetime
from sqlalchemy import Integer, Text, DateTime, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from travelog.db.base import Base


class BadgeProgress(Base):
    __tablename__ = "badge_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_badge_progress_user_badge"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    badge_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    current_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # {"target": int, "percentage": int, ...}
    progress_payload: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
