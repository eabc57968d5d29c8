"""
Badge — an awardable achievement definition.

Owned by the admin surface; the engine only reads it. `criteria_payload`
is JSON text whose shape depends on `criteria_type`
(see travelog/services/criteria.py for the accepted shapes).
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from travelog.db.base import Base


class Badge(Base):
    __tablename__ = "badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    # achievement | milestone | social | content
    badge_type: Mapped[str] = mapped_column(String(32), nullable=False, default="achievement")
    criteria_type: Mapped[str] = mapped_column(String(32), nullable=False)
    criteria_payload: Mapped[str] = mapped_column(Text, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
