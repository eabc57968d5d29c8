from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import (
    Integer, String, Text, DateTime, Date, Numeric, ForeignKey, func, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from travelog.db.base import Base


class TravelEntry(Base):
    """A journal memory. Written by the entries API, read by the badge engine."""

    __tablename__ = "travel_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    memory_type: Mapped[str] = mapped_column(String(64), nullable=False, default="other", index=True)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class EntryTag(Base):
    __tablename__ = "entry_tags"
    __table_args__ = (
        UniqueConstraint("entry_id", "tag", name="uq_entry_tags_entry_tag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("travel_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
