from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, String, Text, DateTime, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column

from travelog.db.base import Base


class Dream(Base):
    """A wishlist destination. Replayed as `dream_created` by retroactive evaluation."""

    __tablename__ = "dreams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)
    # destination | experience | activity | ...
    dream_type: Mapped[str] = mapped_column(String(32), nullable=False, default="destination")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
