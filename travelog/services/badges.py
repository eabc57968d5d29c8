"""
Badge read side and manual grants.

Public API
----------
list_available_badges(db)                   → list[Badge]
list_user_badges(db, user_id)               → list[(UserBadge, Badge)]
list_user_progress(db, user_id)             → list[(BadgeProgress, Badge)]
get_badge_stats(db, user_id)                → BadgeStats
grant_badge(db, user_id, badge_id, data)    → UserBadge   (through the ledger)
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from travelog.core.errors import BadgeAlreadyAwardedError, BadgeInactiveError, BadgeNotFoundError
from travelog.models.badge import Badge
from travelog.models.badge_progress import BadgeProgress
from travelog.models.user_badge import UserBadge
from travelog.services.ledger import award

BADGE_TYPES = ("achievement", "milestone", "social", "content")


@dataclass
class BadgeStats:
    total_badges: int
    total_points: int
    total_available: int
    by_type: dict[str, int] = field(default_factory=dict)

    @property
    def completion_percentage(self) -> int:
        if not self.total_available:
            return 0
        ratio = Decimal(self.total_badges) / Decimal(self.total_available) * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def decode_json(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except (ValueError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def list_available_badges(db: Session) -> list[Badge]:
    return (
        db.query(Badge)
        .filter(Badge.is_active == True)  # noqa: E712
        .order_by(Badge.badge_type, Badge.points.asc())
        .all()
    )


def list_user_badges(db: Session, user_id: int) -> list[tuple[UserBadge, Badge]]:
    return (
        db.query(UserBadge, Badge)
        .join(Badge, UserBadge.badge_id == Badge.id)
        .filter(UserBadge.user_id == user_id)
        .order_by(UserBadge.awarded_at.desc(), UserBadge.id.desc())
        .all()
    )


def list_user_progress(db: Session, user_id: int) -> list[tuple[BadgeProgress, Badge]]:
    earned = select(UserBadge.badge_id).where(UserBadge.user_id == user_id)
    return (
        db.query(BadgeProgress, Badge)
        .join(Badge, BadgeProgress.badge_id == Badge.id)
        .filter(
            BadgeProgress.user_id == user_id,
            BadgeProgress.badge_id.notin_(earned),
        )
        .order_by(Badge.badge_type, Badge.points.asc())
        .all()
    )


def get_badge_stats(db: Session, user_id: int) -> BadgeStats:
    rows = (
        db.query(Badge.badge_type, func.count(UserBadge.id), func.coalesce(func.sum(Badge.points), 0))
        .join(UserBadge, UserBadge.badge_id == Badge.id)
        .filter(UserBadge.user_id == user_id)
        .group_by(Badge.badge_type)
        .all()
    )
    by_type = {badge_type: 0 for badge_type in BADGE_TYPES}
    total_badges = total_points = 0
    for badge_type, count, points in rows:
        by_type[badge_type] = by_type.get(badge_type, 0) + count
        total_badges += count
        total_points += int(points)

    total_available = (
        db.query(func.count(Badge.id)).filter(Badge.is_active == True).scalar()  # noqa: E712
        or 0
    )
    return BadgeStats(
        total_badges=total_badges,
        total_points=total_points,
        total_available=total_available,
        by_type=by_type,
    )


def grant_badge(
    db: Session,
    user_id: int,
    badge_id: int,
    progress_data: Optional[dict[str, Any]] = None,
) -> UserBadge:
    """Award a badge by hand. Same at-most-once guarantee as the engine."""
    badge = db.get(Badge, badge_id)
    if badge is None:
        raise BadgeNotFoundError(badge_id)
    if not badge.is_active:
        raise BadgeInactiveError(badge_id)
    if not award(db, user_id, badge_id, progress_data):
        raise BadgeAlreadyAwardedError(user_id, badge_id)
    return (
        db.query(UserBadge)
        .filter(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        .one()
    )
