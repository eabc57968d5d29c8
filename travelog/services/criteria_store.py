"""
Criteria store: the read-only view of badges a user can still earn.

list_evaluable_badges(db, user_id, kinds=None) → list[EvaluableBadge]

Active badges without a UserBadge row for the user, each already parsed into
a typed criteria model. Badges whose criteria do not parse are logged and
left out; one bad row never fails the whole call. Order carries no meaning.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from travelog.core.errors import InvalidCriteriaError
from travelog.core.logging import get_logger
from travelog.models.badge import Badge
from travelog.models.user_badge import UserBadge
from travelog.services.criteria import Criteria, CriteriaKind, parse_criteria

logger = get_logger(__name__)


@dataclass(frozen=True)
class EvaluableBadge:
    """Plain snapshot of a badge row plus its parsed criteria."""
    id: int
    name: str
    description: Optional[str]
    points: int
    criteria: Criteria

    @property
    def kind(self) -> CriteriaKind:
        return self.criteria.kind


def list_evaluable_badges(
    db: Session,
    user_id: int,
    kinds: Optional[Iterable[CriteriaKind]] = None,
) -> list[EvaluableBadge]:
    earned = select(UserBadge.badge_id).where(UserBadge.user_id == user_id)
    q = db.query(Badge).filter(
        Badge.is_active == True,  # noqa: E712
        Badge.id.notin_(earned),
    )
    if kinds is not None:
        q = q.filter(Badge.criteria_type.in_([CriteriaKind(k).value for k in kinds]))

    evaluable: list[EvaluableBadge] = []
    for badge in q.all():
        try:
            criteria = parse_criteria(badge.criteria_type, badge.criteria_payload)
        except InvalidCriteriaError as exc:
            logger.warning(
                "badge_criteria_invalid",
                badge_id=badge.id,
                criteria_type=badge.criteria_type,
                reason=exc.reason,
            )
            continue
        evaluable.append(EvaluableBadge(
            id=badge.id,
            name=badge.name,
            description=badge.description,
            points=badge.points or 0,
            criteria=criteria,
        ))
    return evaluable
