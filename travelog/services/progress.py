"""
Progress tracker — advisory progress bars for count and location badges.

refresh(db, user_id, action, payload) → None
measure(db, user_id, criteria)        → Measurement | None

Only kinds with a monotonic metric are tracked. For each not-yet-earned
badge whose trigger matches this action, the metric is recomputed with the
same queries the evaluators use and BadgeProgress is upserted
(last writer wins). The tracker never awards anything.

Each badge runs in its own savepoint so one failing metric does not block
the rest. Commits once at the end, then sweeps rows for badges awarded
concurrently since the check in _upsert.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from travelog.core.logging import get_logger
from travelog.models.badge_progress import BadgeProgress
from travelog.models.user_badge import UserBadge
from travelog.services.actions import ActionKind
from travelog.services.criteria import (
    TRACKABLE_KINDS,
    CountCriteria,
    Criteria,
    LocationCriteria,
)
from travelog.services.criteria_store import list_evaluable_badges
from travelog.services.evaluators import (
    count_location_visits,
    count_memories_of_type,
    location_matches,
)
from travelog.services.ledger import has_award

logger = get_logger(__name__)


@dataclass
class Measurement:
    current: int
    target: int
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def percentage(self) -> int:
        ratio = Decimal(self.current) / Decimal(self.target) * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def to_payload(self) -> dict[str, Any]:
        return {"target": self.target, "percentage": self.percentage, **self.context}


def measure(db: Session, user_id: int, criteria: Criteria) -> Optional[Measurement]:
    """Current metric for a trackable criteria, or None if it has none."""
    if isinstance(criteria, CountCriteria):
        return Measurement(
            current=count_memories_of_type(db, user_id, criteria.memory_type),
            target=criteria.count,
            context={"type": criteria.memory_type},
        )
    if isinstance(criteria, LocationCriteria) and not criteria.requires_geocoding:
        return Measurement(
            current=count_location_visits(db, user_id, criteria.location_name),
            target=criteria.visit_count,
            context={"location_name": criteria.location_name},
        )
    return None


def _is_triggered(criteria: Criteria, action: ActionKind, payload: Mapping[str, Any]) -> bool:
    if action != ActionKind.memory_created:
        return False
    if isinstance(criteria, CountCriteria):
        return payload.get("type") == criteria.memory_type
    if isinstance(criteria, LocationCriteria):
        return (
            not criteria.requires_geocoding
            and location_matches(payload.get("location_name"), criteria.location_name)
        )
    return False


def _upsert(db: Session, user_id: int, badge_id: int, measurement: Measurement) -> bool:
    # A concurrent dispatch may have awarded since the badge list was loaded.
    if has_award(db, user_id, badge_id):
        return False

    payload_json = json.dumps(measurement.to_payload())
    row = (
        db.query(BadgeProgress)
        .filter(BadgeProgress.user_id == user_id, BadgeProgress.badge_id == badge_id)
        .first()
    )
    if row is None:
        db.add(BadgeProgress(
            user_id=user_id,
            badge_id=badge_id,
            current_value=measurement.current,
            progress_payload=payload_json,
        ))
    else:
        row.current_value = measurement.current
        row.progress_payload = payload_json
        row.last_updated = datetime.now(tz=timezone.utc)
    return True


def _sweep_awarded(db: Session, user_id: int) -> int:
    """Delete progress rows for badges the user already holds."""
    earned = select(UserBadge.badge_id).where(UserBadge.user_id == user_id)
    removed = (
        db.query(BadgeProgress)
        .filter(BadgeProgress.user_id == user_id, BadgeProgress.badge_id.in_(earned))
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed


def refresh(
    db: Session,
    user_id: int,
    action: ActionKind,
    payload: Mapping[str, Any],
) -> None:
    updated = 0
    for candidate in list_evaluable_badges(db, user_id, kinds=TRACKABLE_KINDS):
        if not _is_triggered(candidate.criteria, action, payload):
            continue
        savepoint = db.begin_nested()
        try:
            measurement = measure(db, user_id, candidate.criteria)
            if measurement is not None and _upsert(db, user_id, candidate.id, measurement):
                updated += 1
            savepoint.commit()
        except Exception:
            savepoint.rollback()
            logger.exception("badge_progress_failed", user_id=user_id, badge_id=candidate.id)

    db.commit()
    if not updated:
        return
    # An award committed after _upsert's check would otherwise leave a row behind.
    removed = _sweep_awarded(db, user_id)
    logger.debug("badge_progress_refreshed", user_id=user_id, updated=updated, removed=removed)
