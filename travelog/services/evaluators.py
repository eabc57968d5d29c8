"""
Criteria evaluators — one decision rule per criteria kind.

evaluate(db, user_id, criteria, action, payload) → bool

Two rules hold for every kind:
  * an irrelevant action returns False before any query runs;
  * only committed history is read. The dispatcher runs after the
    triggering write commits, so counts include the row just created.

| kind        | trigger          | awarded when                                        |
|-------------|------------------|-----------------------------------------------------|
| first_time  | criteria.action  | the action just happened                            |
| count       | memory_created   | memories of `type` >= count                         |
| tag         | memory_created   | entry carries `tag` and the tag has exactly 1 use   |
| location    | memory_created   | city matches and visits >= visit_count              |
| state_count | memory_created   | never (needs geocoding)                             |
| completion  | journey_updated  | every day of the journey has a planned experience   |

The metric helpers are shared with the progress tracker so progress bars
and awards always agree.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from travelog.core.logging import get_logger
from travelog.models.journey import Journey, JourneyExperience
from travelog.models.travel_entry import EntryTag, TravelEntry
from travelog.services.actions import ActionKind
from travelog.services.criteria import (
    COMPLETE_JOURNEY_PLAN,
    CompletionCriteria,
    CountCriteria,
    Criteria,
    FirstTimeCriteria,
    LocationCriteria,
    StateCountCriteria,
    TagCriteria,
)

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Historical metrics
# ---------------------------------------------------------------------------

@dataclass
class PlanCoverage:
    planned_days: int
    total_days: int

    @property
    def is_complete(self) -> bool:
        return self.total_days > 0 and self.planned_days >= self.total_days


def _like_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def count_memories_of_type(db: Session, user_id: int, memory_type: str) -> int:
    return (
        db.query(func.count(TravelEntry.id))
        .filter(TravelEntry.user_id == user_id, TravelEntry.memory_type == memory_type)
        .scalar()
        or 0
    )


def count_tag_uses(db: Session, user_id: int, tag: str) -> int:
    return (
        db.query(func.count(EntryTag.id))
        .join(TravelEntry, EntryTag.entry_id == TravelEntry.id)
        .filter(TravelEntry.user_id == user_id, EntryTag.tag == tag)
        .scalar()
        or 0
    )


def count_location_visits(db: Session, user_id: int, location_name: str) -> int:
    """Entries whose location contains `location_name`, case-insensitive."""
    pattern = f"%{_like_escape(location_name.lower())}%"
    return (
        db.query(func.count(TravelEntry.id))
        .filter(
            TravelEntry.user_id == user_id,
            func.lower(TravelEntry.location_name).like(pattern, escape="\\"),
        )
        .scalar()
        or 0
    )


def journey_plan_coverage(
    db: Session, user_id: int, journey_id: int
) -> Optional[PlanCoverage]:
    """
    Distinct planned day numbers within 1..total_days versus the journey span.
    None when the journey is missing, not the user's, or has no dates.
    """
    journey = (
        db.query(Journey)
        .filter(Journey.id == journey_id, Journey.user_id == user_id)
        .first()
    )
    if journey is None or journey.start_date is None or journey.end_date is None:
        return None

    total_days = (journey.end_date - journey.start_date).days + 1
    if total_days <= 0:
        return PlanCoverage(planned_days=0, total_days=total_days)

    planned_days = (
        db.query(func.count(distinct(JourneyExperience.day)))
        .filter(
            JourneyExperience.journey_id == journey_id,
            JourneyExperience.day.between(1, total_days),
        )
        .scalar()
        or 0
    )
    return PlanCoverage(planned_days=planned_days, total_days=total_days)


def location_matches(entry_location: Any, target: str) -> bool:
    if not isinstance(entry_location, str) or not entry_location:
        return False
    return target.lower() in entry_location.lower()


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _payload_tags(payload: Mapping[str, Any]) -> list[str]:
    """Tags carried by the action; anything malformed counts as no tags."""
    tags = payload.get("tags")
    if isinstance(tags, str):
        return [tags]
    if not isinstance(tags, (list, tuple)):
        return []
    return [t for t in tags if isinstance(t, str)]


# ---------------------------------------------------------------------------
# Per-kind rules
# ---------------------------------------------------------------------------

def _eval_first_time(criteria: FirstTimeCriteria, action: ActionKind) -> bool:
    # Only ever called when the action just happened, so no history lookup.
    return action == criteria.action


def _eval_count(
    db: Session, user_id: int, criteria: CountCriteria,
    action: ActionKind, payload: Mapping[str, Any],
) -> bool:
    if action != ActionKind.memory_created:
        return False
    if payload.get("type") != criteria.memory_type:
        return False
    current = count_memories_of_type(db, user_id, criteria.memory_type)
    logger.debug(
        "badge_count_checked",
        user_id=user_id, memory_type=criteria.memory_type,
        current=current, target=criteria.count,
    )
    return current >= criteria.count


def _eval_tag(
    db: Session, user_id: int, criteria: TagCriteria,
    action: ActionKind, payload: Mapping[str, Any],
) -> bool:
    if action != ActionKind.memory_created:
        return False
    if criteria.tag not in _payload_tags(payload):
        return False
    # 1 == the entry that was just created is the first to use the tag
    return count_tag_uses(db, user_id, criteria.tag) == 1


def _eval_location(
    db: Session, user_id: int, criteria: LocationCriteria,
    action: ActionKind, payload: Mapping[str, Any],
) -> bool:
    if action != ActionKind.memory_created:
        return False
    if criteria.requires_geocoding:
        logger.info(
            "badge_criteria_requires_geocoding",
            criteria_type=criteria.kind.value,
            location_type=criteria.location_type.value if criteria.location_type else None,
        )
        return False
    if not location_matches(payload.get("location_name"), criteria.location_name):
        return False
    visits = count_location_visits(db, user_id, criteria.location_name)
    return visits >= criteria.visit_count


def _eval_state_count(criteria: StateCountCriteria, action: ActionKind) -> bool:
    if action != ActionKind.memory_created:
        return False
    logger.info("badge_criteria_requires_geocoding", criteria_type=criteria.kind.value)
    return False


def _eval_completion(
    db: Session, user_id: int, criteria: CompletionCriteria,
    action: ActionKind, payload: Mapping[str, Any],
) -> bool:
    if criteria.action != COMPLETE_JOURNEY_PLAN or action != ActionKind.journey_updated:
        return False
    journey_id = _as_int(payload.get("journey_id"))
    if journey_id is None:
        return False
    coverage = journey_plan_coverage(db, user_id, journey_id)
    return coverage is not None and coverage.is_complete


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def evaluate(
    db: Session,
    user_id: int,
    criteria: Criteria,
    action: ActionKind,
    payload: Mapping[str, Any],
) -> bool:
    """Return True if `criteria` is satisfied by this action and the user's history."""
    if isinstance(criteria, FirstTimeCriteria):
        return _eval_first_time(criteria, action)
    if isinstance(criteria, CountCriteria):
        return _eval_count(db, user_id, criteria, action, payload)
    if isinstance(criteria, TagCriteria):
        return _eval_tag(db, user_id, criteria, action, payload)
    if isinstance(criteria, LocationCriteria):
        return _eval_location(db, user_id, criteria, action, payload)
    if isinstance(criteria, StateCountCriteria):
        return _eval_state_count(criteria, action)
    if isinstance(criteria, CompletionCriteria):
        return _eval_completion(db, user_id, criteria, action, payload)
    raise TypeError(f"No evaluator for criteria model {type(criteria).__name__}")
