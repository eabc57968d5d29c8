"""
Badge engine — the single entry point for achievement evaluation.

Called by the rest of the application *after* a state-changing action has
committed:

    awarded = dispatch(db, user_id, ActionKind.memory_created, {
        "type": entry.memory_type,
        "tags": tags,
        "location_name": entry.location_name,
    })

Flow
----
  1. criteria_store.list_evaluable_badges   active, not yet earned, parsed
  2. evaluators.evaluate                    one decision per badge, in order
  3. ledger.award                           for every positive result
  4. progress.refresh                       once per action, whatever happened

Failure policy
--------------
dispatch() never raises. Any error while evaluating or awarding rolls the
session back, is logged, and yields an empty list; awards committed earlier
in the same pass stay committed and a later dispatch re-derives everything
from stored history. Progress failures are logged separately. The caller's
own write is never affected.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from sqlalchemy.orm import Session

from travelog.core.config import settings
from travelog.core.logging import get_logger
from travelog.services import progress
from travelog.services.actions import ActionKind
from travelog.services.criteria import TRACKABLE_KINDS
from travelog.services.criteria_store import EvaluableBadge, list_evaluable_badges
from travelog.services.evaluators import evaluate
from travelog.services.ledger import award

logger = get_logger(__name__)


@dataclass(frozen=True)
class AwardedBadge:
    """What the caller gets back for UI notification."""
    id: int
    name: str
    description: Optional[str]
    points: int

    @classmethod
    def from_candidate(cls, candidate: EvaluableBadge) -> "AwardedBadge":
        return cls(
            id=candidate.id,
            name=candidate.name,
            description=candidate.description,
            points=candidate.points,
        )


def _final_snapshot(
    db: Session, user_id: int, candidate: EvaluableBadge
) -> Optional[dict[str, Any]]:
    if candidate.kind not in TRACKABLE_KINDS:
        return None
    measurement = progress.measure(db, user_id, candidate.criteria)
    if measurement is None:
        return None
    return {"current": measurement.current, **measurement.to_payload()}


def _evaluate_and_award(
    db: Session,
    user_id: int,
    action: ActionKind,
    payload: Mapping[str, Any],
) -> list[AwardedBadge]:
    awarded: list[AwardedBadge] = []
    try:
        for candidate in list_evaluable_badges(db, user_id):
            if not evaluate(db, user_id, candidate.criteria, action, payload):
                continue
            snapshot = _final_snapshot(db, user_id, candidate)
            if award(db, user_id, candidate.id, snapshot):
                awarded.append(AwardedBadge.from_candidate(candidate))
                logger.info(
                    "badge_awarded",
                    user_id=user_id,
                    badge_id=candidate.id,
                    badge_name=candidate.name,
                    action=action.value,
                )
    except Exception:
        db.rollback()
        logger.exception("badge_dispatch_failed", user_id=user_id, action=action.value)
        return []
    return awarded


def _refresh_progress(
    db: Session,
    user_id: int,
    action: ActionKind,
    payload: Mapping[str, Any],
) -> None:
    try:
        progress.refresh(db, user_id, action, payload)
    except Exception:
        db.rollback()
        logger.exception("badge_progress_refresh_failed", user_id=user_id, action=action.value)


def dispatch(
    db: Session,
    user_id: int,
    action: Union[ActionKind, str],
    payload: Optional[Mapping[str, Any]] = None,
) -> list[AwardedBadge]:
    """
    Evaluate every badge the user can still earn against this action.
    Returns only the badges awarded by this call; empty on any failure.
    """
    if not settings.BADGE_EVALUATION_ENABLED:
        return []

    try:
        kind = ActionKind(action)
    except ValueError:
        logger.warning("badge_dispatch_unknown_action", user_id=user_id, action=str(action))
        return []

    data: dict[str, Any] = dict(payload or {})
    awarded = _evaluate_and_award(db, user_id, kind, data)
    _refresh_progress(db, user_id, kind, data)
    return awarded
