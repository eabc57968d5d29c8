"""
Retroactive badge evaluation.

Replays a user's stored history through dispatch() so that badges added
after the fact (or missed while the engine was disabled) are awarded.

  evaluate_user_history(db, user_id) → UserEvaluation
  evaluate_all_users(db)             → RetroactiveReport

Replayed actions:
  * every memory          → memory_created {type, tags, location_name, entry_id}
  * every journey         → journey_created, then journey_updated {journey_id}
  * every dream           → dream_created {dream_id, title, dream_type}
  * photos, if any        → photo_uploaded {file_count}   (once, total count)
  * videos, if any        → video_uploaded {file_count}   (once, total count)

Safe to re-run: the ledger ignores badges already awarded. Because the tag
rule awards only when the tag has exactly one use, a tag used several times
before the badge existed is not awarded by a replay.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterator

from sqlalchemy import func, select, union
from sqlalchemy.orm import Session

from travelog.core.logging import get_logger
from travelog.models.dream import Dream
from travelog.models.journey import Journey
from travelog.models.media_file import MEDIA_IMAGE, MEDIA_VIDEO, MediaFile
from travelog.models.travel_entry import EntryTag, TravelEntry
from travelog.services.actions import ActionKind
from travelog.services.badge_engine import dispatch

logger = get_logger(__name__)


@dataclass
class UserEvaluation:
    user_id: int
    actions_replayed: int = 0
    badge_names: list[str] = field(default_factory=list)

    @property
    def badges_awarded(self) -> int:
        return len(self.badge_names)


@dataclass
class RetroactiveReport:
    total_badges_awarded: int
    users_evaluated: int
    user_results: list[UserEvaluation]   # only users who received badges
    users_with_no_badges: int


def _replay_actions(db: Session, user_id: int) -> Iterator[tuple[ActionKind, dict[str, Any]]]:
    entries = (
        db.query(TravelEntry)
        .filter(TravelEntry.user_id == user_id)
        .order_by(TravelEntry.id)
        .all()
    )
    tags_by_entry: dict[int, list[str]] = defaultdict(list)
    if entries:
        rows = (
            db.query(EntryTag.entry_id, EntryTag.tag)
            .filter(EntryTag.entry_id.in_([e.id for e in entries]))
            .all()
        )
        for entry_id, tag in rows:
            tags_by_entry[entry_id].append(tag)

    for entry in entries:
        yield ActionKind.memory_created, {
            "entry_id": entry.id,
            "type": entry.memory_type or "other",
            "tags": tags_by_entry.get(entry.id, []),
            "location_name": entry.location_name,
        }

    journeys = (
        db.query(Journey.id, Journey.title, Journey.destination)
        .filter(Journey.user_id == user_id)
        .order_by(Journey.id)
        .all()
    )
    for journey_id, title, destination in journeys:
        yield ActionKind.journey_created, {
            "journey_id": journey_id,
            "title": title,
            "destination": destination,
        }
        yield ActionKind.journey_updated, {"journey_id": journey_id}

    dreams = (
        db.query(Dream.id, Dream.title, Dream.dream_type)
        .filter(Dream.user_id == user_id)
        .order_by(Dream.id)
        .all()
    )
    for dream_id, title, dream_type in dreams:
        yield ActionKind.dream_created, {
            "dream_id": dream_id,
            "title": title,
            "dream_type": dream_type or "destination",
        }

    # One replay per media type, carrying the user's total file count.
    media_counts = dict(
        db.query(MediaFile.file_type, func.count(MediaFile.id))
        .join(TravelEntry, MediaFile.entry_id == TravelEntry.id)
        .filter(TravelEntry.user_id == user_id)
        .group_by(MediaFile.file_type)
        .all()
    )
    for file_type, action in ((MEDIA_IMAGE, ActionKind.photo_uploaded), (MEDIA_VIDEO, ActionKind.video_uploaded)):
        file_count = media_counts.get(file_type, 0)
        if file_count > 0:
            yield action, {"file_count": file_count}


def evaluate_user_history(db: Session, user_id: int) -> UserEvaluation:
    result = UserEvaluation(user_id=user_id)
    # Materialize first: dispatch() commits, which would expire streamed rows.
    for action, payload in list(_replay_actions(db, user_id)):
        result.actions_replayed += 1
        for badge in dispatch(db, user_id, action, payload):
            result.badge_names.append(badge.name)
    return result


def _known_user_ids(db: Session) -> list[int]:
    ids = union(
        select(TravelEntry.user_id),
        select(Journey.user_id),
        select(Dream.user_id),
    ).subquery()
    return [row[0] for row in db.execute(select(ids.c.user_id).order_by(ids.c.user_id))]


def evaluate_all_users(db: Session) -> RetroactiveReport:
    evaluations = [evaluate_user_history(db, user_id) for user_id in _known_user_ids(db)]
    with_badges = [e for e in evaluations if e.badges_awarded > 0]
    report = RetroactiveReport(
        total_badges_awarded=sum(e.badges_awarded for e in evaluations),
        users_evaluated=len(evaluations),
        user_results=sorted(with_badges, key=lambda e: e.badges_awarded, reverse=True),
        users_with_no_badges=len(evaluations) - len(with_badges),
    )
    logger.info(
        "retroactive_evaluation_complete",
        users_evaluated=report.users_evaluated,
        total_badges_awarded=report.total_badges_awarded,
    )
    return report
