"""
Award ledger — at-most-once badge awards.

award(db, user_id, badge_id, progress_snapshot=None) → bool

Idempotency
-----------
A pre-check skips pairs that already have a UserBadge. The unique
constraint on user_badges(user_id, badge_id) is the final guard: when two
dispatches race past the pre-check, the loser's insert fails with
IntegrityError, its savepoint is rolled back and it returns False, the same
outcome as a pre-check hit.

The UserBadge insert and the BadgeProgress delete share one savepoint, so a
finished badge never keeps a progress row. After the commit the delete runs
once more; together with the tracker's own post-commit sweep this closes the
window where a progress write lands between the two transactions.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from travelog.core.logging import get_logger
from travelog.models.badge_progress import BadgeProgress
from travelog.models.user_badge import UserBadge

logger = get_logger(__name__)


def has_award(db: Session, user_id: int, badge_id: int) -> bool:
    return (
        db.query(UserBadge.id)
        .filter(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        .first()
        is not None
    )


def _delete_progress(db: Session, user_id: int, badge_id: int) -> int:
    return (
        db.query(BadgeProgress)
        .filter(BadgeProgress.user_id == user_id, BadgeProgress.badge_id == badge_id)
        .delete(synchronize_session=False)
    )


def award(
    db: Session,
    user_id: int,
    badge_id: int,
    progress_snapshot: Optional[dict[str, Any]] = None,
) -> bool:
    """Insert the award. Returns True if inserted, False if it already existed."""
    if has_award(db, user_id, badge_id):
        return False

    savepoint = db.begin_nested()
    try:
        db.add(UserBadge(
            user_id=user_id,
            badge_id=badge_id,
            progress_snapshot=(
                json.dumps(progress_snapshot, default=str)
                if progress_snapshot is not None else None
            ),
        ))
        _delete_progress(db, user_id, badge_id)
        savepoint.commit()
    except IntegrityError:
        # Race condition: a concurrent dispatch inserted first
        savepoint.rollback()
        logger.info("badge_award_conflict", user_id=user_id, badge_id=badge_id)
        return False

    db.commit()
    # A tracker that checked before this commit may have written a row since.
    if _delete_progress(db, user_id, badge_id):
        logger.info("badge_progress_swept", user_id=user_id, badge_id=badge_id)
    db.commit()
    return True
