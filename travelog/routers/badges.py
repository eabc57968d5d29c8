"""
Badges router.

GET  /badges/available                 — active badge catalog
GET  /badges/users/{user_id}           — badges a user has earned (newest first)
GET  /badges/users/{user_id}/progress  — progress toward badges not yet earned
GET  /badges/users/{user_id}/stats     — totals and completion percentage
POST /badges/award                     — grant a badge by hand
POST /badges/admin/evaluate            — replay all stored history through the engine

Authentication and admin checks are handled upstream of this service.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from travelog.db.base import get_db
from travelog.models.badge import Badge
from travelog.models.user_badge import UserBadge
from travelog.schemas.badge import (
    AwardRequest,
    BadgeListResponse,
    BadgeProgressListResponse,
    BadgeProgressResponse,
    BadgeResponse,
    BadgeStatsResponse,
    RetroactiveReportResponse,
    UserBadgeListResponse,
    UserBadgeResponse,
    UserEvaluationResponse,
)
from travelog.services.badges import (
    decode_json,
    get_badge_stats,
    grant_badge,
    list_available_badges,
    list_user_badges,
    list_user_progress,
)
from travelog.services.retroactive import evaluate_all_users

router = APIRouter(prefix="/badges", tags=["badges"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _user_badge_to_response(ub: UserBadge, badge: Badge) -> UserBadgeResponse:
    return UserBadgeResponse(
        **BadgeResponse.model_validate(badge).model_dump(),
        awarded_at=ub.awarded_at.isoformat() if ub.awarded_at else "",
        progress_snapshot=decode_json(ub.progress_snapshot),
    )


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/available",
    response_model=BadgeListResponse,
    summary="List active badges",
)
def available_badges(db: Session = Depends(get_db)):
    return BadgeListResponse(
        badges=[BadgeResponse.model_validate(b) for b in list_available_badges(db)]
    )


@router.get(
    "/users/{user_id}",
    response_model=UserBadgeListResponse,
    summary="Badges earned by a user",
)
def user_badges(
    user_id: int = Path(gt=0),
    db: Session = Depends(get_db),
):
    return UserBadgeListResponse(
        badges=[_user_badge_to_response(ub, b) for ub, b in list_user_badges(db, user_id)]
    )


@router.get(
    "/users/{user_id}/progress",
    response_model=BadgeProgressListResponse,
    summary="Progress toward badges not yet earned",
)
def user_progress(
    user_id: int = Path(gt=0),
    db: Session = Depends(get_db),
):
    """
    Only `count` and `location` badges carry progress. Rows disappear as soon
    as the badge is awarded.
    """
    return BadgeProgressListResponse(
        progress=[
            BadgeProgressResponse(
                badge=BadgeResponse.model_validate(badge),
                current_value=row.current_value,
                progress_payload=decode_json(row.progress_payload),
                last_updated=row.last_updated.isoformat() if row.last_updated else "",
            )
            for row, badge in list_user_progress(db, user_id)
        ]
    )


@router.get(
    "/users/{user_id}/stats",
    response_model=BadgeStatsResponse,
    summary="Badge totals for a user",
)
def user_stats(
    user_id: int = Path(gt=0),
    db: Session = Depends(get_db),
):
    stats = get_badge_stats(db, user_id)
    return BadgeStatsResponse(
        total_badges=stats.total_badges,
        total_points=stats.total_points,
        achievement_badges=stats.by_type.get("achievement", 0),
        milestone_badges=stats.by_type.get("milestone", 0),
        social_badges=stats.by_type.get("social", 0),
        content_badges=stats.by_type.get("content", 0),
        total_available=stats.total_available,
        completion_percentage=stats.completion_percentage,
    )


# ---------------------------------------------------------------------------
# Write endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/award",
    response_model=UserBadgeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grant a badge to a user",
    responses={
        404: {"description": "Badge does not exist (BADGE_NOT_FOUND)."},
        409: {"description": "Already awarded or inactive (BADGE_ALREADY_AWARDED, BADGE_INACTIVE)."},
    },
)
def award_badge(body: AwardRequest, db: Session = Depends(get_db)):
    ub = grant_badge(db, body.user_id, body.badge_id, body.progress_data)
    badge = db.get(Badge, body.badge_id)
    return _user_badge_to_response(ub, badge)


@router.post(
    "/admin/evaluate",
    response_model=RetroactiveReportResponse,
    summary="Re-evaluate every user's history against all active badges",
)
def evaluate_badges(db: Session = Depends(get_db)):
    report = evaluate_all_users(db)
    return RetroactiveReportResponse(
        total_badges_awarded=report.total_badges_awarded,
        users_evaluated=report.users_evaluated,
        users_with_no_badges=report.users_with_no_badges,
        user_results=[
            UserEvaluationResponse(
                user_id=r.user_id,
                actions_replayed=r.actions_replayed,
                badges_awarded=r.badges_awarded,
                badge_names=r.badge_names,
            )
            for r in report.user_results
        ],
    )
