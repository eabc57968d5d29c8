"""
Badge API schemas.

GET  /badges/available                  → BadgeListResponse
GET  /badges/users/{user_id}            → UserBadgeListResponse
GET  /badges/users/{user_id}/progress   → BadgeProgressListResponse
GET  /badges/users/{user_id}/stats      → BadgeStatsResponse
POST /badges/award                      → UserBadgeResponse
POST /badges/admin/evaluate             → RetroactiveReportResponse
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    badge_type: str
    criteria_type: str = Field(
        description='"first_time" | "count" | "tag" | "location" | "state_count" | "completion"'
    )
    criteria_payload: str = Field(description="Raw JSON criteria, as configured.")
    points: int


class BadgeListResponse(BaseModel):
    badges: list[BadgeResponse]


class UserBadgeResponse(BadgeResponse):
    awarded_at: str
    progress_snapshot: Optional[dict[str, Any]] = Field(
        default=None,
        description="Final progress numbers at award time (count/location badges).",
    )


class UserBadgeListResponse(BaseModel):
    badges: list[UserBadgeResponse]


class BadgeProgressResponse(BaseModel):
    badge: BadgeResponse
    current_value: int
    progress_payload: Optional[dict[str, Any]] = Field(
        default=None,
        description="At least {target, percentage}.",
    )
    last_updated: str


class BadgeProgressListResponse(BaseModel):
    progress: list[BadgeProgressResponse]


class BadgeStatsResponse(BaseModel):
    total_badges: int
    total_points: int
    achievement_badges: int
    milestone_badges: int
    social_badges: int
    content_badges: int
    total_available: int
    completion_percentage: int = Field(description="Earned / active badges, 0–100.")


class AwardRequest(BaseModel):
    user_id: int = Field(gt=0)
    badge_id: int = Field(gt=0)
    progress_data: Optional[dict[str, Any]] = None


class UserEvaluationResponse(BaseModel):
    user_id: int
    actions_replayed: int
    badges_awarded: int
    badge_names: list[str]


class RetroactiveReportResponse(BaseModel):
    total_badges_awarded: int
    users_evaluated: int
    users_with_no_badges: int
    user_results: list[UserEvaluationResponse]
