"""
Custom exception hierarchy for Travelog.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The badge engine itself never raises into callers; these classes cover the
badge HTTP surface plus the one engine-internal configuration error.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class TravelogException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class BadgeNotFoundError(TravelogException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "BADGE_NOT_FOUND"

    def __init__(self, badge_id: int):
        super().__init__(
            message=f"Badge {badge_id} does not exist.",
            details={"badge_id": badge_id},
        )


class BadgeInactiveError(TravelogException):
    http_status = status.HTTP_409_CONFLICT
    code = "BADGE_INACTIVE"

    def __init__(self, badge_id: int):
        super().__init__(
            message=f"Badge {badge_id} is not active.",
            details={"badge_id": badge_id},
        )


class BadgeAlreadyAwardedError(TravelogException):
    http_status = status.HTTP_409_CONFLICT
    code = "BADGE_ALREADY_AWARDED"

    def __init__(self, user_id: int, badge_id: int):
        super().__init__(
            message=f"User {user_id} already has badge {badge_id}.",
            details={"user_id": user_id, "badge_id": badge_id},
        )


class InvalidCriteriaError(ValueError):
    """A badge's criteria_type/criteria_payload pair cannot be evaluated."""

    def __init__(self, criteria_type: str, reason: str):
        self.criteria_type = criteria_type
        self.reason = reason
        super().__init__(f"{criteria_type}: {reason}")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def travelog_exception_handler(request: Request, exc: TravelogException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
