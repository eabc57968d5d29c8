"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
import pytest

from travelog.core.errors import (
    BadgeAlreadyAwardedError,
    BadgeInactiveError,
    BadgeNotFoundError,
    InvalidCriteriaError,
    TravelogException,
)


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_badge_not_found_error(self):
        err = BadgeNotFoundError(badge_id=7)
        assert err.http_status == 404
        assert err.code == "BADGE_NOT_FOUND"
        assert "7" in err.message
        assert err.to_dict()["details"] == {"badge_id": 7}

    def test_badge_inactive_error(self):
        err = BadgeInactiveError(badge_id=3)
        assert err.http_status == 409
        assert err.code == "BADGE_INACTIVE"

    def test_badge_already_awarded_error(self):
        err = BadgeAlreadyAwardedError(user_id=5, badge_id=9)
        assert err.http_status == 409
        assert err.code == "BADGE_ALREADY_AWARDED"
        d = err.to_dict()
        assert d["details"]["user_id"] == 5
        assert d["details"]["badge_id"] == 9

    def test_base_exception_defaults(self):
        err = TravelogException("boom")
        assert err.http_status == 500
        assert err.code == "INTERNAL_ERROR"

    def test_to_dict_without_details(self):
        d = TravelogException("boom").to_dict()
        assert d == {"code": "INTERNAL_ERROR", "message": "boom"}
        # details should not be in dict when empty
        assert "details" not in d

    def test_invalid_criteria_is_value_error(self):
        err = InvalidCriteriaError("count", "empty criteria payload")
        assert isinstance(err, ValueError)
        assert err.criteria_type == "count"
        assert err.reason == "empty criteria payload"
        assert str(err) == "count: empty criteria payload"


# ---------------------------------------------------------------------------
# Integration tests on HTTP error responses
# ---------------------------------------------------------------------------

class TestValidationErrors:
    def test_missing_badge_id_returns_validation_error(self, client):
        r = client.post("/badges/award", json={"user_id": 1})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert isinstance(body["details"]["errors"], list)

    def test_field_name_reported(self, client):
        r = client.post("/badges/award", json={"user_id": 1, "badge_id": 0})
        assert r.status_code == 422
        fields = [e["field"] for e in r.json()["details"]["errors"]]
        assert any("badge_id" in f for f in fields)

    @pytest.mark.parametrize("user_id", [0, -1])
    def test_non_positive_user_id(self, client, user_id):
        r = client.post("/badges/award", json={"user_id": user_id, "badge_id": 1})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_non_integer_path_param(self, client):
        r = client.get("/badges/users/abc/stats")
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestDomainErrors:
    def test_404_has_machine_readable_code(self, client):
        r = client.post("/badges/award", json={"user_id": 1, "badge_id": 12345})
        assert r.status_code == 404
        body = r.json()
        assert body["code"] == "BADGE_NOT_FOUND"
        assert body["details"]["badge_id"] == 12345

    def test_409_has_machine_readable_code(self, client, make_badge):
        badge = make_badge("first_time", {"action": "memory_created"})
        client.post("/badges/award", json={"user_id": 1, "badge_id": badge.id})
        r = client.post("/badges/award", json={"user_id": 1, "badge_id": badge.id})
        assert r.status_code == 409
        assert r.json()["code"] == "BADGE_ALREADY_AWARDED"
        assert "message" in r.json()
