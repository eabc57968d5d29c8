"""
Integration tests for the badge API using the SQLite test database.
"""
from travelog.models import BadgeProgress
from travelog.services.actions import ActionKind
from travelog.services.badge_engine import dispatch

USER = 51


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestAvailable:
    def test_lists_only_active_badges(self, client, make_badge):
        make_badge("first_time", {"action": "memory_created"}, name="Visible", points=5)
        make_badge("first_time", {"action": "memory_created"}, name="Hidden", is_active=False)
        r = client.get("/badges/available")
        assert r.status_code == 200
        names = [b["name"] for b in r.json()["badges"]]
        assert names == ["Visible"]

    def test_ordered_by_type_then_points(self, client, make_badge):
        make_badge("first_time", {"action": "memory_created"}, name="M50", badge_type="milestone", points=50)
        make_badge("first_time", {"action": "memory_created"}, name="A20", badge_type="achievement", points=20)
        make_badge("first_time", {"action": "memory_created"}, name="A10", badge_type="achievement", points=10)
        names = [b["name"] for b in client.get("/badges/available").json()["badges"]]
        assert names == ["A10", "A20", "M50"]


class TestUserBadges:
    def test_earned_badges(self, client, db, make_badge, add_memory):
        badge = make_badge("count", {"type": "food", "count": 1}, name="Foodie")
        dispatch(db, USER, ActionKind.memory_created, add_memory(USER, "food"))

        r = client.get(f"/badges/users/{USER}")
        assert r.status_code == 200
        badges = r.json()["badges"]
        assert len(badges) == 1
        assert badges[0]["id"] == badge.id
        assert badges[0]["awarded_at"]
        assert badges[0]["progress_snapshot"]["percentage"] == 100

    def test_no_badges(self, client):
        r = client.get(f"/badges/users/{USER}")
        assert r.status_code == 200
        assert r.json()["badges"] == []

    def test_invalid_user_id(self, client):
        r = client.get("/badges/users/0")
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestProgress:
    def test_progress_rows(self, client, db, make_badge, add_memory):
        badge = make_badge("count", {"type": "food", "count": 4}, name="Gourmet")
        dispatch(db, USER, ActionKind.memory_created, add_memory(USER, "food"))

        r = client.get(f"/badges/users/{USER}/progress")
        assert r.status_code == 200
        rows = r.json()["progress"]
        assert len(rows) == 1
        assert rows[0]["badge"]["id"] == badge.id
        assert rows[0]["current_value"] == 1
        assert rows[0]["progress_payload"]["target"] == 4
        assert rows[0]["progress_payload"]["percentage"] == 25

    def test_earned_badges_hidden_from_progress(self, client, db, make_badge):
        badge = make_badge("count", {"type": "food", "count": 4})
        client.post("/badges/award", json={"user_id": USER, "badge_id": badge.id})
        # stale row written after the award
        db.add(BadgeProgress(user_id=USER, badge_id=badge.id, current_value=3))
        db.commit()
        assert client.get(f"/badges/users/{USER}/progress").json()["progress"] == []


class TestStats:
    def test_stats(self, client, db, make_badge, add_memory):
        make_badge("first_time", {"action": "memory_created"}, points=10, badge_type="milestone")
        make_badge("tag", {"tag": "beach"}, points=15, badge_type="content")
        make_badge("tag", {"tag": "ski"}, points=5)
        make_badge("tag", {"tag": "city"}, points=5)
        dispatch(db, USER, ActionKind.memory_created, add_memory(USER, tags=("beach",)))

        body = client.get(f"/badges/users/{USER}/stats").json()
        assert body["total_badges"] == 2
        assert body["total_points"] == 25
        assert body["milestone_badges"] == 1
        assert body["content_badges"] == 1
        assert body["achievement_badges"] == 0
        assert body["total_available"] == 4
        assert body["completion_percentage"] == 50

    def test_stats_without_badges(self, client):
        body = client.get(f"/badges/users/{USER}/stats").json()
        assert body["total_badges"] == 0
        assert body["total_available"] == 0
        assert body["completion_percentage"] == 0


class TestAward:
    def test_award_created(self, client, make_badge):
        badge = make_badge("first_time", {"action": "memory_created"}, name="Manual")
        r = client.post("/badges/award", json={
            "user_id": USER, "badge_id": badge.id, "progress_data": {"reason": "beta tester"},
        })
        assert r.status_code == 201
        body = r.json()
        assert body["name"] == "Manual"
        assert body["progress_snapshot"] == {"reason": "beta tester"}

    def test_award_twice_conflicts(self, client, make_badge):
        badge = make_badge("first_time", {"action": "memory_created"})
        client.post("/badges/award", json={"user_id": USER, "badge_id": badge.id})
        r = client.post("/badges/award", json={"user_id": USER, "badge_id": badge.id})
        assert r.status_code == 409
        assert r.json()["code"] == "BADGE_ALREADY_AWARDED"

    def test_award_unknown_badge(self, client):
        r = client.post("/badges/award", json={"user_id": USER, "badge_id": 999})
        assert r.status_code == 404
        assert r.json()["code"] == "BADGE_NOT_FOUND"

    def test_award_inactive_badge(self, client, make_badge):
        badge = make_badge("first_time", {"action": "memory_created"}, is_active=False)
        r = client.post("/badges/award", json={"user_id": USER, "badge_id": badge.id})
        assert r.status_code == 409
        assert r.json()["code"] == "BADGE_INACTIVE"


class TestAdminEvaluate:
    def test_retroactive_endpoint(self, client, make_badge, add_memory):
        add_memory(USER, "food")
        make_badge("first_time", {"action": "memory_created"}, name="First Memory")

        r = client.post("/badges/admin/evaluate")
        assert r.status_code == 200
        body = r.json()
        assert body["total_badges_awarded"] == 1
        assert body["users_evaluated"] == 1
        assert body["user_results"][0]["badge_names"] == ["First Memory"]

        again = client.post("/badges/admin/evaluate").json()
        assert again["total_badges_awarded"] == 0
        assert again["users_with_no_badges"] == 1
