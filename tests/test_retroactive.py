"""
Tests for retroactive evaluation: replaying stored history through the
engine awards badges that were defined after the fact.
"""
from travelog.models import UserBadge
from travelog.services import retroactive
from travelog.services.actions import ActionKind
from travelog.services.retroactive import evaluate_all_users, evaluate_user_history

ALICE = 41
BOB = 42
CAROL = 43


class TestEvaluateUserHistory:
    def test_count_badge_awarded_from_history(self, db, make_badge, add_memory):
        for _ in range(3):
            add_memory(ALICE, "adventure")
        badge = make_badge("count", {"type": "adventure", "count": 3}, name="Adventurer")

        result = evaluate_user_history(db, ALICE)
        assert result.badge_names == ["Adventurer"]
        assert result.actions_replayed == 3
        assert db.query(UserBadge).filter(UserBadge.badge_id == badge.id).count() == 1

    def test_single_tag_use_awarded(self, db, make_badge, add_memory):
        add_memory(ALICE, tags=("snorkeling",))
        make_badge("tag", {"tag": "snorkeling"}, name="Snorkeler")
        assert evaluate_user_history(db, ALICE).badge_names == ["Snorkeler"]

    def test_completed_journey_awarded(self, db, make_badge, make_journey):
        make_journey(ALICE, days=2, planned_days=(1, 2))
        make_badge("completion", {"action": "complete_journey_plan"}, name="Planner")
        make_badge("first_time", {"action": "journey_created"}, name="Trailblazer")

        result = evaluate_user_history(db, ALICE)
        assert sorted(result.badge_names) == ["Planner", "Trailblazer"]
        assert result.actions_replayed == 2

    def test_rerun_awards_nothing(self, db, make_badge, add_memory):
        add_memory(ALICE, "food")
        make_badge("first_time", {"action": "memory_created"})
        assert evaluate_user_history(db, ALICE).badges_awarded == 1
        assert evaluate_user_history(db, ALICE).badges_awarded == 0

    def test_user_without_history(self, db, make_badge):
        make_badge("first_time", {"action": "memory_created"})
        result = evaluate_user_history(db, ALICE)
        assert result.actions_replayed == 0
        assert result.badges_awarded == 0


class TestEvaluateAllUsers:
    def test_report(self, db, make_badge, add_memory, make_journey):
        add_memory(ALICE, "adventure")
        add_memory(ALICE, "adventure")
        add_memory(BOB, "adventure")
        make_journey(CAROL, days=3, planned_days=(1,))
        make_badge("count", {"type": "adventure", "count": 2}, name="Two Adventures")
        make_badge("first_time", {"action": "memory_created"}, name="First Memory")

        report = evaluate_all_users(db)
        assert report.users_evaluated == 3
        assert report.total_badges_awarded == 3
        assert report.users_with_no_badges == 1
        assert [r.user_id for r in report.user_results] == [ALICE, BOB]
        assert sorted(report.user_results[0].badge_names) == ["First Memory", "Two Adventures"]

    def test_empty_database(self, db):
        report = evaluate_all_users(db)
        assert report.users_evaluated == 0
        assert report.total_badges_awarded == 0
        assert report.user_results == []


class TestDreamAndMediaReplay:
    def test_first_dream_awarded(self, db, make_badge, add_dream):
        add_dream(ALICE, title="Kyoto in spring", dream_type="experience")
        add_dream(ALICE)
        make_badge("first_time", {"action": "dream_created"}, name="Dreamer")

        result = evaluate_user_history(db, ALICE)
        assert result.badge_names == ["Dreamer"]
        assert result.actions_replayed == 2

    def test_dream_only_user_is_evaluated(self, db, make_badge, add_dream):
        add_dream(CAROL)
        make_badge("first_time", {"action": "dream_created"}, name="Dreamer")

        report = evaluate_all_users(db)
        assert report.users_evaluated == 1
        assert report.user_results[0].user_id == CAROL

    def test_photo_and_video_awarded(self, db, make_badge, add_memory, add_media):
        entry = add_memory(ALICE)
        add_media(entry["entry_id"], "image", count=3)
        add_media(entry["entry_id"], "video")
        make_badge("first_time", {"action": "photo_uploaded"}, name="Photographer")
        make_badge("first_time", {"action": "video_uploaded"}, name="Filmmaker")

        result = evaluate_user_history(db, ALICE)
        assert sorted(result.badge_names) == ["Filmmaker", "Photographer"]
        # one memory, one photo replay, one video replay
        assert result.actions_replayed == 3

    def test_media_replayed_once_with_total_count(self, db, add_memory, add_media, monkeypatch):
        first = add_memory(ALICE)
        second = add_memory(ALICE)
        add_media(first["entry_id"], "image", count=2)
        add_media(second["entry_id"], "image", count=3)
        add_media(add_memory(BOB)["entry_id"], "image", count=4)

        seen = []
        monkeypatch.setattr(
            retroactive, "dispatch",
            lambda db, user_id, action, payload: seen.append((action, payload)) or [],
        )
        evaluate_user_history(db, ALICE)
        assert (ActionKind.photo_uploaded, {"file_count": 5}) in seen
        assert all(action != ActionKind.video_uploaded for action, _ in seen)

    def test_no_media_no_upload_replay(self, db, make_badge, add_memory):
        add_memory(ALICE)
        make_badge("first_time", {"action": "photo_uploaded"})
        assert evaluate_user_history(db, ALICE).badges_awarded == 0
