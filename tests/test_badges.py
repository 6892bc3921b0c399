"""
Tests for badge evaluation
"""
import pytest

from conftest import make_log, TEST_USER_ID
from models.badge import BadgeDefinition
from services.badge_service import BadgeService, find_new_badges

CATALOG = [
    {"id": "b-first", "name": "First Step", "description": "Log your first symptom", "icon": "🌱",
     "requirement_type": "logs_count", "requirement_value": 1},
    {"id": "b-five", "name": "Consistent Tracker", "description": "Log 5 times", "icon": "📋",
     "requirement_type": "logs_count", "requirement_value": 5},
    {"id": "b-streak3", "name": "Three in a Row", "description": "3 day streak", "icon": "🔥",
     "requirement_type": "streak_days", "requirement_value": 3},
    {"id": "b-streak7", "name": "Week Warrior", "description": "7 day streak", "icon": "🏆",
     "requirement_type": "streak_days", "requirement_value": 7},
]


def _catalog(*rows):
    return [BadgeDefinition.model_validate(r) for r in (rows or CATALOG)]


@pytest.mark.unit
class TestFindNewBadges:
    def test_thresholds_are_inclusive(self):
        new = find_new_badges(_catalog(), set(), logs_count=5, streak=3)
        assert [b.id for b in new] == ["b-first", "b-five", "b-streak3"]

    def test_already_earned_are_skipped(self):
        new = find_new_badges(_catalog(), {"b-first", "b-five"}, logs_count=10, streak=0)
        assert new == []

    def test_unknown_requirement_never_matches(self):
        odd = {"id": "b-odd", "name": "Odd", "requirement_type": "mood_points", "requirement_value": 0}
        assert find_new_badges(_catalog(odd), set(), logs_count=100, streak=100) == []

    def test_duplicate_catalog_rows_grant_once(self):
        row = CATALOG[0]
        new = find_new_badges(_catalog(row, dict(row)), set(), logs_count=1, streak=0)
        assert [b.id for b in new] == ["b-first"]

    def test_same_requirement_different_badges_both_granted(self):
        twin = {**CATALOG[0], "id": "b-first-twin", "name": "Twin"}
        new = find_new_badges(_catalog(CATALOG[0], twin), set(), logs_count=1, streak=0)
        assert {b.id for b in new} == {"b-first", "b-first-twin"}

    def test_caller_set_is_not_mutated(self):
        earned = {"b-first"}
        find_new_badges(_catalog(), earned, logs_count=5, streak=0)
        assert earned == {"b-first"}


@pytest.mark.integration
class TestEvaluate:
    async def test_five_logs_earns_badge_once(self, store):
        store.seed("badges", [CATALOG[1]])
        store.seed("user_symptoms", [make_log(d) for d in (20, 18, 15, 12, 10)])

        first = await BadgeService.evaluate(TEST_USER_ID)
        second = await BadgeService.evaluate(TEST_USER_ID)

        assert len(first) == 1
        assert first[0]["title"] == "🎉 New Badge Earned!"
        assert first[0]["description"] == 'You\'ve earned the "Consistent Tracker" badge!'
        assert second == []
        assert len(store.rows("user_badges")) == 1

    async def test_streak_badges(self, store):
        store.seed("badges", CATALOG)
        store.seed("user_symptoms", [make_log(0), make_log(1), make_log(2)])

        granted = await BadgeService.evaluate(TEST_USER_ID)
        assert {n["badge_id"] for n in granted} == {"b-first", "b-streak3"}

    async def test_catalog_failure_aborts_silently(self, store):
        store.fail_reads.add("badges")
        store.seed("user_symptoms", [make_log(0)])
        assert await BadgeService.evaluate(TEST_USER_ID) == []
        assert not any(call == ("insert", "user_badges") for call in store.calls)

    async def test_earned_set_failure_aborts_silently(self, store):
        store.seed("badges", CATALOG)
        store.seed("user_symptoms", [make_log(0)])
        store.fail_reads.add("user_badges")
        assert await BadgeService.evaluate(TEST_USER_ID) == []
        assert store.rows("user_badges") == []

    async def test_failed_grant_is_not_announced(self, store):
        store.seed("badges", CATALOG[:1])
        store.seed("user_symptoms", [make_log(0)])
        store.fail_writes.add("user_badges")
        assert await BadgeService.evaluate(TEST_USER_ID) == []

    async def test_list_with_status(self, store):
        store.seed("badges", list(reversed(CATALOG)))
        store.seed("user_badges", [{"user_id": TEST_USER_ID, "badge_id": "b-five", "earned_at": "2024-01-01T00:00:00+00:00"}])

        badges = await BadgeService.list_with_status(TEST_USER_ID)
        assert [b["requirement_value"] for b in badges] == [1, 3, 5, 7]
        earned = {b["id"]: b["earned"] for b in badges}
        assert earned == {"b-first": False, "b-streak3": False, "b-five": True, "b-streak7": False}
        assert next(b for b in badges if b["id"] == "b-five")["earned_at"].year == 2024

    async def test_malformed_grant_row_aborts_silently(self, store):
        store.seed("badges", CATALOG[:1])
        store.seed("user_symptoms", [make_log(0)])
        store.seed("user_badges", [{"user_id": TEST_USER_ID, "earned_at": "2024-01-01T00:00:00+00:00"}])
        assert await BadgeService.evaluate(TEST_USER_ID) == []
        assert len(store.rows("user_badges")) == 1


@pytest.mark.integration
class TestBadgeRoutes:
    async def test_evaluate_endpoint(self, client, store, auth_headers):
        store.seed("badges", CATALOG[:1])
        store.seed("user_symptoms", [make_log(0)])
        resp = await client.post("/api/v1/badges/evaluate", headers=auth_headers)
        assert resp.status_code == 200
        assert [n["badge_id"] for n in resp.json()["new_badges"]] == ["b-first"]

    async def test_stats_endpoint(self, client, store, auth_headers):
        store.seed("user_symptoms", [make_log(0), make_log(1), make_log(4)])
        resp = await client.get("/api/v1/badges/stats", params={"tz": "UTC"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"logs_count": 3, "current_streak": 2}

    async def test_bad_timezone_rejected(self, client, store, auth_headers):
        resp = await client.post("/api/v1/badges/evaluate", params={"tz": "Nowhere/City"}, headers=auth_headers)
        assert resp.status_code == 400

    async def test_list_endpoint_failure(self, client, store, auth_headers):
        store.fail_reads.add("badges")
        resp = await client.get("/api/v1/badges", headers=auth_headers)
        assert resp.status_code == 500
