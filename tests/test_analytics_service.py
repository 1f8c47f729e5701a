"""
Tests for dashboard metrics and user management
"""

import asyncio
from datetime import date

import httpx
import pytest

from app.errors import NotFoundError, ValidationError
from models.analytics import Profile
from services.analytics_service import AnalyticsService, month_start, week_start
from services.user_service import UserService, filter_profiles
from tests.fakes import FakeSupabase, pg_error

TODAY = date(2024, 3, 13)  # a Wednesday


def workout(day, created_at, *categories):
    return {
        "id": f"w-{day}",
        "date": day,
        "blocks": [
            {"id": f"b{i}", "letter": "ABC"[i], "title": "Part", "category": c}
            for i, c in enumerate(categories)
        ],
        "created_at": created_at,
    }


def pr(record_id, exercise, weight, created_at):
    return {
        "id": record_id,
        "user_id": "u1",
        "exercise_name": exercise,
        "weight_kg": weight,
        "date_achieved": created_at[:10],
        "created_at": created_at,
    }


@pytest.fixture
def db():
    return FakeSupabase(
        {
            "workouts": [
                workout("2024-02-28", "2024-02-20T09:00:00+00:00", "OLY"),
                workout("2024-03-04", "2024-02-21T09:00:00+00:00", "OLY", "METCON"),
                workout("2024-03-11", "2024-03-01T09:00:00+00:00", "STRENGTH"),
                workout("2024-03-12", "2024-03-02T09:00:00+00:00"),
            ],
            "profiles": [
                {
                    "id": "u1",
                    "email": "ana@box.test",
                    "full_name": "Ana",
                    "role": "athlete",
                    "created_at": "2024-03-01T12:00:00+00:00",
                },
                {
                    "id": "u2",
                    "email": "coach@box.test",
                    "full_name": None,
                    "role": "master",
                    "created_at": "2024-01-01T12:00:00+00:00",
                },
            ],
            "personal_records": [
                pr("p1", "Deadlift", 180, "2024-02-20T10:00:00+00:00"),
                pr("p2", "Snatch", 70, "2024-03-05T10:00:00+00:00"),
                pr("p3", "Snatch", 72.5, "2024-03-06T10:00:00+00:00"),
            ],
        }
    )


class TestPeriods:
    def test_week_starts_on_monday(self):
        assert week_start(TODAY) == date(2024, 3, 11)
        assert week_start(date(2024, 3, 11)) == date(2024, 3, 11)
        assert week_start(date(2024, 3, 17)) == date(2024, 3, 11)

    def test_month_start(self):
        assert month_start(TODAY) == date(2024, 3, 1)


class TestDashboard:
    def test_counts(self, db):
        metrics = AnalyticsService(db).dashboard_metrics(TODAY)
        assert metrics.total_workouts == 4
        assert metrics.workouts_this_week == 2
        assert metrics.workouts_this_month == 3
        assert metrics.total_users == 2
        assert metrics.categories_used == 3

    def test_personal_record_figures(self, db):
        metrics = AnalyticsService(db).dashboard_metrics(TODAY)
        assert metrics.total_personal_records == 3
        assert metrics.personal_records_this_month == 2
        assert metrics.heaviest_record.id == "p1"
        assert [r.id for r in metrics.recent_personal_records] == ["p3", "p2", "p1"]
        assert metrics.top_exercises[0].exercise_name == "Snatch"
        assert metrics.top_exercises[0].count == 2

    def test_recent_activity_merges_workouts_and_users(self, db):
        activity = AnalyticsService(db).recent_activity()
        assert activity[0].type == "workout_created"
        assert activity[0].description == "Workout scheduled for 12/03/2024"
        users = [a for a in activity if a.type == "user_registered"]
        assert [a.user for a in users] == ["Ana", "coach@box.test"]
        assert len(activity) == 6

    def test_failures_yield_zeroed_metrics(self, db):
        db.fail("workouts", pg_error("XX000"), times=None)
        metrics = AnalyticsService(db).dashboard_metrics(TODAY)
        assert metrics.total_workouts == 0
        assert metrics.recent_activity == []

    def test_unreachable_database_yields_zeroed_metrics(self, db):
        db.fail("workouts", httpx.ConnectError("db down"), times=None)
        metrics = AnalyticsService(db).dashboard_metrics(TODAY)
        assert metrics.total_workouts == 0
        assert metrics.total_users == 0

    def test_unexpected_errors_yield_zeroed_metrics(self, db):
        db.fail("profiles", RuntimeError("boom"))
        assert AnalyticsService(db).dashboard_metrics(TODAY).total_workouts == 0


class TestUsers:
    def test_filter_profiles(self):
        profiles = [
            Profile(id="1", email="ana@box.test", role="athlete", full_name="Ana"),
            Profile(id="2", email="coach@box.test", role="master"),
        ]
        assert [p.id for p in filter_profiles(profiles, "MASTER")] == ["2"]
        assert [p.id for p in filter_profiles(profiles, "ana")] == ["1"]
        assert filter_profiles(profiles, "  ") == profiles

    def test_list_newest_first(self, db):
        assert [p.id for p in UserService(db).list_profiles()] == ["u1", "u2"]

    def test_change_role_invalidates_cached_role(self, db, auth_service):
        assert asyncio.run(auth_service.resolve_role("u1")) == "athlete"

        profile = UserService(db, auth_service).change_role("u1", "master")

        assert profile.role == "master"
        assert asyncio.run(auth_service.resolve_role("u1")) == "master"

    def test_change_role_rejects_unknown_roles(self, db):
        with pytest.raises(ValidationError):
            UserService(db).change_role("u1", "owner")

    def test_change_role_of_missing_user(self, db):
        with pytest.raises(NotFoundError):
            UserService(db).change_role("ghost", "master")

    def test_delete_profile(self, db):
        UserService(db).delete_profile("u1")
        assert [p["id"] for p in db.rows("profiles")] == ["u2"]
