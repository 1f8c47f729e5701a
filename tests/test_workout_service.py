"""
Tests for WorkoutService and block cleaning
"""

from datetime import date

import httpx
import pytest

from app.errors import ConflictError, NotFoundError, ServiceUnavailableError, ValidationError
from services.category_service import CategoryService
from services.workout_service import WorkoutService, clean_blocks
from tests.fakes import FakeSupabase


def block(letter, title, category=None, **extra):
    return {"letter": letter, "title": title, "category": category, **extra}


def workout_row(day, *blocks, created_at="2024-01-01T08:00:00+00:00"):
    return {
        "id": f"w-{day}",
        "date": day,
        "blocks": [dict(b, id=f"block-{day}-{i}") for i, b in enumerate(blocks)],
        "created_at": created_at,
    }


@pytest.fixture
def db():
    return FakeSupabase(
        {
            "workouts": [
                workout_row("2024-03-04", block("A", "Snatch", "OLY"), block("B", "Fran", "METCON")),
                workout_row("2024-03-05", block("A", "Back squat", "STRENGTH")),
                workout_row("2024-03-06", block("A", "Clean", "OLY"), block("B", "Jerk", "OLY")),
                workout_row("2024-03-10", block("A", "Row", "ENDURANCE")),
            ],
            "custom_categories": [
                {"id": "c1", "value": "ENDURANCE", "label": "Endurance", "color": "bg-teal-500"}
            ],
        }
    )


@pytest.fixture
def service(db):
    return WorkoutService(db, CategoryService(db))


class TestCleanBlocks:
    def test_drops_blocks_without_letter_or_title(self):
        cleaned = clean_blocks(
            [block("A", "Warm-up"), block("", "No letter"), block("B", "  "), None]
        )
        assert [b["letter"] for b in cleaned] == ["A"]

    def test_trims_and_fills_defaults(self):
        cleaned = clean_blocks([block(" A ", " Strength ", description=None)])[0]
        assert cleaned["letter"] == "A"
        assert cleaned["title"] == "Strength"
        assert cleaned["description"] == ""
        assert cleaned["notes"] == ""
        assert cleaned["id"].startswith("block-")

    def test_keeps_existing_ids(self):
        assert clean_blocks([block("A", "X", id="block-1")])[0]["id"] == "block-1"


class TestReads:
    def test_get(self, service):
        assert service.get("w-2024-03-05").blocks[0].title == "Back squat"
        with pytest.raises(NotFoundError):
            service.get("nope")

    def test_unreachable_database(self, db, service):
        db.fail("workouts", httpx.ReadTimeout("timed out"))
        with pytest.raises(ServiceUnavailableError) as exc:
            service.get_by_date(date(2024, 3, 4))
        assert exc.value.error_code == "DATABASE_UNAVAILABLE"
        # the next call goes through
        assert len(service.get_by_date(date(2024, 3, 4))) == 1

    def test_get_by_date(self, service):
        workouts = service.get_by_date(date(2024, 3, 5))
        assert [w.id for w in workouts] == ["w-2024-03-05"]
        assert workouts[0].blocks[0].title == "Back squat"

    def test_get_by_date_range_is_ascending(self, service):
        workouts = service.get_by_date_range(date(2024, 3, 4), date(2024, 3, 6))
        assert [str(w.date) for w in workouts] == ["2024-03-04", "2024-03-05", "2024-03-06"]

    def test_filters_are_newest_first(self, service):
        workouts = service.get_with_filters()
        assert [str(w.date) for w in workouts] == [
            "2024-03-10",
            "2024-03-06",
            "2024-03-05",
            "2024-03-04",
        ]

    def test_exact_date_wins_over_range(self, service):
        workouts = service.get_with_filters(
            workout_date=date(2024, 3, 10), start_date=date(2024, 3, 4), end_date=date(2024, 3, 5)
        )
        assert [w.id for w in workouts] == ["w-2024-03-10"]

    def test_category_filter_matches_any_block(self, service):
        workouts = service.get_with_filters(categories=["METCON", "STRENGTH"])
        assert [w.id for w in workouts] == ["w-2024-03-05", "w-2024-03-04"]

    def test_get_by_category_with_range(self, service):
        workouts = service.get_by_category("OLY", start_date=date(2024, 3, 5))
        assert [w.id for w in workouts] == ["w-2024-03-06"]

    def test_used_categories_in_first_seen_order(self, service):
        assert service.get_used_categories() == ["OLY", "METCON", "STRENGTH", "ENDURANCE"]

    def test_category_stats_count_each_workout_once(self, service):
        stats = {s.category: s for s in service.get_category_stats()}
        assert stats["OLY"].count == 2
        assert stats["OLY"].label == "Olympic Lifting"
        assert stats["ENDURANCE"].label == "Endurance"
        assert stats["ENDURANCE"].color == "bg-teal-500"
        assert service.get_category_stats()[0].category == "OLY"

    def test_unknown_category_gets_fallback_label(self, db, service):
        db.rows("workouts").append(workout_row("2024-04-01", block("A", "Swim", "SWIM")))
        stats = {s.category: s for s in service.get_category_stats(start_date=date(2024, 4, 1))}
        assert list(stats) == ["SWIM"]
        assert stats["SWIM"].label == "SWIM"
        assert stats["SWIM"].color == "bg-gray-500"

    def test_legacy_rows_without_blocks(self, db, service):
        db.rows("workouts").append({"id": "old", "date": "2023-01-01", "blocks": None})
        assert service.get_by_date(date(2023, 1, 1))[0].blocks == []


class TestWrites:
    def test_create(self, db, service):
        workout = service.create(
            date(2024, 5, 1), [block("A", "Deadlift", "STRENGTH"), block("", "ignored")]
        )
        assert str(workout.date) == "2024-05-01"
        assert len(workout.blocks) == 1
        assert db.rows("workouts")[-1]["blocks"][0]["title"] == "Deadlift"

    def test_create_requires_date(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create(None, [block("A", "X")])
        assert exc.value.error_code == "VALIDATION_ERROR_DATE"

    def test_create_requires_a_valid_block(self, service):
        with pytest.raises(ValidationError):
            service.create(date(2024, 5, 1), [])
        with pytest.raises(ValidationError):
            service.create(date(2024, 5, 1), [block("A", "")])

    def test_one_workout_per_date(self, service):
        with pytest.raises(ConflictError) as exc:
            service.create(date(2024, 3, 4), [block("A", "Again")])
        assert exc.value.detail == "A workout already exists for this date"

    def test_update_replaces_blocks(self, db, service):
        workout = service.update("w-2024-03-05", [block("A", "Front squat", "STRENGTH")])
        assert [b.title for b in workout.blocks] == ["Front squat"]
        assert db.rows("workouts")[1]["updated_at"]

    def test_update_can_move_date(self, service):
        workout = service.update("w-2024-03-05", [block("A", "X")], date(2024, 3, 7))
        assert str(workout.date) == "2024-03-07"

    def test_update_missing_workout(self, service):
        with pytest.raises(NotFoundError):
            service.update("nope", [block("A", "X")])

    def test_delete(self, db, service):
        service.delete("w-2024-03-10")
        assert all(row["id"] != "w-2024-03-10" for row in db.rows("workouts"))
        with pytest.raises(NotFoundError):
            service.delete("w-2024-03-10")
