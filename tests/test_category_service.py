"""
Tests for default and custom workout categories
"""

import httpx
import pytest

from app.errors import ConflictError, NotFoundError, ServiceUnavailableError, ValidationError
from services.category_service import DEFAULT_CATEGORIES, CategoryService
from tests.fakes import FakeSupabase, pg_error


@pytest.fixture
def db():
    return FakeSupabase(
        {
            "custom_categories": [
                {
                    "id": "c1",
                    "value": "ENDURANCE",
                    "label": "Endurance",
                    "color": "bg-teal-500",
                    "created_at": "2024-01-02T00:00:00+00:00",
                }
            ]
        }
    )


@pytest.fixture
def service(db):
    return CategoryService(db)


def test_defaults_come_first(service):
    categories = service.list_categories()
    assert [c.value for c in categories] == ["OLY", "METCON", "STRENGTH", "GYMNASTICS", "ENDURANCE"]
    assert all(c.is_default for c in categories[:4])
    assert not categories[-1].is_default


def test_missing_table_falls_back_to_defaults(db, service):
    db.fail("custom_categories", pg_error("42P01", 'relation "custom_categories" does not exist'))
    assert service.list_categories() == DEFAULT_CATEGORIES


def test_other_load_errors_fall_back_to_defaults(db, service):
    db.fail("custom_categories", pg_error("XX000"))
    assert len(service.list_categories()) == len(DEFAULT_CATEGORIES)


def test_unreachable_database_falls_back_to_defaults(db, service):
    db.fail("custom_categories", httpx.ConnectError("db down"))
    assert service.list_categories() == DEFAULT_CATEGORIES


def test_lookup(service):
    assert service.lookup("METCON").label == "Metabolic Conditioning"
    assert service.lookup("ENDURANCE").color == "bg-teal-500"
    assert service.lookup("NOPE") is None


class TestCreate:
    def test_value_is_uppercased(self, db, service):
        category = service.create("mobility", "Mobility", "bg-pink-500")
        assert category.value == "MOBILITY"
        assert category.id
        assert db.rows("custom_categories")[-1]["value"] == "MOBILITY"

    def test_duplicates_are_case_insensitive(self, service):
        with pytest.raises(ConflictError):
            service.create("oly", "Olympic again", "bg-blue-500")
        with pytest.raises(ConflictError):
            service.create("Endurance", "Endurance 2", "bg-blue-500")

    def test_requires_value_and_label(self, service):
        with pytest.raises(ValidationError):
            service.create("", "Label", "bg-blue-500")
        with pytest.raises(ValidationError):
            service.create("VALUE", "  ", "bg-blue-500")

    def test_missing_table(self, db, service):
        db.fail("custom_categories", pg_error("42P01"), times=2)
        with pytest.raises(ServiceUnavailableError) as exc:
            service.create("MOBILITY", "Mobility", "bg-pink-500")
        assert exc.value.error_code == "TABLE_MISSING"

    def test_unreachable_database(self, db, service):
        # the duplicate check falls back to defaults, then the insert fails too
        db.fail("custom_categories", httpx.ConnectTimeout("timed out"), times=2)
        with pytest.raises(ServiceUnavailableError) as exc:
            service.create("MOBILITY", "Mobility", "bg-pink-500")
        assert exc.value.error_code == "DATABASE_UNAVAILABLE"
        assert exc.value.status_code == 503


def test_delete(db, service):
    service.delete("c1")
    assert db.rows("custom_categories") == []
    with pytest.raises(NotFoundError):
        service.delete("c1")
