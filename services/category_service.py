"""
Category Service - default workout categories merged with user-defined ones
"""

from typing import List, Optional

import httpx
from postgrest.exceptions import APIError

from app.errors import (
    UNDEFINED_TABLE,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
    database_unavailable,
    translate_postgrest_error,
)
from models.category import Category

from .base_service import BaseService

# Built-in categories, they cannot be deleted
DEFAULT_CATEGORIES: List[Category] = [
    Category(value="OLY", label="Olympic Lifting", color="bg-blue-500", is_default=True),
    Category(value="METCON", label="Metabolic Conditioning", color="bg-red-500", is_default=True),
    Category(value="STRENGTH", label="Strength", color="bg-green-500", is_default=True),
    Category(value="GYMNASTICS", label="Gymnastics", color="bg-purple-500", is_default=True),
]

UNKNOWN_CATEGORY_COLOR = "bg-gray-500"


class CategoryService(BaseService):
    table_name = "custom_categories"
    resource = "category"

    def load_custom(self) -> List[Category]:
        """Custom categories, oldest first. Load failures fall back to none."""
        try:
            rows = self.table.select("*").order("created_at", desc=False).execute().data
        except APIError as e:
            if getattr(e, "code", None) == UNDEFINED_TABLE:
                self.logger.info(
                    "Custom categories table does not exist yet, using default categories only"
                )
            else:
                self.logger.error("Error loading custom categories: %s", e)
            return []
        except httpx.HTTPError as e:
            self.logger.error("Custom categories unreachable, using default categories only: %r", e)
            return []
        return [Category.model_validate({**row, "is_default": False}) for row in rows or []]

    def list_categories(self) -> List[Category]:
        return [*DEFAULT_CATEGORIES, *self.load_custom()]

    def lookup(self, value: str, categories: Optional[List[Category]] = None) -> Optional[Category]:
        for category in categories if categories is not None else self.list_categories():
            if category.value == value:
                return category
        return None

    def create(self, value: str, label: str, color: str) -> Category:
        value = (value or "").strip()
        label = (label or "").strip()
        if not value:
            raise ValidationError("Category value is required", field="value")
        if not label:
            raise ValidationError("Category label is required", field="label")

        existing = [c.value.lower() for c in self.list_categories()]
        if value.lower() in existing:
            raise ConflictError("A category with that name already exists")

        payload = {"value": value.upper(), "label": label, "color": color or UNKNOWN_CATEGORY_COLOR}
        try:
            rows = self.table.insert(payload).execute().data
        except APIError as e:
            if getattr(e, "code", None) == UNDEFINED_TABLE:
                self.logger.error("Custom categories table is missing: %s", e)
                raise ServiceUnavailableError(
                    "The custom categories table does not exist. "
                    "Run the database setup script first.",
                    error_code="TABLE_MISSING",
                ) from e
            raise translate_postgrest_error(e, self.resource, value, "create") from e
        except httpx.HTTPError as e:
            raise database_unavailable(e, self.resource, value, "create") from e

        self.logger.info("Created custom category %s", payload["value"])
        return Category.model_validate({**rows[0], "is_default": False})

    def delete(self, category_id: str) -> None:
        rows = self._execute(self.table.delete().eq("id", category_id), "delete", category_id).data
        if not rows:
            raise NotFoundError("Category", category_id)
        self.logger.info("Deleted custom category %s", category_id)
