"""
Workout Service - scheduled workouts and their embedded blocks
"""

import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from app.errors import NotFoundError, ValidationError
from models.workout import BlockInput, CategoryStats, Workout

from .base_service import BaseService
from .category_service import UNKNOWN_CATEGORY_COLOR, CategoryService

BlockLike = Union[BlockInput, Dict[str, Any]]


def _as_block_input(block: BlockLike) -> BlockInput:
    if isinstance(block, BlockInput):
        return block
    return BlockInput.model_validate(block)


def clean_blocks(blocks: Optional[Iterable[BlockLike]]) -> List[Dict[str, Any]]:
    """Drop blocks without a letter and title and normalise the rest for storage."""
    cleaned = []
    for raw in blocks or []:
        if raw is None:
            continue
        block = _as_block_input(raw)
        letter = (block.letter or "").strip()
        title = (block.title or "").strip()
        if not letter or not title:
            continue
        cleaned.append(
            {
                "id": block.id or f"block-{uuid.uuid4()}",
                "letter": letter,
                "title": title,
                "description": block.description or "",
                "notes": block.notes or "",
                "category": block.category or None,
                "enable_rm_calculator": block.enable_rm_calculator,
            }
        )
    return cleaned


def _row_to_workout(row: Dict[str, Any]) -> Workout:
    return Workout.model_validate({**row, "blocks": row.get("blocks") or []})


def _block_categories(row: Dict[str, Any]) -> List[str]:
    return [b["category"] for b in row.get("blocks") or [] if b and b.get("category")]


class WorkoutService(BaseService):
    table_name = "workouts"
    resource = "workout"

    def __init__(self, client, categories: Optional[CategoryService] = None):
        super().__init__(client)
        self.categories = categories or CategoryService(client)

    # ---------- reads ----------
    def get(self, workout_id: str) -> Workout:
        query = self.table.select("*").eq("id", workout_id).limit(1)
        rows = self._execute(query, "fetch", workout_id).data
        if not rows:
            raise NotFoundError("Workout", workout_id)
        return _row_to_workout(rows[0])

    def get_by_date(self, workout_date: date) -> List[Workout]:
        query = (
            self.table.select("*")
            .eq("date", workout_date.isoformat())
            .order("created_at", desc=False)
        )
        rows = self._execute(query, "fetch", workout_date.isoformat()).data
        return [_row_to_workout(row) for row in rows or []]

    def get_by_date_range(self, start_date: date, end_date: date) -> List[Workout]:
        query = (
            self.table.select("*")
            .gte("date", start_date.isoformat())
            .lte("date", end_date.isoformat())
            .order("date", desc=False)
        )
        rows = self._execute(query, "fetch").data
        return [_row_to_workout(row) for row in rows or []]

    def get_by_category(
        self,
        category: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Workout]:
        return self.get_with_filters(
            start_date=start_date, end_date=end_date, categories=[category]
        )

    def get_with_filters(
        self,
        workout_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        categories: Optional[List[str]] = None,
    ) -> List[Workout]:
        """Newest first. An exact date wins over a range."""
        query = self.table.select("*").order("date", desc=True)
        if workout_date:
            query = query.eq("date", workout_date.isoformat())
        else:
            if start_date:
                query = query.gte("date", start_date.isoformat())
            if end_date:
                query = query.lte("date", end_date.isoformat())

        rows = self._execute(query, "fetch").data or []
        if categories:
            wanted = set(categories)
            rows = [row for row in rows if wanted.intersection(_block_categories(row))]
        return [_row_to_workout(row) for row in rows]

    def get_used_categories(self) -> List[str]:
        rows = self._execute(self.table.select("blocks"), "fetch").data or []
        used: List[str] = []
        for row in rows:
            for category in _block_categories(row):
                if category not in used:
                    used.append(category)
        return used

    def get_category_stats(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[CategoryStats]:
        """How many workouts use each category, most used first."""
        query = self.table.select("blocks, date")
        if start_date:
            query = query.gte("date", start_date.isoformat())
        if end_date:
            query = query.lte("date", end_date.isoformat())
        rows = self._execute(query, "fetch").data or []

        counts: Dict[str, int] = {}
        for row in rows:
            # a category counts once per workout
            for category in set(_block_categories(row)):
                counts[category] = counts.get(category, 0) + 1

        known = self.categories.list_categories()
        stats = []
        for category, count in counts.items():
            info = self.categories.lookup(category, known)
            stats.append(
                CategoryStats(
                    category=category,
                    count=count,
                    label=info.label if info else category,
                    color=info.color if info else UNKNOWN_CATEGORY_COLOR,
                )
            )
        return sorted(stats, key=lambda s: s.count, reverse=True)

    # ---------- writes ----------
    def create(self, workout_date: Optional[date], blocks: Optional[List[BlockLike]]) -> Workout:
        if not workout_date:
            raise ValidationError("Date is required", field="date")
        if not blocks:
            raise ValidationError("At least one block is required", field="blocks")

        valid_blocks = clean_blocks(blocks)
        if not valid_blocks:
            raise ValidationError(
                "At least one block with a letter and a title is required", field="blocks"
            )

        payload = {"date": workout_date.isoformat(), "blocks": valid_blocks}
        self.logger.info(
            "Creating workout for %s with %d blocks", payload["date"], len(valid_blocks)
        )
        rows = self._execute(self.table.insert(payload), "create", payload["date"]).data
        workout = _row_to_workout(rows[0])
        self.logger.info("Workout %s created", workout.id)
        return workout

    def update(
        self,
        workout_id: str,
        blocks: Optional[List[BlockLike]],
        workout_date: Optional[date] = None,
    ) -> Workout:
        valid_blocks = clean_blocks(blocks)
        if not valid_blocks:
            raise ValidationError(
                "At least one block with a letter and a title is required", field="blocks"
            )

        payload: Dict[str, Any] = {"blocks": valid_blocks, "updated_at": self._now_iso()}
        if workout_date:
            payload["date"] = workout_date.isoformat()

        query = self.table.update(payload).eq("id", workout_id)
        rows = self._execute(query, "update", workout_id).data
        if not rows:
            raise NotFoundError("Workout", workout_id)
        self.logger.info("Workout %s updated", workout_id)
        return _row_to_workout(rows[0])

    def delete(self, workout_id: str) -> None:
        rows = self._execute(self.table.delete().eq("id", workout_id), "delete", workout_id).data
        if not rows:
            raise NotFoundError("Workout", workout_id)
        self.logger.info("Workout %s deleted", workout_id)
