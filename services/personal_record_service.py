"""
Personal Record Service - max lifts per athlete and exercise

"Current PR" and "latest attempt" are never stored. They are derived from all
records of an exercise every time they are read.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError

from app.errors import (
    UNIQUE_VIOLATION,
    ConflictError,
    NotFoundError,
    ValidationError,
    database_unavailable,
    translate_postgrest_error,
)
from models.personal_record import (
    ExerciseHistory,
    PersonalRecord,
    PersonalRecordInput,
    PersonalRecordStats,
    PersonalRecordWithHistory,
    Progression,
    RMTable,
)

from .base_service import BaseService

RM_PERCENTAGES = [70, 75, 80, 85, 90, 95, 100]
RECENT_IMPROVEMENT_DAYS = 30
POPULAR_EXERCISE_LIMIT = 20


def calculate_rm_table(one_rep_max: float) -> RMTable:
    """Training weights for each percentage of a 1RM, rounded to 0.1 kg."""
    if one_rep_max is None or one_rep_max <= 0:
        raise ValidationError("The 1RM must be greater than 0", field="one_rep_max")
    weights = [round(one_rep_max * p / 100, 1) for p in RM_PERCENTAGES]
    return RMTable(one_rep_max=one_rep_max, percentages=list(RM_PERCENTAGES), weights=weights)


def _group_by_exercise(records: List[PersonalRecord]) -> Dict[str, List[PersonalRecord]]:
    groups: Dict[str, List[PersonalRecord]] = {}
    for record in records:
        groups.setdefault(record.exercise_name, []).append(record)
    return groups


def _newest_first(records: List[PersonalRecord]) -> List[PersonalRecord]:
    return sorted(records, key=lambda r: r.date_achieved, reverse=True)


def _improvement_percentage(new: float, old: float) -> float:
    if old <= 0:
        return 0
    return round((new - old) / old * 100, 2)


def build_exercise_histories(
    records: List[PersonalRecord], today: Optional[date] = None
) -> List[ExerciseHistory]:
    today = today or date.today()
    histories = []
    for exercise_name, exercise_records in _group_by_exercise(records).items():
        ordered = _newest_first(exercise_records)
        current_pr = max(exercise_records, key=lambda r: r.weight_kg)
        latest_attempt = ordered[0]
        first_record = ordered[-1]

        histories.append(
            ExerciseHistory(
                exercise_name=exercise_name,
                current_pr=current_pr,
                latest_attempt=latest_attempt,
                total_attempts=len(exercise_records),
                records=ordered,
                progression=Progression(
                    weight_improvement=current_pr.weight_kg - first_record.weight_kg,
                    weight_improvement_percentage=_improvement_percentage(
                        current_pr.weight_kg, first_record.weight_kg
                    ),
                    days_since_last_pr=(today - current_pr.date_achieved).days,
                ),
            )
        )
    return sorted(histories, key=lambda h: h.exercise_name)


def annotate_with_history(records: List[PersonalRecord]) -> List[PersonalRecordWithHistory]:
    """Rank every record against the other attempts at the same exercise."""
    annotated = []
    for exercise_records in _group_by_exercise(records).values():
        oldest_first = list(reversed(_newest_first(exercise_records)))
        for record in exercise_records:
            weight_rank = 1 + sum(1 for r in exercise_records if r.weight_kg > record.weight_kg)
            date_rank = 1 + sum(
                1 for r in exercise_records if r.date_achieved > record.date_achieved
            )
            position = next(i for i, r in enumerate(oldest_first) if r is record)
            previous = oldest_first[position - 1] if position > 0 else None
            previous_weight = previous.weight_kg if previous else None

            annotated.append(
                PersonalRecordWithHistory(
                    **record.model_dump(),
                    weight_rank=weight_rank,
                    date_rank=date_rank,
                    total_records=len(exercise_records),
                    previous_weight=previous_weight,
                    is_current_weight_pr=weight_rank == 1,
                    is_latest_attempt=date_rank == 1,
                    is_improvement=previous_weight is not None
                    and record.weight_kg > previous_weight,
                    improvement_percentage=_improvement_percentage(
                        record.weight_kg, previous_weight
                    )
                    if previous_weight
                    else 0,
                )
            )
    return annotated


def summarize_records(
    records: List[PersonalRecord], today: Optional[date] = None
) -> PersonalRecordStats:
    if not records:
        return PersonalRecordStats()
    today = today or date.today()
    cutoff = today - timedelta(days=RECENT_IMPROVEMENT_DAYS)
    recent = [r for r in records if r.date_achieved >= cutoff]
    return PersonalRecordStats(
        total_records=len(records),
        latest_record=max(records, key=lambda r: r.date_achieved),
        heaviest_record=max(records, key=lambda r: r.weight_kg),
        recent_improvements=_newest_first(recent),
        exercises_tracked=sorted({r.exercise_name for r in records}),
    )


def _validate_input(record: PersonalRecordInput) -> Dict[str, Any]:
    exercise_name = (record.exercise_name or "").strip()
    if not exercise_name:
        raise ValidationError("Exercise name is required", field="exercise_name")
    if not record.weight_kg or record.weight_kg <= 0:
        raise ValidationError("Weight must be greater than 0", field="weight_kg")
    if not record.date_achieved:
        raise ValidationError("Date is required", field="date_achieved")
    return {
        "exercise_name": exercise_name,
        "weight_kg": record.weight_kg,
        "date_achieved": record.date_achieved.isoformat(),
        "notes": (record.notes or "").strip() or None,
    }


class PersonalRecordService(BaseService):
    table_name = "personal_records"
    resource = "personal record"

    def list_records(self, user_id: Optional[str] = None) -> List[PersonalRecord]:
        query = self.table.select("*").order("exercise_name", desc=False)
        if user_id:
            query = query.eq("user_id", user_id)
        rows = self._execute(query, "fetch").data
        return [PersonalRecord.model_validate(row) for row in rows or []]

    def get(self, record_id: str, user_id: Optional[str] = None) -> PersonalRecord:
        query = self.table.select("*").eq("id", record_id)
        if user_id:
            query = query.eq("user_id", user_id)
        rows = self._execute(query.limit(1), "fetch", record_id).data
        if not rows:
            raise NotFoundError("Personal record", record_id)
        return PersonalRecord.model_validate(rows[0])

    def get_by_exercise(
        self, exercise_name: str, user_id: Optional[str] = None
    ) -> Optional[PersonalRecord]:
        """The heaviest record for an exercise, or None."""
        query = self.table.select("*").eq("exercise_name", exercise_name)
        if user_id:
            query = query.eq("user_id", user_id)
        query = query.order("weight_kg", desc=True).limit(1)
        rows = self._execute(query, "fetch", exercise_name).data
        return PersonalRecord.model_validate(rows[0]) if rows else None

    def exercise_history(
        self, exercise_name: str, user_id: Optional[str] = None
    ) -> List[PersonalRecord]:
        query = self.table.select("*").eq("exercise_name", exercise_name)
        if user_id:
            query = query.eq("user_id", user_id)
        query = query.order("date_achieved", desc=True)
        rows = self._execute(query, "fetch", exercise_name).data
        return [PersonalRecord.model_validate(row) for row in rows or []]

    def create(self, user_id: str, record: PersonalRecordInput) -> PersonalRecord:
        if not user_id:
            raise ValidationError("User is required", field="user_id")
        payload = {"user_id": user_id, **_validate_input(record)}
        self.logger.info(
            "Creating personal record for user %s: %s %.1f kg",
            user_id,
            payload["exercise_name"],
            payload["weight_kg"],
        )
        rows = self._execute(self.table.insert(payload), "create", payload["exercise_name"]).data
        return PersonalRecord.model_validate(rows[0])

    def update(
        self, record_id: str, record: PersonalRecordInput, user_id: Optional[str] = None
    ) -> PersonalRecord:
        payload = {**_validate_input(record), "updated_at": self._now_iso()}
        query = self.table.update(payload).eq("id", record_id)
        if user_id:
            query = query.eq("user_id", user_id)
        try:
            rows = query.execute().data
        except APIError as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                self.logger.warning("Duplicate personal record for %s", payload["exercise_name"])
                raise ConflictError(
                    f"You already have a PR registered for {payload['exercise_name']}"
                ) from e
            raise translate_postgrest_error(e, self.resource, record_id, "update") from e
        except httpx.HTTPError as e:
            raise database_unavailable(e, self.resource, record_id, "update") from e
        if not rows:
            raise NotFoundError("Personal record", record_id)
        return PersonalRecord.model_validate(rows[0])

    def delete(self, record_id: str, user_id: Optional[str] = None) -> None:
        query = self.table.delete().eq("id", record_id)
        if user_id:
            query = query.eq("user_id", user_id)
        rows = self._execute(query, "delete", record_id).data
        if not rows:
            raise NotFoundError("Personal record", record_id)
        self.logger.info("Personal record %s deleted", record_id)

    def stats(self, user_id: Optional[str] = None, today: Optional[date] = None) -> PersonalRecordStats:
        return summarize_records(self.list_records(user_id), today)

    def grouped_by_exercise(
        self, user_id: Optional[str] = None, today: Optional[date] = None
    ) -> List[ExerciseHistory]:
        return build_exercise_histories(self.list_records(user_id), today)

    def with_history(self, user_id: Optional[str] = None) -> List[PersonalRecordWithHistory]:
        return annotate_with_history(self.list_records(user_id))

    def popular_exercises(self, limit: int = POPULAR_EXERCISE_LIMIT) -> List[str]:
        query = self.table.select("exercise_name").order("exercise_name", desc=False)
        rows = self._execute(query, "fetch").data or []
        counts: Dict[str, int] = {}
        for row in rows:
            counts[row["exercise_name"]] = counts.get(row["exercise_name"], 0) + 1
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [name for name, _ in ranked[:limit]]
