"""
Analytics Service - admin dashboard metrics

Everything here is a count or a reduce over fetched rows.
"""

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from models.analytics import (
    AdminRecordStats,
    DashboardMetrics,
    ExerciseCount,
    RecentActivity,
)
from models.personal_record import PersonalRecord

from .base_service import BaseService
from .workout_service import WorkoutService

RECENT_ITEMS = 5
RECENT_ACTIVITY_LIMIT = 10
TOP_EXERCISES = 5


def week_start(today: date) -> date:
    """Monday of the week containing `today`."""
    return today - timedelta(days=today.weekday())


def month_start(today: date) -> date:
    return today.replace(day=1)


def record_stats(records: List[PersonalRecord], today: date) -> AdminRecordStats:
    """Global PR figures. `records` must be newest first by created_at."""
    if not records:
        return AdminRecordStats()
    first_of_month = month_start(today)
    this_month = [
        r for r in records if r.created_at is not None and r.created_at.date() >= first_of_month
    ]
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.exercise_name] = counts.get(record.exercise_name, 0) + 1
    top = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:TOP_EXERCISES]
    return AdminRecordStats(
        total_personal_records=len(records),
        personal_records_this_month=len(this_month),
        heaviest_record=max(records, key=lambda r: r.weight_kg),
        recent_personal_records=records[:RECENT_ITEMS],
        top_exercises=[ExerciseCount(exercise_name=name, count=count) for name, count in top],
    )


class AnalyticsService(BaseService):
    resource = "analytics"

    def __init__(self, client, workouts: Optional[WorkoutService] = None):
        super().__init__(client)
        self.workouts = workouts or WorkoutService(client)

    def _count(self, table: str, since: Optional[date] = None) -> int:
        query = self.client.table(table).select("id", count="exact")
        if since:
            query = query.gte("date", since.isoformat())
        response = self._execute(query, "count")
        return response.count or 0

    def recent_activity(self) -> List[RecentActivity]:
        workouts = self._execute(
            self.client.table("workouts")
            .select("id, date, created_at")
            .order("created_at", desc=True)
            .limit(RECENT_ITEMS),
            "fetch",
        ).data or []
        profiles = self._execute(
            self.client.table("profiles")
            .select("id, email, full_name, created_at")
            .order("created_at", desc=True)
            .limit(RECENT_ITEMS),
            "fetch",
        ).data or []

        activities = []
        for row in workouts:
            scheduled = date.fromisoformat(row["date"])
            activities.append(
                RecentActivity(
                    id=row["id"],
                    type="workout_created",
                    description=f"Workout scheduled for {scheduled:%d/%m/%Y}",
                    date=row["created_at"],
                )
            )
        for row in profiles:
            name = row.get("full_name") or row.get("email")
            activities.append(
                RecentActivity(
                    id=row["id"],
                    type="user_registered",
                    description=f"New user registered: {name}",
                    date=row["created_at"],
                    user=name,
                )
            )
        activities.sort(key=lambda a: a.date, reverse=True)
        return activities[:RECENT_ACTIVITY_LIMIT]

    def personal_record_stats(self, today: Optional[date] = None) -> AdminRecordStats:
        rows = self._execute(
            self.client.table("personal_records").select("*").order("created_at", desc=True),
            "fetch",
        ).data or []
        records = [PersonalRecord.model_validate(row) for row in rows]
        return record_stats(records, today or date.today())

    def dashboard_metrics(self, today: Optional[date] = None) -> DashboardMetrics:
        """All dashboard figures. Any failure yields zeroed metrics."""
        today = today or datetime.now().date()
        try:
            pr_stats = self.personal_record_stats(today)
            return DashboardMetrics(
                total_workouts=self._count("workouts"),
                total_users=self._count("profiles"),
                workouts_this_week=self._count("workouts", since=week_start(today)),
                workouts_this_month=self._count("workouts", since=month_start(today)),
                categories_used=len(self.workouts.get_used_categories()),
                recent_activity=self.recent_activity(),
                **pr_stats.model_dump(),
            )
        except Exception:
            self.logger.exception("Error building dashboard metrics, returning zeroed metrics")
            return DashboardMetrics()
