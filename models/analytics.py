from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .personal_record import PersonalRecord


class Profile(BaseModel):
    id: str
    email: str
    role: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None


class RecentActivity(BaseModel):
    id: str
    type: Literal["workout_created", "user_registered"]
    description: str
    date: datetime
    user: Optional[str] = None


class ExerciseCount(BaseModel):
    exercise_name: str
    count: int


class AdminRecordStats(BaseModel):
    total_personal_records: int = 0
    personal_records_this_month: int = 0
    heaviest_record: Optional[PersonalRecord] = None
    recent_personal_records: List[PersonalRecord] = Field(default_factory=list)
    top_exercises: List[ExerciseCount] = Field(default_factory=list)


class DashboardMetrics(AdminRecordStats):
    total_workouts: int = 0
    total_users: int = 0
    workouts_this_week: int = 0
    workouts_this_month: int = 0
    categories_used: int = 0
    recent_activity: List[RecentActivity] = Field(default_factory=list)


class RoleChange(BaseModel):
    role: Literal["master", "athlete"]
