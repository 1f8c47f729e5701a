from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PersonalRecord(BaseModel):
    id: str
    user_id: str
    exercise_name: str
    weight_kg: float
    date_achieved: date
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PersonalRecordInput(BaseModel):
    exercise_name: str = ""
    weight_kg: float = 0
    date_achieved: Optional[date] = None
    notes: Optional[str] = None


class PersonalRecordWithHistory(PersonalRecord):
    weight_rank: int
    date_rank: int
    total_records: int
    previous_weight: Optional[float] = None
    is_current_weight_pr: bool
    is_latest_attempt: bool
    is_improvement: bool
    improvement_percentage: float


class Progression(BaseModel):
    weight_improvement: float
    weight_improvement_percentage: float
    days_since_last_pr: int


class ExerciseHistory(BaseModel):
    exercise_name: str
    current_pr: PersonalRecord
    latest_attempt: PersonalRecord
    total_attempts: int
    records: List[PersonalRecord]
    progression: Progression


class PersonalRecordStats(BaseModel):
    total_records: int = 0
    latest_record: Optional[PersonalRecord] = None
    heaviest_record: Optional[PersonalRecord] = None
    recent_improvements: List[PersonalRecord] = Field(default_factory=list)
    exercises_tracked: List[str] = Field(default_factory=list)


class RMTable(BaseModel):
    one_rep_max: float
    percentages: List[int]
    weights: List[float]
