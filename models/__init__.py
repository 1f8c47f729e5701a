"""
Pydantic models for workouts, categories, personal records and auth
"""

from .auth import AuthSession, CurrentUser, LoginRequest, RegisterRequest, Role
from .category import Category, CategoryCreate
from .personal_record import (
    ExerciseHistory,
    PersonalRecord,
    PersonalRecordInput,
    PersonalRecordStats,
    PersonalRecordWithHistory,
    RMTable,
)
from .workout import Block, BlockInput, CategoryStats, Workout, WorkoutCreate, WorkoutUpdate

__all__ = [
    "AuthSession",
    "Block",
    "BlockInput",
    "Category",
    "CategoryCreate",
    "CategoryStats",
    "CurrentUser",
    "ExerciseHistory",
    "LoginRequest",
    "PersonalRecord",
    "PersonalRecordInput",
    "PersonalRecordStats",
    "PersonalRecordWithHistory",
    "RMTable",
    "RegisterRequest",
    "Role",
    "Workout",
    "WorkoutCreate",
    "WorkoutUpdate",
]
