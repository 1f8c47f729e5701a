"""
Data-access and auth services for the WOD scheduler
"""

from .analytics_service import AnalyticsService
from .auth_service import AuthService
from .base_service import BaseService
from .category_service import CategoryService
from .personal_record_service import PersonalRecordService
from .user_service import UserService
from .workout_service import WorkoutService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "BaseService",
    "CategoryService",
    "PersonalRecordService",
    "UserService",
    "WorkoutService",
]
