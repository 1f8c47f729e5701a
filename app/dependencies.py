"""
FastAPI dependencies: services and the authenticated user.
"""

import logging

from fastapi import Depends, Request
from supabase import Client

from models.auth import CurrentUser
from services.analytics_service import AnalyticsService
from services.auth_service import AuthService
from services.category_service import CategoryService
from services.personal_record_service import PersonalRecordService
from services.user_service import UserService
from services.workout_service import WorkoutService

from .errors import ForbiddenError, UnauthorizedError
from .middleware import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_ID_KEY
from .supabase_client import get_supabase

logger = logging.getLogger(__name__)


def get_db() -> Client:
    return get_supabase()


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_category_service(db: Client = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_workout_service(
    db: Client = Depends(get_db),
    categories: CategoryService = Depends(get_category_service),
) -> WorkoutService:
    return WorkoutService(db, categories)


def get_personal_record_service(db: Client = Depends(get_db)) -> PersonalRecordService:
    return PersonalRecordService(db)


def get_analytics_service(
    db: Client = Depends(get_db),
    workouts: WorkoutService = Depends(get_workout_service),
) -> AnalyticsService:
    return AnalyticsService(db, workouts)


def get_user_service(
    db: Client = Depends(get_db), auth: AuthService = Depends(get_auth_service)
) -> UserService:
    return UserService(db, auth)


def store_session(request: Request, user_id: str, access_token: str, refresh_token=None) -> None:
    request.session[USER_ID_KEY] = user_id
    request.session[ACCESS_TOKEN_KEY] = access_token
    request.session[REFRESH_TOKEN_KEY] = refresh_token


async def get_current_user(
    request: Request, auth: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    access_token = request.session.get(ACCESS_TOKEN_KEY)
    refresh_token = request.session.get(REFRESH_TOKEN_KEY)
    if not access_token:
        raise UnauthorizedError()

    user, session = await auth.current_user(access_token, refresh_token)
    if user is None:
        logger.info("Session for user %s is no longer valid", request.session.get(USER_ID_KEY))
        request.session.clear()
        raise UnauthorizedError("Session expired, please sign in again")
    if session.access_token != access_token:
        store_session(request, session.user_id, session.access_token, session.refresh_token)
    return user


async def require_master(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_master:
        raise ForbiddenError("Master role required")
    return user
