"""
WOD Scheduler - CrossFit workout programming and personal records
Main FastAPI application: pages, JSON API and auth flow
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

import uvicorn
from fastapi import Depends, FastAPI, Form, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from app.config import settings
from app.dependencies import (
    get_analytics_service,
    get_auth_service,
    get_category_service,
    get_current_user,
    get_personal_record_service,
    get_user_service,
    get_workout_service,
    require_master,
    store_session,
)
from app.errors import AppError, SessionUnavailableError
from app.logging_config import setup_logging
from app.middleware import (
    ACCESS_TOKEN_KEY,
    RouteGateMiddleware,
    is_api_path,
    login_redirect,
    safe_redirect_target,
)
from app.supabase_client import create_auth_client, get_supabase
from models.analytics import DashboardMetrics, Profile, RoleChange
from models.auth import CurrentUser, LoginRequest, RegisterRequest
from models.category import Category, CategoryCreate
from models.personal_record import (
    ExerciseHistory,
    PersonalRecord,
    PersonalRecordInput,
    PersonalRecordStats,
    PersonalRecordWithHistory,
    RMTable,
)
from models.responses import ErrorResponse, LoginResponse, SuccessResponse
from models.workout import BlockInput, CategoryStats, Workout, WorkoutCreate, WorkoutUpdate
from services.analytics_service import AnalyticsService
from services.auth_service import AuthService, landing_page
from services.category_service import CategoryService
from services.personal_record_service import PersonalRecordService, calculate_rm_table
from services.user_service import UserService
from services.workout_service import WorkoutService

setup_logging()
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

app = FastAPI(
    title="WOD Scheduler",
    description="CrossFit workout scheduling and personal record tracking",
    version="1.0.0",
)

# The gate reads request.session, so SessionMiddleware has to wrap it (added last).
app.add_middleware(RouteGateMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=settings.is_production,
)

app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=BASE_DIR / "templates")

app.state.auth_service = AuthService(create_auth_client, get_supabase)


# ---------- error handling ----------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    if is_api_path(request.url.path):
        body = ErrorResponse(message=exc.detail, error_code=exc.error_code)
        return JSONResponse(body.model_dump(), status_code=exc.status_code, headers=exc.headers)
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        return login_redirect(request.url.path)
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "title": "Something went wrong",
            "message": exc.detail,
            "can_retry": isinstance(exc, SessionUnavailableError),
        },
        status_code=exc.status_code,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed query, path or form values"""
    if is_api_path(request.url.path):
        body = ErrorResponse(
            message="Invalid request",
            error_code="VALIDATION_ERROR",
            details=jsonable_encoder(exc.errors()),
        )
        return JSONResponse(body.model_dump(), status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"title": "Invalid input", "message": "Some of the submitted values are not valid."},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


# ---------- auth ----------
@app.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request, redirectTo: Optional[str] = None, error: Optional[str] = None
):
    return templates.TemplateResponse(
        request,
        "login.html",
        {"title": "Sign in", "redirect_to": redirectTo or "", "error": error},
    )


@app.post("/login")
async def login_form(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    redirect_to: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        session = await auth.sign_in(email, password)
    except AppError as e:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"title": "Sign in", "redirect_to": redirect_to, "error": e.detail, "email": email},
            status_code=e.status_code,
        )
    store_session(request, session.user_id, session.access_token, session.refresh_token)
    role = await auth.resolve_role(session.user_id)
    target = safe_redirect_target(redirect_to, landing_page(role))
    return RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)


@app.post("/register")
async def register_form(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        await auth.sign_up(email, password, full_name or None)
    except AppError as e:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"title": "Sign in", "register_error": e.detail, "email": email},
            status_code=e.status_code,
        )
    return templates.TemplateResponse(
        request,
        "login.html",
        {"title": "Sign in", "notice": "Registration successful! Check your email to confirm your account."},
    )


@app.post("/logout")
async def logout_form(request: Request, auth: AuthService = Depends(get_auth_service)):
    await auth.sign_out(request.session.get(ACCESS_TOKEN_KEY))
    request.session.clear()
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@app.post("/api/auth/login", response_model=LoginResponse)
async def api_login(
    request: Request, credentials: LoginRequest, auth: AuthService = Depends(get_auth_service)
):
    session = await auth.sign_in(credentials.email, credentials.password)
    store_session(request, session.user_id, session.access_token, session.refresh_token)
    role = await auth.resolve_role(session.user_id)
    return LoginResponse(user_id=session.user_id, role=role, redirect=landing_page(role))


@app.post("/api/auth/register", response_model=SuccessResponse, status_code=201)
async def api_register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.sign_up(payload.email, payload.password, payload.full_name)
    return SuccessResponse(message="Registration successful, check your email to confirm your account")


@app.post("/api/auth/logout", response_model=SuccessResponse)
async def api_logout(request: Request, auth: AuthService = Depends(get_auth_service)):
    await auth.sign_out(request.session.get(ACCESS_TOKEN_KEY))
    request.session.clear()
    return SuccessResponse(message="Signed out")


@app.get("/api/auth/me", response_model=CurrentUser)
async def api_me(user: CurrentUser = Depends(get_current_user)):
    return user


# ---------- pages ----------
@app.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
    workouts: WorkoutService = Depends(get_workout_service),
):
    """Welcome page, or today's workouts once signed in."""
    if not request.session.get(ACCESS_TOKEN_KEY):
        return templates.TemplateResponse(request, "index.html", {"title": "WOD Scheduler"})
    user = await get_current_user(request, auth)
    return templates.TemplateResponse(
        request,
        "workouts.html",
        {
            "title": "Today's workout",
            "user": user,
            "workouts": workouts.get_by_date(date.today()),
            "categories": workouts.categories.list_categories(),
            "filters": {"date": date.today().isoformat()},
        },
    )


@app.get("/workouts", response_class=HTMLResponse)
async def workouts_page(
    request: Request,
    workout_date: Optional[date] = Query(None, alias="date"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    category: List[str] = Query(default=[]),
    user: CurrentUser = Depends(get_current_user),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return templates.TemplateResponse(
        request,
        "workouts.html",
        {
            "title": "Workouts",
            "user": user,
            "workouts": workouts.get_with_filters(workout_date, start, end, category),
            "categories": workouts.categories.list_categories(),
            "filters": {
                "date": workout_date.isoformat() if workout_date else "",
                "start": start.isoformat() if start else "",
                "end": end.isoformat() if end else "",
                "category": category,
            },
        },
    )


@app.get("/rm", response_class=HTMLResponse)
async def records_page(
    request: Request,
    one_rep_max: Optional[float] = None,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    rm_table = calculate_rm_table(one_rep_max) if one_rep_max else None
    return templates.TemplateResponse(
        request,
        "records.html",
        {
            "title": "Personal records",
            "user": user,
            "histories": records.grouped_by_exercise(user.id),
            "stats": records.stats(user.id),
            "suggestions": records.popular_exercises(),
            "rm_table": rm_table,
        },
    )


@app.post("/rm")
async def create_record_form(
    exercise_name: str = Form(""),
    weight_kg: float = Form(0),
    date_achieved: Optional[date] = Form(None),
    notes: str = Form(""),
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    records.create(
        user.id,
        PersonalRecordInput(
            exercise_name=exercise_name,
            weight_kg=weight_kg,
            date_achieved=date_achieved,
            notes=notes,
        ),
    )
    return RedirectResponse("/rm", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/rm/{record_id}/edit", response_class=HTMLResponse)
async def edit_record_page(
    request: Request,
    record_id: str,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    record = records.get(record_id, None if user.is_master else user.id)
    return templates.TemplateResponse(
        request, "record_edit.html", {"title": "Edit record", "user": user, "record": record}
    )


@app.post("/rm/{record_id}")
async def update_record_form(
    record_id: str,
    exercise_name: str = Form(""),
    weight_kg: float = Form(0),
    date_achieved: Optional[date] = Form(None),
    notes: str = Form(""),
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    records.update(
        record_id,
        PersonalRecordInput(
            exercise_name=exercise_name,
            weight_kg=weight_kg,
            date_achieved=date_achieved,
            notes=notes,
        ),
        None if user.is_master else user.id,
    )
    return RedirectResponse("/rm", status_code=status.HTTP_303_SEE_OTHER)


@app.post("/rm/{record_id}/delete")
async def delete_record_form(
    record_id: str,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    records.delete(record_id, None if user.is_master else user.id)
    return RedirectResponse("/rm", status_code=status.HTTP_303_SEE_OTHER)


# ---------- admin pages ----------
def _form_blocks(
    letter: List[str],
    title: List[str],
    description: List[str],
    notes: List[str],
    category: List[str],
    block_id: Sequence[str] = (),
    enable_rm_calculator: Sequence[str] = (),
) -> List[BlockInput]:
    """One block per letter field; the other fields line up by position."""

    def column(values: Sequence[str], i: int) -> str:
        return values[i] if i < len(values) else ""

    return [
        BlockInput(
            id=column(block_id, i) or None,
            letter=letter[i],
            title=column(title, i),
            description=column(description, i),
            notes=column(notes, i),
            category=column(category, i) or None,
            enable_rm_calculator=column(enable_rm_calculator, i) == "true",
        )
        for i in range(len(letter))
    ]


@app.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(
    request: Request,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: CurrentUser = Depends(require_master),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return templates.TemplateResponse(
        request,
        "admin/dashboard.html",
        {
            "title": "Dashboard",
            "user": user,
            "metrics": analytics.dashboard_metrics(),
            "category_stats": analytics.workouts.get_category_stats(start, end),
        },
    )


@app.get("/admin/workouts", response_class=HTMLResponse)
async def admin_workouts_page(
    request: Request,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return templates.TemplateResponse(
        request,
        "admin/workouts.html",
        {
            "title": "Manage workouts",
            "user": user,
            "workouts": workouts.get_with_filters(start_date=start, end_date=end),
            "categories": workouts.categories.list_categories(),
            "block_slots": range(4),
        },
    )


@app.post("/admin/workouts")
async def admin_create_workout_form(
    workout_date: Optional[date] = Form(None),
    letter: List[str] = Form(default=[]),
    title: List[str] = Form(default=[]),
    description: List[str] = Form(default=[]),
    notes: List[str] = Form(default=[]),
    category: List[str] = Form(default=[]),
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    workouts.create(workout_date, _form_blocks(letter, title, description, notes, category))
    return RedirectResponse("/admin/workouts", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/admin/workouts/{workout_id}/edit", response_class=HTMLResponse)
async def admin_edit_workout_page(
    request: Request,
    workout_id: str,
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    workout = workouts.get(workout_id)
    return templates.TemplateResponse(
        request,
        "admin/workout_edit.html",
        {
            "title": "Edit workout",
            "user": user,
            "workout": workout,
            # two empty slots for new blocks
            "blocks": [*workout.blocks, BlockInput(), BlockInput()],
            "categories": workouts.categories.list_categories(),
        },
    )


@app.post("/admin/workouts/{workout_id}")
async def admin_update_workout_form(
    workout_id: str,
    workout_date: Optional[date] = Form(None),
    letter: List[str] = Form(default=[]),
    title: List[str] = Form(default=[]),
    description: List[str] = Form(default=[]),
    notes: List[str] = Form(default=[]),
    category: List[str] = Form(default=[]),
    block_id: List[str] = Form(default=[]),
    enable_rm_calculator: List[str] = Form(default=[]),
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    blocks = _form_blocks(
        letter, title, description, notes, category, block_id, enable_rm_calculator
    )
    workouts.update(workout_id, blocks, workout_date)
    return RedirectResponse("/admin/workouts", status_code=status.HTTP_303_SEE_OTHER)


@app.post("/admin/workouts/{workout_id}/delete")
async def admin_delete_workout_form(
    workout_id: str,
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    workouts.delete(workout_id)
    return RedirectResponse("/admin/workouts", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/admin/users", response_class=HTMLResponse)
async def admin_users_page(
    request: Request,
    search: Optional[str] = None,
    user: CurrentUser = Depends(require_master),
    users: UserService = Depends(get_user_service),
):
    return templates.TemplateResponse(
        request,
        "admin/users.html",
        {
            "title": "Users",
            "user": user,
            "profiles": users.list_profiles(search),
            "search": search or "",
        },
    )


@app.post("/admin/users/{user_id}/role")
async def admin_change_role_form(
    user_id: str,
    role: str = Form(...),
    user: CurrentUser = Depends(require_master),
    users: UserService = Depends(get_user_service),
):
    users.change_role(user_id, role)
    return RedirectResponse("/admin/users", status_code=status.HTTP_303_SEE_OTHER)


@app.post("/admin/users/{user_id}/delete")
async def admin_delete_user_form(
    user_id: str,
    user: CurrentUser = Depends(require_master),
    users: UserService = Depends(get_user_service),
):
    users.delete_profile(user_id)
    return RedirectResponse("/admin/users", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/admin/categories", response_class=HTMLResponse)
async def admin_categories_page(
    request: Request,
    user: CurrentUser = Depends(require_master),
    categories: CategoryService = Depends(get_category_service),
):
    return templates.TemplateResponse(
        request,
        "admin/categories.html",
        {"title": "Categories", "user": user, "categories": categories.list_categories()},
    )


@app.post("/admin/categories")
async def admin_create_category_form(
    value: str = Form(""),
    label: str = Form(""),
    color: str = Form("bg-gray-500"),
    user: CurrentUser = Depends(require_master),
    categories: CategoryService = Depends(get_category_service),
):
    categories.create(value, label, color)
    return RedirectResponse("/admin/categories", status_code=status.HTTP_303_SEE_OTHER)


@app.post("/admin/categories/{category_id}/delete")
async def admin_delete_category_form(
    category_id: str,
    user: CurrentUser = Depends(require_master),
    categories: CategoryService = Depends(get_category_service),
):
    categories.delete(category_id)
    return RedirectResponse("/admin/categories", status_code=status.HTTP_303_SEE_OTHER)


# ---------- workouts API ----------
@app.get("/api/workouts", response_model=List[Workout])
async def list_workouts(
    workout_date: Optional[date] = Query(None, alias="date"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    category: List[str] = Query(default=[]),
    user: CurrentUser = Depends(get_current_user),
    workouts: WorkoutService = Depends(get_workout_service),
):
    """Workouts for a day, a date range, or any filter combination"""
    if workout_date and not category:
        return workouts.get_by_date(workout_date)
    if start and end and not workout_date and not category:
        return workouts.get_by_date_range(start, end)
    return workouts.get_with_filters(workout_date, start, end, category)


@app.get("/api/workouts/category/{category}", response_model=List[Workout])
async def list_workouts_by_category(
    category: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: CurrentUser = Depends(get_current_user),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return workouts.get_by_category(category, start, end)


@app.post("/api/admin/workouts", response_model=Workout, status_code=201)
async def create_workout(
    payload: WorkoutCreate,
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return workouts.create(payload.date, payload.blocks)


@app.put("/api/admin/workouts/{workout_id}", response_model=Workout)
async def update_workout(
    workout_id: str,
    payload: WorkoutUpdate,
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return workouts.update(workout_id, payload.blocks, payload.date)


@app.delete("/api/admin/workouts/{workout_id}", response_model=SuccessResponse)
async def delete_workout(
    workout_id: str,
    user: CurrentUser = Depends(require_master),
    workouts: WorkoutService = Depends(get_workout_service),
):
    workouts.delete(workout_id)
    return SuccessResponse(message="Workout deleted")


# ---------- categories API ----------
@app.get("/api/categories", response_model=List[Category])
async def list_categories(
    user: CurrentUser = Depends(get_current_user),
    categories: CategoryService = Depends(get_category_service),
):
    return categories.list_categories()


@app.get("/api/categories/used", response_model=List[str])
async def used_categories(
    user: CurrentUser = Depends(get_current_user),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return workouts.get_used_categories()


@app.get("/api/categories/stats", response_model=List[CategoryStats])
async def category_stats(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: CurrentUser = Depends(get_current_user),
    workouts: WorkoutService = Depends(get_workout_service),
):
    return workouts.get_category_stats(start, end)


@app.post("/api/admin/categories", response_model=Category, status_code=201)
async def create_category(
    payload: CategoryCreate,
    user: CurrentUser = Depends(require_master),
    categories: CategoryService = Depends(get_category_service),
):
    return categories.create(payload.value, payload.label, payload.color)


@app.delete("/api/admin/categories/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: str,
    user: CurrentUser = Depends(require_master),
    categories: CategoryService = Depends(get_category_service),
):
    categories.delete(category_id)
    return SuccessResponse(message="Category deleted")


# ---------- personal records API ----------
def _records_owner(user: CurrentUser, user_id: Optional[str]) -> Optional[str]:
    """Masters may look at any athlete; athletes only at themselves."""
    if user.is_master and user_id:
        return user_id
    return user.id


@app.get("/api/records", response_model=List[PersonalRecord])
async def list_records(
    user_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.list_records(_records_owner(user, user_id))


@app.post("/api/records", response_model=PersonalRecord, status_code=201)
async def create_record(
    payload: PersonalRecordInput,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.create(user.id, payload)


@app.put("/api/records/{record_id}", response_model=PersonalRecord)
async def update_record(
    record_id: str,
    payload: PersonalRecordInput,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.update(record_id, payload, None if user.is_master else user.id)


@app.delete("/api/records/{record_id}", response_model=SuccessResponse)
async def delete_record(
    record_id: str,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    records.delete(record_id, None if user.is_master else user.id)
    return SuccessResponse(message="Personal record deleted")


@app.get("/api/records/stats", response_model=PersonalRecordStats)
async def record_stats(
    user_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.stats(_records_owner(user, user_id))


@app.get("/api/records/history", response_model=List[ExerciseHistory])
async def record_history(
    user_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.grouped_by_exercise(_records_owner(user, user_id))


@app.get("/api/records/history/{exercise_name}", response_model=List[PersonalRecord])
async def exercise_history(
    exercise_name: str,
    user_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.exercise_history(exercise_name, _records_owner(user, user_id))


@app.get("/api/records/annotated", response_model=List[PersonalRecordWithHistory])
async def annotated_records(
    user_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.with_history(_records_owner(user, user_id))


@app.get("/api/records/popular", response_model=List[str])
async def popular_exercises(
    user: CurrentUser = Depends(get_current_user),
    records: PersonalRecordService = Depends(get_personal_record_service),
):
    return records.popular_exercises()


@app.get("/api/rm-calculator", response_model=RMTable)
async def rm_calculator(
    one_rep_max: float = Query(..., gt=0), user: CurrentUser = Depends(get_current_user)
):
    return calculate_rm_table(one_rep_max)


# ---------- admin API ----------
@app.get("/api/admin/metrics", response_model=DashboardMetrics)
async def dashboard_metrics(
    user: CurrentUser = Depends(require_master),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return analytics.dashboard_metrics()


@app.get("/api/admin/users", response_model=List[Profile])
async def list_users(
    search: Optional[str] = None,
    user: CurrentUser = Depends(require_master),
    users: UserService = Depends(get_user_service),
):
    return users.list_profiles(search)


@app.put("/api/admin/users/{user_id}/role", response_model=Profile)
async def change_user_role(
    user_id: str,
    payload: RoleChange,
    user: CurrentUser = Depends(require_master),
    users: UserService = Depends(get_user_service),
):
    return users.change_role(user_id, payload.role)


@app.delete("/api/admin/users/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    user: CurrentUser = Depends(require_master),
    users: UserService = Depends(get_user_service),
):
    users.delete_profile(user_id)
    return SuccessResponse(message="User removed from the database")


# Development server
if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
