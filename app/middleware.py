"""
Route gate.

Decides from the path and the cookie session alone whether a request may reach
its endpoint. Only token presence is checked here; the endpoint dependencies
verify the session itself with the auth provider.
"""

import logging
from urllib.parse import urlencode

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_ID_KEY = "user_id"

LOGIN_PATH = "/login"
HOME_PATH = "/workouts"
PUBLIC_PATHS = {"/", LOGIN_PATH, "/register", "/health"}
PUBLIC_PREFIXES = ("/api/auth/", "/static/")


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def is_admin_path(path: str) -> bool:
    return path in ("/admin", "/api/admin") or path.startswith(("/admin/", "/api/admin/"))


def login_redirect(path: str = "") -> RedirectResponse:
    url = LOGIN_PATH
    if path and path not in (LOGIN_PATH, "/"):
        url = f"{LOGIN_PATH}?{urlencode({'redirectTo': path})}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


def safe_redirect_target(target: str, default: str) -> str:
    """Only follow local paths after login."""
    # browsers read "/\host" as "//host"
    if target and target.startswith("/") and not target.startswith("//") and "\\" not in target:
        return target
    return default


class RouteGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        public = is_public_path(path)

        try:
            denied = await self._check(request, path, public)
        except Exception:
            logger.exception("Route gate failed for %s", path)
            denied = None if public else login_redirect()
        if denied is not None:
            return denied
        return await call_next(request)

    async def _check(self, request: Request, path: str, public: bool):
        session = request.session
        if not session.get(ACCESS_TOKEN_KEY):
            if public:
                return None
            if is_api_path(path):
                return JSONResponse(
                    {"status": "error", "message": "Authentication required", "error_code": "UNAUTHORIZED"},
                    status_code=status.HTTP_401_UNAUTHORIZED,
                )
            return login_redirect(path)

        if path == LOGIN_PATH:
            return RedirectResponse(HOME_PATH, status_code=status.HTTP_302_FOUND)

        if is_admin_path(path):
            auth = request.app.state.auth_service
            role = await auth.resolve_role(session.get(USER_ID_KEY))
            if role != "master":
                logger.info("Non-master user %s denied %s", session.get(USER_ID_KEY), path)
                if is_api_path(path):
                    return JSONResponse(
                        {"status": "error", "message": "Master role required", "error_code": "FORBIDDEN"},
                        status_code=status.HTTP_403_FORBIDDEN,
                    )
                return RedirectResponse(HOME_PATH, status_code=status.HTTP_302_FOUND)
        return None
