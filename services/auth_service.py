"""
Auth Service - sign in/out against Supabase Auth, session and role resolution

Session resolution asks the auth provider for the user behind an access token.
Network failures and timeouts are retried with exponential backoff; a rejected
token is exchanged once for a new session using the refresh token.

Role resolution reads profiles.role separately so that a slow profile lookup
never blocks the session. Roles are cached per user id and fall back to the
least-privileged role when they cannot be read.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx
from postgrest.exceptions import APIError
from supabase import AuthApiError, AuthRetryableError, Client

from app.config import Settings, settings as default_settings
from app.errors import SessionUnavailableError, UnauthorizedError, ValidationError
from models.auth import DEFAULT_ROLE, ROLES, AuthSession, CurrentUser, Role

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    asyncio.TimeoutError,
    TimeoutError,
    ConnectionError,
    httpx.TransportError,
    AuthRetryableError,
)

# where each role lands after signing in
LANDING_PAGES: Dict[str, str] = {"master": "/workouts", "athlete": "/"}


def is_transient(error: BaseException) -> bool:
    return isinstance(error, TRANSIENT_ERRORS)


def landing_page(role: str) -> str:
    return LANDING_PAGES.get(role, LANDING_PAGES[DEFAULT_ROLE])


class AuthService:
    """Auth operations and the per-process role cache"""

    def __init__(
        self,
        auth_client_factory: Callable[[], Client],
        db_factory: Callable[[], Client],
        config: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._auth_client_factory = auth_client_factory
        self._db_factory = db_factory
        self.config = config or default_settings
        self._sleep = sleep
        self._clock = clock
        self._role_cache: Dict[str, Tuple[str, float]] = {}
        self._role_lock = threading.Lock()

    # ---------- retry plumbing ----------
    def session_backoff(self, retry: int) -> float:
        """Delay before session retry number `retry` (0-based): 1s, 2s, 4s, capped."""
        return min(
            self.config.SESSION_BACKOFF_BASE_S * (2**retry), self.config.SESSION_BACKOFF_CAP_S
        )

    def role_backoff(self, retry: int) -> float:
        """Delay before role retry number `retry` (0-based): 1s, 2s, ..."""
        return self.config.ROLE_BACKOFF_STEP_S * (retry + 1)

    async def _with_retry(
        self,
        operation: Callable[..., Any],
        *args: Any,
        timeout: float,
        max_retries: int,
        backoff: Callable[[int], float],
        what: str,
    ) -> Any:
        retry = 0
        while True:
            try:
                return await asyncio.wait_for(asyncio.to_thread(operation, *args), timeout)
            except TRANSIENT_ERRORS as e:
                if retry >= max_retries:
                    logger.error("%s failed after %d retries: %r", what, retry, e)
                    raise
                delay = backoff(retry)
                retry += 1
                logger.warning(
                    "%s failed (%r), retry %d/%d in %.1fs",
                    what,
                    e,
                    retry,
                    max_retries,
                    delay,
                    extra={"extra_fields": {"operation": what, "retry": retry, "delay_s": delay}},
                )
                await self._sleep(delay)

    async def _session_call(self, operation: Callable[..., Any], *args: Any, what: str) -> Any:
        try:
            return await self._with_retry(
                operation,
                *args,
                timeout=self.config.SESSION_TIMEOUT_S,
                max_retries=self.config.SESSION_MAX_RETRIES,
                backoff=self.session_backoff,
                what=what,
            )
        except TRANSIENT_ERRORS as e:
            raise SessionUnavailableError() from e

    # ---------- provider calls (run in worker threads) ----------
    def _get_user(self, access_token: str):
        response = self._auth_client_factory().auth.get_user(access_token)
        return response.user if response else None

    def _refresh(self, refresh_token: str):
        return self._auth_client_factory().auth.refresh_session(refresh_token)

    def _sign_in(self, email: str, password: str):
        return self._auth_client_factory().auth.sign_in_with_password(
            {"email": email, "password": password}
        )

    def _sign_up(self, email: str, password: str, full_name: Optional[str]):
        return self._auth_client_factory().auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"data": {"name": full_name, "full_name": full_name, "role": DEFAULT_ROLE}},
            }
        )

    def _sign_out(self, access_token: str):
        return self._auth_client_factory().auth.admin.sign_out(access_token)

    def _fetch_role(self, user_id: str) -> Optional[str]:
        rows = (
            self._db_factory()
            .table("profiles")
            .select("role")
            .eq("id", user_id)
            .limit(1)
            .execute()
            .data
        )
        return rows[0].get("role") if rows else None

    # ---------- sign in / up / out ----------
    async def sign_in(self, email: str, password: str) -> AuthSession:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required")
        try:
            response = await self._session_call(self._sign_in, email, password, what="Sign in")
        except AuthApiError as e:
            logger.info("Sign in rejected for %s: %s", email, e.message)
            raise UnauthorizedError("Invalid credentials") from e

        session = getattr(response, "session", None)
        if session is None or response.user is None:
            raise UnauthorizedError("Invalid credentials")
        logger.info("User %s signed in", response.user.id)
        return AuthSession(
            user_id=response.user.id,
            email=response.user.email,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> str:
        """Register a new athlete and return the new user id."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required")
        try:
            response = await self._session_call(
                self._sign_up, email, password, full_name, what="Sign up"
            )
        except AuthApiError as e:
            logger.info("Sign up rejected for %s: %s", email, e.message)
            raise ValidationError(e.message) from e
        if response.user is None:
            raise ValidationError("Registration failed")
        logger.info("Registered athlete %s", response.user.id)
        return response.user.id

    async def sign_out(self, access_token: Optional[str]) -> None:
        """Revoke the session at the provider. Failures are logged, not raised."""
        if not access_token:
            return
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._sign_out, access_token), self.config.SESSION_TIMEOUT_S
            )
        except (AuthApiError, *TRANSIENT_ERRORS) as e:
            logger.warning("Error signing out: %r", e)

    # ---------- session ----------
    async def resolve_session(
        self, access_token: Optional[str], refresh_token: Optional[str] = None
    ) -> Optional[AuthSession]:
        """The session behind the tokens, or None if there is no valid session.

        Raises SessionUnavailableError when the provider cannot be reached.
        """
        if not access_token:
            return None
        try:
            user = await self._session_call(self._get_user, access_token, what="Session fetch")
        except AuthApiError as e:
            logger.info("Access token rejected (%s), trying refresh", e.message)
            user = None
        if user is not None:
            return AuthSession(
                user_id=user.id,
                email=user.email,
                access_token=access_token,
                refresh_token=refresh_token,
            )

        if not refresh_token:
            return None
        try:
            response = await self._session_call(
                self._refresh, refresh_token, what="Session refresh"
            )
        except AuthApiError as e:
            logger.info("Refresh token rejected: %s", e.message)
            return None
        session = getattr(response, "session", None)
        if session is None or response.user is None:
            return None
        logger.info("Refreshed session for user %s", response.user.id)
        return AuthSession(
            user_id=response.user.id,
            email=response.user.email,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )

    # ---------- role ----------
    def cached_role(self, user_id: str) -> Optional[str]:
        with self._role_lock:
            entry = self._role_cache.get(user_id)
            if entry is None:
                return None
            role, expires_at = entry
            if expires_at <= self._clock():
                del self._role_cache[user_id]
                return None
            return role

    def invalidate_role(self, user_id: Optional[str] = None) -> None:
        """Forget one cached role, or all of them."""
        with self._role_lock:
            if user_id is None:
                self._role_cache.clear()
            else:
                self._role_cache.pop(user_id, None)

    async def resolve_role(self, user_id: Optional[str]) -> Role:
        if not user_id:
            return DEFAULT_ROLE
        cached = self.cached_role(user_id)
        if cached is not None:
            return cached

        try:
            role = await self._with_retry(
                self._fetch_role,
                user_id,
                timeout=self.config.ROLE_TIMEOUT_S,
                max_retries=self.config.ROLE_MAX_RETRIES,
                backoff=self.role_backoff,
                what="Role fetch",
            )
        except TRANSIENT_ERRORS:
            logger.warning("Falling back to %s role for user %s", DEFAULT_ROLE, user_id)
            return DEFAULT_ROLE
        except (APIError, httpx.HTTPError) as e:
            logger.error("Error fetching role for user %s: %r", user_id, e)
            return DEFAULT_ROLE

        if role not in ROLES:
            logger.warning("User %s has no usable role (%r)", user_id, role)
            return DEFAULT_ROLE

        with self._role_lock:
            self._role_cache[user_id] = (role, self._clock() + self.config.ROLE_CACHE_TTL_S)
        return role

    async def current_user(
        self, access_token: Optional[str], refresh_token: Optional[str] = None
    ) -> Tuple[Optional[CurrentUser], Optional[AuthSession]]:
        session = await self.resolve_session(access_token, refresh_token)
        if session is None:
            return None, None
        role = await self.resolve_role(session.user_id)
        return CurrentUser(id=session.user_id, email=session.email, role=role), session
