import logging
from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from .config import settings
from .errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def _require(value, name: str) -> str:
    if not value:
        raise ServiceUnavailableError(
            f"{name} environment variable must be set", error_code="CONFIG_MISSING"
        )
    return value


@lru_cache
def get_supabase() -> Client:
    """Service-role client shared by all data-access services."""
    url = _require(settings.SUPABASE_URL, "SUPABASE_URL")
    key = _require(settings.SUPABASE_SERVICE_ROLE_KEY, "SUPABASE_SERVICE_ROLE_KEY")
    logger.info("Creating Supabase client for %s", url)
    return create_client(url, key)


def create_auth_client() -> Client:
    """Fresh anon-key client for one auth exchange.

    Signing in mutates the client's auth state, so user sessions never touch
    the shared service client.
    """
    url = _require(settings.SUPABASE_URL, "SUPABASE_URL")
    key = _require(settings.SUPABASE_ANON_KEY, "SUPABASE_ANON_KEY")
    return create_client(
        url,
        key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
