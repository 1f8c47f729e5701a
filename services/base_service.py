"""
Base class for services that query the hosted database
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from app.errors import database_unavailable, translate_postgrest_error


class BaseService:
    """Holds the Supabase client and turns provider errors into AppErrors"""

    table_name: str = ""
    resource: str = ""

    def __init__(self, client: Client):
        self.client = client
        self.logger = logging.getLogger(f"services.{type(self).__name__}")

    @property
    def table(self):
        return self.client.table(self.table_name)

    def _execute(self, query: Any, action: str, identifier: str = ""):
        try:
            return query.execute()
        except APIError as e:
            raise translate_postgrest_error(
                e, self.resource, identifier=identifier, action=action
            ) from e
        except httpx.HTTPError as e:
            raise database_unavailable(e, self.resource, identifier, action) from e

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()
