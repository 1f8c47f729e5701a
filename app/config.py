"""
Application configuration.

All environment variables are read here, from the process environment or a
local .env file.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    # Supabase
    SUPABASE_URL: Optional[str] = Field(default=None)
    SUPABASE_ANON_KEY: Optional[str] = Field(default=None)
    # Data access runs with the service role; authorization is enforced by the app.
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(default=None)

    # Cookie session
    SESSION_SECRET: str = Field(default="dev-session-secret")
    SESSION_MAX_AGE: int = Field(default=14 * 24 * 3600)

    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # text or json

    # Session resolution
    SESSION_TIMEOUT_S: float = Field(default=20.0)
    SESSION_MAX_RETRIES: int = Field(default=3)
    SESSION_BACKOFF_BASE_S: float = Field(default=1.0)
    SESSION_BACKOFF_CAP_S: float = Field(default=5.0)

    # Role resolution
    ROLE_TIMEOUT_S: float = Field(default=10.0)
    ROLE_MAX_RETRIES: int = Field(default=2)
    ROLE_BACKOFF_STEP_S: float = Field(default=1.0)
    ROLE_CACHE_TTL_S: float = Field(default=300.0)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
