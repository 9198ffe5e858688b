"""
burgerhero.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (Supabase keys, JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object injected across layers.
    Defaults target a local Supabase stack (`supabase start`).
    """

    model_config = SettingsConfigDict(env_prefix="BURGERHERO_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "burgerhero"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Hosted backend (GoTrue + PostgREST behind one base url)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = Field(default="dev-anon-key", repr=False)
    # When set, session access tokens are signature-checked before their claims are trusted.
    supabase_jwt_secret: str | None = Field(default=None, repr=False)
    jwt_audience: str = "authenticated"
    backend_timeout_seconds: float = 10.0

    # Local persistent storage (auth cache, preferences, session)
    database_url: str = "sqlite+aiosqlite:///./burgerhero.db"

    # Refresh the access token this many seconds before it actually expires.
    session_refresh_margin_seconds: int = 30

    # Stand-in for `prefers-color-scheme` when theme mode is "system".
    system_prefers_dark: bool = False

    customer_code_max_attempts: int = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every other module depends on this one; keep field names stable since they
# double as environment variable names.
