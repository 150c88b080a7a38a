"""
HTTP server settings.

Core settings (document store, Supabase service credentials, vault rules)
live in shared.config. This module holds what only the API process needs,
read from TRUSTCIRCLE_-prefixed environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """TRUSTCIRCLE_* settings for the API server and its tooling."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRUSTCIRCLE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Bind address (run_api.py)
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False  # also exposes /api/docs
    reload: bool = False

    # Browser clients
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Keep-alive comment interval on /received/stream
    sse_ping_seconds: int = 15

    # Verifies Supabase access tokens
    supabase_jwt_secret: str = ""

    # Direct Postgres URL for run_migrations.py
    supabase_db_url: str = ""


def get_settings() -> APISettings:
    """
    Read API settings.

    Not cached, so tests can change the environment between requests.
    """
    return APISettings()
