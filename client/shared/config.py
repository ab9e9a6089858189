"""
Centralized configuration for the Raidwatch session core.

All settings are loaded from environment variables with sensible defaults.
Variables are namespaced with the RAIDWATCH_ prefix (e.g., RAIDWATCH_API_URL).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Session core settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAIDWATCH_",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend and frontend origins
    api_url: str = "http://localhost:8080"
    app_url: str = "http://localhost:3000"

    # Transport
    request_timeout: float = 30.0
    verify_ssl: bool = True

    # CSRF protection
    csrf_token_path: str = "/api/csrf-token"
    csrf_token_lifetime: int = 3600  # seconds, matches the backend
    csrf_max_retries: int = 3
    csrf_retry_delay: float = 1.0  # seconds

    # Routes the session core redirects to
    landing_route: str = "/dashboard"
    login_route: str = "/login"
    profile_route: str = "/profile"
    home_route: str = "/"
    google_login_path: str = "/api/auth/google/login"

    # Battle.net linking
    default_region: str = "eu"

    # UI pacing delays (seconds). These never carry ordering guarantees.
    relink_sync_delay: float = 1.0
    relink_redirect_delay: float = 2.0
    onboarding_delay: float = 1.0
    oauth_success_delay: float = 1.0


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
