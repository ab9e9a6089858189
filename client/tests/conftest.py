"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
HTTP traffic is intercepted with pytest-httpx; every httpx client created in
a test goes through the `httpx_mock` fixture.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from shared.config import Settings
from shared.http import ApiClient
from shared.navigation import Navigator

from modules.auth import AuthSession
from modules.csrf import CSRFTokenCache


API_URL = "http://api.test"
APP_URL = "http://app.test"
CSRF_URL = f"{API_URL}/api/csrf-token"


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def add_csrf_token(httpx_mock):
    """Register successful responses from the token endpoint, one per token."""

    def add(*tokens: str) -> None:
        for token in tokens or ("csrf-token-1",):
            httpx_mock.add_response(method="GET", url=CSRF_URL, json={"token": token})

    return add


@pytest.fixture
def user_payload() -> dict:
    return {"username": "thrall", "email": "thrall@example.com", "authMethod": "password"}


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the test hosts, with pacing delays disabled."""
    return Settings(
        _env_file=None,
        api_url=API_URL,
        app_url=APP_URL,
        csrf_retry_delay=0.0,
        relink_sync_delay=0.0,
        relink_redirect_delay=0.0,
        onboarding_delay=0.0,
        oauth_success_delay=0.0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def http_client(settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=settings.api_url)


@pytest.fixture
def csrf_cache(settings, http_client, clock) -> CSRFTokenCache:
    return CSRFTokenCache(settings=settings, http_client=http_client, clock=clock)


@pytest.fixture
def retry_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def api(csrf_cache, settings, http_client, retry_sleep) -> ApiClient:
    return ApiClient(csrf_cache, settings=settings, http_client=http_client, sleep=retry_sleep)


@pytest.fixture
def session(api, csrf_cache, navigator, settings) -> AuthSession:
    return AuthSession(api, csrf_cache, navigator, settings=settings)
