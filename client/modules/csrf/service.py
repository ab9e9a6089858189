"""
CSRF token cache implementation.

Keeps one anti-forgery token per session and refetches it only when it is
missing, expired, or explicitly refreshed. Fetch failures are logged and
reported as None, never raised, so an unrelated screen cannot crash on a
token problem.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from urllib.parse import urlsplit

import httpx

from shared.config import Settings, get_settings

from .interfaces import ICSRFTokenCache
from .models import (
    CSRFToken,
    CSRFTokenResponse,
    INVALID_CSRF_TOKEN_CODE,
    PROTECTED_ROUTES,
    READ_ONLY_METHODS,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CSRFTokenCache(ICSRFTokenCache):
    """
    Session-scoped CSRF token cache.

    Construct one per session at bootstrap and inject it into the transport
    and the auth session. Concurrent get_token() calls share a single
    in-flight fetch; a forced refresh always starts a new one.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the token cache.

        Args:
            settings: Session settings. Defaults to get_settings().
            http_client: Client used for the token fetch. Share the
                         transport's client so the CSRF cookie and the
                         session cookie live in the same jar. If None, a
                         client is created on first use and owned here.
            clock: Returns the current UTC time (injectable for tests).
        """
        self._settings = settings or get_settings()
        self._http = http_client
        self._owns_client = http_client is None
        self._clock = clock or _utcnow
        self._lifetime = timedelta(seconds=self._settings.csrf_token_lifetime)

        self._token: Optional[CSRFToken] = None
        self._inflight: Optional[asyncio.Task] = None
        # Bumped on every clear so a fetch started before a logout cannot
        # repopulate the cache after it.
        self._generation = 0

    @property
    def cached_token(self) -> Optional[CSRFToken]:
        """The cached token, whether or not it has expired."""
        return self._token

    def is_token_expired(self) -> bool:
        """Check if there is no usable token."""
        return self._token is None or not self._token.is_valid(self._clock())

    def is_protected_route(self, url: str, method: str) -> bool:
        """Decide whether a request must carry a CSRF token."""
        if method.upper() in READ_ONLY_METHODS:
            return False

        path = urlsplit(url).path or url
        return any(
            path.endswith(route) or f"{route}/" in path
            for route in PROTECTED_ROUTES
        )

    def should_reset_token(self, status_code: int, error_code: Optional[str]) -> bool:
        """Check whether a response means the backend rejected our token."""
        return error_code == INVALID_CSRF_TOKEN_CODE or status_code == 403

    async def get_token(self, force_refresh: bool = False) -> Optional[str]:
        """Get a fresh token, fetching one when needed."""
        if not force_refresh and not self.is_token_expired():
            return self._token.value

        if not force_refresh and self._inflight is not None and not self._inflight.done():
            return await asyncio.shield(self._inflight)

        task = asyncio.ensure_future(self._fetch_token())
        self._inflight = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

    def clear_token(self) -> None:
        """Drop the cached token. Safe to call repeatedly."""
        self._token = None
        self._generation += 1

    async def aclose(self) -> None:
        """Close the HTTP client if this cache created it."""
        if self._owns_client and self._http is not None:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self._settings.api_url,
                timeout=self._settings.request_timeout,
                verify=self._settings.verify_ssl,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "X-Requested-With": "XMLHttpRequest",
                },
            )
        return self._http

    async def _fetch_token(self) -> Optional[str]:
        """Fetch a token from the backend and cache it."""
        generation = self._generation

        try:
            response = await self._client().get(
                self._settings.csrf_token_path,
                headers={
                    "Origin": self._settings.app_url,
                    "X-Requested-With": "XMLHttpRequest",
                },
            )
            response.raise_for_status()
            payload = CSRFTokenResponse.model_validate(response.json())
        except Exception as e:
            logger.warning(f"Failed to fetch CSRF token: {e}")
            self.clear_token()
            return None

        if not payload.token:
            logger.warning("No CSRF token in response")
            self.clear_token()
            return None

        if generation != self._generation:
            # Cleared while the fetch was in flight (logout, 401)
            logger.debug("CSRF token fetched after invalidation, not caching it")
            return payload.token

        issued_at = self._clock()
        self._token = CSRFToken(
            value=payload.token,
            issued_at=issued_at,
            expires_at=issued_at + self._lifetime,
        )
        logger.debug("CSRF token refreshed")
        return payload.token
