"""
HTTP transport for the backend API.

Wraps httpx.AsyncClient with the two interceptors every call needs:
- requests to protected routes carry an X-CSRF-Token header, and are never
  sent unprotected when no token can be obtained
- responses rejecting our token trigger one forced refresh and one replay;
  a 401 clears the token and hands control to the unauthorized handler
  (the auth session's forced logout)

Non-success responses raise ApiError and transport failures raise
NetworkError, so callers never see raw httpx exceptions.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from modules.csrf.exceptions import CSRFProtectionError, CSRFRefreshFailedError
from modules.csrf.interfaces import ICSRFTokenCache
from modules.csrf.models import CSRF_HEADER

from .config import Settings, get_settings
from .exceptions import ApiError, NetworkError
from .models import ApiErrorBody

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "X-Requested-With": "XMLHttpRequest",
}

UnauthorizedHandler = Callable[[], Awaitable[None]]
Sleep = Callable[[float], Awaitable[None]]


def create_http_client(settings: Optional[Settings] = None) -> httpx.AsyncClient:
    """
    Create the session's httpx client.

    Cookies persist in the client's jar for the life of the session, which
    is how the backend session and CSRF cookies travel.
    """
    settings = settings or get_settings()
    return httpx.AsyncClient(
        base_url=settings.api_url,
        timeout=settings.request_timeout,
        verify=settings.verify_ssl,
        headers=DEFAULT_HEADERS,
    )


def parse_error_body(response: httpx.Response) -> ApiErrorBody:
    """Extract {error, code, details} from a response, tolerating any body."""
    try:
        data = response.json()
    except ValueError:
        return ApiErrorBody()
    if not isinstance(data, dict):
        return ApiErrorBody()
    try:
        return ApiErrorBody.model_validate(data)
    except ValueError:
        return ApiErrorBody()


class ApiClient:
    """
    Backend API client with CSRF protection.

    One instance per session, sharing its CSRF token cache with the auth
    session.
    """

    def __init__(
        self,
        csrf: ICSRFTokenCache,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize the API client.

        Args:
            csrf: Token cache consulted for protected routes
            settings: Session settings. Defaults to get_settings().
            http_client: Underlying client. If None, one is created and
                         owned by this instance.
            sleep: Coroutine used between token retries (injectable for tests)
        """
        self._settings = settings or get_settings()
        self._csrf = csrf
        self._http = http_client or create_http_client(self._settings)
        self._owns_client = http_client is None
        self._sleep = sleep or asyncio.sleep
        self._unauthorized_handler: Optional[UnauthorizedHandler] = None

    @property
    def http(self) -> httpx.AsyncClient:
        """The underlying httpx client."""
        return self._http

    def set_unauthorized_handler(self, handler: Optional[UnauthorizedHandler]) -> None:
        """Register the coroutine called when the backend answers 401."""
        self._unauthorized_handler = handler

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
        skip_csrf: bool = False,
        notify_unauthorized: bool = True,
    ) -> httpx.Response:
        """
        Send a request through the CSRF and session interceptors.

        Args:
            method: HTTP method
            url: Path relative to the API base URL
            params: Query parameters
            json: JSON body
            headers: Extra headers
            skip_csrf: Never attach a CSRF token (OAuth routes)
            notify_unauthorized: Call the unauthorized handler on 401.
                                 Flows that own their 401 handling
                                 (login, session check) turn this off.

        Returns:
            The successful response

        Raises:
            CSRFProtectionError: If a protected request cannot be protected
            ApiError: If the backend answers with a non-success status
            NetworkError: If no response was received
        """
        method = method.upper()
        request_headers = dict(headers or {})
        protected = not skip_csrf and self._csrf.is_protected_route(url, method)

        if protected:
            request_headers[CSRF_HEADER] = await self._acquire_token()

        response = await self._send(method, url, params, json, request_headers)
        body = parse_error_body(response) if response.is_error else ApiErrorBody()

        if protected and response.is_error and self._csrf.should_reset_token(
            response.status_code, body.code
        ):
            logger.info(f"CSRF token rejected on {method} {url}, refreshing once")
            token = await self._csrf.get_token(force_refresh=True)
            if not token:
                self._csrf.clear_token()
                raise CSRFRefreshFailedError()
            request_headers[CSRF_HEADER] = token
            response = await self._send(method, url, params, json, request_headers)
            body = parse_error_body(response) if response.is_error else ApiErrorBody()

        if response.status_code == 401:
            self._csrf.clear_token()
            if notify_unauthorized and self._unauthorized_handler is not None:
                logger.info(f"Session rejected on {method} {url}, forcing logout")
                await self._unauthorized_handler()

        if response.is_error:
            raise ApiError(
                status_code=response.status_code,
                message=body.error or response.reason_phrase or "Request failed",
                code=body.code,
                details={"response": body.details} if body.details else None,
                server_message=body.error,
            )

        return response

    async def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and decode its JSON body ({} when there is none)."""
        response = await self.request(method, url, **kwargs)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def _acquire_token(self) -> str:
        """Get a CSRF token, retrying a few times before giving up."""
        attempts = max(1, self._settings.csrf_max_retries)
        for attempt in range(1, attempts + 1):
            token = await self._csrf.get_token()
            if token:
                return token
            if attempt < attempts:
                await self._sleep(self._settings.csrf_retry_delay)

        logger.error(f"Failed to get CSRF token after {attempts} attempts")
        raise CSRFProtectionError()

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]],
        json: Optional[Any],
        headers: dict[str, str],
    ) -> httpx.Response:
        logger.debug(f"{method} {url}")
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Network error on {method} {url}: {e}")
            raise NetworkError(f"Network error during {method} {url}") from e
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response
