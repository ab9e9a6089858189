"""Tests for the CSRF token cache."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from modules.csrf import CSRFTokenCache, ICSRFTokenCache


API_URL = "http://api.test"
CSRF_URL = f"{API_URL}/api/csrf-token"


class TestIsProtectedRoute:
    @pytest.mark.parametrize(
        "url",
        [
            "/auth/login",
            "/auth/signup",
            "/auth/logout",
            "/auth/refresh",
            "/user/email",
            "/user/password",
            "/user/username",
            "/user/account",
            "http://api.test/auth/login",
            "/api/auth/login",
            "/user/account/delete",
            "/auth/login?next=/dashboard",
        ],
    )
    def test_mutating_requests_on_protected_routes(self, csrf_cache, url):
        """Mutating requests to allow-listed routes need a token."""
        assert csrf_cache.is_protected_route(url, "POST") is True

    @pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS", "get", "options"])
    def test_read_only_methods_never_protected(self, csrf_cache, method):
        """Read-only methods are never protected, whatever the URL."""
        assert csrf_cache.is_protected_route("/auth/login", method) is False
        assert csrf_cache.is_protected_route("/user/account", method) is False

    @pytest.mark.parametrize(
        "url",
        [
            "/characters/sync-and-enrich",
            "/auth/battle-net/unlink",
            "/auth/check",
            "/user/profile",
            "/auth/loginx",
        ],
    )
    def test_other_routes_not_protected(self, csrf_cache, url):
        """Routes outside the allow-list are not protected."""
        assert csrf_cache.is_protected_route(url, "POST") is False

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_other_mutating_methods(self, csrf_cache, method):
        """Every non read-only method is treated as mutating."""
        assert csrf_cache.is_protected_route("/user/email", method) is True


class TestShouldResetToken:
    def test_invalid_token_code(self, csrf_cache):
        """INVALID_CSRF_TOKEN bodies mean the token was rejected."""
        assert csrf_cache.should_reset_token(400, "INVALID_CSRF_TOKEN") is True

    def test_forbidden_status(self, csrf_cache):
        """A 403 means the token was rejected."""
        assert csrf_cache.should_reset_token(403, None) is True

    def test_other_errors(self, csrf_cache):
        """Other failures leave the token alone."""
        assert csrf_cache.should_reset_token(401, None) is False
        assert csrf_cache.should_reset_token(500, "server_error") is False


class TestGetToken:
    @pytest.mark.asyncio
    async def test_fetches_and_caches(self, csrf_cache, clock, add_csrf_token, httpx_mock):
        """The first call fetches; the token expires one hour later."""
        add_csrf_token("token-a")

        token = await csrf_cache.get_token()

        assert token == "token-a"
        cached = csrf_cache.cached_token
        assert cached.value == "token-a"
        assert cached.expires_at == clock.now + timedelta(hours=1)
        assert not csrf_cache.is_token_expired()

    @pytest.mark.asyncio
    async def test_fetch_sends_origin_headers(self, csrf_cache, add_csrf_token, httpx_mock):
        """The token request should carry Origin and X-Requested-With."""
        add_csrf_token()

        await csrf_cache.get_token()

        request = httpx_mock.get_requests(url=CSRF_URL)[0]
        assert request.headers["Origin"] == "http://app.test"
        assert request.headers["X-Requested-With"] == "XMLHttpRequest"

    @pytest.mark.asyncio
    async def test_cached_token_reused(self, csrf_cache, add_csrf_token, httpx_mock):
        """A fresh cached token should not be refetched."""
        add_csrf_token("token-a")

        await csrf_cache.get_token()
        token = await csrf_cache.get_token()

        assert token == "token-a"
        assert len(httpx_mock.get_requests(url=CSRF_URL)) == 1

    @pytest.mark.asyncio
    async def test_expired_token_refetched(self, csrf_cache, clock, add_csrf_token, httpx_mock):
        """A token past its lifetime should be refetched."""
        add_csrf_token("token-a", "token-b")

        await csrf_cache.get_token()
        clock.advance(3600)
        assert csrf_cache.is_token_expired()

        assert await csrf_cache.get_token() == "token-b"
        assert len(httpx_mock.get_requests(url=CSRF_URL)) == 2

    @pytest.mark.asyncio
    async def test_force_refresh_always_fetches(self, csrf_cache, clock, add_csrf_token, httpx_mock):
        """force_refresh should fetch and replace value and expiry."""
        add_csrf_token("token-a", "token-b")

        await csrf_cache.get_token()
        clock.advance(60)
        token = await csrf_cache.get_token(force_refresh=True)

        assert token == "token-b"
        assert csrf_cache.cached_token.value == "token-b"
        assert csrf_cache.cached_token.expires_at == clock.now + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_none(self, csrf_cache, add_csrf_token, httpx_mock):
        """Fetch failures should return None and clear the cache."""
        add_csrf_token("token-a")
        httpx_mock.add_response(method="GET", url=CSRF_URL, status_code=500)

        await csrf_cache.get_token()
        token = await csrf_cache.get_token(force_refresh=True)

        assert token is None
        assert csrf_cache.cached_token is None

    @pytest.mark.asyncio
    async def test_network_failure_returns_none(self, csrf_cache, httpx_mock):
        """Network errors should never propagate."""
        httpx_mock.add_exception(httpx.ConnectError("refused"))

        assert await csrf_cache.get_token() is None

    @pytest.mark.asyncio
    async def test_missing_token_in_body(self, csrf_cache, httpx_mock):
        """A body without a token counts as a failure."""
        httpx_mock.add_response(method="GET", url=CSRF_URL, json={"message": "ok"})

        assert await csrf_cache.get_token() is None
        assert csrf_cache.cached_token is None

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_fetch(self, csrf_cache, add_csrf_token, httpx_mock):
        """Concurrent callers should converge on one fetch."""
        add_csrf_token("token-a")

        tokens = await asyncio.gather(*(csrf_cache.get_token() for _ in range(5)))

        assert tokens == ["token-a"] * 5
        assert len(httpx_mock.get_requests(url=CSRF_URL)) == 1

    @pytest.mark.asyncio
    async def test_clear_during_fetch_is_not_overwritten(self, settings, clock):
        """A token fetched across a clear_token() call should not be cached."""
        client = MagicMock(spec=httpx.AsyncClient)
        cache = CSRFTokenCache(settings=settings, http_client=client, clock=clock)

        async def fetch(*args, **kwargs):
            cache.clear_token()
            return httpx.Response(
                200,
                json={"token": "late"},
                request=httpx.Request("GET", CSRF_URL),
            )

        client.get = AsyncMock(side_effect=fetch)

        assert await cache.get_token() == "late"
        assert cache.cached_token is None


class TestClearToken:
    @pytest.mark.asyncio
    async def test_clear_is_idempotent(self, csrf_cache, add_csrf_token, httpx_mock):
        """Clearing twice is the same as clearing once."""
        add_csrf_token()
        await csrf_cache.get_token()

        csrf_cache.clear_token()
        csrf_cache.clear_token()

        assert csrf_cache.cached_token is None
        assert csrf_cache.is_token_expired()

    def test_clear_empty_cache(self, csrf_cache):
        """Clearing an empty cache should not fail."""
        csrf_cache.clear_token()
        assert csrf_cache.cached_token is None


class TestLifecycle:
    def test_implements_interface(self, csrf_cache):
        """CSRFTokenCache should satisfy ICSRFTokenCache."""
        assert isinstance(csrf_cache, ICSRFTokenCache)

    @pytest.mark.asyncio
    async def test_aclose_owned_client(self, settings, add_csrf_token, httpx_mock):
        """A cache without an injected client creates and closes its own."""
        cache = CSRFTokenCache(settings=settings)
        add_csrf_token("token-a")

        assert await cache.get_token() == "token-a"
        await cache.aclose()
        await cache.aclose()
