"""
CSRF module interface.

The transport and the auth session depend on ICSRFTokenCache, not on the
concrete cache. Only the auth session and the cache itself clear the token;
everything else reads through get_token().
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class ICSRFTokenCache(Protocol):
    """Interface for the session-wide anti-forgery token cache."""

    def is_protected_route(self, url: str, method: str) -> bool:
        """
        Decide whether a request must carry a CSRF token.

        Args:
            url: Request URL or path (query string is ignored)
            method: HTTP method, any case

        Returns:
            False for read-only methods; otherwise True iff the path matches
            one of the protected routes
        """
        ...

    async def get_token(self, force_refresh: bool = False) -> Optional[str]:
        """
        Get a fresh token, fetching one when needed.

        Args:
            force_refresh: Always fetch, replacing the cached token

        Returns:
            The token, or None when one could not be obtained. Never raises.
        """
        ...

    def clear_token(self) -> None:
        """Drop the cached token. Safe to call repeatedly."""
        ...

    def should_reset_token(self, status_code: int, error_code: Optional[str]) -> bool:
        """Check whether a response means the backend rejected our token."""
        ...
