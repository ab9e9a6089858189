"""
CSRF module exceptions.

Raised by the transport when a protected request cannot be protected.
Both errors are retryable from the user's point of view.
"""

from shared.exceptions import RaidwatchError


class CSRFProtectionError(RaidwatchError):
    """Raised when a protected request could not obtain a valid CSRF token."""

    def __init__(
        self,
        message: str = "Could not obtain a security token. Please try again.",
        code: str = "csrf_token_unavailable",
    ):
        super().__init__(message, code=code)


class CSRFRefreshFailedError(CSRFProtectionError):
    """Raised when the backend rejected our token and a forced refresh failed."""

    def __init__(self):
        super().__init__(
            "Security verification failed",
            code="csrf_refresh_failed",
        )
