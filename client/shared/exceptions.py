"""
Base exception classes for the Raidwatch session core.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class RaidwatchError(Exception):
    """
    Base exception for all Raidwatch errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for display or logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class AuthenticationError(RaidwatchError):
    """Authentication failed (invalid credentials or expired session)."""

    pass


class ExternalServiceError(RaidwatchError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class ApiError(ExternalServiceError):
    """
    The backend answered with a non-success HTTP status.

    The backend reports failures as ``{"error": ..., "code": ...}``;
    ``code`` carries the machine-readable value when present.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message, service="backend", code=code, details=details)
        self.status_code = status_code
        # Machine-readable code from the body; self.code falls back to the class name
        self.backend_code = code
        # The backend's own wording, None when the body carried no "error"
        self.server_message = server_message
        self.details["status_code"] = status_code


class NetworkError(ExternalServiceError):
    """The request never produced an HTTP response (DNS, timeout, refused)."""

    def __init__(self, message: str = "Network error"):
        super().__init__(message, service="backend", code="network_error")
