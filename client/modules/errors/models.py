"""
Error taxonomy data models.

Error codes are the machine-readable values the backend sends (in JSON
bodies or as the ``error`` query parameter of a redirect). Each code maps
to an ErrorDisplay the host renders.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Error codes aligned with the backend."""

    # Security errors
    INVALID_CSRF_TOKEN = "INVALID_CSRF_TOKEN"
    CSRF_REFRESH_FAILED = "csrf_refresh_failed"
    CSRF_TOKEN_UNAVAILABLE = "csrf_token_unavailable"

    # Credential and validation errors
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_INPUT = "invalid_input"
    INVALID_PASSWORD = "invalid_password"
    INVALID_USERNAME = "invalid_username"
    INVALID_EMAIL = "invalid_email"
    USERNAME_EXISTS = "username_exists"
    EMAIL_EXISTS = "email_exists"
    USER_EXISTS = "user_exists"
    CAPTCHA_REQUIRED = "captcha_required"
    CAPTCHA_INVALID = "captcha_invalid"

    # Session errors
    UNAUTHORIZED = "unauthorized"
    SIGNUP_LOGIN_FAILED = "signup_success_login_failed"

    # Technical errors
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"

    # Operation errors
    LOGIN_ERROR = "login_error"
    SIGNUP_ERROR = "signup_error"
    LOGOUT_ERROR = "logout_error"
    REFRESH_ERROR = "refresh_token_error"

    # OAuth errors
    OAUTH_CANCELLED = "auth_cancelled"
    OAUTH_FAILED = "auth_failed"
    OAUTH_PROCESSING_FAILED = "auth_processing_failed"
    OAUTH_STATE_MISMATCH = "state_mismatch"
    OAUTH_INVALID_CALLBACK = "invalid_callback"
    OAUTH_TOKEN_EXCHANGE_FAILED = "token_exchange_failed"
    OAUTH_USER_INFO_FAILED = "user_info_failed"
    EMAIL_ALREADY_LINKED = "email_already_linked"
    MISSING_PARAMS = "missing_params"
    LINK_FAILED = "link_failed"

    UNKNOWN = "unknown"


class ErrorKind(str, Enum):
    """Handling categories. Each kind implies a recovery policy."""

    CSRF = "csrf"              # Refresh the token once, ask the user to retry
    VALIDATION = "validation"  # Show inline, stay logged out
    SESSION = "session"        # Forced logout and redirect to login
    OAUTH = "oauth"            # Provider flow failed, always recoverable
    NETWORK = "network"        # Generic retry message
    UNKNOWN = "unknown"


class ErrorAction(BaseModel):
    """A suggested next step offered with an error."""

    label: str = Field(..., description="Button label")
    href: Optional[str] = Field(None, description="Route the action leads to")

    model_config = ConfigDict(frozen=True)


class ErrorDisplay(BaseModel):
    """User-facing copy and recovery options for an error code."""

    code: str = Field(..., description="Error code this display belongs to")
    title: str = Field(..., description="Short heading")
    message: str = Field(..., description="Explanation shown to the user")
    actions: tuple[ErrorAction, ...] = Field(default=(), description="Suggested actions")
    recoverable: bool = Field(..., description="Whether the user can retry")
    kind: ErrorKind = Field(default=ErrorKind.UNKNOWN, description="Handling category")

    model_config = ConfigDict(frozen=True)


class ClassifiedError(BaseModel):
    """
    An error after classification.

    ``message`` is what the caller shows inline; for validation errors it is
    the backend's own wording when the backend sent one.
    """

    code: ErrorCode = Field(..., description="Normalized error code")
    message: str = Field(..., description="Human-readable message")
    display: ErrorDisplay = Field(..., description="Full display entry")

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ErrorKind:
        return self.display.kind

    @property
    def recoverable(self) -> bool:
        return self.display.recoverable
