"""
Authentication module data models.

These models define the session state exposed to the host and the request
and response bodies of the backend auth endpoints.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from shared.models import UserData
from shared.result import Failure, Success

from modules.errors import ClassifiedError


class AuthStatus(str, Enum):
    """Session states."""

    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class AuthState(BaseModel):
    """
    Canonical session state.

    Consumers must not branch on is_authenticated while is_loading is True.
    A user is only ever present on an authenticated state.
    """

    status: AuthStatus = Field(default=AuthStatus.LOADING, description="Session state")
    user: Optional[UserData] = Field(None, description="Signed-in user")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _user_requires_authentication(self) -> "AuthState":
        if self.user is not None and self.status != AuthStatus.AUTHENTICATED:
            raise ValueError("user can only be set on an authenticated state")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status == AuthStatus.LOADING

    @classmethod
    def loading(cls) -> "AuthState":
        return cls(status=AuthStatus.LOADING)

    @classmethod
    def authenticated(cls, user: Optional[UserData] = None) -> "AuthState":
        return cls(status=AuthStatus.AUTHENTICATED, user=user)

    @classmethod
    def unauthenticated(cls) -> "AuthState":
        return cls(status=AuthStatus.UNAUTHENTICATED)


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""

    email: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1, description="Password")


class SignupRequest(BaseModel):
    """Body of POST /auth/signup."""

    username: str = Field(..., min_length=1, description="Desired username")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")
    captcha_token: Optional[str] = Field(None, description="Captcha response token")


class AuthResponse(BaseModel):
    """Response from login and signup."""

    message: Optional[str] = None
    code: Optional[str] = None
    user: Optional[UserData] = None

    model_config = ConfigDict(extra="ignore")


class AuthCheckResponse(BaseModel):
    """Response from GET /auth/check."""

    authenticated: bool = False
    code: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


# Outcome of login, signup and session refresh
AuthResult = Union[Success[UserData], Failure[ClassifiedError]]

# Outcome of operations with no value on success (Google redirect)
ActionResult = Union[Success[None], Failure[ClassifiedError]]
