"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class AuthMethod(str, Enum):
    """Authentication method used for login."""

    PASSWORD = "password"
    GOOGLE = "google"


class UserData(BaseModel):
    """
    The user as reported by the backend after login or signup.

    Only ``username`` is guaranteed; the other fields depend on the
    endpoint that produced the payload.
    """

    username: str = Field(..., description="Display username")
    email: Optional[str] = Field(None, description="User's email address")
    auth_method: Optional[AuthMethod] = Field(
        None,
        alias="authMethod",
        description="How the user signed in",
    )
    has_google_linked: Optional[bool] = Field(
        None,
        alias="hasGoogleLinked",
        description="Whether a Google identity is linked",
    )

    model_config = ConfigDict(
        frozen=True,  # Make immutable for safety
        extra="ignore",  # Ignore extra fields from the backend
        populate_by_name=True,
    )


class ApiErrorBody(BaseModel):
    """Error payload returned by the backend on non-success responses."""

    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[Any] = None

    model_config = ConfigDict(extra="ignore")
