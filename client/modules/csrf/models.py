"""
CSRF module data models.

These models define the cached anti-forgery token and the fixed set of
routes whose mutating requests must carry it.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Routes requiring CSRF protection (non read-only methods only)
PROTECTED_ROUTES: tuple[str, ...] = (
    # Auth routes
    "/auth/login",
    "/auth/signup",
    "/auth/logout",
    "/auth/refresh",
    # User profile mutations and account deletion
    "/user/email",
    "/user/password",
    "/user/username",
    "/user/account",
)

READ_ONLY_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS"})

CSRF_HEADER = "X-CSRF-Token"
INVALID_CSRF_TOKEN_CODE = "INVALID_CSRF_TOKEN"


class CSRFToken(BaseModel):
    """
    A cached anti-forgery token.

    The value is opaque; it is only trusted while now < expires_at.
    """

    value: str = Field(..., description="Opaque token issued by the backend")
    issued_at: datetime = Field(..., description="When the token was fetched")
    expires_at: datetime = Field(..., description="When the token stops being trusted")

    model_config = ConfigDict(frozen=True)

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Check whether the token can still be sent."""
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at


class CSRFTokenResponse(BaseModel):
    """Response from the token-issuing endpoint."""

    token: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
