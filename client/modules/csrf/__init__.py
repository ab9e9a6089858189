"""
CSRF module.

Caches the session's anti-forgery token and decides which requests need it.

Public API:
- ICSRFTokenCache: Interface for token operations
- CSRFTokenCache: Session-scoped implementation
- CSRFToken: Cached token with expiry
- CSRF exceptions: CSRFProtectionError, CSRFRefreshFailedError
"""

from .interfaces import ICSRFTokenCache
from .models import (
    CSRFToken,
    CSRFTokenResponse,
    CSRF_HEADER,
    INVALID_CSRF_TOKEN_CODE,
    PROTECTED_ROUTES,
    READ_ONLY_METHODS,
)
from .exceptions import CSRFProtectionError, CSRFRefreshFailedError
from .service import CSRFTokenCache

__all__ = [
    # Interface
    "ICSRFTokenCache",
    # Implementation
    "CSRFTokenCache",
    # Models
    "CSRFToken",
    "CSRFTokenResponse",
    "CSRF_HEADER",
    "INVALID_CSRF_TOKEN_CODE",
    "PROTECTED_ROUTES",
    "READ_ONLY_METHODS",
    # Exceptions
    "CSRFProtectionError",
    "CSRFRefreshFailedError",
]
