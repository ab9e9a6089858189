"""
Shared infrastructure for the Raidwatch session core.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- exceptions: Base exception classes
- result: Success/Failure result types
- http: Backend API client (import from shared.http)
- navigation: Redirect collaborator
- query_cache: Keyed cache with awaitable invalidation

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .exceptions import (
    RaidwatchError,
    AuthenticationError,
    ExternalServiceError,
    ApiError,
    NetworkError,
)
from .models import AuthMethod, UserData
from .navigation import INavigator, Navigator, build_url
from .query_cache import QueryCache
from .result import Failure, Result, Success

__all__ = [
    "Settings",
    "get_settings",
    "RaidwatchError",
    "AuthenticationError",
    "ExternalServiceError",
    "ApiError",
    "NetworkError",
    "AuthMethod",
    "UserData",
    "INavigator",
    "Navigator",
    "build_url",
    "QueryCache",
    "Failure",
    "Result",
    "Success",
]
