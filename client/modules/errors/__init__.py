"""
Errors module.

Maps backend codes, provider callback errors and transport exceptions to
user-facing displays.

Public API:
- ErrorCode, ErrorKind: Normalized codes and their handling categories
- ErrorDisplay, ErrorAction: What the host renders
- ClassifiedError: Failure value carried by Result types
- get_error_display, map_backend_error, map_provider_error,
  classify_exception: Mapping functions (never raise)
"""

from .models import ClassifiedError, ErrorAction, ErrorCode, ErrorDisplay, ErrorKind
from .taxonomy import (
    DEFAULT_ERROR_DISPLAY,
    ERROR_DISPLAYS,
    classified,
    classify_exception,
    get_error_display,
    is_provider_error,
    map_backend_error,
    map_provider_error,
)

__all__ = [
    # Models
    "ClassifiedError",
    "ErrorAction",
    "ErrorCode",
    "ErrorDisplay",
    "ErrorKind",
    # Displays
    "DEFAULT_ERROR_DISPLAY",
    "ERROR_DISPLAYS",
    # Mapping
    "classified",
    "classify_exception",
    "get_error_display",
    "is_provider_error",
    "map_backend_error",
    "map_provider_error",
]
