"""
Character module exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError

from .models import CharacterErrorCode


class CharacterSyncError(ExternalServiceError):
    """Raised when the sync-and-enrich call fails."""

    def __init__(
        self,
        code: CharacterErrorCode,
        message: str,
        wait_time: Optional[int] = None,
    ):
        details = {"wait_time": wait_time} if wait_time is not None else None
        super().__init__(message, service="characters", code=code.value, details=details)
        self.error_code = code
        self.wait_time = wait_time
