"""
OAuth module exceptions.

The callback reconcilers never raise; failures become redirects. Only the
Battle.net link service raises, for hosts calling it directly.
"""

from typing import Any, Optional

from shared.exceptions import ExternalServiceError

from .models import BattleNetErrorCode


class BattleNetError(ExternalServiceError):
    """Raised when a Battle.net link operation fails."""

    def __init__(
        self,
        code: BattleNetErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service="battle_net", code=code.value, details=details)
        self.error_code = code
