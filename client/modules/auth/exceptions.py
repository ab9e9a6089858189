"""
Authentication module exceptions.

Auth operations report failures as Result values. AuthFlowError exists for
callers that would rather raise; see raise_for_failure().
"""

from shared.exceptions import AuthenticationError

from modules.errors import ClassifiedError


class AuthFlowError(AuthenticationError):
    """Raised by raise_for_failure() when an auth operation failed."""

    def __init__(self, failure: ClassifiedError):
        super().__init__(
            failure.message,
            code=failure.code.value,
            details={"kind": failure.kind.value, "recoverable": failure.recoverable},
        )
        self.failure = failure
