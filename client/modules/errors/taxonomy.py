"""
Error taxonomy mapper.

Pure functions turning backend codes, provider callback errors and
transport exceptions into ErrorDisplay entries. Nothing here raises: an
unknown or malformed code degrades to DEFAULT_ERROR_DISPLAY so a callback
page can always render something.

The auth session and both OAuth reconcilers go through this module, which
keeps the copy identical whichever flow produced the error.
"""

from typing import Any, Optional

from shared.exceptions import ApiError, NetworkError, RaidwatchError

from .models import ClassifiedError, ErrorAction, ErrorCode, ErrorDisplay, ErrorKind


_TRY_AGAIN = ErrorAction(label="Try Again", href="/login")
_SIGN_IN = ErrorAction(label="Sign In", href="/login")
_USE_PASSWORD = ErrorAction(label="Use Email/Password", href="/login")
_FORGOT_PASSWORD = ErrorAction(label="Forgot Password?", href="/forgot-password")
_CONTACT_SUPPORT = ErrorAction(label="Contact Support", href="/support")
_BACK_TO_PROFILE = ErrorAction(label="Back to Profile", href="/profile")


def _entry(
    code: ErrorCode,
    title: str,
    message: str,
    kind: ErrorKind,
    actions: tuple[ErrorAction, ...] = (),
    recoverable: bool = True,
) -> tuple[str, ErrorDisplay]:
    return code.value, ErrorDisplay(
        code=code.value,
        title=title,
        message=message,
        actions=actions,
        recoverable=recoverable,
        kind=kind,
    )


ERROR_DISPLAYS: dict[str, ErrorDisplay] = dict([
    # Security
    _entry(
        ErrorCode.INVALID_CSRF_TOKEN,
        "Security Check Expired",
        "Your security token expired. Please try again.",
        ErrorKind.CSRF,
    ),
    _entry(
        ErrorCode.CSRF_REFRESH_FAILED,
        "Security Verification Failed",
        "We could not verify this request. Please reload the page and try again.",
        ErrorKind.CSRF,
    ),
    _entry(
        ErrorCode.CSRF_TOKEN_UNAVAILABLE,
        "Security Verification Failed",
        "We could not secure this request. Please try again in a moment.",
        ErrorKind.CSRF,
    ),
    # Credentials and validation
    _entry(
        ErrorCode.INVALID_CREDENTIALS,
        "Sign-in Failed",
        "Invalid email or password",
        ErrorKind.VALIDATION,
        (_FORGOT_PASSWORD,),
    ),
    _entry(
        ErrorCode.INVALID_INPUT,
        "Invalid Input",
        "Invalid input data",
        ErrorKind.VALIDATION,
    ),
    _entry(
        ErrorCode.INVALID_PASSWORD,
        "Invalid Password",
        "Password must be at least 8 characters long",
        ErrorKind.VALIDATION,
    ),
    _entry(
        ErrorCode.INVALID_USERNAME,
        "Invalid Username",
        "Please choose a different username",
        ErrorKind.VALIDATION,
    ),
    _entry(
        ErrorCode.INVALID_EMAIL,
        "Invalid Email",
        "Please enter a valid email address",
        ErrorKind.VALIDATION,
    ),
    _entry(
        ErrorCode.USERNAME_EXISTS,
        "Username Taken",
        "Username already taken",
        ErrorKind.VALIDATION,
    ),
    _entry(
        ErrorCode.EMAIL_EXISTS,
        "Email Registered",
        "Email already registered",
        ErrorKind.VALIDATION,
        (_SIGN_IN, _FORGOT_PASSWORD),
    ),
    _entry(
        ErrorCode.USER_EXISTS,
        "Account Exists",
        "An account with these details already exists",
        ErrorKind.VALIDATION,
        (_SIGN_IN,),
    ),
    _entry(
        ErrorCode.CAPTCHA_REQUIRED,
        "Verification Required",
        "Please complete the captcha verification",
        ErrorKind.VALIDATION,
    ),
    _entry(
        ErrorCode.CAPTCHA_INVALID,
        "Verification Failed",
        "Captcha verification failed. Please try again.",
        ErrorKind.VALIDATION,
    ),
    # Session
    _entry(
        ErrorCode.UNAUTHORIZED,
        "Session Expired",
        "Your session has expired. Please sign in again.",
        ErrorKind.SESSION,
        (_SIGN_IN,),
        recoverable=False,
    ),
    _entry(
        ErrorCode.SIGNUP_LOGIN_FAILED,
        "Account Created",
        "Your account was created but we could not sign you in. Please sign in.",
        ErrorKind.SESSION,
        (_SIGN_IN,),
    ),
    # Technical
    _entry(
        ErrorCode.NETWORK_ERROR,
        "Connection Problem",
        "We could not reach the server. Check your connection and try again.",
        ErrorKind.NETWORK,
    ),
    _entry(
        ErrorCode.SERVER_ERROR,
        "Server Error",
        "Something went wrong on our side. Please try again later.",
        ErrorKind.NETWORK,
    ),
    # Operations
    _entry(ErrorCode.LOGIN_ERROR, "Sign-in Failed", "Login failed", ErrorKind.NETWORK),
    _entry(
        ErrorCode.SIGNUP_ERROR,
        "Sign-up Failed",
        "Failed to create account",
        ErrorKind.NETWORK,
    ),
    _entry(
        ErrorCode.LOGOUT_ERROR,
        "Sign-out Problem",
        "Failed to logout properly",
        ErrorKind.NETWORK,
    ),
    _entry(
        ErrorCode.REFRESH_ERROR,
        "Session Refresh Failed",
        "Failed to refresh session",
        ErrorKind.NETWORK,
    ),
    # OAuth
    _entry(
        ErrorCode.OAUTH_CANCELLED,
        "Authentication Cancelled",
        "You cancelled the Google sign-in process.",
        ErrorKind.OAUTH,
        (_TRY_AGAIN,),
    ),
    _entry(
        ErrorCode.OAUTH_FAILED,
        "Authentication Failed",
        "Google sign-in failed. Please try again.",
        ErrorKind.OAUTH,
        (_TRY_AGAIN, _USE_PASSWORD),
    ),
    _entry(
        ErrorCode.OAUTH_PROCESSING_FAILED,
        "Processing Error",
        "Failed to process authentication. Please try again.",
        ErrorKind.OAUTH,
        (_TRY_AGAIN,),
    ),
    _entry(
        ErrorCode.OAUTH_STATE_MISMATCH,
        "Security Error",
        "A security check failed during authentication. "
        "This might happen if you took too long to sign in.",
        ErrorKind.OAUTH,
        (_TRY_AGAIN,),
    ),
    _entry(
        ErrorCode.OAUTH_INVALID_CALLBACK,
        "Invalid Request",
        "Invalid authentication request",
        ErrorKind.OAUTH,
        (_TRY_AGAIN,),
    ),
    _entry(
        ErrorCode.OAUTH_TOKEN_EXCHANGE_FAILED,
        "Authentication Failed",
        "We could not complete the exchange with the provider. Please try again.",
        ErrorKind.OAUTH,
        (_TRY_AGAIN,),
    ),
    _entry(
        ErrorCode.OAUTH_USER_INFO_FAILED,
        "Authentication Failed",
        "We could not read your account details from the provider.",
        ErrorKind.OAUTH,
        (_TRY_AGAIN,),
    ),
    _entry(
        ErrorCode.EMAIL_ALREADY_LINKED,
        "Email Already in Use",
        "This email is already associated with another account. "
        "Please sign in with your existing account.",
        ErrorKind.OAUTH,
        (_SIGN_IN, _FORGOT_PASSWORD),
    ),
    _entry(
        ErrorCode.MISSING_PARAMS,
        "Incomplete Response",
        "The provider response was incomplete. Please start the linking again.",
        ErrorKind.OAUTH,
        (_BACK_TO_PROFILE,),
    ),
    _entry(
        ErrorCode.LINK_FAILED,
        "Linking Failed",
        "We could not link your Battle.net account. Please try again.",
        ErrorKind.OAUTH,
        (_BACK_TO_PROFILE,),
    ),
])

# Fallback for unknown errors
DEFAULT_ERROR_DISPLAY = ErrorDisplay(
    code=ErrorCode.UNKNOWN.value,
    title="Authentication Error",
    message="An unexpected error occurred during sign-in.",
    actions=(_TRY_AGAIN, _CONTACT_SUPPORT),
    recoverable=False,
    kind=ErrorKind.UNKNOWN,
)

# Backend spellings that differ from our codes
_BACKEND_ALIASES: dict[str, ErrorCode] = {
    "invalid_state": ErrorCode.OAUTH_STATE_MISMATCH,
    "invalid_request": ErrorCode.OAUTH_INVALID_CALLBACK,
    "invalid_grant": ErrorCode.OAUTH_INVALID_CALLBACK,
    "unsupported_grant": ErrorCode.OAUTH_INVALID_CALLBACK,
    "user_not_found": ErrorCode.UNAUTHORIZED,
    "invalid_email_format": ErrorCode.INVALID_EMAIL,
    "invalid_password_length": ErrorCode.INVALID_PASSWORD,
}

# Errors reported by the OAuth provider itself on the redirect
_PROVIDER_ERRORS: dict[str, tuple[ErrorCode, str]] = {
    "access_denied": (
        ErrorCode.OAUTH_CANCELLED,
        "You cancelled the Google sign-in process",
    ),
    "invalid_request": (ErrorCode.OAUTH_INVALID_CALLBACK, "Invalid authentication request"),
    "invalid_grant": (ErrorCode.OAUTH_INVALID_CALLBACK, "Invalid authentication request"),
    "unsupported_grant_type": (
        ErrorCode.OAUTH_INVALID_CALLBACK,
        "Invalid authentication request",
    ),
    "server_error": (
        ErrorCode.OAUTH_FAILED,
        "Google authentication service is temporarily unavailable",
    ),
    "temporarily_unavailable": (
        ErrorCode.OAUTH_FAILED,
        "Google authentication service is temporarily unavailable",
    ),
}


def get_error_display(code: Any) -> ErrorDisplay:
    """
    Get display information for an error code.

    Accepts an ErrorCode, a raw string, or anything else; never raises.
    """
    if isinstance(code, ErrorCode):
        return ERROR_DISPLAYS.get(code.value, DEFAULT_ERROR_DISPLAY)
    if isinstance(code, str):
        return ERROR_DISPLAYS.get(code, DEFAULT_ERROR_DISPLAY)
    return DEFAULT_ERROR_DISPLAY


def map_backend_error(
    code: Optional[str],
    fallback: ErrorCode = ErrorCode.UNKNOWN,
) -> ErrorCode:
    """Map a backend error code string to an ErrorCode."""
    if not code or not isinstance(code, str):
        return fallback
    if code in _BACKEND_ALIASES:
        return _BACKEND_ALIASES[code]
    try:
        return ErrorCode(code)
    except ValueError:
        return fallback


def is_provider_error(error: Optional[str]) -> bool:
    """Check whether an error code comes from the OAuth provider itself."""
    return isinstance(error, str) and error in _PROVIDER_ERRORS


def map_provider_error(
    error: Optional[str],
    description: Optional[str] = None,
) -> ClassifiedError:
    """
    Map an OAuth provider error (the ``error`` callback parameter).

    The provider's own description wins over our copy when it sent one,
    except for cancellation, which always uses our wording.
    """
    code, default_message = _PROVIDER_ERRORS.get(
        error or "",
        (ErrorCode.OAUTH_FAILED, "Google sign-in failed"),
    )
    message = default_message
    if description and code != ErrorCode.OAUTH_CANCELLED:
        message = description
    return classified(code, message)


def classified(code: ErrorCode, message: Optional[str] = None) -> ClassifiedError:
    """Build a ClassifiedError, defaulting the message to the display copy."""
    display = get_error_display(code)
    return ClassifiedError(code=code, message=message or display.message, display=display)


def classify_exception(
    error: Exception,
    fallback: ErrorCode,
    unauthorized_code: ErrorCode = ErrorCode.UNAUTHORIZED,
) -> ClassifiedError:
    """
    Classify a failure caught at the boundary of a public operation.

    Args:
        error: The exception raised by the transport or by response parsing
        fallback: Code used when nothing more specific applies
                  (e.g. LOGIN_ERROR for the login flow)
        unauthorized_code: Code for HTTP 401. Login uses
                           INVALID_CREDENTIALS; everything else means the
                           session is gone.

    Returns:
        The classified error; never raises
    """
    if isinstance(error, NetworkError):
        return classified(ErrorCode.NETWORK_ERROR)

    if isinstance(error, ApiError):
        if error.status_code == 401 and error.backend_code in (None, ErrorCode.INVALID_CREDENTIALS.value):
            return classified(unauthorized_code)

        code = map_backend_error(error.backend_code, fallback=fallback)
        if code == fallback and error.status_code >= 500 and not error.backend_code:
            code = ErrorCode.SERVER_ERROR

        if get_error_display(code).kind == ErrorKind.VALIDATION:
            # Backend wording for field-level problems
            return classified(code, error.server_message)
        return classified(code)

    if isinstance(error, RaidwatchError):
        return classified(map_backend_error(error.code, fallback=fallback))

    return classified(fallback)
