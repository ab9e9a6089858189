"""
Authentication module.

Tracks whether the user is signed in and drives login, signup, logout and
the Google sign-in redirect.

Public API:
- IAuthSession: Interface for session operations
- AuthSession: Session state machine
- AuthState, AuthStatus: Canonical session state
- AuthResult, ActionResult: Result types returned by operations
- AuthFlowError, raise_for_failure: Exception bridge for results
"""

from .interfaces import IAuthSession, StateListener
from .models import (
    ActionResult,
    AuthCheckResponse,
    AuthResponse,
    AuthResult,
    AuthState,
    AuthStatus,
    LoginRequest,
    SignupRequest,
)
from .exceptions import AuthFlowError
from .service import AuthSession, raise_for_failure

__all__ = [
    # Interface
    "IAuthSession",
    "StateListener",
    # Implementation
    "AuthSession",
    "raise_for_failure",
    # Models
    "ActionResult",
    "AuthCheckResponse",
    "AuthResponse",
    "AuthResult",
    "AuthState",
    "AuthStatus",
    "LoginRequest",
    "SignupRequest",
    # Exceptions
    "AuthFlowError",
]
