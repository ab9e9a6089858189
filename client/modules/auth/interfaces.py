"""
Authentication module interface.

Hosts and the OAuth callback handlers depend on IAuthSession, not on the
concrete implementation. This enables testing with mocks.
"""

from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from .models import ActionResult, AuthResult, AuthState

StateListener = Callable[[AuthState], Awaitable[None]]


@runtime_checkable
class IAuthSession(Protocol):
    """
    Interface for the session state machine.

    Every operation leaves the state consistent, never partially
    authenticated, including when the backend call fails.
    """

    @property
    def state(self) -> AuthState:
        """Current session state."""
        ...

    async def check_auth(self) -> AuthState:
        """
        Ask the backend whether the session is alive.

        Returns:
            The new state, never loading. Never raises.
        """
        ...

    async def login(self, identifier: str, secret: str) -> AuthResult:
        """
        Sign in with credentials and redirect to the landing route.

        Args:
            identifier: Email or username
            secret: Password

        Returns:
            Success with the user, or Failure with the classified error
        """
        ...

    async def signup(
        self,
        username: str,
        email: str,
        secret: str,
        captcha_token: Optional[str] = None,
    ) -> AuthResult:
        """
        Create an account, sign in and redirect to the landing route.

        Returns:
            Success with the user, or Failure with the classified error
        """
        ...

    async def logout(self) -> None:
        """End the session. Always ends unauthenticated; never raises."""
        ...

    async def login_with_google(self) -> ActionResult:
        """Hand the browser to the Google sign-in redirect."""
        ...

    async def handle_unauthorized(self) -> None:
        """Forced logout after the backend rejected the session."""
        ...
