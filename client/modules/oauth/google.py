"""
Google sign-in callback handler.

The backend finishes the Google exchange itself and redirects the browser
back with either an error or a fresh session cookie. This handler reads
that redirect once, re-checks the session and sends the user on.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from shared.config import Settings, get_settings
from shared.navigation import INavigator

from modules.auth import IAuthSession
from modules.errors import (
    ErrorCode,
    classified,
    is_provider_error,
    map_backend_error,
    map_provider_error,
)

from .models import CallbackParams, GoogleCallbackOutcome

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class GoogleCallbackHandler:
    """One-shot processor for a Google sign-in callback navigation."""

    def __init__(
        self,
        session: IAuthSession,
        navigator: INavigator,
        settings: Optional[Settings] = None,
        sleep: Optional[Sleep] = None,
    ):
        self._session = session
        self._navigator = navigator
        self._settings = settings or get_settings()
        self._sleep = sleep or asyncio.sleep

        self._processed = False
        self._detached = False
        self._outcome: Optional[GoogleCallbackOutcome] = None

    @property
    def outcome(self) -> Optional[GoogleCallbackOutcome]:
        """The outcome of the first handle() call, None while it runs."""
        return self._outcome

    def detach(self) -> None:
        self._detached = True

    async def handle(self, params: CallbackParams) -> Optional[GoogleCallbackOutcome]:
        """
        Process the callback.

        Errors are returned for the host to render with get_error_display();
        only a successful sign-in redirects.
        """
        if self._processed:
            return self._outcome
        self._processed = True

        if params.error and is_provider_error(params.error):
            failure = map_provider_error(params.error, params.error_description)
            return self._finish_failed(failure.code, failure.message)

        if params.error or params.message:
            code = map_backend_error(params.error, fallback=ErrorCode.OAUTH_FAILED)
            return self._finish_failed(code, params.message or "Authentication failed")

        state = await self._session.check_auth()
        if not state.is_authenticated:
            logger.warning("Session check failed after Google sign-in")
            return self._finish_failed(
                ErrorCode.OAUTH_PROCESSING_FAILED,
                "Failed to verify authentication after Google login",
            )

        target = self._settings.home_route if params.new_user else self._settings.profile_route
        self._outcome = GoogleCallbackOutcome(success=True, redirect_url=target)
        logger.info(f"Google sign-in complete (new_user={params.new_user})")

        await self._sleep(self._settings.oauth_success_delay)
        if self._detached:
            logger.debug("Google callback detached, dropping redirect")
        else:
            self._navigator.push(target)
        return self._outcome

    def _finish_failed(self, code: ErrorCode, message: str) -> GoogleCallbackOutcome:
        logger.warning(f"Google sign-in failed: {code.value}")
        failure = classified(code, message)
        self._outcome = GoogleCallbackOutcome(
            success=False,
            error_code=failure.code,
            message=failure.message,
        )
        return self._outcome
