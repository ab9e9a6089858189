"""
Auth session state machine.

Owns the canonical session state (loading, authenticated, unauthenticated)
and keeps the CSRF token in step with it: leaving the authenticated state
clears the token, signing in warms it.
"""

import asyncio
import logging
from typing import Callable, Optional, Union

from pydantic import ValidationError as ModelValidationError

from shared.config import Settings, get_settings
from shared.exceptions import RaidwatchError
from shared.http import ApiClient
from shared.models import UserData
from shared.navigation import INavigator
from shared.result import Failure, Success

from modules.csrf import ICSRFTokenCache
from modules.errors import (
    ClassifiedError,
    ErrorCode,
    classified,
    classify_exception,
    map_backend_error,
)

from .exceptions import AuthFlowError
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

logger = logging.getLogger(__name__)


def raise_for_failure(result: Union[AuthResult, ActionResult]):
    """
    Unwrap a result, raising AuthFlowError on failure.

    For callers that would rather handle exceptions than match on results.
    """
    if isinstance(result, Failure):
        raise AuthFlowError(result.error)
    return result.value


class AuthSession(IAuthSession):
    """
    Session state machine for one browser session.

    Construct once at bootstrap with the session's API client, CSRF cache
    and navigator. The session registers itself as the API client's
    unauthorized handler, so any 401 on an ordinary call ends here.
    """

    def __init__(
        self,
        api: ApiClient,
        csrf: ICSRFTokenCache,
        navigator: INavigator,
        settings: Optional[Settings] = None,
    ):
        self._api = api
        self._csrf = csrf
        self._navigator = navigator
        self._settings = settings or get_settings()

        self._state = AuthState.loading()
        self._csrf_initialized = False
        # Bumped whenever the session ends, so a warm-up started before a
        # logout cannot mark the next session as initialized.
        self._epoch = 0
        self._start_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        self._listeners: list[StateListener] = []

        api.set_unauthorized_handler(self.handle_unauthorized)

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[UserData]:
        return self._state.user

    @property
    def csrf_initialized(self) -> bool:
        """Whether the CSRF cache has been warmed for this session."""
        return self._csrf_initialized

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a coroutine called with every new state.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self) -> AuthState:
        """Run the initial session check. Later calls reuse the first one."""
        if self._start_task is None:
            self._start_task = asyncio.ensure_future(self.check_auth())
        await asyncio.shield(self._start_task)
        return self._state

    async def drain(self) -> None:
        """Wait for background CSRF warm-ups to settle."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def check_auth(self) -> AuthState:
        try:
            data = await self._api.request_json(
                "GET", "/auth/check", notify_unauthorized=False
            )
            check = AuthCheckResponse.model_validate(data)
        except (RaidwatchError, ValueError) as e:
            logger.warning(f"Session check failed: {e}")
            await self._become_unauthenticated()
            return self._state
        except Exception:
            logger.exception("Unexpected error during session check")
            await self._become_unauthenticated()
            return self._state

        if not check.authenticated:
            logger.info("No active session")
            await self._become_unauthenticated()
            return self._state

        await self._set_state(AuthState.authenticated(self._state.user))
        if not self._csrf_initialized:
            await self._warm_csrf(force_refresh=False)
        return self._state

    async def login(self, identifier: str, secret: str) -> AuthResult:
        try:
            request = LoginRequest(email=identifier, password=secret)
        except ModelValidationError:
            return await self._fail(classified(ErrorCode.INVALID_INPUT))

        try:
            data = await self._api.request_json(
                "POST",
                "/auth/login",
                json=request.model_dump(),
                notify_unauthorized=False,
            )
            response = AuthResponse.model_validate(data)
        except (RaidwatchError, ValueError) as e:
            return await self._fail(
                classify_exception(
                    e,
                    fallback=ErrorCode.LOGIN_ERROR,
                    unauthorized_code=ErrorCode.INVALID_CREDENTIALS,
                )
            )

        if response.user is None:
            logger.warning("Login response carried no user")
            return await self._fail(
                classified(map_backend_error(response.code, fallback=ErrorCode.LOGIN_ERROR))
            )

        await self._complete_sign_in(response.user)
        return Success(value=response.user)

    async def signup(
        self,
        username: str,
        email: str,
        secret: str,
        captcha_token: Optional[str] = None,
    ) -> AuthResult:
        try:
            request = SignupRequest(
                username=username,
                email=email,
                password=secret,
                captcha_token=captcha_token,
            )
        except ModelValidationError as e:
            bad_email = any(err["loc"][:1] == ("email",) for err in e.errors())
            code = ErrorCode.INVALID_EMAIL if bad_email else ErrorCode.INVALID_INPUT
            return await self._fail(classified(code))

        try:
            data = await self._api.request_json(
                "POST",
                "/auth/signup",
                json=request.model_dump(mode="json"),
                notify_unauthorized=False,
            )
            response = AuthResponse.model_validate(data)
        except (RaidwatchError, ValueError) as e:
            return await self._fail(classify_exception(e, fallback=ErrorCode.SIGNUP_ERROR))

        if response.user is None or response.code == ErrorCode.SIGNUP_LOGIN_FAILED.value:
            # Account may exist while the automatic sign-in failed
            return await self._fail(
                classified(map_backend_error(response.code, fallback=ErrorCode.SIGNUP_ERROR))
            )

        await self._complete_sign_in(response.user)
        return Success(value=response.user)

    async def logout(self) -> None:
        try:
            await self._api.request("POST", "/auth/logout", notify_unauthorized=False)
        except RaidwatchError as e:
            logger.warning(f"Logout request failed, ending session locally: {e}")
        except Exception:
            logger.exception("Unexpected error during logout, ending session locally")
        finally:
            self._csrf.clear_token()
            await self._become_unauthenticated()
            self._csrf_initialized = False
            try:
                self._navigator.push(self._settings.login_route)
            except Exception:
                logger.exception("Failed to redirect to login after logout")

    async def login_with_google(self) -> ActionResult:
        url = f"{self._settings.app_url.rstrip('/')}{self._settings.google_login_path}"
        try:
            self._navigator.redirect_external(url)
        except Exception as e:
            logger.error(f"Failed to start Google sign-in: {e}")
            return Failure(error=classified(ErrorCode.OAUTH_FAILED))
        return Success(value=None)

    async def refresh_session(self) -> ActionResult:
        """
        Extend the backend session.

        A 401 goes through the transport's unauthorized handler, which
        forces the logout; the failure is still returned to the caller.
        """
        try:
            data = await self._api.request_json("POST", "/auth/refresh")
            response = AuthResponse.model_validate(data)
        except (RaidwatchError, ValueError) as e:
            failure = classify_exception(e, fallback=ErrorCode.REFRESH_ERROR)
            logger.warning(f"Session refresh failed: {failure.code.value}")
            return Failure(error=failure)

        if self._state.status != AuthStatus.AUTHENTICATED or response.user is not None:
            await self._set_state(AuthState.authenticated(response.user or self._state.user))
        return Success(value=None)

    async def handle_unauthorized(self) -> None:
        if self._state.status == AuthStatus.UNAUTHENTICATED:
            return

        logger.info("Session rejected by the backend, signing out")
        await self._become_unauthenticated()
        self._navigator.push(self._settings.login_route)

    async def _fail(self, failure: ClassifiedError) -> Failure[ClassifiedError]:
        logger.info(f"Auth operation failed: {failure.code.value}")
        # A rejected re-login leaves the existing backend session in place
        if self._state.status != AuthStatus.AUTHENTICATED:
            await self._become_unauthenticated()
        return Failure(error=failure)

    async def _complete_sign_in(self, user: UserData) -> None:
        await self._set_state(AuthState.authenticated(user))
        logger.info(f"Signed in as {user.username}")

        # Best effort; the redirect never waits for it
        task = asyncio.ensure_future(self._warm_csrf(force_refresh=True))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

        self._navigator.push(self._settings.landing_route)

    async def _warm_csrf(self, force_refresh: bool) -> None:
        epoch = self._epoch
        token = await self._csrf.get_token(force_refresh=force_refresh)
        if epoch != self._epoch:
            return
        if token:
            self._csrf_initialized = True
        else:
            logger.warning("CSRF warm-up failed, next protected call will fetch lazily")

    async def _become_unauthenticated(self) -> None:
        if self._state.status == AuthStatus.UNAUTHENTICATED:
            return
        self._csrf.clear_token()
        self._csrf_initialized = False
        self._epoch += 1
        await self._set_state(AuthState.unauthenticated())

    async def _set_state(self, state: AuthState) -> None:
        if state == self._state:
            return
        logger.debug(f"Auth state {self._state.status.value} -> {state.status.value}")
        self._state = state
        for listener in list(self._listeners):
            try:
                await listener(state)
            except Exception:
                logger.exception("Auth state listener failed")
