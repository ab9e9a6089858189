"""
Battle.net account linking.

BattleNetCallbackReconciler processes one return trip from the Battle.net
consent screen. It exchanges the callback code at most once, however many
times the host re-evaluates the callback page, and then runs explicit
awaited stages:

    invalidate_caches -> trigger_sync -> redirect      (auto re-link)
    invalidate_caches -> show_onboarding               (manual link)

Every failure ends in a redirect to the profile page carrying an error
code; nothing is raised to the host.

BattleNetLinkService wraps the other linking endpoints for hosts.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError as ModelValidationError

from shared.config import Settings, get_settings
from shared.exceptions import ApiError, RaidwatchError
from shared.http import ApiClient
from shared.navigation import INavigator, build_url
from shared.query_cache import (
    AUTH_KEY,
    BATTLE_NET_LINK_STATUS_KEY,
    CHARACTERS_KEY,
    USER_PROFILE_KEY,
    QueryCache,
)

from modules.characters import ICharacterSync
from modules.errors import ErrorCode, classify_exception, map_backend_error

from .exceptions import BattleNetError
from .interfaces import IBattleNetLinkService, IOnboardingPrompt
from .models import (
    BattleNetErrorCode,
    CallbackFlowState,
    CallbackParams,
    CallbackStage,
    LinkExchangeResponse,
    LinkStatus,
    LinkUrlResponse,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Queries whose data changes when an account is linked
LINK_INVALIDATED_KEYS = (
    CHARACTERS_KEY,
    USER_PROFILE_KEY,
    BATTLE_NET_LINK_STATUS_KEY,
    AUTH_KEY,
)


class BattleNetCallbackReconciler:
    """
    One-shot processor for a Battle.net callback navigation.

    Create one instance per navigation; the processed guard is never shared
    between navigations. Call detach() when the host leaves the page:
    work still in flight then finishes without redirecting, prompting or
    starting a sync.
    """

    def __init__(
        self,
        api: ApiClient,
        query_cache: QueryCache,
        character_sync: ICharacterSync,
        navigator: INavigator,
        onboarding: Optional[IOnboardingPrompt] = None,
        settings: Optional[Settings] = None,
        sleep: Optional[Sleep] = None,
    ):
        self._api = api
        self._cache = query_cache
        self._sync = character_sync
        self._navigator = navigator
        self._onboarding = onboarding
        self._settings = settings or get_settings()
        self._sleep = sleep or asyncio.sleep

        self._flow = CallbackFlowState()
        self._detached = False
        self._sync_task: Optional[asyncio.Task] = None

    @property
    def flow(self) -> CallbackFlowState:
        return self._flow

    @property
    def detached(self) -> bool:
        return self._detached

    def detach(self) -> None:
        """Mark the navigation as gone. Safe to call at any time."""
        if not self._detached:
            logger.debug("Battle.net callback detached")
        self._detached = True

    async def wait_for_sync(self) -> None:
        """Wait for a triggered character sync to finish."""
        if self._sync_task is not None:
            await asyncio.gather(self._sync_task, return_exceptions=True)

    async def handle(self, params: CallbackParams) -> CallbackFlowState:
        """
        Process the callback.

        Re-evaluations after the first call return the flow state untouched
        and make no network call.
        """
        # No await between the check and the set
        if self._flow.processed_guard:
            logger.debug("Battle.net callback already processed, ignoring")
            return self._flow
        self._flow.processed_guard = True
        self._flow.is_auto_relink = params.auto_relink

        if not params.has_exchange_params:
            logger.warning("Battle.net callback is missing code or state")
            self._fail(ErrorCode.MISSING_PARAMS)
            return self._flow

        try:
            response = await self._exchange(params)
        except (RaidwatchError, ValueError) as e:
            failure = classify_exception(e, fallback=ErrorCode.UNKNOWN)
            logger.warning(f"Battle.net code exchange failed: {failure.code.value}")
            self._fail(failure.code)
            return self._flow
        except Exception:
            logger.exception("Unexpected error during Battle.net code exchange")
            self._fail(ErrorCode.UNKNOWN)
            return self._flow

        if not response.linked:
            if response.code:
                code = map_backend_error(response.code, fallback=ErrorCode.UNKNOWN)
            else:
                code = ErrorCode.LINK_FAILED
            logger.warning(f"Battle.net link refused: {code.value}")
            self._fail(code)
            return self._flow

        self._flow.link_success = True
        self._flow.battle_tag = response.battle_tag
        # Either source is enough to switch to auto re-link
        self._flow.is_auto_relink = params.auto_relink or response.auto_relink
        logger.info(
            f"Battle.net account linked (auto_relink={self._flow.is_auto_relink})"
        )

        await self._invalidate_caches()
        if self._flow.is_auto_relink:
            await self._trigger_sync()
            await self._redirect_to_characters()
        else:
            await self._show_onboarding()
        return self._flow

    async def _exchange(self, params: CallbackParams) -> LinkExchangeResponse:
        self._flow.stage = CallbackStage.EXCHANGING
        data = await self._api.request_json(
            "GET",
            "/auth/battle-net/callback",
            params={"code": params.code, "state": params.state},
            skip_csrf=True,
            notify_unauthorized=False,
        )
        return LinkExchangeResponse.model_validate(data)

    async def _invalidate_caches(self) -> None:
        self._flow.stage = CallbackStage.INVALIDATING
        await self._cache.invalidate(*LINK_INVALIDATED_KEYS)

    async def _trigger_sync(self) -> None:
        await self._sleep(self._settings.relink_sync_delay)
        if self._detached:
            self._finish_detached()
            return

        self._flow.stage = CallbackStage.SYNCING
        issued = asyncio.Event()
        self._sync_task = asyncio.ensure_future(self._run_sync(issued))
        # The redirect never precedes the sync request
        await issued.wait()

    async def _run_sync(self, issued: asyncio.Event) -> None:
        self._flow.auto_sync_triggered = True
        issued.set()
        try:
            await self._sync.sync_and_enrich(self._settings.default_region)
        except RaidwatchError as e:
            # The characters page reflects the sync state
            logger.warning(f"Automatic character sync failed: {e}")

    async def _redirect_to_characters(self) -> None:
        if not self._flow.auto_sync_triggered:
            return
        await self._sleep(self._settings.relink_redirect_delay)
        self._flow.stage = CallbackStage.REDIRECTING
        self._redirect(
            build_url(
                self._settings.profile_route,
                {"tab": "characters", "success": "auto_sync"},
            )
        )
        if not self._detached:
            self._flow.stage = CallbackStage.DONE

    async def _show_onboarding(self) -> None:
        await self._sleep(self._settings.onboarding_delay)
        if self._detached:
            self._finish_detached()
            return

        self._flow.stage = CallbackStage.ONBOARDING
        if self._onboarding is not None:
            self._onboarding.show(self._flow.battle_tag)
        else:
            logger.debug("No onboarding prompt registered")

    def _fail(self, code: ErrorCode) -> None:
        self._flow.error_code = code
        self._flow.stage = CallbackStage.FAILED
        self._redirect(build_url(self._settings.profile_route, {"error": code.value}))

    def _redirect(self, url: str) -> None:
        if self._detached:
            logger.debug(f"Battle.net callback detached, dropping redirect to {url}")
            return
        self._flow.redirect_url = url
        self._navigator.push(url)

    def _finish_detached(self) -> None:
        logger.debug("Battle.net callback detached, skipping remaining stages")
        self._flow.stage = CallbackStage.DONE


def _link_error_code(code: Optional[str], fallback: BattleNetErrorCode) -> BattleNetErrorCode:
    try:
        return BattleNetErrorCode(code)
    except ValueError:
        return fallback


class BattleNetLinkService(IBattleNetLinkService):
    """Backend-backed implementation of IBattleNetLinkService."""

    def __init__(self, api: ApiClient, query_cache: QueryCache):
        self._api = api
        self._cache = query_cache

    async def initiate_linking(self, auto_relink: bool = False) -> str:
        params = {"auto_relink": "true"} if auto_relink else None
        try:
            data = await self._api.request_json(
                "GET", "/auth/battle-net/link", params=params, skip_csrf=True
            )
            response = LinkUrlResponse.model_validate(data)
        except ApiError as e:
            raise BattleNetError(
                _link_error_code(e.backend_code, BattleNetErrorCode.LINK_FAILED),
                e.server_message or "Failed to initiate Battle.net linking",
                details={"status_code": e.status_code},
            ) from e
        except (RaidwatchError, ModelValidationError) as e:
            raise BattleNetError(
                BattleNetErrorCode.NETWORK_ERROR,
                "Network error during Battle.net linking",
            ) from e

        logger.info(f"Battle.net linking started (auto_relink={auto_relink})")
        return response.url

    async def get_link_status(self) -> LinkStatus:
        try:
            data = await self._api.request_json("GET", "/auth/battle-net/status")
            return LinkStatus.model_validate(data)
        except ApiError as e:
            if e.status_code == 401:
                raise BattleNetError(
                    BattleNetErrorCode.UNAUTHORIZED, "Unauthorized access"
                ) from e
            raise BattleNetError(
                BattleNetErrorCode.NETWORK_ERROR,
                e.server_message or "Failed to get Battle.net status",
                details={"status_code": e.status_code},
            ) from e
        except (RaidwatchError, ModelValidationError) as e:
            raise BattleNetError(
                BattleNetErrorCode.NETWORK_ERROR,
                "Network error while getting status",
            ) from e

    async def unlink_account(self) -> None:
        try:
            await self._api.request("POST", "/auth/battle-net/unlink")
        except ApiError as e:
            raise BattleNetError(
                BattleNetErrorCode.UNLINK_FAILED,
                e.server_message or "Failed to unlink Battle.net account",
                details={"status_code": e.status_code},
            ) from e
        except RaidwatchError as e:
            raise BattleNetError(
                BattleNetErrorCode.NETWORK_ERROR,
                "Network error while unlinking account",
            ) from e

        logger.info("Battle.net account unlinked")
        await self._cache.invalidate(BATTLE_NET_LINK_STATUS_KEY, CHARACTERS_KEY, USER_PROFILE_KEY)
