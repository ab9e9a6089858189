"""
Composition root for one browser session.

SessionContainer builds the session-scoped objects once at bootstrap and
hands the same instances to everything that needs them: one httpx client
(one cookie jar), one CSRF token cache, one API client and one auth
session. Hosts create a container per session and close it on exit;
there is no module-level instance.

Callback reconcilers are per navigation, so the container only provides
factories for them.
"""

import logging
from typing import Optional

import httpx

from shared.config import Settings, get_settings
from shared.http import ApiClient, create_http_client
from shared.navigation import INavigator
from shared.query_cache import AUTH_KEY, QueryCache

from modules.auth import AuthSession
from modules.characters import CharacterSyncService, ICharacterSync
from modules.csrf import CSRFTokenCache
from modules.oauth import (
    BattleNetCallbackReconciler,
    BattleNetLinkService,
    GoogleCallbackHandler,
    IBattleNetLinkService,
    IOnboardingPrompt,
)

logger = logging.getLogger(__name__)


class SessionContainer:
    """
    Container for the session's service instances.

    The transport, token cache and auth session are created eagerly so the
    session is registered as the 401 handler before any request goes out.
    Other services are created lazily on first access.
    """

    def __init__(
        self,
        navigator: INavigator,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        onboarding: Optional[IOnboardingPrompt] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.navigator = navigator
        self.onboarding = onboarding

        self._owns_http = http_client is None
        self.http = http_client or create_http_client(self.settings)

        self.csrf = CSRFTokenCache(settings=self.settings, http_client=self.http)
        self.api = ApiClient(self.csrf, settings=self.settings, http_client=self.http)
        self.queries = QueryCache()
        self.session = AuthSession(
            self.api,
            self.csrf,
            self.navigator,
            settings=self.settings,
        )
        # Linking an account invalidates "auth"; consumers re-check the session
        self.queries.subscribe(AUTH_KEY, self._recheck_session)

        self._character_sync: Optional[ICharacterSync] = None
        self._battle_net: Optional[IBattleNetLinkService] = None

    @property
    def character_sync(self) -> ICharacterSync:
        """Get the character sync service instance."""
        if self._character_sync is None:
            self._character_sync = CharacterSyncService(
                self.api, self.queries, settings=self.settings
            )
        return self._character_sync

    @property
    def battle_net(self) -> IBattleNetLinkService:
        """Get the Battle.net link service instance."""
        if self._battle_net is None:
            self._battle_net = BattleNetLinkService(self.api, self.queries)
        return self._battle_net

    def battle_net_callback(self) -> BattleNetCallbackReconciler:
        """Create the reconciler for a new Battle.net callback navigation."""
        return BattleNetCallbackReconciler(
            self.api,
            self.queries,
            self.character_sync,
            self.navigator,
            onboarding=self.onboarding,
            settings=self.settings,
        )

    def google_callback(self) -> GoogleCallbackHandler:
        """Create the handler for a new Google sign-in callback navigation."""
        return GoogleCallbackHandler(self.session, self.navigator, settings=self.settings)

    async def aclose(self) -> None:
        """Wait for background work and close the HTTP client if we created it."""
        await self.session.drain()
        if self._owns_http:
            await self.http.aclose()
        logger.debug("Session container closed")

    async def __aenter__(self) -> "SessionContainer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _recheck_session(self, key: str) -> None:
        if self.session.state.is_authenticated:
            await self.session.check_auth()
