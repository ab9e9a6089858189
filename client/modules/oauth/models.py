"""
OAuth module data models.

Callback parameters as read from the redirect URL, the per-navigation flow
state of the Battle.net reconciler, and the bodies of the Battle.net
linking endpoints.
"""

from enum import Enum
from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from modules.errors import ErrorCode


_TRUE_VALUES = {"1", "true", "yes"}


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


class CallbackParams(BaseModel):
    """
    Query parameters of a provider callback navigation.

    Empty strings count as missing.
    """

    code: Optional[str] = None
    state: Optional[str] = None
    auto_relink: bool = Field(False, description="Flow was started by the app itself")
    new_user: bool = Field(False, description="Backend created the account on this sign-in")
    error: Optional[str] = Field(None, description="Error code (provider or backend)")
    error_description: Optional[str] = None
    message: Optional[str] = Field(None, description="Backend error message")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "CallbackParams":
        return cls(
            code=query.get("code") or None,
            state=query.get("state") or None,
            auto_relink=_flag(query.get("auto_relink")),
            new_user=_flag(query.get("new_user")),
            error=query.get("error") or None,
            error_description=query.get("error_description") or None,
            message=query.get("message") or None,
        )

    @classmethod
    def from_url(cls, url: str) -> "CallbackParams":
        return cls.from_query(dict(parse_qsl(urlsplit(url).query)))

    @property
    def has_exchange_params(self) -> bool:
        return bool(self.code and self.state)


class CallbackStage(str, Enum):
    """Stages of one Battle.net callback navigation."""

    PENDING = "pending"
    EXCHANGING = "exchanging"
    INVALIDATING = "invalidating"
    SYNCING = "syncing"
    REDIRECTING = "redirecting"
    ONBOARDING = "onboarding"
    DONE = "done"
    FAILED = "failed"


class CallbackFlowState(BaseModel):
    """Mutable record of one callback navigation, discarded with it."""

    processed_guard: bool = False
    is_auto_relink: bool = False
    link_success: bool = False
    auto_sync_triggered: bool = False
    stage: CallbackStage = CallbackStage.PENDING
    battle_tag: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    redirect_url: Optional[str] = None


class LinkExchangeResponse(BaseModel):
    """Response from GET /auth/battle-net/callback."""

    linked: bool = False
    battle_tag: Optional[str] = Field(None, alias="battleTag")
    auto_relink: bool = False
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LinkUrlResponse(BaseModel):
    """Response from GET /auth/battle-net/link."""

    url: str


class LinkStatus(BaseModel):
    """Response from GET /auth/battle-net/status."""

    linked: bool = False
    battle_tag: Optional[str] = Field(None, alias="battleTag")
    error: Optional[str] = None
    code: Optional[str] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BattleNetErrorCode(str, Enum):
    """Error codes raised by the Battle.net link service."""

    ALREADY_LINKED = "battle_net_already_linked"
    LINK_FAILED = "battle_net_link_failed"
    UNLINK_FAILED = "battle_net_unlink_failed"
    NETWORK_ERROR = "battle_net_network_error"
    UNAUTHORIZED = "battle_net_unauthorized"
    CALLBACK_FAILED = "battle_net_callback_failed"
    INVALID_STATE = "battle_net_invalid_state"


class GoogleCallbackOutcome(BaseModel):
    """Result of a Google sign-in callback navigation."""

    success: bool
    redirect_url: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    message: Optional[str] = None
