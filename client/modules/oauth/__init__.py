"""
OAuth module.

Processes provider callback navigations (Battle.net account linking,
Google sign-in) exactly once each, and wraps the Battle.net linking
endpoints.

Public API:
- BattleNetCallbackReconciler: One-shot Battle.net callback processor
- GoogleCallbackHandler: One-shot Google sign-in callback processor
- IBattleNetLinkService, BattleNetLinkService: Link, status, unlink
- IOnboardingPrompt: Host hook for the manual-link prompt
- CallbackParams, CallbackFlowState, CallbackStage: Flow models
- BattleNetError, BattleNetErrorCode: Link service failures
"""

from .interfaces import IBattleNetLinkService, IOnboardingPrompt
from .models import (
    BattleNetErrorCode,
    CallbackFlowState,
    CallbackParams,
    CallbackStage,
    GoogleCallbackOutcome,
    LinkExchangeResponse,
    LinkStatus,
    LinkUrlResponse,
)
from .exceptions import BattleNetError
from .service import (
    LINK_INVALIDATED_KEYS,
    BattleNetCallbackReconciler,
    BattleNetLinkService,
)
from .google import GoogleCallbackHandler

__all__ = [
    # Interfaces
    "IBattleNetLinkService",
    "IOnboardingPrompt",
    # Implementations
    "BattleNetCallbackReconciler",
    "BattleNetLinkService",
    "GoogleCallbackHandler",
    "LINK_INVALIDATED_KEYS",
    # Models
    "BattleNetErrorCode",
    "CallbackFlowState",
    "CallbackParams",
    "CallbackStage",
    "GoogleCallbackOutcome",
    "LinkExchangeResponse",
    "LinkStatus",
    "LinkUrlResponse",
    # Exceptions
    "BattleNetError",
]
