"""
Character sync service.

Triggers the backend's sync-and-enrich pipeline for the linked Battle.net
account and drops the cached character list so the host refetches it.
"""

import logging
import re
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from shared.config import Settings, get_settings
from shared.exceptions import ApiError, RaidwatchError
from shared.http import ApiClient
from shared.query_cache import CHARACTERS_KEY, QueryCache

from .exceptions import CharacterSyncError
from .interfaces import ICharacterSync
from .models import CharacterErrorCode, SyncAndEnrichResult

logger = logging.getLogger(__name__)

_WAIT_PATTERN = re.compile(r"(\d+)\s*(s|sec|secs|second|seconds|m|min|mins|minute|minutes)\b", re.I)


def extract_wait_time(message: str) -> Optional[int]:
    """Read a retry delay in seconds out of a rate-limit message."""
    match = _WAIT_PATTERN.search(message or "")
    if not match:
        return None
    amount = int(match.group(1))
    if match.group(2).lower().startswith("m"):
        return amount * 60
    return amount


def _to_sync_error(error: RaidwatchError) -> CharacterSyncError:
    if not isinstance(error, ApiError):
        return CharacterSyncError(
            CharacterErrorCode.NETWORK_ERROR,
            "Failed to sync and enrich characters",
        )

    status = error.status_code
    if status == 401:
        return CharacterSyncError(
            CharacterErrorCode.UNAUTHORIZED,
            "Authentication required. Please link your Battle.net account.",
        )
    if status == 403:
        return CharacterSyncError(
            CharacterErrorCode.FORBIDDEN,
            "Access denied. Character may not belong to this user.",
        )
    if status == 404:
        return CharacterSyncError(CharacterErrorCode.NOT_FOUND, "Character not found.")
    if status == 429:
        message = error.server_message or "Rate limit exceeded. Please try again later."
        return CharacterSyncError(
            CharacterErrorCode.RATE_LIMIT,
            message,
            wait_time=extract_wait_time(message),
        )
    if status >= 500:
        return CharacterSyncError(
            CharacterErrorCode.SERVER_ERROR,
            "A server error occurred. Please try again later.",
        )
    return CharacterSyncError(
        CharacterErrorCode.NETWORK_ERROR,
        error.server_message or "Failed to sync and enrich characters",
    )


class CharacterSyncService(ICharacterSync):
    """Backend-backed implementation of ICharacterSync."""

    def __init__(
        self,
        api: ApiClient,
        query_cache: QueryCache,
        settings: Optional[Settings] = None,
    ):
        self._api = api
        self._cache = query_cache
        self._settings = settings or get_settings()

    async def sync_and_enrich(self, region: Optional[str] = None) -> SyncAndEnrichResult:
        region = region or self._settings.default_region
        logger.info(f"Starting character sync-and-enrich for region {region}")

        try:
            data = await self._api.request_json(
                "POST",
                "/characters/sync-and-enrich",
                headers={"Region": region},
                notify_unauthorized=False,
            )
            result = SyncAndEnrichResult.model_validate(data)
        except RaidwatchError as e:
            error = _to_sync_error(e)
            logger.warning(f"Character sync failed: {error.code}")
            raise error from e
        except ModelValidationError as e:
            raise CharacterSyncError(
                CharacterErrorCode.SERVER_ERROR,
                "Unexpected response from the character sync",
            ) from e

        stats = result.result
        logger.info(
            f"Character sync done: {stats.synced_count} synced, "
            f"{stats.enriched_count} enriched, {len(stats.errors)} errors"
        )
        await self._cache.invalidate(CHARACTERS_KEY)
        return result
