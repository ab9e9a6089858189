"""
Character module interface.

The Battle.net callback reconciler depends on ICharacterSync so tests can
observe the sync trigger without a backend.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import SyncAndEnrichResult


@runtime_checkable
class ICharacterSync(Protocol):
    """Interface for the character sync trigger."""

    async def sync_and_enrich(self, region: Optional[str] = None) -> SyncAndEnrichResult:
        """
        Import every character of the linked Battle.net account and enrich it.

        Args:
            region: Battle.net region (eu, us, kr, tw). Defaults to the
                    configured region.

        Returns:
            Sync counters and per-character errors

        Raises:
            CharacterSyncError: If the backend rejected or failed the sync
        """
        ...
