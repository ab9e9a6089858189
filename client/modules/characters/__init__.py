"""
Characters module.

Triggers the sync-and-enrich pipeline after a Battle.net link.

Public API:
- ICharacterSync: Interface for the sync trigger
- CharacterSyncService: Backend-backed implementation
- SyncAndEnrichResult, SyncStats: Sync outcome
- CharacterSyncError, CharacterErrorCode: Failures
"""

from .interfaces import ICharacterSync
from .models import CharacterErrorCode, SyncAndEnrichResult, SyncStats
from .exceptions import CharacterSyncError
from .service import CharacterSyncService, extract_wait_time

__all__ = [
    # Interface
    "ICharacterSync",
    # Implementation
    "CharacterSyncService",
    "extract_wait_time",
    # Models
    "CharacterErrorCode",
    "SyncAndEnrichResult",
    "SyncStats",
    # Exceptions
    "CharacterSyncError",
]
