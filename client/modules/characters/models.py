"""
Character module data models.

Only the sync-and-enrich trigger lives here; reading and displaying
characters belongs to the host.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CharacterErrorCode(str, Enum):
    """Error codes for character sync failures."""

    RATE_LIMIT = "RATE_LIMIT"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"


class SyncStats(BaseModel):
    """Counters reported by a sync-and-enrich run."""

    synced_count: int = Field(0, ge=0, description="Characters imported from Battle.net")
    enriched_count: int = Field(0, ge=0, description="Characters enriched with game data")
    updated_count: int = Field(0, ge=0, description="Existing characters updated")
    errors: list[str] = Field(default_factory=list, description="Per-character failures")

    model_config = ConfigDict(extra="ignore")


class SyncAndEnrichResult(BaseModel):
    """Response from POST /characters/sync-and-enrich."""

    message: Optional[str] = None
    result: SyncStats = Field(default_factory=SyncStats)

    model_config = ConfigDict(extra="ignore")

    @property
    def has_errors(self) -> bool:
        return bool(self.result.errors)
