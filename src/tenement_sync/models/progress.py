"""
Sync Progress and Result Models

Pydantic models for progress snapshots and run summaries. Field aliases keep
the camelCase JSON shape that existing frontend pollers read.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SyncStatus(str, Enum):
    """
    Run status for a jurisdiction.

    Valid transitions within one run:
        idle -> syncing -> completed
                        -> error
    """

    IDLE = "idle"
    SYNCING = "syncing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncStatus.COMPLETED, SyncStatus.ERROR)

    def can_transition_to(self, target: "SyncStatus") -> bool:
        """Check a within-run transition. A terminal state only restarts via a new run."""
        if self == target:
            return self == SyncStatus.SYNCING
        if self == SyncStatus.SYNCING:
            return target.is_terminal
        return target == SyncStatus.SYNCING


def utc_timestamp() -> str:
    """ISO8601 timestamp used in summaries."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SyncProgress(BaseModel):
    """
    Latest progress snapshot for one jurisdiction.

    Attributes:
        status: Current run status
        progress: Percentage complete (0-100)
        current_record: Records processed so far in this run
        total_records: Records expected in this run
        message: Human readable status line
        start_time: Run start as epoch milliseconds (0 when never started)
        estimated_time_remaining: Milliseconds remaining, derived on read
    """

    status: SyncStatus = Field(SyncStatus.IDLE, description="Run status")
    progress: float = Field(0, ge=0, le=100, description="Percent complete")
    current_record: int = Field(0, ge=0, alias="currentRecord")
    total_records: int = Field(0, ge=0, alias="totalRecords")
    message: str = Field("Ready to sync", description="Status message")
    start_time: float = Field(0, ge=0, alias="startTime")
    estimated_time_remaining: Optional[float] = Field(None, alias="estimatedTimeRemaining")

    @classmethod
    def idle(cls) -> "SyncProgress":
        """Snapshot reported for a jurisdiction that has never synced."""
        return cls()

    def to_payload(self) -> dict:
        """JSON body served to pollers."""
        payload = self.model_dump(mode="json", by_alias=True)
        if payload["estimatedTimeRemaining"] is None:
            del payload["estimatedTimeRemaining"]
        return payload

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class SyncResult(BaseModel):
    """Summary returned by a single-jurisdiction sync."""

    success: bool
    imported: int = 0
    errors: List[str] = Field(default_factory=list)
    jurisdiction: str
    timestamp: str = Field(default_factory=utc_timestamp)
    message: str = ""

    @classmethod
    def failed(cls, jurisdiction: str, error: str, message: Optional[str] = None) -> "SyncResult":
        return cls(
            success=False,
            imported=0,
            errors=[error],
            jurisdiction=jurisdiction,
            message=message or f"Failed to sync {jurisdiction} data",
        )


class FullSyncResult(BaseModel):
    """Aggregate summary of a sync across all jurisdictions."""

    success: bool = True
    total_imported: int = Field(0, alias="totalImported")
    successful_syncs: int = Field(0, alias="successfulSyncs")
    total_jurisdictions: int = Field(0, alias="totalJurisdictions")
    results: List[SyncResult] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_timestamp)
    message: str = ""

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True
