"""
Pydantic Schemas for API Request/Response Models

Sync summaries and progress snapshots are served from the models package;
these schemas cover the remaining endpoints.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"
    progress_backend: str = "memory"
    timestamp: datetime


class CancelResponse(BaseModel):
    """Result of a cancellation request."""
    success: bool
    jurisdiction: str
    message: str


class PublishResponse(BaseModel):
    """Acknowledgement of a published progress snapshot."""
    success: bool = True


class SyncRunSummary(BaseModel):
    """One row of the sync run log."""
    id: int
    jurisdiction: str
    status: str
    records_total: int
    records_imported: int
    records_failed: int
    error_message: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DataSourceStatus(BaseModel):
    """Data source description with its current table footprint."""
    id: str
    name: str
    jurisdiction: str
    type: str = Field(..., description="live or placeholder")
    url: Optional[str] = None
    description: str = ""
    batch_size: int
    expected_records: Optional[int] = None
    tenement_count: int = 0
    sync_status: str = "idle"
    last_sync: Optional[SyncRunSummary] = None


class DataSourceList(BaseModel):
    """Response of the data sources endpoint."""
    sources: List[DataSourceStatus]
    total_tenements: int
