"""
Sync Exceptions

Error taxonomy for the tenement sync pipeline.

Transient batch failures are never raised; they are collected in the run's
error list. Only run-level conditions surface as exceptions, and the
orchestrator converts those into an ``error`` terminal state.
"""
from typing import Optional


class TenementSyncError(Exception):
    """Base class for all sync pipeline errors."""


class UnknownJurisdictionError(TenementSyncError):
    """Raised when a jurisdiction code is not one of the six supported codes."""

    def __init__(self, jurisdiction: str):
        self.jurisdiction = jurisdiction
        super().__init__(f"Unknown jurisdiction: {jurisdiction}")


class RunLevelError(TenementSyncError):
    """A condition that stops the current run early."""


class SourceUnavailableError(RunLevelError):
    """The external source could not be queried after all retry attempts."""

    def __init__(self, message: str, url: Optional[str] = None, attempts: int = 0):
        self.url = url
        self.attempts = attempts
        super().__init__(message)


class EmptySourceError(RunLevelError):
    """The source returned no data although records were expected."""


class SyncCancelledError(TenementSyncError):
    """Raised at a suspension point once the run's cancellation token is set."""


class SyncInProgressError(TenementSyncError):
    """A run for this jurisdiction is already active."""

    def __init__(self, jurisdiction: str):
        self.jurisdiction = jurisdiction
        super().__init__(f"A sync for {jurisdiction} is already in progress")
