"""
Full-Sync Coordinator

Runs every jurisdiction in a fixed order, one at a time. A jurisdiction that
fails, or whose trigger raises, becomes a failed entry in the aggregate and
the remaining jurisdictions still run.
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

import requests

from config.settings import settings
from src.tenement_sync.exceptions import SyncCancelledError
from src.tenement_sync.models.progress import FullSyncResult, SyncResult
from src.tenement_sync.models.tenement import ALL_JURISDICTIONS, Jurisdiction
from src.tenement_sync.sync.cancellation import CancellationToken, checkpoint, pause
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)


class SyncTrigger(ABC):
    """Starts one jurisdiction's sync and waits for its summary."""

    @abstractmethod
    def trigger(self, jurisdiction: Jurisdiction) -> SyncResult:
        """Run the jurisdiction's sync to completion."""


class LocalSyncTrigger(SyncTrigger):
    """Runs the sync in this process through a SyncService."""

    def __init__(self, service):
        self.service = service

    def trigger(self, jurisdiction: Jurisdiction) -> SyncResult:
        return self.service.sync(jurisdiction)


class HttpSyncTrigger(SyncTrigger):
    """
    Runs the sync by calling ``POST {base_url}/sync/{jurisdiction}``.

    A 500 response still carries the summary body, so it is returned as a
    failed result rather than raised.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.sync_api_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.sync_trigger_timeout_seconds

    def trigger(self, jurisdiction: Jurisdiction) -> SyncResult:
        url = f"{self.base_url}/sync/{jurisdiction.value}"
        response = self.session.post(
            url,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if response.status_code != 500:
            response.raise_for_status()
        return SyncResult.model_validate(response.json())


class FullSyncCoordinator:
    """
    Sequential sync of all jurisdictions.

    Args:
        trigger: How each jurisdiction's sync is started
        jurisdictions: Order to run in (WA, NSW, VIC, NT, QLD, TAS by default)
        delay_seconds: Pause between jurisdictions
        sleep: Sleep function used when no cancellation token is given
    """

    def __init__(
        self,
        trigger: SyncTrigger,
        jurisdictions: Optional[Sequence[Jurisdiction]] = None,
        delay_seconds: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.trigger = trigger
        self.jurisdictions = list(jurisdictions or ALL_JURISDICTIONS)
        self.delay_seconds = settings.jurisdiction_delay_seconds if delay_seconds is None else delay_seconds
        self.sleep = sleep

    def run(self, cancel_token: Optional[CancellationToken] = None) -> FullSyncResult:
        """
        Sync every jurisdiction in order.

        Returns:
            FullSyncResult aggregating every per-jurisdiction summary
        """
        logger.info("full_sync_started", jurisdictions=[j.value for j in self.jurisdictions])
        results: List[SyncResult] = []
        cancelled = False

        for index, jurisdiction in enumerate(self.jurisdictions):
            try:
                if index > 0:
                    pause(self.delay_seconds, cancel_token, self.sleep)
                checkpoint(cancel_token)
            except SyncCancelledError:
                cancelled = True
                break

            try:
                result = self.trigger.trigger(jurisdiction)
            except Exception as e:
                logger.error(
                    "full_sync_jurisdiction_failed",
                    jurisdiction=jurisdiction.value,
                    error=str(e),
                    error_type=type(e).__name__
                )
                result = SyncResult.failed(
                    jurisdiction.value,
                    str(e) or type(e).__name__,
                    message=f"Failed to sync {jurisdiction.value}",
                )
            else:
                logger.info(
                    "full_sync_jurisdiction_finished",
                    jurisdiction=jurisdiction.value,
                    success=result.success,
                    imported=result.imported
                )
            results.append(result)

        return summarize_results(results, len(self.jurisdictions), cancelled=cancelled)


def summarize_results(
    results: Sequence[SyncResult],
    total_jurisdictions: int,
    cancelled: bool = False,
) -> FullSyncResult:
    """
    Aggregate per-jurisdiction summaries into a FullSyncResult.

    Args:
        results: Summaries of the jurisdictions that ran
        total_jurisdictions: Jurisdictions the full sync was meant to cover
        cancelled: The full sync stopped before every jurisdiction ran

    Returns:
        FullSyncResult; ``success`` is True even when every jurisdiction failed
    """
    total_imported = sum(r.imported for r in results)
    successful_syncs = sum(1 for r in results if r.success)
    message = f"Full sync completed: {total_imported} tenements synced across {successful_syncs} jurisdictions"
    if cancelled:
        message = f"Full sync cancelled after {len(results)} of {total_jurisdictions} jurisdictions"

    logger.info(
        "full_sync_completed",
        total_imported=total_imported,
        successful_syncs=successful_syncs,
        total_jurisdictions=total_jurisdictions,
        cancelled=cancelled
    )

    return FullSyncResult(
        success=True,
        total_imported=total_imported,
        successful_syncs=successful_syncs,
        total_jurisdictions=total_jurisdictions,
        results=list(results),
        message=message,
    )
