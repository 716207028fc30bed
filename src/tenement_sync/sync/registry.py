"""
Sync Service

Owns the progress store and one orchestrator per jurisdiction, and is the
single entry point used by the API, the CLI and the scheduler.
"""
from typing import Any, Dict, List, Optional

from config.settings import Settings, settings as default_settings
from src.tenement_sync.db.repository import SyncRunRepository, TenementRepository
from src.tenement_sync.db.session import get_db_session
from src.tenement_sync.etl.upserter import BatchUpserter
from src.tenement_sync.exceptions import UnknownJurisdictionError
from src.tenement_sync.models.progress import FullSyncResult, SyncProgress, SyncResult
from src.tenement_sync.models.tenement import ALL_JURISDICTIONS, Jurisdiction
from src.tenement_sync.sources import build_default_sources
from src.tenement_sync.sources.base import DataSource, DataSourceInfo
from src.tenement_sync.sync.cancellation import CancellationToken
from src.tenement_sync.sync.coordinator import FullSyncCoordinator, LocalSyncTrigger
from src.tenement_sync.sync.orchestrator import SyncOrchestrator
from src.tenement_sync.sync.progress_store import ProgressStore, create_progress_store
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)


class SyncService:
    """
    Per-process registry of orchestrators.

    Args:
        sources: DataSource per jurisdiction
        upserter: Shared BatchUpserter
        progress_store: Shared ProgressStore
        run_repository: SyncRunRepository for the run log (optional)
        jurisdiction_delay: Pause between jurisdictions in a full sync
    """

    def __init__(
        self,
        sources: Dict[Jurisdiction, DataSource],
        upserter: BatchUpserter,
        progress_store: ProgressStore,
        run_repository: Optional[SyncRunRepository] = None,
        jurisdiction_delay: float = 0,
    ):
        self.sources = sources
        self.upserter = upserter
        self.progress_store = progress_store
        self.run_repository = run_repository
        self.jurisdiction_delay = jurisdiction_delay
        self.orchestrators: Dict[Jurisdiction, SyncOrchestrator] = {
            jurisdiction: SyncOrchestrator(
                source,
                upserter,
                progress_store,
                run_repository=run_repository,
            )
            for jurisdiction, source in sources.items()
        }
        self._full_sync_token: Optional[CancellationToken] = None

    def orchestrator(self, jurisdiction: Any) -> SyncOrchestrator:
        """
        Raises:
            UnknownJurisdictionError: if the code is unsupported or has no source
        """
        code = Jurisdiction.parse(jurisdiction)
        if code not in self.orchestrators:
            raise UnknownJurisdictionError(code.value)
        return self.orchestrators[code]

    def sync(self, jurisdiction: Any, cancel_token: Optional[CancellationToken] = None) -> SyncResult:
        """
        Run one jurisdiction's sync in the calling thread.

        Raises:
            UnknownJurisdictionError: unsupported code
            SyncInProgressError: the jurisdiction is already syncing
        """
        return self.orchestrator(jurisdiction).run(cancel_token=cancel_token)

    def sync_all(self, cancel_token: Optional[CancellationToken] = None) -> FullSyncResult:
        """Run every configured jurisdiction in order."""
        token = cancel_token or CancellationToken()
        self._full_sync_token = token
        try:
            jurisdictions = [j for j in ALL_JURISDICTIONS if j in self.orchestrators]
            coordinator = FullSyncCoordinator(
                LocalSyncTrigger(self),
                jurisdictions=jurisdictions,
                delay_seconds=self.jurisdiction_delay,
            )
            return coordinator.run(cancel_token=token)
        finally:
            self._full_sync_token = None

    def cancel(self, jurisdiction: Any, reason: str = "Sync cancelled") -> bool:
        """
        Signal the jurisdiction's active run to stop.

        Returns:
            True if a run was active
        """
        return self.orchestrator(jurisdiction).cancel(reason)

    def cancel_all(self, reason: str = "Sync cancelled") -> bool:
        """Stop a running full sync and every active jurisdiction run."""
        cancelled = False
        if self._full_sync_token is not None:
            self._full_sync_token.cancel(reason)
            cancelled = True
        for orchestrator in self.orchestrators.values():
            cancelled = orchestrator.cancel(reason) or cancelled
        return cancelled

    def progress(self, jurisdiction: Any) -> SyncProgress:
        return self.progress_store.get(jurisdiction)

    def publish_progress(self, jurisdiction: Any, payload: Dict[str, Any]) -> SyncProgress:
        return self.progress_store.publish(jurisdiction, payload)

    def describe_sources(self) -> List[DataSourceInfo]:
        return [self.sources[j].describe() for j in ALL_JURISDICTIONS if j in self.sources]


def build_sync_service(
    settings: Optional[Settings] = None,
    progress_store: Optional[ProgressStore] = None,
    session_factory=None,
) -> SyncService:
    """
    Wire the default service from settings.

    Args:
        settings: Settings instance (defaults to the module singleton)
        progress_store: Override the configured progress store
        session_factory: Session context manager factory (defaults to get_db_session)

    Returns:
        SyncService
    """
    settings = settings or default_settings
    upserter = BatchUpserter(
        session_factory=session_factory or get_db_session,
        repository=TenementRepository(),
        batch_size=settings.wa_batch_size,
        batch_delay=settings.batch_delay_seconds,
    )
    service = SyncService(
        sources=build_default_sources(settings),
        upserter=upserter,
        progress_store=progress_store or create_progress_store(settings),
        run_repository=SyncRunRepository(),
        jurisdiction_delay=settings.jurisdiction_delay_seconds,
    )
    logger.info("sync_service_built", jurisdictions=[j.value for j in service.sources])
    return service
