"""
Sync Orchestrator

Drives one jurisdiction's run: count, fetch page by page, upsert each page
in batches and publish a progress snapshot after every unit of work.

Status moves idle -> syncing -> completed | error. ``currentRecord`` and
``progress`` never decrease within a run. Batch failures leave the run
``completed``; only run-level errors and cancellation end it in ``error``.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.tenement_sync.db.repository import SyncRunRepository
from src.tenement_sync.etl.normalizer import TenementNormalizer
from src.tenement_sync.etl.upserter import BatchUpserter
from src.tenement_sync.exceptions import RunLevelError, SyncCancelledError, SyncInProgressError
from src.tenement_sync.models.progress import SyncProgress, SyncResult, SyncStatus
from src.tenement_sync.sources.base import DataSource
from src.tenement_sync.sync.cancellation import CancellationToken
from src.tenement_sync.sync.progress_store import ProgressStore, now_ms
from src.tenement_sync.utils.logger import get_logger, log_context

logger = get_logger(__name__)


@dataclass
class _RunState:
    start_time: float
    started: float
    total: int = 0
    processed: int = 0
    imported: int = 0
    progress: float = 0.0
    next_batch: int = 1
    status: SyncStatus = SyncStatus.IDLE


class SyncOrchestrator:
    """
    Runs syncs for a single jurisdiction.

    Args:
        source: DataSource for the jurisdiction
        upserter: BatchUpserter writing the tenements table
        progress_store: Store receiving progress snapshots
        run_repository: Records a sync_runs row per run when given
        session_factory: Session context manager for run rows
            (defaults to the upserter's)
        clock: Monotonic seconds, used for the ETA
        wall_clock: Epoch milliseconds, used for startTime
    """

    def __init__(
        self,
        source: DataSource,
        upserter: BatchUpserter,
        progress_store: ProgressStore,
        run_repository: Optional[SyncRunRepository] = None,
        session_factory: Optional[Callable[[], ContextManager[Session]]] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = now_ms,
    ):
        self.source = source
        self.upserter = upserter
        self.progress_store = progress_store
        self.run_repository = run_repository
        self.session_factory = session_factory or upserter.session_factory
        self.clock = clock
        self.wall_clock = wall_clock

        self._guard = threading.Lock()
        self._cancel_token: Optional[CancellationToken] = None

    @property
    def jurisdiction(self) -> str:
        return self.source.jurisdiction.value

    @property
    def is_running(self) -> bool:
        return self._guard.locked()

    def cancel(self, reason: str = "Sync cancelled") -> bool:
        """
        Cancel the active run.

        Returns:
            True if a run was active and has been signalled
        """
        token = self._cancel_token
        if token is None or not self.is_running:
            return False
        token.cancel(reason)
        logger.info("sync_cancel_requested", jurisdiction=self.jurisdiction, reason=reason)
        return True

    def run(self, cancel_token: Optional[CancellationToken] = None) -> SyncResult:
        """
        Execute one sync run to completion.

        Args:
            cancel_token: Token checked at every suspension point

        Returns:
            SyncResult summary; ``success`` is False only for run-level
            errors and cancellation

        Raises:
            SyncInProgressError: if a run for this jurisdiction is active
        """
        if not self._guard.acquire(blocking=False):
            raise SyncInProgressError(self.jurisdiction)

        self._cancel_token = cancel_token or CancellationToken()
        try:
            with log_context(jurisdiction=self.jurisdiction):
                return self._run(self._cancel_token)
        finally:
            self._cancel_token = None
            self._guard.release()

    def _run(self, token: CancellationToken) -> SyncResult:
        state = _RunState(start_time=self.wall_clock(), started=self.clock())
        errors: List[str] = []
        run_id = self._start_run_record()
        log = logger.bind(run_id=run_id)

        self._publish(state, SyncStatus.SYNCING, f"Starting {self.jurisdiction} sync - getting record count")
        log.info("sync_started", source=self.source.kind)

        try:
            state.total = self.source.total_count(cancel_token=token)
            self._publish(state, SyncStatus.SYNCING, f"Found {state.total} records to sync")
            log.info("sync_total_counted", total=state.total)

            normalizer = TenementNormalizer()
            for page in self.source.iter_pages(state.total, cancel_token=token):
                errors.extend(page.errors)
                page_start = state.processed

                if page.records:
                    result = self.upserter.upsert(
                        page.records,
                        batch_size=self.source.batch_size,
                        on_batch=self._batch_progress(state, page_start),
                        cancel_token=token,
                        first_batch_number=state.next_batch,
                        normalizer=normalizer,
                    )
                    state.next_batch += result.batches
                    errors.extend(result.errors)

                state.processed = page_start + page.fetched
                self._publish(state, SyncStatus.SYNCING, f"Synced {state.processed}/{state.total} records")
                log.info(
                    "sync_page_processed",
                    processed=state.processed,
                    total=state.total,
                    imported=state.imported,
                    truncated=page.truncated
                )

        except SyncCancelledError as e:
            message = f"Sync cancelled: {e}"
            self._publish(state, SyncStatus.ERROR, message, final=True)
            self._complete_run_record(run_id, "cancelled", state, errors + [str(e)], str(e))
            log.warning("sync_cancelled", processed=state.processed, imported=state.imported)
            return SyncResult(
                success=False,
                imported=state.imported,
                errors=errors + [str(e)],
                jurisdiction=self.jurisdiction,
                message=message,
            )

        except RunLevelError as e:
            self._publish(state, SyncStatus.ERROR, f"Sync failed: {e}", final=True)
            self._complete_run_record(run_id, "failure", state, errors + [str(e)], str(e))
            log.error("sync_failed", error=str(e), error_type=type(e).__name__)
            return SyncResult(
                success=False,
                imported=state.imported,
                errors=errors + [str(e)],
                jurisdiction=self.jurisdiction,
                message=f"Failed to sync {self.jurisdiction} data",
            )

        except Exception as e:
            self._publish(state, SyncStatus.ERROR, f"Sync failed: {e}", final=True)
            self._complete_run_record(run_id, "failure", state, errors + [str(e)], str(e))
            log.exception("sync_crashed", error=str(e), error_type=type(e).__name__)
            raise

        state.progress = 100.0
        self._publish(
            state,
            SyncStatus.COMPLETED,
            f"Sync completed: {state.imported} tenements imported",
            final=True,
        )
        self._complete_run_record(
            run_id,
            "partial" if errors else "success",
            state,
            errors,
            errors[0] if errors else None,
        )
        log.info("sync_completed", imported=state.imported, errors=len(errors))

        return SyncResult(
            success=True,
            imported=state.imported,
            errors=errors,
            jurisdiction=self.jurisdiction,
            message=f"Successfully synced {state.imported} {self.jurisdiction} tenements from {self.source.describe().name}",
        )

    def _batch_progress(self, state: _RunState, page_start: int):
        """Callback advancing the run state after each batch of one page."""
        page_imported = state.imported

        def on_batch(batch_number: int, attempted: int, imported: int) -> None:
            state.processed = page_start + attempted
            state.imported = page_imported + imported
            self._publish(
                state,
                SyncStatus.SYNCING,
                f"Processing batch {batch_number}: {state.processed}/{state.total}",
            )

        return on_batch

    def _publish(self, state: _RunState, status: SyncStatus, message: str, final: bool = False) -> None:
        if not state.status.can_transition_to(status):
            logger.error(
                "sync_status_transition_rejected",
                jurisdiction=self.jurisdiction,
                current=state.status.value,
                target=status.value
            )
            return
        state.status = status

        if state.total > 0:
            state.progress = max(state.progress, min(100.0, state.processed / state.total * 100))

        eta = None
        if not final and state.processed > 0:
            elapsed_ms = (self.clock() - state.started) * 1000
            remaining = max(state.total - state.processed, 0)
            eta = float(round(elapsed_ms / state.processed * remaining))

        self.progress_store.set(
            self.jurisdiction,
            SyncProgress(
                status=status,
                progress=round(state.progress, 2),
                current_record=state.processed,
                total_records=state.total,
                message=message,
                start_time=state.start_time,
                estimated_time_remaining=eta,
            ),
        )

    def _start_run_record(self) -> Optional[int]:
        if self.run_repository is None:
            return None
        try:
            with self.session_factory() as session:
                return self.run_repository.create_run(session, self.jurisdiction).id
        except SQLAlchemyError as e:
            logger.warning("sync_run_record_failed", jurisdiction=self.jurisdiction, error=str(e))
            return None

    def _complete_run_record(
        self,
        run_id: Optional[int],
        status: str,
        state: _RunState,
        errors: List[str],
        error_message: Optional[str],
    ) -> None:
        if self.run_repository is None or run_id is None:
            return
        try:
            with self.session_factory() as session:
                self.run_repository.complete_run(
                    session,
                    run_id,
                    status=status,
                    records_total=state.total,
                    records_imported=state.imported,
                    records_failed=max(state.processed - state.imported, 0),
                    error_message=error_message,
                    error_details={"errors": errors} if errors else None,
                )
        except SQLAlchemyError as e:
            logger.warning("sync_run_record_failed", jurisdiction=self.jurisdiction, run_id=run_id, error=str(e))
