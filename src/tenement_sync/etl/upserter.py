"""
Batch Upserter

Writes normalized tenement rows in fixed-size batches, committing each batch
in its own session. A batch that fails is recorded and skipped; the
remaining batches are still written.
"""
from dataclasses import dataclass, field
from typing import Callable, ContextManager, List, Optional, Sequence

from sqlalchemy.orm import Session

from src.tenement_sync.db.repository import TenementRepository
from src.tenement_sync.db.session import get_db_session, with_retry
from src.tenement_sync.etl.normalizer import TenementNormalizer
from src.tenement_sync.exceptions import SyncCancelledError
from src.tenement_sync.models.tenement import TenementRecord
from src.tenement_sync.sync.cancellation import CancellationToken, checkpoint, pause
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

# on_batch(batch_number, attempted_so_far, imported_so_far)
BatchCallback = Callable[[int, int, int], None]


@dataclass
class UpsertResult:
    """Outcome of one upsert call."""
    imported: int = 0
    errors: List[str] = field(default_factory=list)
    batches: int = 0


class BatchUpserter:
    """
    Idempotent batched writer for the tenements table.

    Args:
        session_factory: Callable returning a session context manager that
            commits on exit (defaults to get_db_session)
        repository: TenementRepository instance
        batch_size: Records per batch
        batch_delay: Pause in seconds between batches
        max_retries: Attempts per batch for transient database errors
        retry_delay: Base delay between those attempts
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], ContextManager[Session]]] = None,
        repository: Optional[TenementRepository] = None,
        batch_size: int = 500,
        batch_delay: float = 0,
        max_retries: int = 3,
        retry_delay: float = 1,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.session_factory = session_factory or get_db_session
        self.repository = repository or TenementRepository()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def upsert(
        self,
        records: Sequence[TenementRecord],
        batch_size: Optional[int] = None,
        on_batch: Optional[BatchCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
        first_batch_number: int = 1,
        normalizer: Optional[TenementNormalizer] = None,
    ) -> UpsertResult:
        """
        Write records in batches.

        Args:
            records: Records to write
            batch_size: Override the configured batch size
            on_batch: Called after every batch, written or failed
            cancel_token: Checked before every batch and inside every pause,
                including database retry backoff
            first_batch_number: Number reported for the first batch, so
                callers writing page by page keep one sequence per run
            normalizer: Shared normalizer (one last_sync_at per run)

        Returns:
            UpsertResult with the count written and one error per failed batch

        Raises:
            SyncCancelledError: if the token is cancelled between batches or
                while a batch write is backing off
        """
        size = batch_size or self.batch_size
        normalizer = normalizer or TenementNormalizer()
        result = UpsertResult()

        for start in range(0, len(records), size):
            if start > 0:
                pause(self.batch_delay, cancel_token)
            checkpoint(cancel_token)

            batch = records[start:start + size]
            batch_number = first_batch_number + result.batches
            result.batches += 1

            try:
                rows = normalizer.normalize_batch(batch)
                self._write_with_retry(rows, cancel_token)
                result.imported += len(batch)
                logger.debug(
                    "batch_upserted",
                    batch=batch_number,
                    records=len(batch),
                    imported=result.imported
                )
            except SyncCancelledError:
                raise
            except Exception as e:
                error = f"Failed to insert batch {batch_number}: {e}"
                result.errors.append(error)
                logger.error(
                    "batch_upsert_failed",
                    batch=batch_number,
                    records=len(batch),
                    error=str(e),
                    error_type=type(e).__name__
                )

            if on_batch is not None:
                on_batch(batch_number, start + len(batch), result.imported)

        return result

    def _write_with_retry(self, rows, cancel_token: Optional[CancellationToken] = None) -> int:
        return with_retry(self.max_retries, self.retry_delay, cancel_token)(self._write_batch)(rows)

    def _write_batch(self, rows) -> int:
        with self.session_factory() as session:
            return self.repository.bulk_upsert(session, rows)
