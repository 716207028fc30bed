"""
Repository Pattern for Data Access

Provides CRUD operations and sync-specific queries for the tenement tables.
"""
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Type, TypeVar

from sqlalchemy import select, func, desc
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from src.tenement_sync.db.models import Tenement, SyncRun
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

# Columns overwritten when a tenement row already exists
TENEMENT_UPDATE_COLUMNS = (
    "jurisdiction",
    "number",
    "type",
    "status",
    "holder_name",
    "area_ha",
    "grant_date",
    "application_date",
    "expiry_date",
    "longitude",
    "latitude",
    "geometry",
    "last_sync_at",
    "source_wfs_ref",
    "source_mto_ref",
)


def _dialect_insert(session: Session):
    """Pick the INSERT construct that supports ON CONFLICT for the bound dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upsert not supported for dialect: {dialect}")


class BaseRepository:
    """
    Base repository with common CRUD operations.

    Generic repository that can be extended for specific models.
    """

    def __init__(self, model: Type[T]):
        self.model = model
        logger.debug("repository_initialized", model=model.__name__)

    def get_by_id(self, session: Session, id_value: Any) -> Optional[T]:
        """
        Get single record by primary key.

        Args:
            session: Database session
            id_value: Primary key value

        Returns:
            Model instance or None
        """
        return session.get(self.model, id_value)

    def count(self, session: Session) -> int:
        """Count all records."""
        return session.execute(select(func.count()).select_from(self.model)).scalar_one()


class TenementRepository(BaseRepository):
    """Repository for the shared tenements table."""

    def __init__(self):
        super().__init__(Tenement)

    def bulk_upsert(self, session: Session, rows: List[Dict[str, Any]]) -> int:
        """
        Insert or overwrite tenement rows keyed on ``id``.

        Args:
            session: Database session
            rows: Row dictionaries with every column in TENEMENT_UPDATE_COLUMNS plus id

        Returns:
            Number of rows written
        """
        if not rows:
            return 0

        insert = _dialect_insert(session)
        stmt = insert(Tenement).values(rows)
        set_ = {column: getattr(stmt.excluded, column) for column in TENEMENT_UPDATE_COLUMNS}
        set_["updated_at"] = func.now()
        stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=set_)

        session.execute(stmt)
        session.flush()

        logger.debug("tenements_bulk_upserted", count=len(rows))
        return len(rows)

    def get_by_number(self, session: Session, jurisdiction: str, number: str) -> Optional[Tenement]:
        query = select(Tenement).where(
            Tenement.jurisdiction == jurisdiction,
            Tenement.number == number
        )
        return session.execute(query).scalar_one_or_none()

    def count_by_jurisdiction(self, session: Session, jurisdiction: Optional[str] = None) -> Dict[str, int]:
        """
        Count tenements grouped by jurisdiction.

        Args:
            session: Database session
            jurisdiction: Restrict to one jurisdiction code (optional)

        Returns:
            Mapping of jurisdiction code to row count
        """
        query = select(Tenement.jurisdiction, func.count()).group_by(Tenement.jurisdiction)
        if jurisdiction:
            query = query.where(Tenement.jurisdiction == jurisdiction)

        return {code: total for code, total in session.execute(query).all()}


class SyncRunRepository(BaseRepository):
    """Repository for SyncRun model (sync run tracking)."""

    def __init__(self):
        super().__init__(SyncRun)

    def create_run(
        self,
        session: Session,
        jurisdiction: str,
        records_total: int = 0,
        started_at: Optional[datetime] = None
    ) -> SyncRun:
        """
        Create new sync run.

        Args:
            session: Database session
            jurisdiction: Jurisdiction code
            records_total: Records expected in the run
            started_at: Start timestamp (defaults to now)

        Returns:
            SyncRun instance
        """
        if started_at is None:
            started_at = datetime.now(timezone.utc)

        run = SyncRun(
            jurisdiction=jurisdiction,
            status='running',
            records_total=records_total,
            started_at=started_at
        )

        session.add(run)
        session.flush()

        logger.info("sync_run_created", run_id=run.id, jurisdiction=jurisdiction)
        return run

    def complete_run(
        self,
        session: Session,
        run_id: int,
        status: str,
        records_total: int = 0,
        records_imported: int = 0,
        records_failed: int = 0,
        error_message: Optional[str] = None,
        error_details: Optional[Dict] = None
    ) -> SyncRun:
        """
        Mark sync run as complete.

        Args:
            session: Database session
            run_id: Run ID
            status: Final status (success, partial, failure, cancelled)
            records_total: Records expected
            records_imported: Records written
            records_failed: Records that could not be written
            error_message: Error message if failed
            error_details: Structured error data

        Returns:
            Updated SyncRun instance
        """
        run = self.get_by_id(session, run_id)
        if not run:
            raise ValueError(f"SyncRun {run_id} not found")

        run.status = status
        run.records_total = records_total
        run.records_imported = records_imported
        run.records_failed = records_failed
        run.error_message = error_message
        run.error_details = error_details
        run.completed_at = datetime.now(timezone.utc)

        session.flush()

        logger.info(
            "sync_run_completed",
            run_id=run_id,
            status=status,
            imported=records_imported,
            failed=records_failed
        )

        return run

    def get_recent_runs(
        self,
        session: Session,
        jurisdiction: Optional[str] = None,
        limit: int = 10
    ) -> List[SyncRun]:
        """
        Get recent sync runs, newest first.

        Args:
            session: Database session
            jurisdiction: Filter by jurisdiction code (optional)
            limit: Maximum number of runs

        Returns:
            List of sync runs
        """
        query = select(SyncRun).order_by(desc(SyncRun.started_at), desc(SyncRun.id))

        if jurisdiction:
            query = query.where(SyncRun.jurisdiction == jurisdiction)

        query = query.limit(limit)

        return session.execute(query).scalars().all()

    def get_last_run(self, session: Session, jurisdiction: str) -> Optional[SyncRun]:
        runs = self.get_recent_runs(session, jurisdiction=jurisdiction, limit=1)
        return runs[0] if runs else None
