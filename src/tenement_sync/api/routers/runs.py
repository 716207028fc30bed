"""
Sync Runs Router

Read access to the sync run log.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.tenement_sync.api.dependencies import get_db
from src.tenement_sync.api.schemas import SyncRunSummary
from src.tenement_sync.db.repository import SyncRunRepository
from src.tenement_sync.models.tenement import Jurisdiction

router = APIRouter(prefix="/sync-runs", tags=["sync-runs"])


@router.get("", response_model=List[SyncRunSummary])
def list_sync_runs(
    jurisdiction: Optional[str] = Query(None, description="Filter by jurisdiction code"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Recent sync runs, newest first.

    Raises:
        UnknownJurisdictionError: mapped to 404
    """
    code = Jurisdiction.parse(jurisdiction).value if jurisdiction else None
    runs = SyncRunRepository().get_recent_runs(db, jurisdiction=code, limit=limit)
    return [SyncRunSummary.model_validate(run) for run in runs]
