"""
Data Sources Router

Lists each jurisdiction's data source with its row count and last run.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.tenement_sync.api.dependencies import get_db, get_sync_service
from src.tenement_sync.api.schemas import DataSourceList, DataSourceStatus, SyncRunSummary
from src.tenement_sync.db.repository import SyncRunRepository, TenementRepository
from src.tenement_sync.sync.registry import SyncService

router = APIRouter(prefix="/data-sources", tags=["data-sources"])


@router.get("", response_model=DataSourceList)
def list_data_sources(
    db: Session = Depends(get_db),
    service: SyncService = Depends(get_sync_service),
):
    """
    Describe every configured data source.

    Returns:
        Sources in sync order with tenement counts, progress status and
        the most recent sync run
    """
    counts = TenementRepository().count_by_jurisdiction(db)
    runs = SyncRunRepository()

    sources = []
    for info in service.describe_sources():
        last_run = runs.get_last_run(db, info.jurisdiction)
        sources.append(
            DataSourceStatus(
                **info.model_dump(),
                tenement_count=counts.get(info.jurisdiction, 0),
                sync_status=service.progress(info.jurisdiction).status.value,
                last_sync=SyncRunSummary.model_validate(last_run) if last_run else None,
            )
        )

    return DataSourceList(sources=sources, total_tenements=sum(counts.values()))
