"""
Sync Router

Endpoints that run and cancel syncs. Runs execute in the request thread and
respond with the full summary once finished.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.tenement_sync.api.dependencies import get_sync_service
from src.tenement_sync.api.schemas import CancelResponse
from src.tenement_sync.models.tenement import Jurisdiction
from src.tenement_sync.sync.registry import SyncService
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/all")
def sync_all_jurisdictions(service: SyncService = Depends(get_sync_service)):
    """
    Sync every jurisdiction in order (WA, NSW, VIC, NT, QLD, TAS).

    Returns:
        Aggregate summary; per-jurisdiction failures are listed in ``results``
    """
    result = service.sync_all()
    return JSONResponse(content=result.to_payload())


@router.post("/all/cancel", response_model=CancelResponse)
def cancel_all(service: SyncService = Depends(get_sync_service)):
    cancelled = service.cancel_all("Full sync cancelled by request")
    return CancelResponse(
        success=cancelled,
        jurisdiction="ALL",
        message="Cancellation requested" if cancelled else "No sync in progress",
    )


@router.post("/{jurisdiction}")
def sync_jurisdiction(
    jurisdiction: str,
    service: SyncService = Depends(get_sync_service),
):
    """
    Sync a single jurisdiction.

    Args:
        jurisdiction: Jurisdiction code (case-insensitive)

    Returns:
        Sync summary; status 500 when the run ended in error

    Raises:
        UnknownJurisdictionError: mapped to 404
        SyncInProgressError: mapped to 409
    """
    code = Jurisdiction.parse(jurisdiction)
    logger.info("sync_requested", jurisdiction=code.value)

    result = service.sync(code)
    status_code = 200 if result.success else 500
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.post("/{jurisdiction}/cancel", response_model=CancelResponse)
def cancel_jurisdiction(
    jurisdiction: str,
    service: SyncService = Depends(get_sync_service),
):
    code = Jurisdiction.parse(jurisdiction)
    cancelled = service.cancel(code, f"{code.value} sync cancelled by request")
    return CancelResponse(
        success=cancelled,
        jurisdiction=code.value,
        message="Cancellation requested" if cancelled else "No sync in progress",
    )
