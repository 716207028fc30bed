"""
Progress Router

Polling endpoint for sync progress, plus the publish endpoint used by
out-of-process writers. Payloads use camelCase keys.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from src.tenement_sync.api.dependencies import get_sync_service
from src.tenement_sync.api.schemas import PublishResponse
from src.tenement_sync.sync.registry import SyncService

router = APIRouter(prefix="/sync-progress", tags=["progress"])


@router.get("/{jurisdiction}")
def get_progress(
    jurisdiction: str,
    service: SyncService = Depends(get_sync_service),
):
    """
    Latest progress snapshot.

    ``estimatedTimeRemaining`` is present only while syncing with at least
    one record processed.
    """
    snapshot = service.progress(jurisdiction)
    return JSONResponse(content=snapshot.to_payload())


@router.post("/{jurisdiction}", response_model=PublishResponse)
def publish_progress(
    jurisdiction: str,
    payload: Dict[str, Any] = Body(...),
    service: SyncService = Depends(get_sync_service),
):
    service.publish_progress(jurisdiction, payload)
    return PublishResponse(success=True)
