"""
FastAPI Main Application

Tenement Sync REST API.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from config.settings import settings
from src import __version__
from src.tenement_sync.api.dependencies import get_db
from src.tenement_sync.api.schemas import HealthCheck
from src.tenement_sync.api.routers import data_sources, progress, runs, sync
from src.tenement_sync.db.session import close_connections, health_check as database_health_check
from src.tenement_sync.exceptions import SyncInProgressError, UnknownJurisdictionError
from src.tenement_sync.sync.registry import SyncService, build_sync_service
from src.tenement_sync.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Dispose of pooled database connections on shutdown."""
    yield
    close_connections()


def create_app(service: Optional[SyncService] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        service: SyncService to serve (built from settings when omitted)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Tenement Sync API",
        description="Synchronises Australian mining tenement records from state and territory sources",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.sync_service = service or build_sync_service()

    # Admin frontend polls progress from the browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(sync.router)
    app.include_router(progress.router)
    app.include_router(data_sources.router)
    app.include_router(runs.router)

    @app.exception_handler(UnknownJurisdictionError)
    async def unknown_jurisdiction_handler(request: Request, exc: UnknownJurisdictionError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SyncInProgressError)
    async def sync_in_progress_handler(request: Request, exc: SyncInProgressError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/health", response_model=HealthCheck, tags=["health"])
    def health_check(db: Session = Depends(get_db)):
        """
        Health check endpoint.

        Returns:
            Health status with database connectivity check
        """
        database_status = "connected" if database_health_check(db) else "error"

        return HealthCheck(
            status="healthy" if database_status == "connected" else "degraded",
            version=__version__,
            database=database_status,
            progress_backend=settings.progress_backend,
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/", tags=["root"])
    def root():
        """
        Root endpoint.

        Returns:
            API information
        """
        return {
            "name": "Tenement Sync API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "jurisdictions": [info.jurisdiction for info in app.state.sync_service.describe_sources()],
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(
        "src.tenement_sync.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
