"""
FastAPI Dependencies

Provides dependency injection for database sessions and the sync service.
"""
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from src.tenement_sync.db.session import SessionLocal, get_engine
from src.tenement_sync.sync.registry import SyncService


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields:
        SQLAlchemy database session
    """
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sync_service(request: Request) -> SyncService:
    """The SyncService attached to the application at startup."""
    return request.app.state.sync_service

