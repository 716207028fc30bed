"""
Database Package

Database models, connection management, and data persistence layer.
"""
from src.tenement_sync.db.base import Base
from src.tenement_sync.db.session import (
    SessionLocal,
    get_engine,
    configure_engine,
    get_db_session,
    health_check,
    close_connections,
    create_all_tables,
    with_retry,
)
from src.tenement_sync.db.models import Tenement, SyncRun
from src.tenement_sync.db.repository import (
    BaseRepository,
    TenementRepository,
    SyncRunRepository,
)

__all__ = [
    # Base
    "Base",
    # Session management
    "SessionLocal",
    "get_engine",
    "configure_engine",
    "get_db_session",
    "health_check",
    "close_connections",
    "create_all_tables",
    "with_retry",
    # Models
    "Tenement",
    "SyncRun",
    # Repositories
    "BaseRepository",
    "TenementRepository",
    "SyncRunRepository",
]
