"""
Database Session Management

Provides database connection pooling and session management.
"""
from contextlib import contextmanager
from functools import wraps
from typing import Generator, Optional

from sqlalchemy import create_engine, event, exc, pool, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from src.tenement_sync.sync.cancellation import CancellationToken, pause
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

_engine: Optional[Engine] = None

# Session factory; bound to the engine on first use
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create a database engine with connection pooling.

    Args:
        database_url: Override settings.database_url

    Returns:
        SQLAlchemy engine
    """
    url = database_url or settings.database_url
    kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.database_echo,  # Log SQL queries if enabled
    }
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=settings.database_pool_recycle,
        )

    new_engine = create_engine(url, **kwargs)

    @event.listens_for(new_engine, "connect")
    def receive_connect(dbapi_conn, connection_record):
        logger.debug("database_connection_established")

    return new_engine


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine()
        SessionLocal.configure(bind=_engine)
    return _engine


def configure_engine(engine: Engine) -> None:
    """Bind the session factory to an existing engine (tests, scripts)."""
    global _engine
    _engine = engine
    SessionLocal.configure(bind=engine)


@event.listens_for(pool.Pool, "invalidate")
def receive_invalidate(dbapi_conn, connection_record, exception):
    """
    Event listener for connection invalidation.

    Logs when a connection is marked as invalid and removed from pool.
    """
    logger.warning(
        "database_connection_invalidated",
        exception=str(exception) if exception else None
    )


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Get database session with automatic cleanup.

    Usage:
        with get_db_session() as session:
            session.execute(...)

    Yields:
        Database session

    Raises:
        Exception: Re-raises any exception after rollback
    """
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except exc.SQLAlchemyError as e:
        session.rollback()
        logger.error(
            "database_session_rollback",
            error=str(e),
            error_type=type(e).__name__
        )
        raise
    except Exception as e:
        session.rollback()
        logger.error(
            "database_session_error",
            error=str(e),
            error_type=type(e).__name__
        )
        raise
    finally:
        session.close()


def health_check(session: Optional[Session] = None) -> bool:
    """
    Check database connection health.

    Args:
        session: Session to probe (a fresh session is opened when omitted)

    Returns:
        True if database is accessible, False otherwise
    """
    try:
        if session is not None:
            session.execute(text("SELECT 1"))
            return True
        with get_db_session() as new_session:
            new_session.execute(text("SELECT 1"))
            return True
    except exc.SQLAlchemyError as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return False


def close_connections():
    """
    Close all database connections and dispose of the engine.

    Should be called on application shutdown.
    """
    global _engine
    if _engine is None:
        return
    logger.info("closing_database_connections")
    _engine.dispose()
    _engine = None


def create_all_tables(engine: Optional[Engine] = None):
    """
    Create all database tables defined in models.

    WARNING: Use Alembic migrations instead in production.
    This is only for testing and initial setup.
    """
    from src.tenement_sync.db.base import Base, import_all_models

    import_all_models()
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("database_tables_created")


# Retry decorator for transient database errors
def with_retry(max_retries: int = 3, retry_delay: float = 1, cancel_token: Optional[CancellationToken] = None):
    """
    Decorator to retry database operations on transient failures.

    Args:
        max_retries: Maximum number of retry attempts
        retry_delay: Delay between retries in seconds
        cancel_token: Token whose cancellation cuts a backoff short

    Usage:
        @with_retry(max_retries=3)
        def my_database_operation(session):
            pass
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except (exc.OperationalError, exc.DisconnectionError) as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        logger.warning(
                            "database_operation_retry",
                            attempt=attempt + 1,
                            max_retries=max_retries,
                            error=str(e)
                        )
                        pause(retry_delay * (attempt + 1), cancel_token)
                    else:
                        logger.error(
                            "database_operation_failed_after_retries",
                            max_retries=max_retries,
                            error=str(e)
                        )

            raise last_exception

        return wrapper
    return decorator
