"""
Create Database Tables Using SQLAlchemy

Creates the tenements and sync_runs tables directly with create_all(). This
bypasses Alembic migrations and is useful for local testing.
"""
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.tenement_sync.db.session import create_all_tables, get_engine
from src.tenement_sync.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main():
    """Create all database tables."""
    setup_logging(log_format="console")
    engine = get_engine()
    logger.info("database_table_creation_started", url=engine.url.render_as_string(hide_password=True))
    create_all_tables(engine)


if __name__ == "__main__":
    main()
