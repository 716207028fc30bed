"""
Shared Fixtures

In-memory SQLite database shared by every session opened during a test.
"""
from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.tenement_sync.db.base import Base, import_all_models


@pytest.fixture(scope="function")
def test_engine():
    """Create an in-memory SQLite database visible to every connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_all_models()
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session context manager factory that commits on exit, like get_db_session."""
    Session = sessionmaker(bind=test_engine, expire_on_commit=False)

    @contextmanager
    def factory():
        session = Session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@pytest.fixture
def test_db(test_engine):
    """Plain session for direct repository tests."""
    Session = sessionmaker(bind=test_engine)
    session = Session()

    yield session

    session.close()
