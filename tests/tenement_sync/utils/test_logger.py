"""
Tests for logging helpers
"""
import structlog

from src.tenement_sync.utils.logger import add_app_context, get_logger, log_context


def test_add_app_context():
    event_dict = add_app_context(None, "info", {"event": "sync_started"})

    assert event_dict["service"] == "tenement-sync"
    assert "environment" in event_dict


def test_log_context_binds_only_inside_block():
    with log_context(jurisdiction="WA", run_id=7):
        assert structlog.contextvars.get_contextvars() == {"jurisdiction": "WA", "run_id": 7}

    assert "jurisdiction" not in structlog.contextvars.get_contextvars()


def test_get_logger():
    assert get_logger(__name__) is not None
