"""
Helper tests for DAG task utilities.
"""
import pytest
import requests
from unittest.mock import MagicMock, Mock, patch

from src.tenement_sync.models.progress import SyncResult
from src.tenement_sync.models.tenement import Jurisdiction
from dags.utils.sync_tasks import (
    RESULT_XCOM_KEY,
    build_full_sync_summary,
    summarize_sync,
    sync_task_id,
    trigger_jurisdiction_sync,
)


def result_payload(jurisdiction, success=True, imported=10, errors=None):
    return SyncResult(
        success=success,
        imported=imported,
        errors=errors or [],
        jurisdiction=jurisdiction,
        message="ok" if success else f"Failed to sync {jurisdiction} data",
    ).model_dump(mode="json")


def test_sync_task_id():
    assert sync_task_id(Jurisdiction.NSW) == "sync_nsw"


def test_trigger_pushes_result_to_xcom():
    trigger = Mock()
    trigger.trigger.return_value = SyncResult(success=True, imported=42, jurisdiction="WA")
    task_instance = MagicMock()

    payload = trigger_jurisdiction_sync("wa", trigger=trigger, task_instance=task_instance)

    trigger.trigger.assert_called_once_with(Jurisdiction.WA)
    assert payload["imported"] == 42
    task_instance.xcom_push.assert_called_once_with(key=RESULT_XCOM_KEY, value=payload)


def test_trigger_failure_becomes_failed_result():
    trigger = Mock()
    trigger.trigger.side_effect = requests.ConnectionError("API unreachable")

    payload = trigger_jurisdiction_sync("VIC", trigger=trigger, delay_seconds=0)

    assert payload["success"] is False
    assert payload["errors"] == ["API unreachable"]
    assert payload["message"] == "Failed to sync VIC"


def test_later_jurisdictions_wait_before_triggering():
    trigger = Mock()
    trigger.trigger.return_value = SyncResult(success=True, imported=5, jurisdiction="NSW")
    sleep = Mock()

    trigger_jurisdiction_sync("NSW", trigger=trigger, delay_seconds=2.5, sleep=sleep)

    sleep.assert_called_once_with(2.5)


def test_first_jurisdiction_does_not_wait():
    trigger = Mock()
    trigger.trigger.return_value = SyncResult(success=True, imported=5, jurisdiction="WA")
    sleep = Mock()

    trigger_jurisdiction_sync("WA", trigger=trigger, delay_seconds=2.5, sleep=sleep)

    sleep.assert_not_called()


def test_build_full_sync_summary_skips_missing_results():
    summary = build_full_sync_summary([
        result_payload("WA", imported=100),
        None,
        result_payload("VIC", success=False, imported=0, errors=["down"]),
    ])

    assert summary.total_imported == 100
    assert summary.successful_syncs == 1
    assert summary.total_jurisdictions == 6
    assert len(summary.results) == 2
    assert summary.message == "Full sync completed: 100 tenements synced across 1 jurisdictions"


@patch('dags.utils.sync_tasks.send_slack_notification')
def test_summarize_sync(mock_slack):
    payloads = {
        "sync_wa": result_payload("WA", imported=100),
        "sync_nsw": result_payload("NSW", imported=200),
    }
    task_instance = MagicMock()
    task_instance.xcom_pull.side_effect = lambda task_ids, key: payloads.get(task_ids)

    summary = summarize_sync(task_instance=task_instance)

    assert summary["totalImported"] == 300
    assert summary["successfulSyncs"] == 2
    assert "Total Imported: 300" in mock_slack.call_args.args[0]


@patch('dags.utils.sync_tasks.send_slack_notification')
def test_summarize_sync_raises_when_everything_failed(mock_slack):
    task_instance = MagicMock()
    task_instance.xcom_pull.return_value = result_payload("WA", success=False, imported=0, errors=["down"])

    with pytest.raises(ValueError, match="No jurisdiction synced successfully"):
        summarize_sync(task_instance=task_instance)

    mock_slack.assert_called_once()
