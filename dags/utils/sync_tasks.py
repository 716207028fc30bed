"""
Sync Task Callables

PythonOperator callables for the daily tenement sync. Each jurisdiction is
triggered against the running API, so the run shows up in the progress
store that the frontend polls.
"""
from typing import Any, Callable, Dict, List, Optional

from config.settings import settings
from src.tenement_sync.models.progress import FullSyncResult, SyncResult
from src.tenement_sync.models.tenement import ALL_JURISDICTIONS, Jurisdiction
from src.tenement_sync.sync.cancellation import pause
from src.tenement_sync.sync.coordinator import HttpSyncTrigger, summarize_results
from src.tenement_sync.utils.logger import get_logger
from dags.utils.notifications import format_sync_summary, send_slack_notification

logger = get_logger(__name__)

RESULT_XCOM_KEY = "sync_result"


def sync_task_id(jurisdiction: Jurisdiction) -> str:
    return f"sync_{jurisdiction.value.lower()}"


def trigger_jurisdiction_sync(
    jurisdiction: str,
    trigger: HttpSyncTrigger = None,
    delay_seconds: Optional[float] = None,
    sleep: Optional[Callable[[float], None]] = None,
    **context
) -> Dict[str, Any]:
    """
    Sync one jurisdiction through the API.

    Every jurisdiction after the first waits ``delay_seconds`` (the
    configured jurisdiction delay by default) before it is triggered. A
    failed sync is returned as a failed result instead of failing the
    task, so the remaining jurisdictions still run.

    Returns:
        SyncResult payload, also pushed to XCom
    """
    code = Jurisdiction.parse(jurisdiction)
    trigger = trigger or HttpSyncTrigger()
    if code != ALL_JURISDICTIONS[0]:
        delay = settings.jurisdiction_delay_seconds if delay_seconds is None else delay_seconds
        pause(delay, sleep=sleep)
    logger.info("dag_sync_started", jurisdiction=code.value)

    try:
        result = trigger.trigger(code)
    except Exception as e:
        logger.error("dag_sync_trigger_failed", jurisdiction=code.value, error=str(e))
        result = SyncResult.failed(code.value, str(e), message=f"Failed to sync {code.value}")

    payload = result.model_dump(mode="json")
    if 'task_instance' in context:
        context['task_instance'].xcom_push(key=RESULT_XCOM_KEY, value=payload)

    logger.info("dag_sync_finished", jurisdiction=code.value, success=result.success, imported=result.imported)
    return payload


def build_full_sync_summary(payloads: List[Dict[str, Any]]) -> FullSyncResult:
    """Aggregate per-jurisdiction payloads the way the full sync endpoint does."""
    results = [SyncResult.model_validate(p) for p in payloads if p]
    return summarize_results(results, len(ALL_JURISDICTIONS))


def summarize_sync(**context) -> Dict[str, Any]:
    """
    Collect every jurisdiction's result and send the summary.

    Raises:
        ValueError: if no jurisdiction synced successfully
    """
    ti = context['task_instance']
    payloads = [
        ti.xcom_pull(task_ids=sync_task_id(j), key=RESULT_XCOM_KEY)
        for j in ALL_JURISDICTIONS
    ]
    summary = build_full_sync_summary(payloads).to_payload()

    logger.info(
        "dag_sync_summary",
        total_imported=summary["totalImported"],
        successful_syncs=summary["successfulSyncs"]
    )
    send_slack_notification(format_sync_summary(summary))

    if summary["successfulSyncs"] == 0:
        raise ValueError("No jurisdiction synced successfully")

    return summary
