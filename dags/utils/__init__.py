"""
Airflow DAG Utilities

Task callables and notifications for the tenement sync DAG.
"""
from dags.utils.notifications import send_slack_notification, format_sync_summary
from dags.utils.sync_tasks import (
    trigger_jurisdiction_sync,
    build_full_sync_summary,
    summarize_sync,
)

__all__ = [
    "send_slack_notification",
    "format_sync_summary",
    "trigger_jurisdiction_sync",
    "build_full_sync_summary",
    "summarize_sync",
]
