"""
Notification Utilities

Utilities for sending sync summaries to Slack.
"""
from typing import Any, Dict, List, Optional

import requests

from config.settings import settings
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

# Errors listed per jurisdiction in a summary
MAX_ERRORS_PER_JURISDICTION = 3


def send_slack_notification(message: str, webhook_url: Optional[str] = None) -> bool:
    """
    Send notification to Slack via webhook.

    Args:
        message: Message to send
        webhook_url: Slack webhook URL (defaults to settings.alert_slack_webhook)

    Returns:
        True if successful, False otherwise
    """
    if not settings.alert_enable_slack:
        logger.info("slack_notifications_disabled")
        return False

    webhook_url = webhook_url or settings.alert_slack_webhook
    if not webhook_url:
        logger.warning("slack_webhook_url_not_configured")
        return False

    try:
        response = requests.post(webhook_url, json={"text": message}, timeout=10)
    except requests.RequestException as e:
        logger.error("slack_notification_error", error=str(e))
        return False

    if response.status_code != 200:
        logger.error("slack_notification_failed",
                     status_code=response.status_code,
                     response=response.text)
        return False

    logger.info("slack_notification_sent")
    return True


def format_sync_summary(summary: Dict[str, Any]) -> str:
    """
    Format a full sync summary into a notification message.

    Args:
        summary: FullSyncResult payload (camelCase keys)

    Returns:
        Formatted message string
    """
    results: List[Dict[str, Any]] = summary.get("results", [])
    message_lines = [
        "*Daily Tenement Sync Summary*",
        "",
        f"Total Imported: {summary.get('totalImported', 0):,}",
        f"Successful: {summary.get('successfulSyncs', 0)}/{summary.get('totalJurisdictions', len(results))}",
        "",
    ]

    for result in results:
        marker = "OK" if result.get("success") else "FAILED"
        message_lines.append(
            f"*{result.get('jurisdiction')}* {marker}: {result.get('imported', 0):,} imported"
        )
        for error in result.get("errors", [])[:MAX_ERRORS_PER_JURISDICTION]:
            message_lines.append(f"- {error}")

    return "\n".join(message_lines)
