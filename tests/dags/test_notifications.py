"""
Tests for notification utilities.
"""
import requests
from unittest.mock import Mock, patch

from dags.utils.notifications import format_sync_summary, send_slack_notification

SUMMARY = {
    "success": True,
    "totalImported": 12345,
    "successfulSyncs": 1,
    "totalJurisdictions": 2,
    "results": [
        {"jurisdiction": "WA", "success": True, "imported": 12345, "errors": []},
        {
            "jurisdiction": "VIC",
            "success": False,
            "imported": 0,
            "errors": ["first", "second", "third", "fourth"],
        },
    ],
}


class TestFormatSyncSummary:
    def test_format(self):
        message = format_sync_summary(SUMMARY)

        assert "*Daily Tenement Sync Summary*" in message
        assert "Total Imported: 12,345" in message
        assert "Successful: 1/2" in message
        assert "*WA* OK: 12,345 imported" in message
        assert "*VIC* FAILED: 0 imported" in message

    def test_errors_are_capped(self):
        message = format_sync_summary(SUMMARY)

        assert "- third" in message
        assert "- fourth" not in message


class TestSendSlackNotification:
    """Tests for the Slack webhook sender."""

    @patch('dags.utils.notifications.settings')
    @patch('dags.utils.notifications.requests.post')
    def test_disabled(self, mock_post, mock_settings):
        mock_settings.alert_enable_slack = False

        assert send_slack_notification("hello") is False
        mock_post.assert_not_called()

    @patch('dags.utils.notifications.settings')
    @patch('dags.utils.notifications.requests.post')
    def test_missing_webhook(self, mock_post, mock_settings):
        mock_settings.alert_enable_slack = True
        mock_settings.alert_slack_webhook = None

        assert send_slack_notification("hello") is False
        mock_post.assert_not_called()

    @patch('dags.utils.notifications.settings')
    @patch('dags.utils.notifications.requests.post')
    def test_sends_message(self, mock_post, mock_settings):
        mock_settings.alert_enable_slack = True
        mock_settings.alert_slack_webhook = "https://hooks.slack.com/services/T000/B000/XXX"
        mock_post.return_value = Mock(status_code=200)

        assert send_slack_notification("hello") is True
        mock_post.assert_called_once_with(
            "https://hooks.slack.com/services/T000/B000/XXX",
            json={"text": "hello"},
            timeout=10,
        )

    @patch('dags.utils.notifications.settings')
    @patch('dags.utils.notifications.requests.post')
    def test_non_200_response(self, mock_post, mock_settings):
        mock_settings.alert_enable_slack = True
        mock_settings.alert_slack_webhook = "https://hooks.slack.com/x"
        mock_post.return_value = Mock(status_code=500, text="error")

        assert send_slack_notification("hello") is False

    @patch('dags.utils.notifications.settings')
    @patch('dags.utils.notifications.requests.post')
    def test_request_exception(self, mock_post, mock_settings):
        mock_settings.alert_enable_slack = True
        mock_settings.alert_slack_webhook = "https://hooks.slack.com/x"
        mock_post.side_effect = requests.ConnectionError("refused")

        assert send_slack_notification("hello") is False
