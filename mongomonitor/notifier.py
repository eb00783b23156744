"""Alert delivery: local logging plus an optional Slack incoming webhook."""

import logging
import threading
from typing import Any, Dict, Optional, Union

import requests

from .alerts import DEFAULT_SUBJECT, HealthAlert
from .config import SlackSettings

logger = logging.getLogger(__name__)

AUTHOR_NAME = "MongoMonitor"
AUTHOR_LINK = "https://github.com/eladnava/mongomonitor"
WEBHOOK_TIMEOUT = 10


class SlackWebhook:
    """Posts attachment messages to a Slack incoming webhook."""

    def __init__(self, settings: SlackSettings) -> None:
        self.settings = settings

    def generate_message(self, subject: str, text: str) -> Dict[str, Any]:
        """Build the webhook payload for one alert."""

        attachment: Dict[str, Any] = {
            "fallback": text,
            "author_name": AUTHOR_NAME,
            "author_link": AUTHOR_LINK,
            "color": "danger",
            "title": subject,
            "text": text,
        }
        if self.settings.notify_members:
            attachment["pretext"] = " ".join(
                f"<@{username}>" for username in self.settings.notify_members
            )
        return {"attachments": [attachment]}

    def send_webhook_message(self, subject: str, text: str) -> None:
        payload = self.generate_message(subject, text)
        response = requests.post(
            self.settings.channel_url, json=payload, timeout=WEBHOOK_TIMEOUT
        )
        response.raise_for_status()


class Notifier:
    """Logs every alert and forwards it to Slack when a channel is configured.

    Delivery runs on a daemon thread so a slow or failing webhook never holds
    up the health checks. Failures are logged and swallowed.
    """

    def __init__(
        self, slack: Optional[SlackSettings] = None, background: bool = True
    ) -> None:
        self.slack_settings = slack
        self.background = background
        self._webhook: Optional[SlackWebhook] = None
        self._lock = threading.Lock()

    @property
    def has_channel(self) -> bool:
        return self.slack_settings is not None

    def _get_webhook(self) -> SlackWebhook:
        with self._lock:
            if self._webhook is None:
                self._webhook = SlackWebhook(self.slack_settings)
            return self._webhook

    def _deliver(self, subject: str, text: str) -> bool:
        try:
            self._get_webhook().send_webhook_message(subject, text)
        except Exception as exc:
            logger.error("Failed to deliver Slack notification: %s", exc)
            return False
        return True

    def notify(
        self, alert: Union[HealthAlert, str], subject: Optional[str] = None
    ) -> None:
        """Log ``alert`` and dispatch it to the notification channel."""

        if isinstance(alert, HealthAlert):
            subject = subject or alert.subject
        subject = subject or DEFAULT_SUBJECT
        text = str(alert)

        logger.error("%s: %s", subject, text)

        if not self.has_channel:
            return

        if self.background:
            thread = threading.Thread(
                target=self._deliver, args=(subject, text), daemon=True
            )
            thread.start()
        else:
            self._deliver(subject, text)

    def send_test_alert(self) -> bool:
        """Send one synthetic alert synchronously; return True if delivered."""

        subject = "Test Alert"
        text = "This is a test alert from mongomonitor. Notifications are configured correctly."
        logger.info("%s: %s", subject, text)
        if not self.has_channel:
            logger.error("No notification channel configured; nothing to test")
            return False
        return self._deliver(subject, text)
