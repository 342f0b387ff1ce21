"""
Booking notification dispatchers.

Dispatchers are best effort: `notify` reports success as a boolean and logs
failures instead of raising.
"""

import logging
from typing import Dict

import requests
from django.conf import settings
from django.core.mail import send_mail

from .loader import load_backend

logger = logging.getLogger(__name__)

DEFAULT_DISPATCHER = (
    "apps.bookingapp.integrations.notifications.LoggingNotificationDispatcher"
)


class BaseNotificationDispatcher:
    """Base class for notification dispatchers"""

    def notify(self, event: str, payload: Dict) -> bool:
        raise NotImplementedError("Subclasses must implement notify method")


class LoggingNotificationDispatcher(BaseNotificationDispatcher):
    """Writes notifications to the log, for development and tests"""

    def notify(self, event, payload):
        logger.info(f"[{event}] {payload}")
        return True


class WebhookNotificationDispatcher(BaseNotificationDispatcher):
    """Posts a Slack-style ``{"text": ...}`` message to NOTIFICATION_WEBHOOK_URL"""

    def __init__(self, webhook_url=None, timeout=None):
        self.webhook_url = webhook_url or getattr(settings, "NOTIFICATION_WEBHOOK_URL", "")
        self.timeout = timeout or getattr(settings, "SIDE_EFFECT_TIMEOUT", 10)

    def notify(self, event, payload):
        if not self.webhook_url:
            logger.error("WebhookNotificationDispatcher used without NOTIFICATION_WEBHOOK_URL")
            return False

        text = (
            f"New booking: {payload.get('guest_name')} ({payload.get('guest_email')}) "
            f"for {payload.get('title')} at {payload.get('start')}"
        )
        if payload.get("meeting_url"):
            text += f"\nMeeting link: {payload['meeting_url']}"

        try:
            response = requests.post(
                self.webhook_url,
                json={"text": text, "event": event, "booking": payload},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Webhook notification for {event} failed: {str(e)}")
            return False
        return True


class EmailNotificationDispatcher(BaseNotificationDispatcher):
    """Emails the booking details to the guest"""

    def notify(self, event, payload):
        subject = f"Booking confirmed: {payload.get('title')}"
        lines = [
            f"Hi {payload.get('guest_name')},",
            "",
            f"Your booking for {payload.get('title')} is confirmed.",
            f"Start: {payload.get('start')}",
            f"End: {payload.get('end')}",
        ]
        if payload.get("meeting_url"):
            lines.append(f"Meeting link: {payload['meeting_url']}")

        try:
            sent = send_mail(
                subject,
                "\n".join(lines),
                settings.DEFAULT_FROM_EMAIL,
                [payload.get("guest_email")],
            )
        except Exception as e:
            logger.error(f"Email notification for {event} failed: {str(e)}")
            return False
        return bool(sent)


def get_notification_dispatcher() -> BaseNotificationDispatcher:
    return load_backend("NOTIFICATION_DISPATCHER", DEFAULT_DISPATCHER)
