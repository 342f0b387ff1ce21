"""
Meeting-link providers.

A provider turns a confirmed booking into a video-call URL. It is called
after the booking is committed and must never raise: a failed call returns
None and the booking simply has no meeting URL.
"""

import logging
from typing import Dict, Optional

import requests
from django.conf import settings

from .loader import load_backend

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "apps.bookingapp.integrations.meeting_links.NullMeetingLinkProvider"


class BaseMeetingLinkProvider:
    """Base class for meeting-link providers"""

    def create_meeting_link(self, owner_id: int, details: Dict) -> Optional[str]:
        """
        Create a meeting for a booking.

        Args:
            owner_id: User hosting the meeting
            details: ``title``, ``start``, ``end`` (ISO strings) and ``attendee`` (email)

        Returns:
            Meeting URL, or None when no link could be created
        """
        raise NotImplementedError("Subclasses must implement create_meeting_link method")


class NullMeetingLinkProvider(BaseMeetingLinkProvider):
    """Provider used when no conferencing integration is configured"""

    def create_meeting_link(self, owner_id, details):
        logger.info(f"No meeting link provider configured, skipping link for owner {owner_id}")
        return None


class HttpMeetingLinkProvider(BaseMeetingLinkProvider):
    """
    Creates meetings through an HTTP endpoint.

    POSTs the meeting details as JSON to MEETING_LINK_API_URL and expects a
    JSON response carrying the URL under ``url`` (or ``joinUrl``).
    """

    def __init__(self, api_url=None, api_token=None, timeout=None):
        self.api_url = api_url or getattr(settings, "MEETING_LINK_API_URL", "")
        self.api_token = api_token or getattr(settings, "MEETING_LINK_API_TOKEN", "")
        self.timeout = timeout or getattr(settings, "SIDE_EFFECT_TIMEOUT", 10)

    def create_meeting_link(self, owner_id, details):
        if not self.api_url:
            logger.error("HttpMeetingLinkProvider used without MEETING_LINK_API_URL")
            return None

        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        try:
            response = requests.post(
                self.api_url,
                json={"ownerId": owner_id, **details},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Meeting link creation failed for owner {owner_id}: {str(e)}")
            return None

        url = (data.get("url") or data.get("joinUrl")) if isinstance(data, dict) else None
        if not url:
            logger.error(f"Meeting link response for owner {owner_id} had no URL: {data!r}")
            return None
        return url


def get_meeting_link_provider() -> BaseMeetingLinkProvider:
    return load_backend("MEETING_LINK_PROVIDER", DEFAULT_PROVIDER)
