# apps/bookingapp/tests/test_integrations.py
import uuid
from unittest.mock import Mock, patch

import requests
from django.core import mail
from django.test import SimpleTestCase, TestCase, override_settings

from apps.bookingapp.integrations.loader import load_backend
from apps.bookingapp.integrations.meeting_links import (
    HttpMeetingLinkProvider,
    NullMeetingLinkProvider,
    get_meeting_link_provider,
)
from apps.bookingapp.integrations.notifications import (
    EmailNotificationDispatcher,
    LoggingNotificationDispatcher,
    WebhookNotificationDispatcher,
    get_notification_dispatcher,
)
from apps.bookingapp.models import Booking
from apps.bookingapp.tasks import (
    booking_payload,
    create_meeting_link_task,
    send_booking_notification_task,
)
from apps.bookinglinkapp.models import BookingLink
from core.exceptions import ConfigurationError

from .fakes import utc

PAYLOAD = {
    "title": "Intro call",
    "guest_name": "Ada Guest",
    "guest_email": "ada@example.com",
    "start": "2030-01-07T10:00:00+00:00",
    "end": "2030-01-07T10:30:00+00:00",
    "meeting_url": None,
}


def json_response(data, status_code=200):
    response = Mock(status_code=status_code)
    response.json.return_value = data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


class BackendLoaderTest(SimpleTestCase):
    """Test cases for loading backends from settings"""

    def test_defaults(self):
        self.assertIsInstance(get_meeting_link_provider(), NullMeetingLinkProvider)
        self.assertIsInstance(get_notification_dispatcher(), LoggingNotificationDispatcher)

    @override_settings(
        NOTIFICATION_DISPATCHER="apps.bookingapp.integrations.notifications.WebhookNotificationDispatcher",
        NOTIFICATION_WEBHOOK_URL="https://hooks.example.com/booking",
    )
    def test_configured_backend(self):
        dispatcher = get_notification_dispatcher()

        self.assertIsInstance(dispatcher, WebhookNotificationDispatcher)
        self.assertEqual(dispatcher.webhook_url, "https://hooks.example.com/booking")

    def test_unknown_backend_is_a_configuration_error(self):
        with self.settings(MEETING_LINK_PROVIDER="apps.nowhere.Provider"):
            with self.assertRaises(ConfigurationError):
                get_meeting_link_provider()

        with self.settings(MEETING_LINK_PROVIDER="NotADottedPath"):
            with self.assertRaises(ConfigurationError):
                get_meeting_link_provider()

    def test_empty_setting_uses_default(self):
        with self.settings(MEETING_LINK_PROVIDER=""):
            provider = load_backend(
                "MEETING_LINK_PROVIDER",
                "apps.bookingapp.integrations.meeting_links.HttpMeetingLinkProvider",
                api_url="https://meet.example.com/api",
            )

        self.assertIsInstance(provider, HttpMeetingLinkProvider)
        self.assertEqual(provider.api_url, "https://meet.example.com/api")


class HttpMeetingLinkProviderTest(SimpleTestCase):
    """Test cases for the HTTP meeting-link provider"""

    def setUp(self):
        self.provider = HttpMeetingLinkProvider(
            api_url="https://meet.example.com/api", api_token="secret", timeout=3
        )

    @patch("apps.bookingapp.integrations.meeting_links.requests.post")
    def test_returns_url(self, mock_post):
        mock_post.return_value = json_response({"url": "https://meet.example.com/abc"})

        url = self.provider.create_meeting_link(1, {"title": "Intro call"})

        self.assertEqual(url, "https://meet.example.com/abc")
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs["json"], {"ownerId": 1, "title": "Intro call"})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer secret")
        self.assertEqual(kwargs["timeout"], 3)

    @patch("apps.bookingapp.integrations.meeting_links.requests.post")
    def test_accepts_join_url(self, mock_post):
        mock_post.return_value = json_response({"joinUrl": "https://meet.example.com/xyz"})

        self.assertEqual(self.provider.create_meeting_link(1, {}), "https://meet.example.com/xyz")

    @patch("apps.bookingapp.integrations.meeting_links.requests.post")
    def test_failures_return_none(self, mock_post):
        for outcome in (
            requests.Timeout("slow"),
            json_response({}, status_code=502),
            json_response({"id": "no-url"}),
        ):
            mock_post.reset_mock()
            if isinstance(outcome, Exception):
                mock_post.side_effect = outcome
            else:
                mock_post.side_effect = None
                mock_post.return_value = outcome

            with self.assertLogs("apps.bookingapp.integrations.meeting_links", level="ERROR"):
                self.assertIsNone(self.provider.create_meeting_link(1, {}))

    def test_missing_url_setting(self):
        with self.settings(MEETING_LINK_API_URL=""):
            provider = HttpMeetingLinkProvider()

        with self.assertLogs("apps.bookingapp.integrations.meeting_links", level="ERROR"):
            self.assertIsNone(provider.create_meeting_link(1, {}))


class NotificationDispatcherTest(SimpleTestCase):
    """Test cases for notification dispatchers"""

    @patch("apps.bookingapp.integrations.notifications.requests.post")
    def test_webhook_posts_text(self, mock_post):
        mock_post.return_value = json_response({"ok": True})
        dispatcher = WebhookNotificationDispatcher(webhook_url="https://hooks.example.com/booking")

        self.assertTrue(dispatcher.notify("booking.confirmed", PAYLOAD))

        body = mock_post.call_args[1]["json"]
        self.assertIn("Ada Guest", body["text"])
        self.assertEqual(body["event"], "booking.confirmed")

    @patch("apps.bookingapp.integrations.notifications.requests.post")
    def test_webhook_failure_returns_false(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        dispatcher = WebhookNotificationDispatcher(webhook_url="https://hooks.example.com/booking")

        with self.assertLogs("apps.bookingapp.integrations.notifications", level="ERROR"):
            self.assertFalse(dispatcher.notify("booking.confirmed", PAYLOAD))

    def test_email_goes_to_guest(self):
        payload = dict(PAYLOAD, meeting_url="https://meet.example.com/abc")

        self.assertTrue(EmailNotificationDispatcher().notify("booking.confirmed", payload))

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["ada@example.com"])
        self.assertIn("https://meet.example.com/abc", mail.outbox[0].body)


class BookingTasksTest(TestCase):
    """Test cases for the post-booking tasks"""

    def setUp(self):
        self.link = BookingLink.objects.create(
            owner_id=1, slug="intro-call", title="Intro call", duration=30
        )
        self.booking = Booking.objects.create(
            booking_link=self.link,
            name="Ada Guest",
            email="ada@example.com",
            start_time=utc(2030, 1, 7, 10, 0),
            end_time=utc(2030, 1, 7, 10, 30),
            assigned_user_id=1,
            duration=30,
        )

    def test_payload(self):
        payload = booking_payload(self.booking)

        self.assertEqual(payload["booking_id"], str(self.booking.id))
        self.assertEqual(payload["title"], "Intro call")
        self.assertEqual(payload["start"], "2030-01-07T10:00:00+00:00")
        self.assertIsNone(payload["meeting_url"])

    def test_notification_for_missing_booking(self):
        with self.assertLogs("apps.bookingapp.tasks", level="ERROR"):
            self.assertFalse(send_booking_notification_task(str(uuid.uuid4())))

    @patch("apps.bookingapp.tasks.get_notification_dispatcher")
    def test_notification_failure_is_logged(self, mock_dispatcher):
        mock_dispatcher.return_value.notify.side_effect = RuntimeError("smtp down")

        with self.assertLogs("apps.bookingapp.tasks", level="ERROR"):
            self.assertFalse(send_booking_notification_task(str(self.booking.id)))

    @patch("apps.bookingapp.tasks.send_booking_notification_task")
    @patch("apps.bookingapp.tasks.get_meeting_link_provider")
    def test_provider_failure_still_notifies(self, mock_provider, mock_notify):
        mock_provider.return_value.create_meeting_link.side_effect = RuntimeError("api down")

        with self.assertLogs("apps.bookingapp.tasks", level="ERROR"):
            self.assertIsNone(create_meeting_link_task(str(self.booking.id)))

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.meeting_url, "")
        mock_notify.delay.assert_called_once_with(str(self.booking.id))

    @patch("apps.bookingapp.tasks.send_booking_notification_task")
    @patch("apps.bookingapp.tasks.get_meeting_link_provider")
    def test_existing_meeting_url_is_kept(self, mock_provider, mock_notify):
        Booking.objects.filter(pk=self.booking.pk).update(meeting_url="https://meet.example.com/old")

        create_meeting_link_task(str(self.booking.id))

        mock_provider.return_value.create_meeting_link.assert_not_called()
        mock_notify.delay.assert_called_once()
