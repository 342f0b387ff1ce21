# apps/bookingapp/tasks.py
import logging

from celery import shared_task
from celery.exceptions import SoftTimeLimitExceeded
from django.conf import settings

from apps.bookingapp.integrations.meeting_links import get_meeting_link_provider
from apps.bookingapp.integrations.notifications import get_notification_dispatcher
from apps.bookingapp.models import Booking
from apps.bookingapp.storage import DjangoSchedulingStorage
from utils.constants import EVENT_BOOKING_CONFIRMED
from utils.distributed_locks import with_distributed_lock

logger = logging.getLogger(__name__)

SIDE_EFFECT_TIMEOUT = getattr(settings, "SIDE_EFFECT_TIMEOUT", 10)


def booking_payload(booking):
    """Notification payload for a booking"""
    link = booking.booking_link
    return {
        "booking_id": str(booking.id),
        "link_id": str(link.id),
        "title": link.title,
        "owner_id": link.owner_id,
        "assigned_user_id": booking.assigned_user_id,
        "guest_name": booking.name,
        "guest_email": booking.email,
        "notes": booking.notes,
        "start": booking.start_time.isoformat(),
        "end": booking.end_time.isoformat(),
        "meeting_url": booking.meeting_url or None,
    }


@shared_task(soft_time_limit=SIDE_EFFECT_TIMEOUT)
@with_distributed_lock(
    key_func=lambda booking_id: f"meeting-link:{booking_id}",
    expires=SIDE_EFFECT_TIMEOUT * 2,
    timeout=0,
)
def create_meeting_link_task(booking_id):
    """Create the meeting link of a booking, then send its notification"""
    try:
        booking = Booking.objects.select_related("booking_link").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for meeting link creation")
        return None

    link = booking.booking_link
    url = None
    if not booking.meeting_url:
        try:
            url = get_meeting_link_provider().create_meeting_link(
                link.owner_id,
                {
                    "title": link.title,
                    "start": booking.start_time.isoformat(),
                    "end": booking.end_time.isoformat(),
                    "attendee": booking.email,
                },
            )
        except SoftTimeLimitExceeded:
            logger.error(f"Meeting link creation for booking {booking_id} timed out")
        except Exception as e:
            logger.error(f"Meeting link creation for booking {booking_id} failed: {str(e)}")

        if url:
            DjangoSchedulingStorage().set_meeting_url(booking.id, url)
            booking.meeting_url = url
            logger.info(f"Meeting link created for booking {booking_id}")

    if link.notify_on_booking:
        send_booking_notification_task.delay(str(booking.id))

    return url


@shared_task(soft_time_limit=SIDE_EFFECT_TIMEOUT)
def send_booking_notification_task(booking_id):
    """Send the booking-confirmed notification; failures are only logged"""
    try:
        booking = Booking.objects.select_related("booking_link").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for notification")
        return False

    try:
        sent = get_notification_dispatcher().notify(
            EVENT_BOOKING_CONFIRMED, booking_payload(booking)
        )
    except SoftTimeLimitExceeded:
        logger.error(f"Notification for booking {booking_id} timed out")
        return False
    except Exception as e:
        logger.error(f"Notification for booking {booking_id} failed: {str(e)}")
        return False

    if not sent:
        logger.error(f"Notification for booking {booking_id} was not delivered")
    return sent
