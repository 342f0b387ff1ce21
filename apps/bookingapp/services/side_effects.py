# apps/bookingapp/services/side_effects.py
import logging
from functools import partial

from django.db import transaction

from core.exceptions.custom_exceptions import SideEffectFailure

logger = logging.getLogger(__name__)


class SideEffectStatus:
    """Filled in by the commit hooks once the booking transaction commits."""

    def __init__(self):
        self.queued = []
        self.failures = []

    @property
    def degraded(self):
        return bool(self.failures)


class BookingSideEffects:
    """
    Queues the post-booking work (meeting link, notification) as Celery tasks.

    Tasks are only queued once the booking's transaction has committed, so a
    slow or failing provider can never hold up or roll back a booking.
    """

    def __init__(self, meeting_link_task=None, notification_task=None):
        if meeting_link_task is None or notification_task is None:
            from apps.bookingapp.tasks import (
                create_meeting_link_task,
                send_booking_notification_task,
            )

            meeting_link_task = meeting_link_task or create_meeting_link_task
            notification_task = notification_task or send_booking_notification_task
        self.meeting_link_task = meeting_link_task
        self.notification_task = notification_task

    def schedule(self, booking, config) -> SideEffectStatus:
        """Register the side effects of `booking` to run after commit."""
        status = SideEffectStatus()
        booking_id = str(booking.id)

        # The meeting-link task sends the notification itself once the URL exists
        if config.auto_create_meeting_link:
            task = self.meeting_link_task
        elif config.notify_on_booking:
            task = self.notification_task
        else:
            return status

        transaction.on_commit(partial(self._enqueue, task, booking_id, status))
        return status

    def _enqueue(self, task, booking_id, status):
        try:
            task.delay(booking_id)
        except Exception as e:
            failure = SideEffectFailure(
                f"Could not queue {task.name} for booking {booking_id}: {e}"
            )
            logger.error(str(failure))
            status.failures.append(failure)
            return
        status.queued.append(task.name)
