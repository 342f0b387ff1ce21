# apps/bookingapp/storage.py
"""
Storage collaborator of the scheduling engine.

Services never touch the ORM directly; they receive a storage object. The
Django implementation below is what runs in production, tests swap in an
in-memory one.
"""

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.db.models import Count

from apps.bookinglinkapp.config import BookingLinkConfig, DateOverrideRule
from apps.bookinglinkapp.models import BookingLink, DateOverride
from apps.calendarapp.models import CalendarEvent, SchedulingSettings
from core.exceptions.custom_exceptions import LinkNotFound

from .domain import BookingRequest, BusyInterval
from .models import Booking, BookingStatus

logger = logging.getLogger(__name__)


class BaseSchedulingStorage:
    """Interface the engine expects from its persistent store."""

    def get_link_config(self, link_id) -> BookingLinkConfig:
        raise NotImplementedError("Subclasses must implement get_link_config")

    def get_link_config_by_slug(self, slug: str) -> BookingLinkConfig:
        raise NotImplementedError("Subclasses must implement get_link_config_by_slug")

    def lock_link(self, link_id) -> BookingLinkConfig:
        """Re-read the link, holding a row lock until the transaction ends."""
        raise NotImplementedError("Subclasses must implement lock_link")

    def get_owner_timezone(self, owner_id: int) -> Optional[str]:
        raise NotImplementedError("Subclasses must implement get_owner_timezone")

    def get_date_override(self, owner_id: int, day: date) -> Optional[DateOverrideRule]:
        raise NotImplementedError("Subclasses must implement get_date_override")

    def get_calendar_intervals(
        self, user_ids: Iterable[int], start: datetime, end: datetime
    ) -> List[BusyInterval]:
        raise NotImplementedError("Subclasses must implement get_calendar_intervals")

    def get_booking_intervals(
        self, user_ids: Iterable[int], start: datetime, end: datetime
    ) -> List[BusyInterval]:
        raise NotImplementedError("Subclasses must implement get_booking_intervals")

    def get_time_blocks(self, user_ids: Iterable[int]) -> Dict[int, list]:
        """Raw declared time blocks per user, unparsed."""
        raise NotImplementedError("Subclasses must implement get_time_blocks")

    def create_booking(
        self, config: BookingLinkConfig, request: BookingRequest, assigned_user_id: int
    ):
        raise NotImplementedError("Subclasses must implement create_booking")

    def mark_link_expired(self, link_id) -> None:
        raise NotImplementedError("Subclasses must implement mark_link_expired")

    def count_bookings(self, link_id, start: datetime, end: datetime) -> int:
        """Confirmed bookings of a link starting in ``[start, end)``."""
        raise NotImplementedError("Subclasses must implement count_bookings")

    def count_bookings_by_member(
        self, link_ids: Iterable, member_ids: Iterable[int]
    ) -> Dict[int, int]:
        raise NotImplementedError("Subclasses must implement count_bookings_by_member")

    def team_link_ids_for_owner(self, owner_id: int) -> List:
        raise NotImplementedError("Subclasses must implement team_link_ids_for_owner")

    def set_meeting_url(self, booking_id, url: str) -> None:
        raise NotImplementedError("Subclasses must implement set_meeting_url")


class DjangoSchedulingStorage(BaseSchedulingStorage):
    """ORM-backed storage."""

    def get_link_config(self, link_id) -> BookingLinkConfig:
        try:
            link = BookingLink.objects.get(pk=link_id, is_active=True)
        except (BookingLink.DoesNotExist, ValidationError):
            raise LinkNotFound()
        return link.to_config()

    def get_link_config_by_slug(self, slug: str) -> BookingLinkConfig:
        try:
            link = BookingLink.objects.get(slug=slug, is_active=True)
        except BookingLink.DoesNotExist:
            raise LinkNotFound()
        return link.to_config()

    def lock_link(self, link_id) -> BookingLinkConfig:
        try:
            link = BookingLink.objects.select_for_update().get(pk=link_id)
        except BookingLink.DoesNotExist:
            raise LinkNotFound()
        if not link.is_active:
            raise LinkNotFound()
        return link.to_config()

    def get_owner_timezone(self, owner_id: int) -> Optional[str]:
        tz_name = (
            SchedulingSettings.objects.filter(owner_id=owner_id)
            .values_list("preferred_timezone", flat=True)
            .first()
        )
        return tz_name or None

    def get_date_override(self, owner_id: int, day: date) -> Optional[DateOverrideRule]:
        override = DateOverride.objects.filter(owner_id=owner_id, date=day).first()
        return override.to_rule() if override else None

    def get_calendar_intervals(self, user_ids, start, end):
        events = CalendarEvent.objects.filter(
            owner_id__in=list(user_ids), start_time__lt=end, end_time__gt=start
        ).values_list("owner_id", "start_time", "end_time")
        return [
            BusyInterval(start=s, end=e, owner_id=owner_id, source="event")
            for owner_id, s, e in events
        ]

    def get_booking_intervals(self, user_ids, start, end):
        bookings = Booking.objects.filter(
            assigned_user_id__in=list(user_ids),
            status=BookingStatus.CONFIRMED.value,
            start_time__lt=end,
            end_time__gt=start,
        ).values_list("assigned_user_id", "start_time", "end_time")
        return [
            BusyInterval(start=s, end=e, owner_id=user_id, source="booking")
            for user_id, s, e in bookings
        ]

    def get_time_blocks(self, user_ids):
        return dict(
            SchedulingSettings.objects.filter(owner_id__in=list(user_ids)).values_list(
                "owner_id", "time_blocks"
            )
        )

    def create_booking(self, config, request, assigned_user_id):
        return Booking.objects.create(
            booking_link_id=config.link_id,
            name=request.name,
            email=request.email,
            notes=request.notes,
            start_time=request.start,
            end_time=request.end,
            assigned_user_id=assigned_user_id,
            status=BookingStatus.CONFIRMED.value,
            buffer_before=config.buffer_before,
            buffer_after=config.buffer_after,
            duration=config.duration,
        )

    def mark_link_expired(self, link_id) -> None:
        BookingLink.objects.filter(pk=link_id).update(is_expired=True)
        logger.info(f"One-off booking link {link_id} marked as expired")

    def count_bookings(self, link_id, start, end) -> int:
        return Booking.objects.filter(
            booking_link_id=link_id,
            status=BookingStatus.CONFIRMED.value,
            start_time__gte=start,
            start_time__lt=end,
        ).count()

    def count_bookings_by_member(self, link_ids, member_ids):
        rows = (
            Booking.objects.filter(
                booking_link_id__in=list(link_ids),
                assigned_user_id__in=list(member_ids),
                status=BookingStatus.CONFIRMED.value,
            )
            .values("assigned_user_id")
            .order_by()
            .annotate(total=Count("id"))
        )
        return {row["assigned_user_id"]: row["total"] for row in rows}

    def team_link_ids_for_owner(self, owner_id: int):
        return list(
            BookingLink.objects.filter(
                owner_id=owner_id, is_team_booking=True
            ).values_list("id", flat=True)
        )

    def set_meeting_url(self, booking_id, url: str) -> None:
        Booking.objects.filter(pk=booking_id).update(meeting_url=url)
