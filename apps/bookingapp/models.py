# apps/bookingapp/models.py
import uuid
from enum import Enum

from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.bookinglinkapp.models import BookingLink


class BookingStatus(str, Enum):
    """Enum for booking status values"""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class Booking(models.Model):
    """A guest's reservation of one slot on a booking link"""

    STATUS_CHOICES = (
        ("confirmed", _("Confirmed")),
        ("cancelled", _("Cancelled")),
        ("rescheduled", _("Rescheduled")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_link = models.ForeignKey(
        BookingLink,
        on_delete=models.PROTECT,
        related_name="bookings",
        verbose_name=_("Booking Link"),
    )
    name = models.CharField(_("Guest Name"), max_length=255)
    email = models.EmailField(_("Guest Email"))
    notes = models.TextField(_("Notes"), blank=True)
    start_time = models.DateTimeField(_("Start Time"), db_index=True)
    end_time = models.DateTimeField(_("End Time"), db_index=True)
    assigned_user_id = models.PositiveIntegerField(_("Assigned User"), db_index=True)
    status = models.CharField(
        _("Status"),
        max_length=20,
        choices=STATUS_CHOICES,
        default=BookingStatus.CONFIRMED.value,
        db_index=True,
    )
    meeting_url = models.URLField(_("Meeting URL"), max_length=500, blank=True)
    buffer_before = models.PositiveIntegerField(_("Buffer Before (minutes)"), default=0)
    buffer_after = models.PositiveIntegerField(_("Buffer After (minutes)"), default=0)
    duration = models.PositiveIntegerField(_("Duration (minutes)"), default=0)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-start_time"]
        indexes = [
            models.Index(fields=["start_time", "end_time"]),
            models.Index(fields=["assigned_user_id", "start_time", "status"]),
            models.Index(fields=["booking_link", "start_time", "status"]),
        ]

    def __str__(self):
        return f"{self.name} - {self.start_time.strftime('%Y-%m-%d %H:%M')} ({self.status})"

    @property
    def is_confirmed(self):
        return self.status == BookingStatus.CONFIRMED.value

    def mark_cancelled(self):
        """Mark booking as cancelled; it stops counting as busy time"""
        self.status = BookingStatus.CANCELLED.value
        self.save(update_fields=["status", "updated_at"])
