import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class CalendarEvent(models.Model):
    """An event synced from one of the user's external calendars"""

    CALENDAR_TYPE_CHOICES = (
        ("google", _("Google")),
        ("outlook", _("Outlook")),
        ("ical", _("iCalendar")),
        ("local", _("Local")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.PositiveIntegerField(_("Owner"), db_index=True)
    title = models.CharField(_("Title"), max_length=255, blank=True)
    start_time = models.DateTimeField(_("Start Time"))
    end_time = models.DateTimeField(_("End Time"))
    is_all_day = models.BooleanField(_("All Day"), default=False)
    external_id = models.CharField(_("External ID"), max_length=255, blank=True)
    calendar_type = models.CharField(
        _("Calendar Type"), max_length=20, choices=CALENDAR_TYPE_CHOICES, default="local"
    )

    class Meta:
        verbose_name = _("Calendar Event")
        verbose_name_plural = _("Calendar Events")
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["owner_id", "start_time", "end_time"]),
        ]

    def __str__(self):
        return f"{self.title or 'Busy'} ({self.start_time} - {self.end_time})"


class SchedulingSettings(models.Model):
    """Per-user scheduling preferences"""

    owner_id = models.PositiveIntegerField(_("Owner"), unique=True)
    preferred_timezone = models.CharField(
        _("Preferred Timezone"), max_length=64, blank=True
    )
    time_blocks = models.JSONField(
        _("Time Blocks"),
        default=list,
        blank=True,
        help_text=_(
            'Manually declared busy periods: [{"startDate": ..., "endDate": ..., '
            '"title": ..., "allDay": false}]'
        ),
    )
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Scheduling Settings")
        verbose_name_plural = _("Scheduling Settings")

    def __str__(self):
        return f"Settings for user {self.owner_id}"
