import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.exceptions import ConfigurationError

from .config import BookingLinkConfig, DateOverrideRule, WeeklyTemplate
from .enums import AssignmentMethod, RoundRobinScope


def default_availability_template():
    return WeeklyTemplate.default().to_json()


class BookingLink(models.Model):
    """A shareable scheduling offer with a fixed duration and availability rules"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.PositiveIntegerField(_("Owner"), db_index=True)
    slug = models.SlugField(_("Slug"), max_length=100, unique=True)
    title = models.CharField(_("Title"), max_length=255)
    description = models.TextField(_("Description"), blank=True)

    duration = models.PositiveIntegerField(
        _("Duration (minutes)"),
        validators=[MinValueValidator(1), MaxValueValidator(1440)],
    )
    buffer_before = models.PositiveIntegerField(_("Buffer Before (minutes)"), default=0)
    buffer_after = models.PositiveIntegerField(_("Buffer After (minutes)"), default=0)
    lead_time = models.PositiveIntegerField(
        _("Lead Time (minutes)"),
        default=60,
        help_text=_("Minimum notice between booking and meeting start"),
    )
    slot_increment = models.PositiveIntegerField(
        _("Start Time Increment (minutes)"),
        default=30,
        validators=[MinValueValidator(5), MaxValueValidator(720)],
    )
    availability_template = models.JSONField(
        _("Weekly Availability"), default=default_availability_template
    )
    availability_window = models.PositiveIntegerField(
        _("Availability Window (days)"),
        default=30,
        help_text=_("How many days ahead slots are offered, 0 for no limit"),
    )

    max_bookings_per_day = models.PositiveIntegerField(
        _("Max Bookings per Day"), default=0
    )
    max_bookings_per_week = models.PositiveIntegerField(
        _("Max Bookings per Week"), default=0
    )
    max_bookings_per_month = models.PositiveIntegerField(
        _("Max Bookings per Month"), default=0
    )

    is_team_booking = models.BooleanField(_("Team Booking"), default=False)
    team_member_ids = models.JSONField(_("Team Members"), default=list, blank=True)
    assignment_method = models.CharField(
        _("Assignment Method"),
        max_length=20,
        choices=AssignmentMethod.choices,
        default=AssignmentMethod.POOLED,
    )
    specific_member_id = models.PositiveIntegerField(
        _("Specific Member"), null=True, blank=True
    )
    round_robin_scope = models.CharField(
        _("Round Robin Scope"),
        max_length=20,
        choices=RoundRobinScope.choices,
        default=RoundRobinScope.LINK,
    )

    is_one_off = models.BooleanField(_("One-off"), default=False)
    is_expired = models.BooleanField(_("Expired"), default=False)
    is_active = models.BooleanField(_("Active"), default=True)

    auto_create_meeting_link = models.BooleanField(
        _("Create Meeting Link"), default=False
    )
    notify_on_booking = models.BooleanField(_("Notify on Booking"), default=True)
    redirect_url = models.URLField(_("Redirect URL"), blank=True)
    confirmation_message = models.TextField(_("Confirmation Message"), blank=True)

    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Booking Link")
        verbose_name_plural = _("Booking Links")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner_id", "is_team_booking"]),
        ]

    def __str__(self):
        return f"{self.title} ({self.slug})"

    def clean(self):
        try:
            self.to_config()
        except ConfigurationError as e:
            raise ValidationError(str(e))

    def to_config(self) -> BookingLinkConfig:
        """Validated engine view of this link; raises ConfigurationError."""
        return BookingLinkConfig(
            link_id=self.id,
            owner_id=self.owner_id,
            duration=self.duration,
            template=WeeklyTemplate.from_json(self.availability_template),
            buffer_before=self.buffer_before,
            buffer_after=self.buffer_after,
            lead_time=self.lead_time,
            slot_increment=self.slot_increment,
            availability_window=self.availability_window,
            max_bookings_per_day=self.max_bookings_per_day,
            max_bookings_per_week=self.max_bookings_per_week,
            max_bookings_per_month=self.max_bookings_per_month,
            is_team_booking=self.is_team_booking,
            team_member_ids=self.team_member_ids,
            assignment_method=self.assignment_method,
            specific_member_id=self.specific_member_id,
            round_robin_scope=self.round_robin_scope,
            is_one_off=self.is_one_off,
            is_expired=self.is_expired,
            is_active=self.is_active,
            slug=self.slug,
            title=self.title,
            auto_create_meeting_link=self.auto_create_meeting_link,
            notify_on_booking=self.notify_on_booking,
            redirect_url=self.redirect_url,
            confirmation_message=self.confirmation_message,
        )


class DateOverride(models.Model):
    """Replacement for the weekly template on one calendar date (holiday, special hours)"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.PositiveIntegerField(_("Owner"), db_index=True)
    date = models.DateField(_("Date"))
    is_available = models.BooleanField(_("Is Available"), default=False)
    start_time = models.TimeField(_("Start Time"), null=True, blank=True)
    end_time = models.TimeField(_("End Time"), null=True, blank=True)
    label = models.CharField(_("Label"), max_length=255, blank=True)

    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Date Override")
        verbose_name_plural = _("Date Overrides")
        unique_together = ("owner_id", "date")
        ordering = ["date"]

    def __str__(self):
        if not self.is_available:
            return f"{self.date.strftime('%Y-%m-%d')} (Unavailable)"
        if self.start_time is None:
            return f"{self.date.strftime('%Y-%m-%d')} (Regular hours)"
        return f"{self.date.strftime('%Y-%m-%d')}: {self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"

    def clean(self):
        try:
            self.to_rule()
        except ConfigurationError as e:
            raise ValidationError(str(e))

    def to_rule(self) -> DateOverrideRule:
        return DateOverrideRule(
            date=self.date,
            is_available=self.is_available,
            start=self.start_time if self.is_available else None,
            end=self.end_time if self.is_available else None,
        )
