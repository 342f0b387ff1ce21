# apps/bookinglinkapp/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.bookinglinkapp.models import BookingLink, DateOverride


@admin.register(BookingLink)
class BookingLinkAdmin(admin.ModelAdmin):
    """Admin configuration for booking links"""

    list_display = [
        "title",
        "slug",
        "owner_id",
        "duration",
        "is_team_booking",
        "assignment_method",
        "is_one_off",
        "is_expired",
        "is_active",
    ]
    list_filter = ["is_team_booking", "assignment_method", "is_one_off", "is_active"]
    search_fields = ["title", "slug"]
    prepopulated_fields = {"slug": ("title",)}
    readonly_fields = ["created_at", "updated_at"]
    fieldsets = (
        (None, {"fields": ("owner_id", "title", "slug", "description", "is_active")}),
        (
            _("Scheduling"),
            {
                "fields": (
                    "duration",
                    "slot_increment",
                    "buffer_before",
                    "buffer_after",
                    "lead_time",
                    "availability_window",
                    "availability_template",
                )
            },
        ),
        (
            _("Limits"),
            {
                "fields": (
                    "max_bookings_per_day",
                    "max_bookings_per_week",
                    "max_bookings_per_month",
                    "is_one_off",
                    "is_expired",
                )
            },
        ),
        (
            _("Team"),
            {
                "fields": (
                    "is_team_booking",
                    "team_member_ids",
                    "assignment_method",
                    "specific_member_id",
                    "round_robin_scope",
                )
            },
        ),
        (
            _("After booking"),
            {
                "fields": (
                    "auto_create_meeting_link",
                    "notify_on_booking",
                    "redirect_url",
                    "confirmation_message",
                )
            },
        ),
        (_("Timestamps"), {"fields": ("created_at", "updated_at")}),
    )


@admin.register(DateOverride)
class DateOverrideAdmin(admin.ModelAdmin):
    """Admin configuration for date overrides"""

    list_display = ["date", "owner_id", "is_available", "start_time", "end_time", "label"]
    list_filter = ["is_available"]
    search_fields = ["label"]
    date_hierarchy = "date"
