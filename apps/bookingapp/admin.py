# apps/bookingapp/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.bookingapp.models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin configuration for bookings"""

    list_display = [
        "name",
        "email",
        "booking_link",
        "assigned_user_id",
        "start_time",
        "end_time",
        "status",
    ]
    list_filter = ["status", "start_time"]
    search_fields = ["name", "email", "booking_link__slug"]
    date_hierarchy = "start_time"
    readonly_fields = [
        "booking_link",
        "start_time",
        "end_time",
        "assigned_user_id",
        "duration",
        "buffer_before",
        "buffer_after",
        "created_at",
        "updated_at",
    ]
    actions = ["cancel_bookings"]

    def cancel_bookings(self, request, queryset):
        for booking in queryset:
            booking.mark_cancelled()
        self.message_user(request, _("Selected bookings were cancelled."))

    cancel_bookings.short_description = _("Cancel selected bookings")
