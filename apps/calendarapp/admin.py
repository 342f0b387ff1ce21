from django.contrib import admin

from .models import CalendarEvent, SchedulingSettings


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("title", "owner_id", "start_time", "end_time", "calendar_type")
    list_filter = ("calendar_type", "is_all_day")
    search_fields = ("title", "external_id")
    date_hierarchy = "start_time"


@admin.register(SchedulingSettings)
class SchedulingSettingsAdmin(admin.ModelAdmin):
    list_display = ("owner_id", "preferred_timezone", "updated_at")
    search_fields = ("owner_id",)
