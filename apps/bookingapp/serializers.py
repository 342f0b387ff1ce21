# apps/bookingapp/serializers.py
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.bookingapp.models import Booking
from apps.bookingapp.utils.timezone_utils import get_timezone


class AvailabilityQuerySerializer(serializers.Serializer):
    """Query parameters of the availability endpoint"""

    startDate = serializers.DateField()
    endDate = serializers.DateField(required=False)
    timezone = serializers.CharField(required=False, allow_blank=True)

    def validate_timezone(self, value):
        if value and get_timezone(value) is None:
            raise serializers.ValidationError(_("Unknown timezone"))
        return value

    def validate(self, data):
        end_date = data.get("endDate")
        if end_date is not None and end_date <= data["startDate"]:
            raise serializers.ValidationError(
                {"endDate": _("endDate must be after startDate")}
            )
        return data


class SlotSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()


class BookingCreateSerializer(serializers.Serializer):
    """Guest submission of a chosen slot"""

    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, data):
        if data["end"] <= data["start"]:
            raise serializers.ValidationError({"end": _("end must be after start")})
        return data


class BookingSerializer(serializers.ModelSerializer):
    """Serializer for confirmed bookings"""

    booking_link = serializers.UUIDField(source="booking_link_id", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_link",
            "name",
            "email",
            "notes",
            "start_time",
            "end_time",
            "assigned_user_id",
            "status",
            "status_display",
            "meeting_url",
            "created_at",
        ]
        read_only_fields = fields


class BookingOutcomeSerializer(serializers.Serializer):
    """Response of the booking endpoint"""

    booking = BookingSerializer()
    assigned_user_id = serializers.IntegerField()
    degraded = serializers.BooleanField()
    redirect_url = serializers.CharField(allow_blank=True)
    confirmation_message = serializers.CharField(allow_blank=True)
