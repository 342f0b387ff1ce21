# apps/bookinglinkapp/serializers.py
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.bookinglinkapp.models import DateOverride


class DateOverrideSerializer(serializers.ModelSerializer):
    """Serializer for an owner's date overrides"""

    class Meta:
        model = DateOverride
        fields = [
            "id",
            "date",
            "is_available",
            "start_time",
            "end_time",
            "label",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        # Upserts by date are handled in the view
        validators = []

    def validate(self, data):
        # Creation upserts in the view; an update must not land on a taken date
        if self.instance is not None and "date" in data:
            clash = DateOverride.objects.filter(
                owner_id=self.instance.owner_id, date=data["date"]
            ).exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError(
                    {"date": _("An override for this date already exists")}
                )

        is_available = data.get(
            "is_available", getattr(self.instance, "is_available", False)
        )
        start_time = data.get("start_time", getattr(self.instance, "start_time", None))
        end_time = data.get("end_time", getattr(self.instance, "end_time", None))

        if not is_available:
            data["start_time"] = None
            data["end_time"] = None
            return data

        if (start_time is None) != (end_time is None):
            raise serializers.ValidationError(
                _("Provide both start_time and end_time, or neither to keep regular hours")
            )
        if start_time is not None and end_time <= start_time:
            raise serializers.ValidationError(
                {"end_time": _("end_time must be after start_time")}
            )
        return data
