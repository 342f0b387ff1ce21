# apps/bookinglinkapp/filters.py
from django_filters import rest_framework as filters

from apps.bookinglinkapp.models import DateOverride


class DateOverrideFilter(filters.FilterSet):
    """Filter date overrides by date range and availability"""

    start_date = filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = filters.DateFilter(field_name="date", lookup_expr="lte")
    is_available = filters.BooleanFilter(field_name="is_available")

    class Meta:
        model = DateOverride
        fields = ["start_date", "end_date", "is_available"]
