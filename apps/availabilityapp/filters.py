# apps/availabilityapp/filters.py
from datetime import date

from django_filters import rest_framework as filters

from apps.availabilityapp.enums import AvailabilityStatus, BlackoutType
from apps.availabilityapp.models import Availability, BlackoutDate, TimeSlotTemplate
from apps.availabilityapp.services.blackout_filter import BlackoutService
from utils.date_utils import get_month_bounds


class AvailabilityFilter(filters.FilterSet):
    """Filter for explicit availability slots"""

    start_date = filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = filters.DateFilter(field_name="date", lookup_expr="lte")
    status = filters.ChoiceFilter(choices=AvailabilityStatus.choices)
    is_booked = filters.BooleanFilter()

    class Meta:
        model = Availability
        fields = ["start_date", "end_date", "status", "is_booked"]


class BlackoutDateFilter(filters.FilterSet):
    """Filter for blackout dates by type, calendar period or upcoming"""

    type = filters.ChoiceFilter(field_name="blackout_type", choices=BlackoutType.choices)
    year = filters.NumberFilter(method="filter_period", min_value=1970, max_value=9999)
    month = filters.NumberFilter(method="filter_period", min_value=1, max_value=12)
    upcoming = filters.BooleanFilter(method="filter_upcoming")

    class Meta:
        model = BlackoutDate
        fields = ["type", "year", "month", "upcoming"]

    def filter_upcoming(self, queryset, name, value):
        if value:
            return queryset.filter(end_date__gte=date.today())
        return queryset

    def filter_period(self, queryset, name, value):
        # Year and month are combined in filter_queryset
        return queryset

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        data = self.form.cleaned_data
        year, month = data.get("year"), data.get("month")
        if data.get("upcoming") or not year:
            return queryset

        if month:
            start_date, end_date = get_month_bounds(int(year), int(month))
        else:
            start_date, end_date = date(int(year), 1, 1), date(int(year), 12, 31)
        return BlackoutService.filter_in_range(queryset, start_date, end_date)


class TimeSlotTemplateFilter(filters.FilterSet):
    active = filters.BooleanFilter(field_name="is_active")
    default = filters.BooleanFilter(field_name="is_default")

    class Meta:
        model = TimeSlotTemplate
        fields = ["active", "default"]
