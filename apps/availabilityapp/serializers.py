# apps/availabilityapp/serializers.py
from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.availabilityapp.enums import RecurrenceFrequency
from apps.availabilityapp.models import (
    Availability,
    BlackoutDate,
    RecurringPattern,
    TimeSlotTemplate,
)

HHMM_FORMAT = "%H:%M"


def hhmm_field(**kwargs):
    return serializers.TimeField(format=HHMM_FORMAT, input_formats=[HHMM_FORMAT], **kwargs)


class AvailabilitySerializer(serializers.ModelSerializer):
    """Serializer for explicit availability slots"""

    start_time = hhmm_field()
    end_time = hhmm_field()
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Availability
        fields = [
            "id",
            "date",
            "start_time",
            "end_time",
            "status",
            "status_display",
            "is_booked",
            "booking",
            "price_multiplier",
            "minimum_hours",
            "buffer_before",
            "buffer_after",
            "notes",
            "requirements",
            "recurring_pattern",
            "source_template",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "is_booked",
            "booking",
            "recurring_pattern",
            "source_template",
            "created_at",
            "updated_at",
        ]

    def validate(self, data):
        """Validate the slot window and that a booked slot stays available"""
        start_time = data.get("start_time", getattr(self.instance, "start_time", None))
        end_time = data.get("end_time", getattr(self.instance, "end_time", None))
        if start_time and end_time and end_time <= start_time:
            raise serializers.ValidationError({"end_time": _("End time must be after start time")})

        if self.instance and self.instance.is_booked:
            if "status" in data and data["status"] != self.instance.status:
                raise serializers.ValidationError(
                    {"status": _("A booked slot cannot be marked unavailable")}
                )
            if any(field in data for field in ("date", "start_time", "end_time")):
                raise serializers.ValidationError(_("A booked slot cannot be moved"))

        artist = self.context["artist"]
        date = data.get("date", getattr(self.instance, "date", None))
        clash = Availability.objects.filter(artist=artist, date=date, start_time=start_time)
        if self.instance:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError(
                _("Availability already exists for this date and time")
            )
        return data


class RecurringPatternSerializer(serializers.ModelSerializer):
    """Serializer for recurring patterns"""

    start_time = hhmm_field()
    end_time = hhmm_field()
    frequency_display = serializers.CharField(source="get_frequency_display", read_only=True)
    custom_offsets = serializers.ListField(
        child=serializers.IntegerField(min_value=0), required=False
    )
    timezone = serializers.CharField(max_length=64, required=False)
    minimum_hours = serializers.DecimalField(
        max_digits=4,
        decimal_places=2,
        min_value=1,
        max_value=24,
        required=False,
        allow_null=True,
    )

    class Meta:
        model = RecurringPattern
        fields = [
            "id",
            "name",
            "description",
            "frequency",
            "frequency_display",
            "day_of_week",
            "day_of_month",
            "week_of_month",
            "custom_offsets",
            "start_time",
            "end_time",
            "timezone",
            "price_multiplier",
            "minimum_hours",
            "valid_from",
            "valid_until",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, data):
        """Validate frequency-specific fields and the time and validity windows"""

        def current(field):
            return data.get(field, getattr(self.instance, field, None))

        start_time, end_time = current("start_time"), current("end_time")
        if start_time and end_time and end_time <= start_time:
            raise serializers.ValidationError({"end_time": _("End time must be after start time")})

        valid_from, valid_until = current("valid_from"), current("valid_until")
        if valid_from and valid_until and valid_until <= valid_from:
            raise serializers.ValidationError(
                {"valid_until": _("Valid until date must be after valid from date")}
            )

        frequency = current("frequency")
        if frequency == RecurrenceFrequency.WEEKLY and current("day_of_week") is None:
            raise serializers.ValidationError(
                {"day_of_week": _("Day of week is required for weekly patterns")}
            )
        if frequency == RecurrenceFrequency.MONTHLY and current("day_of_month") is None:
            if current("week_of_month") is None or current("day_of_week") is None:
                raise serializers.ValidationError(
                    {"day_of_month": _("Day of month is required for monthly patterns")}
                )
        if frequency == RecurrenceFrequency.CUSTOM and not current("custom_offsets"):
            raise serializers.ValidationError(
                {"custom_offsets": _("Custom patterns need at least one day offset")}
            )
        return data


class BlackoutDateSerializer(serializers.ModelSerializer):
    """Serializer for blackout dates"""

    blackout_type_display = serializers.CharField(
        source="get_blackout_type_display", read_only=True
    )

    class Meta:
        model = BlackoutDate
        fields = [
            "id",
            "start_date",
            "end_date",
            "title",
            "description",
            "blackout_type",
            "blackout_type_display",
            "is_recurring",
            "recurring_rule",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, data):
        start_date = data.get("start_date", getattr(self.instance, "start_date", None))
        end_date = data.get("end_date", getattr(self.instance, "end_date", None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError(
                {"end_date": _("End date must not be before start date")}
            )
        return data


class TimeSlotTemplateSerializer(serializers.ModelSerializer):
    """Serializer for time slot templates"""

    class Meta:
        model = TimeSlotTemplate
        fields = [
            "id",
            "name",
            "description",
            "duration_minutes",
            "buffer_before",
            "buffer_after",
            "price_multiplier",
            "minimum_advance_hours",
            "is_default",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class AvailabilityCheckSerializer(serializers.Serializer):
    """Request body of an availability check"""

    date = serializers.DateField()
    start_time = hhmm_field()
    duration_minutes = serializers.IntegerField()
    include_alternatives = serializers.BooleanField(default=False)
    alternative_range_days = serializers.IntegerField(required=False)

    def validate_duration_minutes(self, value):
        config = settings.ARTISTBOOK
        low = config["MIN_REQUEST_DURATION_MINUTES"]
        high = config["MAX_REQUEST_DURATION_MINUTES"]
        if not low <= value <= high:
            raise serializers.ValidationError(
                _("Duration must be between %(low)s and %(high)s minutes")
                % {"low": low, "high": high}
            )
        return value

    def validate_alternative_range_days(self, value):
        high = settings.ARTISTBOOK["MAX_ALTERNATIVE_RANGE_DAYS"]
        if not 1 <= value <= high:
            raise serializers.ValidationError(
                _("Alternative range must be between 1 and %(high)s days") % {"high": high}
            )
        return value


class ReserveSlotSerializer(AvailabilityCheckSerializer):
    """Request body of a slot reservation"""

    booking_id = serializers.UUIDField()
    include_alternatives = None
    alternative_range_days = None


class ReleaseSlotSerializer(serializers.Serializer):
    booking_id = serializers.UUIDField()


class ApplyTemplateSerializer(serializers.Serializer):
    """Request body for applying a template to a list of dates"""

    template_id = serializers.UUIDField()
    dates = serializers.ListField(child=serializers.DateField(), min_length=1)
    start_time = hhmm_field()
    overwrite_existing = serializers.BooleanField(default=False)

    def validate_dates(self, value):
        high = settings.ARTISTBOOK["MAX_TEMPLATE_DATES"]
        if len(value) > high:
            raise serializers.ValidationError(
                _("At most %(high)s dates can be applied at once") % {"high": high}
            )
        return value


class PublicAvailabilityQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    year = serializers.IntegerField(required=False, min_value=1970, max_value=9999)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)


class MonthQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1970, max_value=9999)
    month = serializers.IntegerField(min_value=1, max_value=12)


class MaterializeSerializer(serializers.Serializer):
    horizon_days = serializers.IntegerField(required=False, min_value=1, max_value=366)


class OccurrenceSerializer(serializers.Serializer):
    date = serializers.DateField()
    start_time = hhmm_field()
    end_time = hhmm_field()
    price_multiplier = serializers.DecimalField(max_digits=5, decimal_places=2)
    minimum_hours = serializers.DecimalField(max_digits=4, decimal_places=2, allow_null=True)
