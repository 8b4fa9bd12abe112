# apps/availabilityapp/models.py
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _
from model_utils import FieldTracker

from apps.artistsapp.models import Artist
from apps.availabilityapp.enums import (
    AvailabilityStatus,
    BlackoutType,
    DayOfWeek,
    RecurrenceFrequency,
)
from apps.availabilityapp.rules import DailyRule, MonthlyRule, OffsetsRule, WeeklyRule
from apps.availabilityapp.services.interval import Interval
from apps.bookingapp.models import Booking

MULTIPLIER_VALIDATORS = [MinValueValidator(Decimal("0.10")), MaxValueValidator(10)]


class RecurringPattern(models.Model):
    """Rule generating availability occurrences without per-date storage"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    artist = models.ForeignKey(
        Artist,
        on_delete=models.CASCADE,
        related_name="recurring_patterns",
        verbose_name=_("Artist"),
    )
    name = models.CharField(_("Name"), max_length=100)
    description = models.TextField(_("Description"), max_length=500, blank=True)
    frequency = models.CharField(
        _("Frequency"), max_length=10, choices=RecurrenceFrequency.choices
    )
    day_of_week = models.IntegerField(
        _("Day of Week"), choices=DayOfWeek.choices, null=True, blank=True
    )
    day_of_month = models.PositiveSmallIntegerField(
        _("Day of Month"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
    )
    week_of_month = models.PositiveSmallIntegerField(
        _("Week of Month"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    custom_offsets = models.JSONField(
        _("Custom Day Offsets"),
        default=list,
        blank=True,
        help_text=_("Days after valid_from on which the pattern occurs"),
    )
    start_time = models.TimeField(_("Start Time"))
    end_time = models.TimeField(_("End Time"))
    timezone = models.CharField(_("Local Time"), max_length=64, default=settings.TIME_ZONE)
    price_multiplier = models.DecimalField(
        _("Price Multiplier"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=MULTIPLIER_VALIDATORS,
    )
    minimum_hours = models.DecimalField(
        _("Minimum Hours"), max_digits=4, decimal_places=2, null=True, blank=True
    )
    valid_from = models.DateField(_("Valid From"))
    valid_until = models.DateField(_("Valid Until"), null=True, blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Recurring Pattern")
        verbose_name_plural = _("Recurring Patterns")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["artist", "is_active"]),
        ]

    def __str__(self):
        return f"{self.artist} - {self.name} ({self.get_frequency_display()})"

    def clean(self):
        """Validate time window, validity window and frequency-specific fields"""
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("End time must be after start time"))

        if self.valid_until and self.valid_from and self.valid_until <= self.valid_from:
            raise ValidationError(_("Valid until date must be after valid from date"))

        if self.frequency == RecurrenceFrequency.WEEKLY and self.day_of_week is None:
            raise ValidationError(_("Day of week is required for weekly patterns"))

        if self.frequency == RecurrenceFrequency.MONTHLY:
            if self.day_of_month is None and (
                self.week_of_month is None or self.day_of_week is None
            ):
                raise ValidationError(_("Day of month is required for monthly patterns"))

        if self.frequency == RecurrenceFrequency.CUSTOM:
            offsets = self.custom_offsets or []
            if not offsets or not all(
                isinstance(day, int) and not isinstance(day, bool) and day >= 0
                for day in offsets
            ):
                raise ValidationError(
                    _("Custom patterns need a list of non-negative day offsets")
                )

    @property
    def rule(self):
        """The pattern's recurrence rule as a typed variant"""
        if self.frequency == RecurrenceFrequency.DAILY:
            return DailyRule()
        if self.frequency == RecurrenceFrequency.WEEKLY:
            return WeeklyRule(day_of_week=self.day_of_week)
        if self.frequency == RecurrenceFrequency.MONTHLY:
            if self.day_of_month is not None:
                return MonthlyRule(day_of_month=self.day_of_month)
            return MonthlyRule(
                week_of_month=self.week_of_month, day_of_week=self.day_of_week
            )
        if self.frequency == RecurrenceFrequency.CUSTOM:
            return OffsetsRule(days=tuple(sorted(set(self.custom_offsets or []))))
        raise ValueError(f"Unknown recurrence frequency: {self.frequency}")


class TimeSlotTemplate(models.Model):
    """Reusable slot shape (duration, buffers, pricing) applied to many dates"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    artist = models.ForeignKey(
        Artist,
        on_delete=models.CASCADE,
        related_name="slot_templates",
        verbose_name=_("Artist"),
    )
    name = models.CharField(_("Name"), max_length=100)
    description = models.TextField(_("Description"), max_length=500, blank=True)
    duration_minutes = models.PositiveIntegerField(
        _("Duration (minutes)"),
        validators=[MinValueValidator(30), MaxValueValidator(1440)],
    )
    buffer_before = models.PositiveIntegerField(
        _("Buffer Before (minutes)"), default=0, validators=[MaxValueValidator(480)]
    )
    buffer_after = models.PositiveIntegerField(
        _("Buffer After (minutes)"), default=0, validators=[MaxValueValidator(480)]
    )
    price_multiplier = models.DecimalField(
        _("Price Multiplier"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=MULTIPLIER_VALIDATORS,
    )
    minimum_advance_hours = models.PositiveIntegerField(
        _("Minimum Advance Notice (hours)"),
        default=24,
        validators=[MinValueValidator(1), MaxValueValidator(8760)],
    )
    is_default = models.BooleanField(_("Default"), default=False)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Time Slot Template")
        verbose_name_plural = _("Time Slot Templates")
        ordering = ["-is_default", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["artist"],
                condition=Q(is_default=True),
                name="unique_default_template_per_artist",
            ),
        ]

    def __str__(self):
        return f"{self.artist} - {self.name} ({self.duration_minutes} min)"


class Availability(models.Model):
    """One explicit bookable (or explicitly blocked) window of an artist"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    artist = models.ForeignKey(
        Artist,
        on_delete=models.CASCADE,
        related_name="availability_slots",
        verbose_name=_("Artist"),
    )
    date = models.DateField(_("Date"), db_index=True)
    start_time = models.TimeField(_("Start Time"))
    end_time = models.TimeField(_("End Time"))
    status = models.CharField(
        _("Status"),
        max_length=20,
        choices=AvailabilityStatus.choices,
        default=AvailabilityStatus.AVAILABLE,
        db_index=True,
    )
    is_booked = models.BooleanField(_("Booked"), default=False)
    booking = models.OneToOneField(
        Booking,
        on_delete=models.SET_NULL,
        related_name="availability_slot",
        verbose_name=_("Booking"),
        null=True,
        blank=True,
    )
    price_multiplier = models.DecimalField(
        _("Price Multiplier"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=MULTIPLIER_VALIDATORS,
    )
    minimum_hours = models.DecimalField(
        _("Minimum Hours"), max_digits=4, decimal_places=2, null=True, blank=True
    )
    buffer_before = models.PositiveIntegerField(_("Buffer Before (minutes)"), default=0)
    buffer_after = models.PositiveIntegerField(_("Buffer After (minutes)"), default=0)
    notes = models.TextField(_("Notes"), blank=True)
    requirements = models.TextField(_("Requirements"), blank=True)
    recurring_pattern = models.ForeignKey(
        RecurringPattern,
        on_delete=models.RESTRICT,
        related_name="availability_slots",
        verbose_name=_("Recurring Pattern"),
        null=True,
        blank=True,
    )
    source_template = models.ForeignKey(
        TimeSlotTemplate,
        on_delete=models.SET_NULL,
        related_name="availability_slots",
        verbose_name=_("Source Template"),
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    # Track field changes for signals
    tracker = FieldTracker(fields=["status", "is_booked"])

    class Meta:
        verbose_name = _("Availability")
        verbose_name_plural = _("Availability")
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["artist", "date", "status"]),
            models.Index(fields=["artist", "date", "is_booked"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["artist", "date", "start_time"],
                name="unique_availability_start_per_artist",
            ),
            models.CheckConstraint(
                condition=Q(end_time__gt=models.F("start_time")),
                name="availability_end_after_start",
            ),
        ]

    def __str__(self):
        return (
            f"{self.artist} - {self.date:%Y-%m-%d} "
            f"{self.start_time:%H:%M}-{self.end_time:%H:%M} ({self.status})"
        )

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("End time must be after start time"))
        if self.is_booked and self.status != AvailabilityStatus.AVAILABLE:
            raise ValidationError(_("A booked slot cannot be marked unavailable"))

    @property
    def interval(self) -> Interval:
        return Interval.from_times(self.date, self.start_time, self.end_time)

    @property
    def is_bookable(self):
        return self.status == AvailabilityStatus.AVAILABLE and not self.is_booked


class BlackoutDate(models.Model):
    """Artist-declared unavailable date range overriding every other source"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    artist = models.ForeignKey(
        Artist,
        on_delete=models.CASCADE,
        related_name="blackout_dates",
        verbose_name=_("Artist"),
    )
    start_date = models.DateField(_("Start Date"), db_index=True)
    end_date = models.DateField(_("End Date"), db_index=True)
    title = models.CharField(_("Title"), max_length=100)
    description = models.TextField(_("Description"), max_length=500, blank=True)
    blackout_type = models.CharField(
        _("Type"), max_length=20, choices=BlackoutType.choices, default=BlackoutType.OTHER
    )
    is_recurring = models.BooleanField(_("Recurring"), default=False)
    recurring_rule = models.JSONField(_("Recurring Rule"), null=True, blank=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Blackout Date")
        verbose_name_plural = _("Blackout Dates")
        ordering = ["start_date"]
        indexes = [
            models.Index(fields=["artist", "start_date", "end_date"]),
        ]

    def __str__(self):
        return f"{self.artist} - {self.title} ({self.start_date} to {self.end_date})"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError(_("End date must not be before start date"))

    def covers(self, day):
        return self.start_date <= day <= self.end_date


class Holiday(models.Model):
    """Public holiday of the local calendar, priced with the holiday multiplier"""

    date = models.DateField(_("Date"), unique=True)
    name = models.CharField(_("Name"), max_length=100)
    is_active = models.BooleanField(_("Active"), default=True)

    class Meta:
        verbose_name = _("Holiday")
        verbose_name_plural = _("Holidays")
        ordering = ["date"]

    def __str__(self):
        return f"{self.name} ({self.date})"
