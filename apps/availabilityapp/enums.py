from enum import Enum

from django.db import models
from django.utils.translation import gettext_lazy as _


class DayOfWeek(models.IntegerChoices):
    """Day of week (0=Sunday, 6=Saturday)"""

    SUNDAY = 0, _("Sunday")
    MONDAY = 1, _("Monday")
    TUESDAY = 2, _("Tuesday")
    WEDNESDAY = 3, _("Wednesday")
    THURSDAY = 4, _("Thursday")
    FRIDAY = 5, _("Friday")
    SATURDAY = 6, _("Saturday")


class AvailabilityStatus(models.TextChoices):
    AVAILABLE = "available", _("Available")
    UNAVAILABLE = "unavailable", _("Unavailable")


class RecurrenceFrequency(models.TextChoices):
    DAILY = "daily", _("Daily")
    WEEKLY = "weekly", _("Weekly")
    MONTHLY = "monthly", _("Monthly")
    CUSTOM = "custom", _("Custom")


class BlackoutType(models.TextChoices):
    PERSONAL = "personal", _("Personal")
    HOLIDAY = "holiday", _("Holiday")
    MAINTENANCE = "maintenance", _("Maintenance")
    OTHER = "other", _("Other")


class CheckOutcome(str, Enum):
    """States of a single availability check"""

    PENDING = "PENDING"
    AVAILABLE = "AVAILABLE"
    TOO_SOON = "TOO_SOON"
    TOO_FAR = "TOO_FAR"
    NO_AVAILABILITY = "NO_AVAILABILITY"
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    BLACKOUT = "BLACKOUT"


class AlternativeReason(str, Enum):
    SAME_DAY_ALTERNATIVE = "SAME_DAY_ALTERNATIVE"
    ADJACENT_DAY = "ADJACENT_DAY"
    ALTERNATIVE_TIME = "ALTERNATIVE_TIME"


class BatchFailureCode(str, Enum):
    """Per-item failure codes of best-effort batch operations"""

    ALREADY_EXISTS = "ALREADY_EXISTS"
    SLOT_BOOKED = "SLOT_BOOKED"
    TOO_SOON = "TOO_SOON"
    BLACKOUT = "BLACKOUT"
    INVALID_INTERVAL = "INVALID_INTERVAL"
