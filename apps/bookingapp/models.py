# apps/bookingapp/models.py
import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils import FieldTracker

from apps.artistsapp.models import Artist


class BookingStatus(models.TextChoices):
    """Lifecycle of a booking request"""

    INQUIRY = "inquiry", _("Inquiry")
    QUOTED = "quoted", _("Quoted")
    CONFIRMED = "confirmed", _("Confirmed")
    PAID = "paid", _("Paid")
    COMPLETED = "completed", _("Completed")
    CANCELLED = "cancelled", _("Cancelled")


# Bookings that hold the artist's time
HARD_CONFLICT_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.PAID)

# Bookings hidden from the public calendar, including past engagements
CALENDAR_BLOCKING_STATUSES = (
    BookingStatus.CONFIRMED,
    BookingStatus.PAID,
    BookingStatus.COMPLETED,
)


class Booking(models.Model):
    """
    Booking record owned by the booking subsystem.

    The availability engine only reads bookings; it never creates or changes them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    artist = models.ForeignKey(
        Artist,
        on_delete=models.CASCADE,
        related_name="bookings",
        verbose_name=_("Artist"),
    )
    booking_number = models.CharField(_("Booking Number"), max_length=32, unique=True)
    event_type = models.CharField(_("Event Type"), max_length=100, blank=True)
    event_date = models.DateField(_("Event Date"), db_index=True)
    start_time = models.TimeField(_("Start Time"))
    end_time = models.TimeField(_("End Time"))
    status = models.CharField(
        _("Status"),
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.INQUIRY,
        db_index=True,
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    # Track status changes for slot release
    tracker = FieldTracker(fields=["status"])

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-event_date", "-start_time"]
        indexes = [
            models.Index(fields=["artist", "event_date", "status"]),
        ]

    def __str__(self):
        return f"{self.booking_number} - {self.artist} ({self.event_date})"

    def clean(self):
        if self.end_time == self.start_time:
            raise ValidationError(_("End time must differ from start time"))
