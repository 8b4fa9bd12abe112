# apps/availabilityapp/tests/helpers.py
import uuid
from datetime import date, datetime, time
from decimal import Decimal

from apps.artistsapp.models import Artist
from apps.availabilityapp.models import Availability
from apps.bookingapp.models import Booking, BookingStatus

# Sunday noon; every service test measures the booking window from here
NOW = datetime(2025, 6, 1, 12, 0)


def create_test_artist(**kwargs):
    """Create an artist with a flat 100/hour rate and default booking window"""
    defaults = {
        "stage_name": "Test Artist",
        "hourly_rate": Decimal("100.00"),
        "minimum_hours": Decimal("1.00"),
        "min_advance_booking_hours": 24,
        "max_advance_booking_days": 365,
    }
    defaults.update(kwargs)
    return Artist.objects.create(**defaults)


def create_test_slot(artist, day, start=time(9, 0), end=time(17, 0), **kwargs):
    return Availability.objects.create(
        artist=artist, date=day, start_time=start, end_time=end, **kwargs
    )


def create_test_booking(artist, day, start, end, status=BookingStatus.CONFIRMED, **kwargs):
    return Booking.objects.create(
        artist=artist,
        booking_number=kwargs.pop("booking_number", f"BK-{uuid.uuid4().hex[:10]}"),
        event_date=day,
        start_time=start,
        end_time=end,
        status=status,
        **kwargs,
    )


def d(value):
    """Shorthand for ISO dates in assertions"""
    return date.fromisoformat(value)
