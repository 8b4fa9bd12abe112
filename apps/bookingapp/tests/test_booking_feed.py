from datetime import date, time

from django.test import TestCase

from apps.artistsapp.models import Artist
from apps.availabilityapp.services.interval import Interval
from apps.bookingapp.models import Booking, BookingStatus
from apps.bookingapp.services.booking_feed import BookingFeed, booking_interval


class BookingFeedTest(TestCase):
    """Test cases for the read-only booking queries"""

    def setUp(self):
        self.artist = Artist.objects.create(stage_name="Test Artist")
        self.other_artist = Artist.objects.create(stage_name="Other Artist")
        self.day = date(2025, 6, 10)

    def create_booking(self, number, start, end, status=BookingStatus.CONFIRMED, **kwargs):
        return Booking.objects.create(
            artist=kwargs.pop("artist", self.artist),
            booking_number=number,
            event_date=kwargs.pop("event_date", self.day),
            start_time=start,
            end_time=end,
            status=status,
        )

    def test_overlapping_bookings(self):
        overlapping = self.create_booking("BK-1", time(11, 0), time(13, 0))
        self.create_booking("BK-2", time(13, 0), time(15, 0))
        self.create_booking("BK-3", time(11, 0), time(12, 0), status=BookingStatus.QUOTED)
        self.create_booking("BK-4", time(11, 0), time(12, 0), artist=self.other_artist)

        requested = Interval.from_times(self.day, time(10, 0), time(13, 0))

        self.assertEqual(BookingFeed.list_conflicting_bookings(self.artist.id, requested), [overlapping])

    def test_paid_bookings_conflict(self):
        paid = self.create_booking("BK-1", time(11, 0), time(13, 0), status=BookingStatus.PAID)

        requested = Interval.from_times(self.day, time(12, 0), time(14, 0))

        self.assertEqual(BookingFeed.list_conflicting_bookings(self.artist.id, requested), [paid])

    def test_booking_from_previous_evening(self):
        late = self.create_booking(
            "BK-1", time(22, 0), time(2, 0), event_date=date(2025, 6, 9)
        )

        self.assertEqual(booking_interval(late).end.date(), self.day)
        requested = Interval.from_times(self.day, time(1, 0), time(3, 0))
        self.assertEqual(BookingFeed.list_conflicting_bookings(self.artist.id, requested), [late])

    def test_custom_statuses(self):
        inquiry = self.create_booking("BK-1", time(11, 0), time(13, 0), status=BookingStatus.INQUIRY)

        requested = Interval.from_times(self.day, time(10, 0), time(12, 0))

        self.assertEqual(
            BookingFeed.list_conflicting_bookings(
                self.artist.id, requested, statuses=[BookingStatus.INQUIRY]
            ),
            [inquiry],
        )

    def test_bookings_in_range(self):
        first = self.create_booking("BK-1", time(11, 0), time(13, 0))
        second = self.create_booking(
            "BK-2", time(19, 0), time(23, 0), event_date=date(2025, 6, 12)
        )
        self.create_booking("BK-3", time(19, 0), time(23, 0), event_date=date(2025, 6, 20))

        self.assertEqual(
            BookingFeed.list_bookings_in_range(self.artist.id, date(2025, 6, 10), date(2025, 6, 12)),
            [first, second],
        )
