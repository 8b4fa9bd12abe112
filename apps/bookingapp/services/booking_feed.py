"""
Booking feed

Read-only view of the booking subsystem used by the availability engine to
find bookings that hold an artist's time.
"""

import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from apps.availabilityapp.services.interval import Interval, clock_interval
from apps.bookingapp.models import HARD_CONFLICT_STATUSES, Booking

logger = logging.getLogger(__name__)


def booking_interval(booking: Booking) -> Interval:
    """Wall-clock interval occupied by a booking"""
    return clock_interval(booking.event_date, booking.start_time, booking.end_time)


class BookingFeed:
    """Queries over bookings, never mutating them"""

    @staticmethod
    def list_conflicting_bookings(
        artist_id,
        requested: Interval,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Booking]:
        """
        Bookings of an artist whose interval overlaps ``requested``.

        Overlap is ``existing.start < requested.end and existing.end > requested.start``.

        Args:
            artist_id: ID of the artist
            requested: Requested interval
            statuses: Booking statuses treated as conflicts (confirmed/paid by default)

        Returns:
            Overlapping bookings ordered by start
        """
        statuses = list(statuses or HARD_CONFLICT_STATUSES)

        # A booking from the previous evening may run past midnight
        candidates = Booking.objects.filter(
            artist_id=artist_id,
            status__in=statuses,
            event_date__gte=requested.start.date() - timedelta(days=1),
            event_date__lte=requested.end.date(),
        ).order_by("event_date", "start_time")

        conflicts = [
            booking
            for booking in candidates
            if booking_interval(booking).overlaps(requested)
        ]
        if conflicts:
            logger.debug(
                f"Artist {artist_id} has {len(conflicts)} booking(s) overlapping "
                f"{requested.start:%Y-%m-%d %H:%M}-{requested.end:%H:%M}"
            )
        return conflicts

    @staticmethod
    def list_bookings_in_range(
        artist_id,
        start_date,
        end_date,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Booking]:
        """Bookings of an artist with an event date inside ``[start_date, end_date]``"""
        statuses = list(statuses or HARD_CONFLICT_STATUSES)
        return list(
            Booking.objects.filter(
                artist_id=artist_id,
                status__in=statuses,
                event_date__gte=start_date,
                event_date__lte=end_date,
            ).order_by("event_date", "start_time")
        )
