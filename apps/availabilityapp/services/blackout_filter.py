# apps/availabilityapp/services/blackout_filter.py
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from django.db import transaction
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from apps.availabilityapp.enums import AvailabilityStatus, BlackoutType
from apps.availabilityapp.models import Availability, BlackoutDate
from apps.availabilityapp.services.interval import Interval
from apps.bookingapp.services.booking_feed import BookingFeed
from utils.distributed_locks import artist_calendar_lock
from utils.exceptions import StateViolationError, ValidationError

logger = logging.getLogger(__name__)


def blackout_note(title):
    return f"Blackout: {title}"


class BlackoutSet:
    """In-memory blackout ranges of one artist, loaded once per query window"""

    def __init__(self, blackouts):
        self._blackouts = sorted(blackouts, key=lambda b: (b.start_date, b.end_date))

    def __iter__(self):
        return iter(self._blackouts)

    def __len__(self):
        return len(self._blackouts)

    def covering(self, day: date) -> Optional[BlackoutDate]:
        """First blackout whose range contains ``day``"""
        for blackout in self._blackouts:
            if blackout.covers(day):
                return blackout
        return None

    def covering_interval(self, interval: Interval) -> Optional[BlackoutDate]:
        """First blackout containing any calendar day the interval touches"""
        day = interval.start.date()
        last_day = (interval.end - timedelta(microseconds=1)).date()
        while day <= last_day:
            blackout = self.covering(day)
            if blackout:
                return blackout
            day += timedelta(days=1)
        return None


class BlackoutService:
    """
    Blackout lookups and the blackout creation side effect.

    Lookups never mutate. Creation flips the overlapping free availability of
    the artist to unavailable once, at creation time.
    """

    @staticmethod
    def overlapping(artist_id, start_date: date, end_date: date):
        """Queryset of blackouts intersecting ``[start_date, end_date]``"""
        return BlackoutDate.objects.filter(
            artist_id=artist_id, start_date__lte=end_date, end_date__gte=start_date
        ).order_by("start_date")

    @classmethod
    def load(cls, artist_id, start_date: date, end_date: date) -> BlackoutSet:
        return BlackoutSet(cls.overlapping(artist_id, start_date, end_date))

    @classmethod
    def find_blackout(cls, artist_id, interval: Interval) -> Optional[BlackoutDate]:
        """
        Find the blackout covering a candidate interval.

        Args:
            artist_id: ID of the artist
            interval: Candidate interval

        Returns:
            The covering BlackoutDate (for user-facing messaging) or None
        """
        last_day = (interval.end - timedelta(microseconds=1)).date()
        return cls.load(artist_id, interval.start.date(), last_day).covering_interval(interval)

    @staticmethod
    def filter_in_range(queryset, start_date: date, end_date: date):
        """Restrict a blackout queryset to ranges touching ``[start_date, end_date]``"""
        return queryset.filter(
            Q(start_date__gte=start_date, start_date__lte=end_date)
            | Q(end_date__gte=start_date, end_date__lte=end_date)
            | Q(start_date__lte=start_date, end_date__gte=end_date)
        )

    @classmethod
    def create_blackout(
        cls,
        artist,
        start_date: date,
        end_date: date,
        title: str,
        blackout_type: str = BlackoutType.OTHER,
        description: str = "",
        is_recurring: bool = False,
        recurring_rule=None,
    ) -> BlackoutDate:
        """
        Create a blackout and mark the artist's free availability in it unavailable.

        Args:
            artist: Artist instance
            start_date: First blacked out date
            end_date: Last blacked out date (inclusive)
            title: Title surfaced to customers
            blackout_type: BlackoutType value
            description: Optional description
            is_recurring: Whether the blackout repeats (stored only)
            recurring_rule: Recurrence metadata (stored only)

        Returns:
            The created BlackoutDate

        Raises:
            ValidationError: if end_date is before start_date
            StateViolationError: if a confirmed or paid booking falls in the range
        """
        cls._validate_range(start_date, end_date)

        with artist_calendar_lock(artist.id):
            with transaction.atomic():
                cls._reject_committed_bookings(artist.id, start_date, end_date)

                blackout = BlackoutDate.objects.create(
                    artist=artist,
                    start_date=start_date,
                    end_date=end_date,
                    title=title,
                    blackout_type=blackout_type,
                    description=description,
                    is_recurring=is_recurring,
                    recurring_rule=recurring_rule,
                )
                flipped = cls._flip_availability(artist.id, start_date, end_date, title)

        logger.info(
            f"Blackout '{title}' created for artist {artist.id} "
            f"({start_date} to {end_date}), {flipped} slot(s) marked unavailable"
        )
        return blackout

    @classmethod
    def update_blackout(cls, blackout: BlackoutDate, **changes) -> BlackoutDate:
        """
        Update a blackout, re-applying the creation rules to its new range.

        Availability flipped by the old range is left untouched.
        """
        start_date = changes.get("start_date", blackout.start_date)
        end_date = changes.get("end_date", blackout.end_date)
        cls._validate_range(start_date, end_date)

        with artist_calendar_lock(blackout.artist_id):
            with transaction.atomic():
                cls._reject_committed_bookings(blackout.artist_id, start_date, end_date)
                for field, value in changes.items():
                    setattr(blackout, field, value)
                blackout.save()
                flipped = cls._flip_availability(
                    blackout.artist_id, start_date, end_date, blackout.title
                )

        logger.info(
            f"Blackout {blackout.id} updated, {flipped} slot(s) marked unavailable"
        )
        return blackout

    @staticmethod
    def _validate_range(start_date: date, end_date: date):
        if end_date < start_date:
            raise ValidationError(
                _("End date must not be before start date"),
                detail={"start_date": str(start_date), "end_date": str(end_date)},
            )

    @staticmethod
    def _reject_committed_bookings(artist_id, start_date: date, end_date: date):
        # Bookings from the evening before may run past midnight into the range
        blocked = Interval(
            datetime.combine(start_date, time.min),
            datetime.combine(end_date + timedelta(days=1), time.min),
        )
        bookings = BookingFeed.list_conflicting_bookings(artist_id, blocked)
        if bookings:
            logger.warning(
                f"Blackout for artist {artist_id} rejected: "
                f"{len(bookings)} confirmed booking(s) in {start_date}..{end_date}"
            )
            raise StateViolationError(
                _("Cannot create blackout date - there are confirmed bookings in this period"),
                detail={
                    "rejected_because_confirmed_bookings": [
                        {
                            "id": str(booking.id),
                            "booking_number": booking.booking_number,
                            "event_date": str(booking.event_date),
                            "event_type": booking.event_type,
                            "status": booking.status,
                        }
                        for booking in bookings
                    ]
                },
            )

    @staticmethod
    def _flip_availability(artist_id, start_date: date, end_date: date, title: str) -> int:
        # Booked rows stay available
        return Availability.objects.filter(
            artist_id=artist_id,
            date__gte=start_date,
            date__lte=end_date,
            is_booked=False,
        ).update(status=AvailabilityStatus.UNAVAILABLE, notes=blackout_note(title))

