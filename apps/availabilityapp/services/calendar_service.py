# apps/availabilityapp/services/calendar_service.py
import logging
from datetime import date, timedelta
from typing import List, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.utils.translation import gettext_lazy as _

from apps.artistsapp.models import Artist
from apps.availabilityapp.enums import BatchFailureCode
from apps.availabilityapp.models import Availability, RecurringPattern, TimeSlotTemplate
from apps.availabilityapp.services.batch import BatchResult
from apps.availabilityapp.services.blackout_filter import BlackoutService
from apps.availabilityapp.services.pricing_calculator import HolidayCalendar, PricingCalculator
from apps.availabilityapp.services.recurrence_expander import Occurrence, RecurrenceExpander
from apps.availabilityapp.services.slot_source import SlotSource
from apps.bookingapp.models import CALENDAR_BLOCKING_STATUSES
from apps.bookingapp.services.booking_feed import BookingFeed, booking_interval
from utils.date_utils import get_month_bounds
from utils.distributed_locks import artist_calendar_lock
from utils.exceptions import StateViolationError, ValidationError

logger = logging.getLogger(__name__)


class CalendarService:
    """Public calendar, pattern materialization and dependent-record guards"""

    # Cache settings
    PUBLIC_CACHE_TTL = 60 * 5  # 5 minutes

    GLOBAL_VERSION_KEY = "calendar_version:all"

    @staticmethod
    def _version_key(artist_id):
        return f"artist:{artist_id}:calendar_version"

    @staticmethod
    def _bump(key):
        try:
            cache.incr(key)
        except ValueError:
            cache.set(key, 2, None)

    @classmethod
    def invalidate(cls, artist_id):
        """Drop every cached public calendar of an artist"""
        cls._bump(cls._version_key(artist_id))

    @classmethod
    def invalidate_all(cls):
        cls._bump(cls.GLOBAL_VERSION_KEY)

    @classmethod
    def resolve_range(
        cls,
        today: date,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ):
        """
        Date range of a public calendar query.

        A month/year pair wins over explicit dates; the default is the next
        configured number of days starting today.
        """
        if year and month:
            return get_month_bounds(year, month)

        start_date = start_date or today
        end_date = end_date or start_date + timedelta(
            days=settings.ARTISTBOOK["PUBLIC_AVAILABILITY_DEFAULT_DAYS"]
        )
        if end_date < start_date:
            raise ValidationError(
                _("End date must not be before start date"),
                detail={"start_date": str(start_date), "end_date": str(end_date)},
            )
        return start_date, end_date

    @classmethod
    def list_public_availability(cls, artist: Artist, start_date: date, end_date: date) -> List[dict]:
        """
        Free slots shown on an artist's public calendar.

        Slots on blacked out dates and slots overlapping confirmed, paid or
        completed bookings are left out.

        Args:
            artist: Artist instance
            start_date: First date (inclusive)
            end_date: Last date (inclusive)

        Returns:
            List of slot dicts with the price of the full slot
        """
        version = cache.get_or_set(cls._version_key(artist.id), 1, None)
        global_version = cache.get_or_set(cls.GLOBAL_VERSION_KEY, 1, None)
        cache_key = (
            f"public_availability:{artist.id}:{start_date}:{end_date}"
            f":v{global_version}.{version}"
        )
        cached_result = cache.get(cache_key)
        if cached_result is not None:
            return cached_result

        blackouts = BlackoutService.load(artist.id, start_date, end_date)
        slots = SlotSource.load(artist, start_date, end_date, blackouts=blackouts)
        booked = [
            booking_interval(booking)
            for booking in BookingFeed.list_bookings_in_range(
                artist.id,
                start_date - timedelta(days=1),
                end_date,
                statuses=CALENDAR_BLOCKING_STATUSES,
            )
        ]
        holidays = HolidayCalendar.for_range(start_date, end_date)

        calendar = []
        for slot in slots:
            if any(slot.interval.overlaps(existing) for existing in booked):
                continue
            data = slot.as_dict()
            data["duration_minutes"] = slot.duration_minutes
            data["price"] = PricingCalculator.quote_for_artist(
                artist, slot.duration_minutes, slot.price_multiplier, slot.date, holidays
            ).as_dict()
            calendar.append(data)

        cache.set(cache_key, calendar, cls.PUBLIC_CACHE_TTL)
        return calendar

    @staticmethod
    def expand_pattern_month(pattern: RecurringPattern, year: int, month: int) -> List[Occurrence]:
        """Occurrences of a pattern in one month, computed on demand"""
        return list(RecurrenceExpander.expand_month(pattern, year, month))

    @classmethod
    def materialize_patterns(
        cls,
        artist: Artist,
        today: date,
        horizon_days: Optional[int] = None,
    ) -> BatchResult:
        """
        Persist occurrences of the artist's active patterns as availability rows.

        Occurrences on blacked out dates or at an existing slot's date and start
        time are skipped; each occurrence is committed on its own.

        Args:
            artist: Artist instance
            today: First date considered
            horizon_days: Number of days ahead to materialize

        Returns:
            BatchResult of created rows and skipped occurrences
        """
        if horizon_days is None:
            horizon_days = settings.ARTISTBOOK["MATERIALIZE_HORIZON_DAYS"]
        end_date = today + timedelta(days=horizon_days)
        result = BatchResult()

        blackouts = BlackoutService.load(artist.id, today, end_date)
        patterns = RecurringPattern.objects.filter(artist=artist, is_active=True)

        with artist_calendar_lock(artist.id):
            existing = set(
                Availability.objects.filter(
                    artist=artist, date__gte=today, date__lte=end_date
                ).values_list("date", "start_time")
            )
            for pattern in patterns:
                for occurrence in RecurrenceExpander.expand(pattern, today, end_date):
                    key = (occurrence.date, occurrence.start_time)
                    if key in existing:
                        continue
                    blackout = blackouts.covering(occurrence.date)
                    if blackout:
                        result.add_failure(
                            occurrence.date,
                            BatchFailureCode.BLACKOUT,
                            _("Date is blacked out: %s") % blackout.title,
                        )
                        continue
                    try:
                        with transaction.atomic():
                            row = Availability.objects.create(
                                artist=artist,
                                date=occurrence.date,
                                start_time=occurrence.start_time,
                                end_time=occurrence.end_time,
                                price_multiplier=occurrence.price_multiplier,
                                minimum_hours=occurrence.minimum_hours,
                                buffer_before=artist.default_buffer_minutes,
                                buffer_after=artist.default_buffer_minutes,
                                recurring_pattern=pattern,
                            )
                    except IntegrityError:
                        result.add_failure(
                            occurrence.date,
                            BatchFailureCode.ALREADY_EXISTS,
                            _("Availability already exists for this date and time"),
                        )
                        continue
                    existing.add(key)
                    result.add_success(occurrence.date, row.id)

        logger.info(
            f"Materialized {len(result.processed)} occurrence(s) for artist {artist.id} "
            f"through {end_date}, skipped {len(result.failed)}"
        )
        return result

    @staticmethod
    def delete_pattern(pattern: RecurringPattern):
        """
        Delete a recurring pattern.

        Raises:
            StateViolationError: while materialized availability rows depend on it
        """
        dependents = list(
            pattern.availability_slots.order_by("date", "start_time").values(
                "id", "date", "start_time", "is_booked"
            )
        )
        if dependents:
            logger.warning(
                f"Refusing to delete pattern {pattern.id}: {len(dependents)} dependent slot(s)"
            )
            raise StateViolationError(
                _("Recurring pattern still has materialized availability"),
                detail={
                    "dependent_availability": [
                        {
                            "id": str(row["id"]),
                            "date": row["date"].isoformat(),
                            "start_time": row["start_time"].strftime("%H:%M"),
                            "is_booked": row["is_booked"],
                        }
                        for row in dependents
                    ]
                },
            )
        pattern_id = pattern.id
        pattern.delete()
        logger.info(f"Recurring pattern {pattern_id} deleted")

    @staticmethod
    def delete_availability(slot: Availability):
        """
        Delete an explicit availability row.

        Raises:
            StateViolationError: while a booking references the row
        """
        if slot.is_booked or slot.booking_id:
            raise StateViolationError(
                _("Cannot delete a booked availability slot"),
                detail={"availability_id": str(slot.id), "booking_id": str(slot.booking_id)},
            )
        slot.delete()

    @staticmethod
    def save_template(template: TimeSlotTemplate) -> TimeSlotTemplate:
        """Save a template, making it the artist's only default when flagged"""
        with transaction.atomic():
            if template.is_default:
                TimeSlotTemplate.objects.filter(
                    artist_id=template.artist_id, is_default=True
                ).exclude(pk=template.pk).update(is_default=False)
            template.save()
        return template
