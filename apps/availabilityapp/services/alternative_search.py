# apps/availabilityapp/services/alternative_search.py
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from django.conf import settings

from apps.availabilityapp.enums import AlternativeReason
from apps.availabilityapp.services.blackout_filter import BlackoutService
from apps.availabilityapp.services.interval import Interval
from apps.availabilityapp.services.pricing_calculator import (
    HolidayCalendar,
    PriceQuote,
    PricingCalculator,
)
from apps.availabilityapp.services.slot_source import CandidateSlot, SlotSource
from apps.bookingapp.services.booking_feed import BookingFeed, booking_interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alternative:
    """A slot offered instead of a request that cannot be booked"""

    slot: CandidateSlot
    interval: Interval
    day_difference: int
    reason: AlternativeReason
    price: PriceQuote

    def as_dict(self):
        data = self.slot.as_dict()
        data.update(
            {
                "date": self.interval.start.date().isoformat(),
                "start_time": self.interval.start.strftime("%H:%M"),
                "end_time": self.interval.end.strftime("%H:%M"),
                "slot_start_time": self.slot.start_time.strftime("%H:%M"),
                "slot_end_time": self.slot.end_time.strftime("%H:%M"),
                "day_difference": self.day_difference,
                "reason": self.reason.value,
                "price": self.price.as_dict(),
            }
        )
        return data


def alternative_reason(day_difference: int) -> AlternativeReason:
    if day_difference == 0:
        return AlternativeReason.SAME_DAY_ALTERNATIVE
    if abs(day_difference) <= 1:
        return AlternativeReason.ADJACENT_DAY
    return AlternativeReason.ALTERNATIVE_TIME


def clamp_radius(radius_days: Optional[int]) -> int:
    config = settings.ARTISTBOOK
    if radius_days is None:
        radius_days = config["DEFAULT_ALTERNATIVE_RANGE_DAYS"]
    return max(1, min(int(radius_days), config["MAX_ALTERNATIVE_RANGE_DAYS"]))


class AlternativeSlotSearch:
    """
    Ranked search for alternative slots around a requested date.

    Read-only: safe to call repeatedly and concurrently.
    """

    @classmethod
    def search(
        cls,
        artist,
        requested_date: date,
        duration_minutes: int,
        radius_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Alternative]:
        """
        Find free slots near ``requested_date`` that fit the requested duration.

        Args:
            artist: Artist instance
            requested_date: Originally requested date
            duration_minutes: Requested duration
            radius_days: Days searched on each side (default 7, bounded to [1, 30])
            now: Reference time for the artist's booking window

        Returns:
            Alternatives sorted by distance in days, then time of day, capped
            at the configured maximum
        """
        now = now or datetime.now()
        radius = clamp_radius(radius_days)
        window_start = requested_date - timedelta(days=radius)
        window_end = requested_date + timedelta(days=radius)

        # Stay inside the artist's bookable window
        earliest_start = now + timedelta(hours=artist.min_advance_booking_hours)
        latest_date = now.date() + timedelta(days=artist.max_advance_booking_days)
        window_start = max(window_start, earliest_start.date())
        window_end = min(window_end, latest_date)
        if window_end < window_start:
            return []

        blackouts = BlackoutService.load(artist.id, window_start, window_end)
        slots = SlotSource.load(artist, window_start, window_end, blackouts=blackouts)
        booked = [
            booking_interval(booking)
            for booking in BookingFeed.list_bookings_in_range(
                artist.id, window_start - timedelta(days=1), window_end
            )
        ]
        holidays = HolidayCalendar.for_range(window_start, window_end)

        alternatives = []
        for slot in slots:
            if slot.duration_minutes < duration_minutes:
                continue

            candidate = cls.first_free_start(slot, duration_minutes, booked, earliest_start)
            if candidate is None:
                continue

            day_difference = (slot.date - requested_date).days
            alternatives.append(
                Alternative(
                    slot=slot,
                    interval=candidate,
                    day_difference=day_difference,
                    reason=alternative_reason(day_difference),
                    price=PricingCalculator.quote_for_artist(
                        artist,
                        duration_minutes,
                        slot.price_multiplier,
                        slot.date,
                        holidays=holidays,
                    ),
                )
            )

        alternatives.sort(
            key=lambda alt: (abs(alt.day_difference), alt.interval.start.time(), alt.slot.date)
        )
        limit = settings.ARTISTBOOK["MAX_ALTERNATIVES"]
        logger.debug(
            f"Found {len(alternatives)} alternative(s) for artist {artist.id} "
            f"around {requested_date}, returning at most {limit}"
        )
        return alternatives[:limit]

    @staticmethod
    def first_free_start(
        slot: CandidateSlot,
        duration_minutes: int,
        booked: List[Interval],
        earliest_start: datetime,
    ) -> Optional[Interval]:
        """
        Earliest interval of the requested length inside a slot that no booking overlaps.

        Candidates start at the slot start or where a booking inside the slot ends.
        """
        window = slot.interval
        blocking = sorted(
            (existing for existing in booked if existing.overlaps(window)),
            key=lambda existing: existing.start,
        )
        starts = [window.start] + [
            existing.end for existing in blocking if window.start < existing.end < window.end
        ]
        for start in sorted(set(starts)):
            candidate = Interval(start, start + timedelta(minutes=duration_minutes))
            if candidate.end > window.end:
                break
            if candidate.start < earliest_start:
                continue
            if any(candidate.overlaps(existing) for existing in blocking):
                continue
            return candidate
        return None
