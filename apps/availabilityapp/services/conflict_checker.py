# apps/availabilityapp/services/conflict_checker.py
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from django.conf import settings
from django.utils.translation import gettext_lazy as _

from apps.availabilityapp.enums import CheckOutcome
from apps.availabilityapp.services.alternative_search import Alternative, AlternativeSlotSearch
from apps.availabilityapp.services.blackout_filter import BlackoutService
from apps.availabilityapp.services.interval import Interval
from apps.availabilityapp.services.pricing_calculator import (
    HolidayCalendar,
    PriceQuote,
    PricingCalculator,
)
from apps.availabilityapp.services.slot_source import CandidateSlot, SlotSource
from apps.bookingapp.services.booking_feed import BookingFeed
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

OUTCOME_MESSAGES = {
    CheckOutcome.AVAILABLE: _("Artist is available for the requested time"),
    CheckOutcome.TOO_SOON: _("Bookings must be made at least %(hours)s hours in advance"),
    CheckOutcome.TOO_FAR: _("Bookings cannot be made more than %(days)s days in advance"),
    CheckOutcome.NO_AVAILABILITY: _("Artist has no availability for the requested time"),
    CheckOutcome.BOOKING_CONFLICT: _("Artist already has a booking at the requested time"),
    CheckOutcome.BLACKOUT: _("Artist is unavailable: %(title)s"),
}


@dataclass
class CheckResult:
    """Terminal state of one availability check"""

    outcome: CheckOutcome
    message: str
    requested: Interval
    slot: Optional[CandidateSlot] = None
    price: Optional[PriceQuote] = None
    blackout: Optional[object] = None
    conflicts: List = field(default_factory=list)
    alternatives: List[Alternative] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.outcome == CheckOutcome.AVAILABLE

    def as_dict(self):
        data = {
            "available": self.available,
            "reason": None if self.available else self.outcome.value,
            "message": str(self.message),
            "requested": {
                "date": self.requested.start.date().isoformat(),
                "start_time": self.requested.start.strftime("%H:%M"),
                "end_time": self.requested.end.strftime("%H:%M"),
                "duration_minutes": self.requested.duration_minutes,
            },
        }
        if self.slot:
            slot = self.slot.as_dict()
            slot["price"] = self.price.as_dict()
            data["slot"] = slot
        if self.blackout:
            data["blackout"] = {
                "id": str(self.blackout.id),
                "title": self.blackout.title,
                "start_date": self.blackout.start_date.isoformat(),
                "end_date": self.blackout.end_date.isoformat(),
                "blackout_type": self.blackout.blackout_type,
            }
        if self.conflicts:
            data["conflicting_bookings"] = [
                {"id": str(booking.id), "booking_number": booking.booking_number}
                for booking in self.conflicts
            ]
        if not self.available:
            data["alternatives"] = [alt.as_dict() for alt in self.alternatives]
        return data


class AvailabilityChecker:
    """
    Decides whether a requested interval can be booked.

    Checks run in order and the first failing one wins: booking window
    (too soon, too far), a free slot containing the request, overlapping
    confirmed bookings, then blackouts. A request without a slot on a
    blacked out date reports the blackout so the title reaches the customer.
    """

    @staticmethod
    def validate_duration(duration_minutes: int):
        config = settings.ARTISTBOOK
        low = config["MIN_REQUEST_DURATION_MINUTES"]
        high = config["MAX_REQUEST_DURATION_MINUTES"]
        if not low <= duration_minutes <= high:
            raise ValidationError(
                _("Duration must be between %(low)s and %(high)s minutes")
                % {"low": low, "high": high},
                detail={"duration_minutes": duration_minutes},
            )

    @classmethod
    def check(
        cls,
        artist,
        event_date: date,
        start_time: time,
        duration_minutes: int,
        include_alternatives: bool = False,
        alternative_range_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> CheckResult:
        """
        Check a booking request against the artist's calendar.

        Args:
            artist: Artist instance
            event_date: Requested date
            start_time: Requested local start time
            duration_minutes: Requested duration
            include_alternatives: Attach alternatives when the request fails
            alternative_range_days: Search radius for alternatives
            now: Reference time, defaults to the current local time

        Returns:
            CheckResult carrying the outcome, message and, when available,
            the matched slot and its price

        Raises:
            ValidationError: if the duration is out of range
        """
        cls.validate_duration(duration_minutes)
        now = now or datetime.now()
        requested = Interval.from_duration(event_date, start_time, duration_minutes)

        result = cls._evaluate(artist, requested, now)

        if result.available:
            logger.debug(f"Artist {artist.id} available for {requested}")
        else:
            logger.info(
                f"Availability check for artist {artist.id} on {event_date} "
                f"{start_time:%H:%M} ({duration_minutes} min): {result.outcome.value}"
            )
            if include_alternatives:
                result.alternatives = AlternativeSlotSearch.search(
                    artist,
                    event_date,
                    duration_minutes,
                    radius_days=alternative_range_days,
                    now=now,
                )
        return result

    @classmethod
    def _evaluate(cls, artist, requested: Interval, now: datetime) -> CheckResult:
        event_date = requested.day

        if requested.start < now + timedelta(hours=artist.min_advance_booking_hours):
            return CheckResult(
                outcome=CheckOutcome.TOO_SOON,
                message=OUTCOME_MESSAGES[CheckOutcome.TOO_SOON]
                % {"hours": artist.min_advance_booking_hours},
                requested=requested,
            )

        if event_date > now.date() + timedelta(days=artist.max_advance_booking_days):
            return CheckResult(
                outcome=CheckOutcome.TOO_FAR,
                message=OUTCOME_MESSAGES[CheckOutcome.TOO_FAR]
                % {"days": artist.max_advance_booking_days},
                requested=requested,
            )

        blackout = BlackoutService.find_blackout(artist.id, requested)

        slot = SlotSource.find_containing(
            SlotSource.load(artist, event_date, event_date), requested
        )
        if slot is None:
            if blackout:
                return cls._blackout_result(requested, blackout)
            return CheckResult(
                outcome=CheckOutcome.NO_AVAILABILITY,
                message=OUTCOME_MESSAGES[CheckOutcome.NO_AVAILABILITY],
                requested=requested,
            )

        conflicts = BookingFeed.list_conflicting_bookings(artist.id, requested)
        if conflicts:
            return CheckResult(
                outcome=CheckOutcome.BOOKING_CONFLICT,
                message=OUTCOME_MESSAGES[CheckOutcome.BOOKING_CONFLICT],
                requested=requested,
                conflicts=conflicts,
            )

        if blackout:
            return cls._blackout_result(requested, blackout)

        price = PricingCalculator.quote_for_artist(
            artist,
            requested.duration_minutes,
            slot.price_multiplier,
            event_date,
            holidays=HolidayCalendar.for_range(event_date, event_date),
        )
        return CheckResult(
            outcome=CheckOutcome.AVAILABLE,
            message=OUTCOME_MESSAGES[CheckOutcome.AVAILABLE],
            requested=requested,
            slot=slot,
            price=price,
        )

    @staticmethod
    def _blackout_result(requested: Interval, blackout) -> CheckResult:
        return CheckResult(
            outcome=CheckOutcome.BLACKOUT,
            message=OUTCOME_MESSAGES[CheckOutcome.BLACKOUT] % {"title": blackout.title},
            requested=requested,
            blackout=blackout,
        )
