# apps/availabilityapp/services/pricing_calculator.py
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Set

from apps.availabilityapp.models import Holiday
from utils.date_utils import is_weekend

ONE = Decimal("1")
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PriceQuote:
    """Breakdown of the price of one candidate slot"""

    hourly_rate: Decimal
    effective_hours: Decimal
    base_price: Decimal
    slot_multiplier: Decimal
    weekend_multiplier: Decimal
    holiday_multiplier: Decimal
    multiplier: Decimal
    final_price: Decimal
    is_weekend: bool
    is_holiday: bool

    def as_dict(self):
        return {
            "hourly_rate": self.hourly_rate,
            "effective_hours": self.effective_hours,
            "base_price": self.base_price,
            "multiplier": self.multiplier,
            "final_price": self.final_price,
            "is_weekend": self.is_weekend,
            "is_holiday": self.is_holiday,
        }


class HolidayCalendar:
    """Set of local holiday dates, loaded once per range"""

    def __init__(self, holidays: Iterable[date] = ()):
        self._days: Set[date] = set(holidays)

    @classmethod
    def for_range(cls, start_date: date, end_date: date) -> "HolidayCalendar":
        days = Holiday.objects.filter(
            is_active=True, date__gte=start_date, date__lte=end_date
        ).values_list("date", flat=True)
        return cls(days)

    def is_holiday(self, day: date) -> bool:
        return day in self._days


class PricingCalculator:
    """
    Computes the price of a slot.

    ``effective_hours = max(duration / 60, minimum_hours)`` and the slot,
    weekend and holiday multipliers compose multiplicatively, so stacking a
    weekend surcharge on top of a slot surcharge compounds both.
    """

    @staticmethod
    def quote(
        hourly_rate: Decimal,
        duration_minutes: int,
        minimum_hours: Decimal,
        slot_multiplier: Decimal,
        event_date: date,
        weekend_multiplier: Decimal = ONE,
        holiday_multiplier: Decimal = ONE,
        holidays: Optional[HolidayCalendar] = None,
    ) -> PriceQuote:
        """
        Price a candidate slot.

        Args:
            hourly_rate: Artist base hourly rate
            duration_minutes: Requested duration
            minimum_hours: Artist minimum billable hours
            slot_multiplier: Matched slot price multiplier
            event_date: Event date, used for the weekend/holiday surcharges
            weekend_multiplier: Artist weekend multiplier
            holiday_multiplier: Artist holiday multiplier
            holidays: Holiday calendar; holidays are not priced when omitted

        Returns:
            PriceQuote with the final price rounded to cents
        """
        hourly_rate = Decimal(hourly_rate)
        requested_hours = Decimal(duration_minutes) / Decimal(60)
        effective_hours = max(requested_hours, Decimal(minimum_hours or 0))
        base_price = hourly_rate * effective_hours

        weekend = is_weekend(event_date)
        holiday = bool(holidays and holidays.is_holiday(event_date))

        applied_weekend = Decimal(weekend_multiplier) if weekend else ONE
        applied_holiday = Decimal(holiday_multiplier) if holiday else ONE
        multiplier = Decimal(slot_multiplier) * applied_weekend * applied_holiday

        return PriceQuote(
            hourly_rate=hourly_rate,
            effective_hours=effective_hours.quantize(CENTS, rounding=ROUND_HALF_UP),
            base_price=base_price.quantize(CENTS, rounding=ROUND_HALF_UP),
            slot_multiplier=Decimal(slot_multiplier),
            weekend_multiplier=applied_weekend,
            holiday_multiplier=applied_holiday,
            multiplier=multiplier,
            final_price=(base_price * multiplier).quantize(CENTS, rounding=ROUND_HALF_UP),
            is_weekend=weekend,
            is_holiday=holiday,
        )

    @classmethod
    def quote_for_artist(
        cls,
        artist,
        duration_minutes: int,
        slot_multiplier: Decimal,
        event_date: date,
        holidays: Optional[HolidayCalendar] = None,
    ) -> PriceQuote:
        """Price a slot using the artist's rate, minimum hours and surcharges"""
        return cls.quote(
            hourly_rate=artist.hourly_rate,
            duration_minutes=duration_minutes,
            minimum_hours=artist.minimum_hours,
            slot_multiplier=slot_multiplier,
            event_date=event_date,
            weekend_multiplier=artist.weekend_multiplier,
            holiday_multiplier=artist.holiday_multiplier,
            holidays=holidays,
        )
