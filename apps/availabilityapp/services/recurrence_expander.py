# apps/availabilityapp/services/recurrence_expander.py
import calendar
import logging
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Iterator, Optional

from apps.availabilityapp.rules import DailyRule, MonthlyRule, OffsetsRule, WeeklyRule
from apps.availabilityapp.services.interval import Interval
from utils.date_utils import get_month_bounds, sunday_based_weekday

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Occurrence:
    """One concrete calendar occurrence of a recurring pattern"""

    pattern_id: object
    date: date
    start_time: time
    end_time: time
    price_multiplier: Decimal
    minimum_hours: Optional[Decimal] = None

    @property
    def interval(self) -> Interval:
        return Interval.from_times(self.date, self.start_time, self.end_time)


class RecurrenceExpander:
    """
    Turns a recurring pattern into concrete occurrences.

    Expansion is a pure function of the pattern and the query window: the
    returned generator is finite, holds no hidden state and can be recreated
    at will. Nothing is persisted here.
    """

    @classmethod
    def expand(cls, pattern, range_start: date, range_end: date) -> Iterator[Occurrence]:
        """
        Lazily yield the occurrences of ``pattern`` inside ``[range_start, range_end]``.

        Args:
            pattern: RecurringPattern instance
            range_start: First date of the query window (inclusive)
            range_end: Last date of the query window (inclusive)

        Returns:
            Generator of occurrences in date order. Empty when the validity
            window of the pattern does not intersect the query window.
        """
        window_start = max(pattern.valid_from, range_start)
        window_end = range_end
        if pattern.valid_until and pattern.valid_until < window_end:
            window_end = pattern.valid_until

        if window_end < window_start:
            return iter(())

        days = cls._matching_days(pattern.rule, pattern.valid_from, window_start, window_end)
        return (cls._occurrence(pattern, day) for day in days)

    @classmethod
    def expand_month(cls, pattern, year: int, month: int) -> Iterator[Occurrence]:
        """Occurrences of ``pattern`` in one calendar month"""
        first_day, last_day = get_month_bounds(year, month)
        return cls.expand(pattern, first_day, last_day)

    @staticmethod
    def _occurrence(pattern, day: date) -> Occurrence:
        # Rejects patterns whose end is not after their start
        Interval.from_times(day, pattern.start_time, pattern.end_time)
        return Occurrence(
            pattern_id=pattern.id,
            date=day,
            start_time=pattern.start_time,
            end_time=pattern.end_time,
            price_multiplier=pattern.price_multiplier,
            minimum_hours=pattern.minimum_hours,
        )

    @classmethod
    def _matching_days(cls, rule, valid_from: date, start: date, end: date) -> Iterator[date]:
        if isinstance(rule, DailyRule):
            return cls._daily(start, end)
        if isinstance(rule, WeeklyRule):
            return cls._weekly(rule, start, end)
        if isinstance(rule, MonthlyRule):
            return cls._monthly(rule, start, end)
        if isinstance(rule, OffsetsRule):
            return cls._offsets(rule, valid_from, start, end)
        raise TypeError(f"Unsupported recurrence rule: {rule!r}")

    @staticmethod
    def _daily(start: date, end: date) -> Iterator[date]:
        current = start
        while current <= end:
            yield current
            current += timedelta(days=1)

    @staticmethod
    def _weekly(rule: WeeklyRule, start: date, end: date) -> Iterator[date]:
        # Step forward to the first matching weekday, then a week at a time
        days_ahead = (rule.day_of_week - sunday_based_weekday(start)) % 7
        current = start + timedelta(days=days_ahead)
        while current <= end:
            yield current
            current += timedelta(days=7)

    @classmethod
    def _monthly(cls, rule: MonthlyRule, start: date, end: date) -> Iterator[date]:
        year, month = start.year, start.month
        while (year, month) <= (end.year, end.month):
            day = cls.resolve_monthly_day(rule, year, month)
            if day is None:
                logger.debug(f"Monthly rule {rule} has no day in {year}-{month:02d}, skipping")
            elif start <= day <= end:
                yield day

            month += 1
            if month > 12:
                year, month = year + 1, 1

    @staticmethod
    def resolve_monthly_day(rule: MonthlyRule, year: int, month: int) -> Optional[date]:
        """
        Resolve the day a monthly rule falls on in a given month.

        Returns:
            The date, or None when the month has no such day (day 31 in a
            30-day month, a 5th Friday that does not exist)
        """
        _, days_in_month = calendar.monthrange(year, month)

        if rule.day_of_month is not None:
            if rule.day_of_month > days_in_month:
                return None
            return date(year, month, rule.day_of_month)

        first_day = date(year, month, 1)
        days_ahead = (rule.day_of_week - sunday_based_weekday(first_day)) % 7
        day_number = 1 + days_ahead + 7 * (rule.week_of_month - 1)
        if day_number > days_in_month:
            return None
        return date(year, month, day_number)

    @staticmethod
    def _offsets(rule: OffsetsRule, valid_from: date, start: date, end: date) -> Iterator[date]:
        for offset in sorted(rule.days):
            day = valid_from + timedelta(days=offset)
            if day > end:
                break
            if day >= start:
                yield day
