"""
Interval model

Half-open ``[start, end)`` ranges of naive local wall-clock datetimes and the
predicates the engine builds on. No timezone conversion is ever performed.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from utils.exceptions import InvalidIntervalError


@dataclass(frozen=True, order=True)
class Interval:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidIntervalError(
                detail={"start": self.start.isoformat(), "end": self.end.isoformat()}
            )

    @classmethod
    def from_times(cls, day: date, start_time: time, end_time: time) -> "Interval":
        """Interval between two times of day on ``day``"""
        return cls(datetime.combine(day, start_time), datetime.combine(day, end_time))

    @classmethod
    def from_duration(cls, day: date, start_time: time, minutes: int) -> "Interval":
        """Interval starting at ``start_time`` on ``day`` lasting ``minutes``"""
        start = datetime.combine(day, start_time)
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def duration_minutes(self) -> int:
        return duration_minutes(self)

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)

    def contains(self, other: "Interval") -> bool:
        return contains(self, other)

    def with_buffers(self, before_minutes: int = 0, after_minutes: int = 0) -> "Interval":
        """Interval widened by setup/teardown buffers"""
        return Interval(
            self.start - timedelta(minutes=before_minutes),
            self.end + timedelta(minutes=after_minutes),
        )


def overlaps(a: Interval, b: Interval) -> bool:
    """True when the half-open intervals share at least one instant"""
    return a.start < b.end and a.end > b.start


def contains(a: Interval, b: Interval) -> bool:
    """True when ``b`` lies entirely inside ``a``"""
    return a.start <= b.start and b.end <= a.end


def duration_minutes(a: Interval) -> int:
    return int((a.end - a.start).total_seconds() // 60)


def clock_interval(day: date, start_time: time, end_time: time) -> Interval:
    """
    Interval for a stored (start, end) pair of times of day.

    An end at or before the start is read as running past midnight.
    """
    start = datetime.combine(day, start_time)
    end = datetime.combine(day, end_time)
    if end <= start:
        end += timedelta(days=1)
    return Interval(start, end)
