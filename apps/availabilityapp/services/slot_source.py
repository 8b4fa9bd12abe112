# apps/availabilityapp/services/slot_source.py
import logging
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import List, Optional

from apps.availabilityapp.enums import AvailabilityStatus
from apps.availabilityapp.models import Availability, RecurringPattern
from apps.availabilityapp.services.interval import Interval
from apps.availabilityapp.services.recurrence_expander import RecurrenceExpander

logger = logging.getLogger(__name__)

SOURCE_EXPLICIT = "availability"
SOURCE_RECURRING = "recurring"


@dataclass(frozen=True)
class CandidateSlot:
    """A free window of the artist's materialized calendar"""

    source: str
    date: date
    start_time: time
    end_time: time
    price_multiplier: Decimal
    minimum_hours: Optional[Decimal] = None
    buffer_before: int = 0
    buffer_after: int = 0
    notes: str = ""
    requirements: str = ""
    availability_id: Optional[str] = None
    pattern_id: Optional[str] = None

    @property
    def interval(self) -> Interval:
        return Interval.from_times(self.date, self.start_time, self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes

    @classmethod
    def from_availability(cls, slot: Availability) -> "CandidateSlot":
        return cls(
            source=SOURCE_EXPLICIT,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            price_multiplier=slot.price_multiplier,
            minimum_hours=slot.minimum_hours,
            buffer_before=slot.buffer_before,
            buffer_after=slot.buffer_after,
            notes=slot.notes,
            requirements=slot.requirements,
            availability_id=str(slot.id),
            pattern_id=str(slot.recurring_pattern_id) if slot.recurring_pattern_id else None,
        )

    @classmethod
    def from_occurrence(cls, occurrence, buffer_minutes=0) -> "CandidateSlot":
        return cls(
            source=SOURCE_RECURRING,
            date=occurrence.date,
            start_time=occurrence.start_time,
            end_time=occurrence.end_time,
            price_multiplier=occurrence.price_multiplier,
            minimum_hours=occurrence.minimum_hours,
            buffer_before=buffer_minutes,
            buffer_after=buffer_minutes,
            pattern_id=str(occurrence.pattern_id),
        )

    def as_dict(self):
        return {
            "source": self.source,
            "availability_id": self.availability_id,
            "recurring_pattern_id": self.pattern_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "price_multiplier": self.price_multiplier,
            "minimum_hours": self.minimum_hours,
            "buffer_before": self.buffer_before,
            "buffer_after": self.buffer_after,
            "notes": self.notes,
            "requirements": self.requirements,
        }


class SlotSource:
    """
    The artist's materialized calendar for a date range.

    Combines explicit available, unbooked rows with occurrences of active
    recurring patterns. An explicit row at the same date and start time, in
    any state, takes precedence over the occurrence.
    """

    @classmethod
    def load(
        cls, artist, start_date: date, end_date: date, blackouts=None
    ) -> List[CandidateSlot]:
        """
        Free slots of an artist between two dates (inclusive).

        Args:
            artist: Artist instance
            start_date: First date
            end_date: Last date
            blackouts: Optional BlackoutSet; slots on blacked out dates are dropped

        Returns:
            Candidate slots ordered by date and start time
        """
        rows = list(
            Availability.objects.filter(
                artist_id=artist.id, date__gte=start_date, date__lte=end_date
            ).order_by("date", "start_time")
        )
        taken = {(row.date, row.start_time) for row in rows}

        slots = [
            CandidateSlot.from_availability(row)
            for row in rows
            if row.status == AvailabilityStatus.AVAILABLE and not row.is_booked
        ]

        patterns = RecurringPattern.objects.filter(
            artist_id=artist.id,
            is_active=True,
            valid_from__lte=end_date,
        )
        for pattern in patterns:
            for occurrence in RecurrenceExpander.expand(pattern, start_date, end_date):
                if (occurrence.date, occurrence.start_time) in taken:
                    continue
                slots.append(
                    CandidateSlot.from_occurrence(occurrence, artist.default_buffer_minutes)
                )

        if blackouts is not None:
            slots = [slot for slot in slots if not blackouts.covering(slot.date)]

        slots.sort(key=lambda slot: (slot.date, slot.start_time))
        return slots

    @staticmethod
    def find_containing(slots: List[CandidateSlot], requested: Interval) -> Optional[CandidateSlot]:
        """First slot whose interval fully contains ``requested``"""
        for slot in slots:
            if slot.interval.contains(requested):
                return slot
        return None
