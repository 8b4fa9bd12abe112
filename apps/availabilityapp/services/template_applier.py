# apps/availabilityapp/services/template_applier.py
import logging
import math
from datetime import datetime, time, timedelta
from typing import Iterable, Optional

from django.db import IntegrityError, transaction
from django.utils.translation import gettext_lazy as _

from apps.availabilityapp.enums import AvailabilityStatus, BatchFailureCode
from apps.availabilityapp.models import Availability, TimeSlotTemplate
from apps.availabilityapp.services.batch import BatchResult
from apps.availabilityapp.services.blackout_filter import BlackoutService
from apps.availabilityapp.services.interval import Interval
from utils.distributed_locks import artist_calendar_lock
from utils.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)


def template_note(template):
    return f"Applied template: {template.name}"


class TemplateApplier:
    """
    Projects a time slot template onto a list of dates.

    Each date is handled on its own: a failure for one date is recorded and the
    batch moves on, and dates already written are never rolled back.
    """

    @staticmethod
    def get_template(artist_id, template_id) -> TimeSlotTemplate:
        """Active template of the artist, or ResourceNotFoundError"""
        try:
            return TimeSlotTemplate.objects.get(
                id=template_id, artist_id=artist_id, is_active=True
            )
        except TimeSlotTemplate.DoesNotExist:
            raise ResourceNotFoundError(
                _("Template not found or inactive"),
                detail={"template_id": str(template_id)},
            )

    @classmethod
    def apply(
        cls,
        template: TimeSlotTemplate,
        dates: Iterable,
        start_time: time,
        overwrite: bool = False,
        now: Optional[datetime] = None,
    ) -> BatchResult:
        """
        Apply a template to each date.

        Args:
            template: Template to apply
            dates: Target dates
            start_time: Local start time of every produced slot
            overwrite: Whether an existing slot at the same date and start is replaced
            now: Reference time for the template's minimum advance notice

        Returns:
            BatchResult with processed dates and per-date failures
        """
        now = now or datetime.now()
        dates = list(dates)
        result = BatchResult()
        if not dates:
            return result

        earliest_start = now + timedelta(hours=template.minimum_advance_hours)
        blackouts = BlackoutService.load(template.artist_id, min(dates), max(dates))

        with artist_calendar_lock(template.artist_id):
            for day in dates:
                interval = Interval.from_duration(day, start_time, template.duration_minutes)

                if interval.end.date() != day:
                    result.add_failure(
                        day,
                        BatchFailureCode.INVALID_INTERVAL,
                        _("Slot would run past midnight"),
                    )
                    continue

                if interval.start < earliest_start:
                    result.add_failure(
                        day,
                        BatchFailureCode.TOO_SOON,
                        _("Date is within the template's minimum advance notice"),
                    )
                    continue

                blackout = blackouts.covering(day)
                if blackout:
                    result.add_failure(
                        day, BatchFailureCode.BLACKOUT, _("Date is blacked out: %s") % blackout.title
                    )
                    continue

                cls._apply_to_date(template, interval, overwrite, result)

        logger.info(
            f"Template {template.id} applied for artist {template.artist_id}: "
            f"{len(result.processed)} processed, {len(result.failed)} failed"
        )
        return result

    @classmethod
    def _apply_to_date(cls, template, interval: Interval, overwrite: bool, result: BatchResult):
        day = interval.day
        try:
            with transaction.atomic():
                existing = (
                    Availability.objects.select_for_update()
                    .filter(artist_id=template.artist_id, date=day, start_time=interval.start.time())
                    .first()
                )

                if existing and not overwrite:
                    result.add_failure(
                        day,
                        BatchFailureCode.ALREADY_EXISTS,
                        _("Availability already exists for this date and time"),
                    )
                    return

                if existing and existing.is_booked:
                    result.add_failure(
                        day, BatchFailureCode.SLOT_BOOKED, _("Existing slot is already booked")
                    )
                    return

                slot = existing or Availability(
                    artist_id=template.artist_id,
                    date=day,
                    start_time=interval.start.time(),
                )
                slot.end_time = interval.end.time()
                slot.status = AvailabilityStatus.AVAILABLE
                slot.price_multiplier = template.price_multiplier
                slot.minimum_hours = math.ceil(template.duration_minutes / 60)
                slot.buffer_before = template.buffer_before
                slot.buffer_after = template.buffer_after
                slot.notes = template_note(template)
                slot.source_template = template
                slot.save()
        except IntegrityError:
            logger.warning(
                f"Concurrent slot creation for artist {template.artist_id} on {day}"
            )
            result.add_failure(
                day,
                BatchFailureCode.ALREADY_EXISTS,
                _("Availability already exists for this date and time"),
            )
            return

        result.add_success(day, slot.id, created=existing is None)
