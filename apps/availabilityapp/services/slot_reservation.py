# apps/availabilityapp/services/slot_reservation.py
import logging
from datetime import date, datetime, time
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils.translation import gettext_lazy as _

from apps.artistsapp.models import Artist
from apps.availabilityapp.enums import AvailabilityStatus
from apps.availabilityapp.models import Availability
from apps.availabilityapp.services.calendar_service import CalendarService
from apps.availabilityapp.services.conflict_checker import AvailabilityChecker, CheckResult
from apps.availabilityapp.services.slot_source import CandidateSlot
from apps.bookingapp.models import Booking
from utils.distributed_locks import artist_calendar_lock
from utils.exceptions import BookingConflictError, ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class SlotReservationService:
    """
    Claims and frees availability slots for bookings.

    Claims are serialized per artist and the final write is conditional on
    the slot still being free, so two requests can never hold one slot.
    """

    @classmethod
    def reserve(
        cls,
        artist: Artist,
        booking: Booking,
        event_date: date,
        start_time: time,
        duration_minutes: int,
        now: Optional[datetime] = None,
    ) -> CheckResult:
        """
        Re-check a request and claim the matched slot for a booking.

        Args:
            artist: Artist instance
            booking: Booking the slot is claimed for
            event_date: Requested date
            start_time: Requested local start time
            duration_minutes: Requested duration
            now: Reference time for the booking window

        Returns:
            The AVAILABLE CheckResult whose slot now belongs to the booking,
            or the failing CheckResult (nothing is written)

        Raises:
            ValidationError: if the booking belongs to another artist or
                already holds a slot
            BookingConflictError: if the slot was claimed concurrently
        """
        if booking.artist_id != artist.id:
            raise ValidationError(
                _("Booking belongs to another artist"),
                detail={"booking_id": str(booking.id)},
            )

        with artist_calendar_lock(artist.id):
            if Availability.objects.filter(booking=booking).exists():
                raise ValidationError(
                    _("Booking already holds a slot"), detail={"booking_id": str(booking.id)}
                )

            result = AvailabilityChecker.check(
                artist, event_date, start_time, duration_minutes, now=now
            )
            if not result.available:
                logger.warning(
                    f"Reservation for booking {booking.id} refused: {result.outcome.value}"
                )
                return result

            try:
                with transaction.atomic():
                    Artist.objects.select_for_update().filter(id=artist.id).first()
                    slot_id = cls._materialize(artist, result.slot)
                    claimed = Availability.objects.filter(
                        id=slot_id,
                        status=AvailabilityStatus.AVAILABLE,
                        is_booked=False,
                    ).update(is_booked=True, booking=booking)
            except IntegrityError:
                claimed = 0

            if not claimed:
                logger.warning(
                    f"Slot {result.slot.availability_id or result.slot.pattern_id} "
                    f"for artist {artist.id} was claimed concurrently"
                )
                raise BookingConflictError(
                    detail={"date": str(event_date), "start_time": start_time.strftime("%H:%M")}
                )

        CalendarService.invalidate(artist.id)
        result.slot = CandidateSlot.from_availability(Availability.objects.get(id=slot_id))
        logger.info(f"Slot {slot_id} of artist {artist.id} reserved for booking {booking.id}")
        return result

    @staticmethod
    def _materialize(artist: Artist, slot: CandidateSlot):
        """Persist a recurring occurrence so it can be claimed; explicit rows pass through"""
        if slot.availability_id:
            return slot.availability_id

        row, created = Availability.objects.get_or_create(
            artist=artist,
            date=slot.date,
            start_time=slot.start_time,
            defaults={
                "end_time": slot.end_time,
                "price_multiplier": slot.price_multiplier,
                "minimum_hours": slot.minimum_hours,
                "buffer_before": slot.buffer_before,
                "buffer_after": slot.buffer_after,
                "recurring_pattern_id": slot.pattern_id,
            },
        )
        if created:
            logger.debug(f"Materialized occurrence of pattern {slot.pattern_id} on {slot.date}")
        return row.id

    @staticmethod
    def release(booking: Booking) -> Optional[Availability]:
        """
        Free the slot held by a booking.

        Returns:
            The released slot, or None when the booking held no slot
        """
        with artist_calendar_lock(booking.artist_id):
            with transaction.atomic():
                slot = Availability.objects.select_for_update().filter(booking=booking).first()
                if slot is None:
                    return None
                slot.is_booked = False
                slot.booking = None
                slot.save(update_fields=["is_booked", "booking", "updated_at"])

        logger.info(f"Slot {slot.id} released from booking {booking.id}")
        return slot

    @staticmethod
    def get_booking(artist_id, booking_id) -> Booking:
        try:
            return Booking.objects.get(id=booking_id, artist_id=artist_id)
        except Booking.DoesNotExist:
            raise ResourceNotFoundError(
                _("Booking not found"), detail={"booking_id": str(booking_id)}
            )
