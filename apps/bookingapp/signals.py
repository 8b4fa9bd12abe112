# apps/bookingapp/signals.py
import logging

from django.db import transaction
from django.db.models.signals import post_save, pre_delete
from django.dispatch import receiver

from apps.availabilityapp.services.calendar_service import CalendarService
from apps.availabilityapp.services.slot_reservation import SlotReservationService
from apps.bookingapp.models import Booking, BookingStatus

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Booking)
def booking_post_save(sender, instance, created, **kwargs):
    """
    Handle post-save signal for Bookings.
    Frees the held slot when a booking is cancelled and invalidates the
    artist's public calendar.
    """
    status_changed = not created and instance.tracker.has_changed("status")

    if status_changed and instance.status == BookingStatus.CANCELLED:
        logger.info(f"Booking {instance.booking_number} cancelled, releasing its slot")
        SlotReservationService.release(instance)

    if created or status_changed:
        artist_id = instance.artist_id
        transaction.on_commit(lambda: CalendarService.invalidate(artist_id))


@receiver(pre_delete, sender=Booking)
def booking_pre_delete(sender, instance, **kwargs):
    """Free the slot before the booking reference is cleared"""
    SlotReservationService.release(instance)
