# apps/availabilityapp/signals.py
import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.availabilityapp.models import (
    Availability,
    BlackoutDate,
    Holiday,
    RecurringPattern,
    TimeSlotTemplate,
)
from apps.availabilityapp.services.calendar_service import CalendarService

logger = logging.getLogger(__name__)


def invalidate_on_commit(artist_id):
    transaction.on_commit(lambda: CalendarService.invalidate(artist_id))


@receiver(post_save, sender=Availability)
def availability_post_save(sender, instance, created, **kwargs):
    """
    Handle post-save signal for Availability.
    Logs booking and status transitions and invalidates the public calendar.
    """
    if not created:
        if instance.tracker.has_changed("is_booked"):
            state = "booked" if instance.is_booked else "released"
            logger.info(f"Availability {instance.id} {state}")
        if instance.tracker.has_changed("status"):
            logger.info(
                f"Availability {instance.id} status changed from "
                f"{instance.tracker.previous('status')} to {instance.status}"
            )

    invalidate_on_commit(instance.artist_id)


@receiver(post_delete, sender=Availability)
@receiver(post_save, sender=BlackoutDate)
@receiver(post_delete, sender=BlackoutDate)
@receiver(post_save, sender=RecurringPattern)
@receiver(post_delete, sender=RecurringPattern)
def calendar_source_changed(sender, instance, **kwargs):
    """Invalidate the artist's public calendar when one of its sources changes"""
    invalidate_on_commit(instance.artist_id)


@receiver(post_save, sender=TimeSlotTemplate)
def template_post_save(sender, instance, created, **kwargs):
    if created:
        logger.info(f"Template '{instance.name}' created for artist {instance.artist_id}")


@receiver(post_save, sender=Holiday)
@receiver(post_delete, sender=Holiday)
def holiday_changed(sender, instance, **kwargs):
    # Holidays change prices on every calendar
    transaction.on_commit(lambda: CalendarService.invalidate_all())
