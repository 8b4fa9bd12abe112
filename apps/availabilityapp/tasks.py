# apps/availabilityapp/tasks.py
import logging
from datetime import date

from celery import shared_task

from apps.artistsapp.models import Artist
from apps.availabilityapp.services.calendar_service import CalendarService
from utils.exceptions import LockUnavailableError

logger = logging.getLogger(__name__)


@shared_task
def materialize_recurring_patterns(artist_id=None, horizon_days=None):
    """Persist upcoming occurrences of active recurring patterns as availability slots"""
    artists = Artist.objects.filter(is_active=True, recurring_patterns__is_active=True).distinct()
    if artist_id:
        artists = artists.filter(id=artist_id)

    created = 0
    for artist in artists:
        try:
            result = CalendarService.materialize_patterns(artist, date.today(), horizon_days)
        except LockUnavailableError:
            logger.warning(f"Calendar of artist {artist.id} busy, skipping materialization")
            continue
        created += len(result.processed)

    return f"Materialized {created} availability slots"
