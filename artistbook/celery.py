"""
Celery configuration for the ArtistBook platform.

Background work is limited to keeping recurring availability materialized
ahead of the booking window.
"""

import logging
import os

from celery import Celery
from celery.signals import task_failure, task_retry, task_success

logger = logging.getLogger(__name__)

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "artistbook.settings.production")

app = Celery("artistbook")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.timezone = os.environ.get("TIME_ZONE", "Asia/Bangkok")

app.conf.task_routes = {
    "apps.availabilityapp.tasks.*": {"queue": "availability"},
}

app.conf.beat_schedule = {
    "materialize-recurring-patterns": {
        "task": "apps.availabilityapp.tasks.materialize_recurring_patterns",
        "schedule": 3600.0 * 6,  # Every 6 hours
        "options": {"expires": 3600},  # Task expires after 1 hour if not executed
    },
}


@task_success.connect
def task_success_handler(sender=None, **kwargs):
    logger.info(f"Task {sender.name} succeeded")


@task_failure.connect
def task_failure_handler(sender=None, exception=None, **kwargs):
    logger.error(f"Task {sender.name} failed: {exception}")


@task_retry.connect
def task_retry_handler(sender=None, reason=None, **kwargs):
    logger.warning(f"Task {sender.name} retrying: {reason}")
