# apps/availabilityapp/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.availabilityapp.views import (
    AvailabilityViewSet,
    BlackoutDateViewSet,
    RecurringPatternViewSet,
    TimeSlotTemplateViewSet,
)

ARTIST_PREFIX = r"artists/(?P<artist_id>[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})"

router = DefaultRouter()
router.register(rf"{ARTIST_PREFIX}/availability", AvailabilityViewSet, basename="availability")
router.register(
    rf"{ARTIST_PREFIX}/recurring-patterns", RecurringPatternViewSet, basename="recurring-pattern"
)
router.register(rf"{ARTIST_PREFIX}/blackouts", BlackoutDateViewSet, basename="blackout")
router.register(rf"{ARTIST_PREFIX}/templates", TimeSlotTemplateViewSet, basename="template")

urlpatterns = [
    path("", include(router.urls)),
]
