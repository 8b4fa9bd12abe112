"""
Availability app views for ArtistBook
Handles endpoints for an artist's calendar: explicit slots, recurring patterns,
blackout dates, time slot templates, availability checks and reservations
"""

import logging
from datetime import date

from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response

from api.documentation.api_doc_decorators import document_api_endpoint, document_api_viewset
from apps.artistsapp.models import Artist
from apps.availabilityapp.filters import (
    AvailabilityFilter,
    BlackoutDateFilter,
    TimeSlotTemplateFilter,
)
from apps.availabilityapp.models import (
    Availability,
    BlackoutDate,
    RecurringPattern,
    TimeSlotTemplate,
)
from apps.availabilityapp.permissions import IsArtistOwner
from apps.availabilityapp.serializers import (
    ApplyTemplateSerializer,
    AvailabilityCheckSerializer,
    AvailabilitySerializer,
    BlackoutDateSerializer,
    MaterializeSerializer,
    MonthQuerySerializer,
    OccurrenceSerializer,
    PublicAvailabilityQuerySerializer,
    RecurringPatternSerializer,
    ReleaseSlotSerializer,
    ReserveSlotSerializer,
    TimeSlotTemplateSerializer,
)
from apps.availabilityapp.services.blackout_filter import BlackoutService
from apps.availabilityapp.services.calendar_service import CalendarService
from apps.availabilityapp.services.conflict_checker import AvailabilityChecker
from apps.availabilityapp.services.slot_reservation import SlotReservationService
from apps.availabilityapp.services.template_applier import TemplateApplier
from utils.distributed_locks import artist_calendar_lock
from utils.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)


class ArtistCalendarViewSetMixin:
    """
    Scopes a viewset to the artist in the URL.

    Management actions require the user who owns the artist profile (or
    staff); actions listed in ``public_actions`` are open to everyone.
    """

    public_actions = ()

    def get_artist(self) -> Artist:
        if not hasattr(self, "_artist"):
            try:
                self._artist = Artist.objects.get(id=self.kwargs["artist_id"], is_active=True)
            except Artist.DoesNotExist:
                raise ResourceNotFoundError(
                    _("Artist not found"), detail={"artist_id": str(self.kwargs["artist_id"])}
                )
        return self._artist

    def get_permissions(self):
        if self.action in self.public_actions:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsArtistOwner()]

    def get_queryset(self):
        queryset = super().get_queryset()
        if getattr(self, "swagger_fake_view", False):
            return queryset.none()
        return queryset.filter(artist=self.get_artist())

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if not getattr(self, "swagger_fake_view", False):
            context["artist"] = self.get_artist()
        return context


@document_api_viewset(
    summary="Availability",
    description="Explicit availability slots of an artist",
    tags=["Availability"],
)
class AvailabilityViewSet(ArtistCalendarViewSetMixin, viewsets.ModelViewSet):
    """
    API endpoint for an artist's availability.

    Provides CRUD operations for explicit slots with additional actions for:
    - Checking a booking request (public)
    - Listing the public calendar (public)
    - Reserving and releasing slots for bookings
    """

    queryset = Availability.objects.all()
    serializer_class = AvailabilitySerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = AvailabilityFilter
    ordering_fields = ["date", "start_time", "created_at"]
    ordering = ["date", "start_time"]
    public_actions = ("check", "public")

    def perform_create(self, serializer):
        artist = self.get_artist()
        with artist_calendar_lock(artist.id):
            serializer.save(artist=artist)

    def perform_update(self, serializer):
        with artist_calendar_lock(self.get_artist().id):
            serializer.save()

    def perform_destroy(self, instance):
        with artist_calendar_lock(self.get_artist().id):
            CalendarService.delete_availability(instance)

    @document_api_endpoint(
        summary="Check availability",
        description="Check a requested date, start time and duration against the artist's calendar",
        request_body=AvailabilityCheckSerializer,
        responses={200: "Check result with reason code, slot and alternatives", 400: "Bad Request"},
        tags=["Availability"],
    )
    @action(detail=False, methods=["post"])
    def check(self, request, artist_id=None):
        """Check whether a booking request fits the artist's calendar"""
        serializer = AvailabilityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = AvailabilityChecker.check(
            self.get_artist(),
            data["date"],
            data["start_time"],
            data["duration_minutes"],
            include_alternatives=data["include_alternatives"],
            alternative_range_days=data.get("alternative_range_days"),
        )
        return Response(result.as_dict())

    @document_api_endpoint(
        summary="Public availability",
        description="Free slots of the artist, defaulting to the next 30 days",
        responses={200: "Success - Returns available slots"},
        query_params=[
            {"name": "start_date", "description": "First date (YYYY-MM-DD)"},
            {"name": "end_date", "description": "Last date (YYYY-MM-DD)"},
            {"name": "year", "description": "Year of a month query", "type": "integer"},
            {"name": "month", "description": "Month of a month query", "type": "integer"},
        ],
        tags=["Availability"],
    )
    @action(detail=False, methods=["get"])
    def public(self, request, artist_id=None):
        serializer = PublicAvailabilityQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        start_date, end_date = CalendarService.resolve_range(date.today(), **serializer.validated_data)
        slots = CalendarService.list_public_availability(self.get_artist(), start_date, end_date)
        return Response(
            {
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "availability": slots,
            }
        )

    @document_api_endpoint(
        summary="Reserve slot",
        description="Re-check a request and claim the matched slot for a booking",
        request_body=ReserveSlotSerializer,
        responses={
            200: "Slot reserved",
            409: "Request cannot be booked or the slot was claimed concurrently",
        },
        tags=["Availability"],
    )
    @action(detail=False, methods=["post"])
    def reserve(self, request, artist_id=None):
        serializer = ReserveSlotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        artist = self.get_artist()
        booking = SlotReservationService.get_booking(artist.id, data["booking_id"])
        result = SlotReservationService.reserve(
            artist, booking, data["date"], data["start_time"], data["duration_minutes"]
        )
        if not result.available:
            return Response(result.as_dict(), status=status.HTTP_409_CONFLICT)
        return Response(result.as_dict())

    @document_api_endpoint(
        summary="Release slot",
        description="Free the slot held by a booking",
        request_body=ReleaseSlotSerializer,
        responses={200: "Slot released", 404: "Booking not found"},
        tags=["Availability"],
    )
    @action(detail=False, methods=["post"])
    def release(self, request, artist_id=None):
        serializer = ReleaseSlotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = SlotReservationService.get_booking(
            self.get_artist().id, serializer.validated_data["booking_id"]
        )
        slot = SlotReservationService.release(booking)
        return Response(
            {
                "released": slot is not None,
                "availability_id": str(slot.id) if slot else None,
            }
        )


@document_api_viewset(
    summary="Recurring Pattern",
    description="Recurring availability rules of an artist",
    tags=["Availability", "Recurring Patterns"],
)
class RecurringPatternViewSet(ArtistCalendarViewSetMixin, viewsets.ModelViewSet):
    """
    API endpoint for recurring patterns.

    Deleting a pattern is refused while materialized slots depend on it.
    """

    queryset = RecurringPattern.objects.all()
    serializer_class = RecurringPatternSerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["frequency", "is_active"]
    ordering = ["-created_at"]

    def perform_create(self, serializer):
        serializer.save(artist=self.get_artist())

    def perform_destroy(self, instance):
        CalendarService.delete_pattern(instance)

    @document_api_endpoint(
        summary="Pattern occurrences",
        description="Occurrences of a recurring pattern in one month, computed on demand",
        query_params=[
            {"name": "year", "description": "Year", "type": "integer", "required": True},
            {"name": "month", "description": "Month (1-12)", "type": "integer", "required": True},
        ],
        tags=["Recurring Patterns"],
    )
    @action(detail=True, methods=["get"])
    def occurrences(self, request, artist_id=None, pk=None):
        pattern = self.get_object()
        serializer = MonthQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        occurrences = CalendarService.expand_pattern_month(
            pattern, serializer.validated_data["year"], serializer.validated_data["month"]
        )
        return Response(
            {
                "pattern_id": str(pattern.id),
                "occurrences": OccurrenceSerializer(occurrences, many=True).data,
            }
        )

    @document_api_endpoint(
        summary="Materialize patterns",
        description="Persist occurrences of active patterns as availability slots",
        request_body=MaterializeSerializer,
        tags=["Recurring Patterns"],
    )
    @action(detail=False, methods=["post"])
    def materialize(self, request, artist_id=None):
        serializer = MaterializeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CalendarService.materialize_patterns(
            self.get_artist(), date.today(), serializer.validated_data.get("horizon_days")
        )
        return Response(result.as_dict())


@document_api_viewset(
    summary="Blackout Date",
    description="Date ranges in which the artist cannot be booked",
    tags=["Availability", "Blackouts"],
)
class BlackoutDateViewSet(ArtistCalendarViewSetMixin, viewsets.ModelViewSet):
    """
    API endpoint for blackout dates.

    Creating a blackout over a confirmed or paid booking is refused with the
    conflicting bookings listed; otherwise free slots in the range are marked
    unavailable.
    """

    queryset = BlackoutDate.objects.all()
    serializer_class = BlackoutDateSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = BlackoutDateFilter

    def perform_create(self, serializer):
        serializer.instance = BlackoutService.create_blackout(
            self.get_artist(), **serializer.validated_data
        )

    def perform_update(self, serializer):
        serializer.instance = BlackoutService.update_blackout(
            serializer.instance, **serializer.validated_data
        )


@document_api_viewset(
    summary="Time Slot Template",
    description="Reusable slot shapes of an artist",
    tags=["Availability", "Templates"],
)
class TimeSlotTemplateViewSet(ArtistCalendarViewSetMixin, viewsets.ModelViewSet):
    """API endpoint for time slot templates with an action to apply one to dates"""

    queryset = TimeSlotTemplate.objects.all()
    serializer_class = TimeSlotTemplateSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = TimeSlotTemplateFilter

    def perform_create(self, serializer):
        serializer.instance = CalendarService.save_template(
            TimeSlotTemplate(artist=self.get_artist(), **serializer.validated_data)
        )

    def perform_update(self, serializer):
        template = serializer.instance
        for field, value in serializer.validated_data.items():
            setattr(template, field, value)
        serializer.instance = CalendarService.save_template(template)

    @document_api_endpoint(
        summary="Apply template",
        description="Create or overwrite availability slots from a template on up to 31 dates. "
        "Dates are processed independently and failures are reported per date.",
        request_body=ApplyTemplateSerializer,
        responses={200: "Batch result with processed and failed dates", 404: "Template not found"},
        tags=["Templates"],
    )
    @action(detail=False, methods=["post"])
    def apply(self, request, artist_id=None):
        serializer = ApplyTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        template = TemplateApplier.get_template(self.get_artist().id, data["template_id"])
        result = TemplateApplier.apply(
            template,
            data["dates"],
            data["start_time"],
            overwrite=data["overwrite_existing"],
        )
        return Response(result.as_dict())
