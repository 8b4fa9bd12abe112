import uuid
from datetime import date, time, timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from apps.availabilityapp.enums import AvailabilityStatus
from apps.availabilityapp.models import Availability, BlackoutDate, RecurringPattern, TimeSlotTemplate
from apps.bookingapp.models import BookingStatus
from utils.date_utils import sunday_based_weekday

from .helpers import create_test_artist, create_test_booking, create_test_slot

User = get_user_model()


class ArtistCalendarAPITestCase(TestCase):
    """Shared fixtures: an owned artist with one free slot ten days out"""

    def setUp(self):
        self.client = APIClient()
        self.owner = User.objects.create_user(username="owner", password="testpass123")
        self.stranger = User.objects.create_user(username="stranger", password="testpass123")
        self.artist = create_test_artist(user=self.owner)
        self.day = date.today() + timedelta(days=10)
        self.slot = create_test_slot(self.artist, self.day, time(9, 0), time(17, 0))

    def url(self, name, **kwargs):
        return reverse(name, kwargs={"artist_id": self.artist.id, **kwargs})


class AvailabilityViewSetTest(ArtistCalendarAPITestCase):
    """Test cases for the AvailabilityViewSet"""

    def test_check_is_public(self):
        response = self.client.post(
            self.url("availability-check"),
            {"date": self.day.isoformat(), "start_time": "10:00", "duration_minutes": 120},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["available"])
        self.assertEqual(response.data["slot"]["availability_id"], str(self.slot.id))

    def test_check_reports_reason_and_alternatives(self):
        response = self.client.post(
            self.url("availability-check"),
            {
                "date": (self.day + timedelta(days=1)).isoformat(),
                "start_time": "10:00",
                "duration_minutes": 120,
                "include_alternatives": True,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["reason"], "NO_AVAILABILITY")
        self.assertEqual(response.data["alternatives"][0]["day_difference"], -1)

    def test_check_rejects_bad_input(self):
        response = self.client.post(
            self.url("availability-check"),
            {"date": self.day.isoformat(), "start_time": "25:00", "duration_minutes": 10},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("start_time", response.data)
        self.assertIn("duration_minutes", response.data)

    def test_unknown_artist(self):
        url = reverse("availability-check", kwargs={"artist_id": uuid.uuid4()})

        response = self.client.post(
            url,
            {"date": self.day.isoformat(), "start_time": "10:00", "duration_minutes": 120},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_public_calendar(self):
        response = self.client.get(self.url("availability-public"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["start_date"], date.today().isoformat())
        self.assertEqual(
            [slot["availability_id"] for slot in response.data["availability"]], [str(self.slot.id)]
        )

    def test_management_requires_authentication(self):
        response = self.client.get(self.url("availability-list"))

        self.assertIn(
            response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        )

    def test_management_requires_owner(self):
        self.client.force_authenticate(user=self.stranger)

        response = self.client.get(self.url("availability-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_manages_slots(self):
        self.client.force_authenticate(user=self.owner)
        next_day = self.day + timedelta(days=1)

        response = self.client.post(
            self.url("availability-list"),
            {"date": next_day.isoformat(), "start_time": "18:00", "end_time": "23:00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["start_time"], "18:00")

        duplicate = self.client.post(
            self.url("availability-list"),
            {"date": next_day.isoformat(), "start_time": "18:00", "end_time": "22:00"},
            format="json",
        )
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        listing = self.client.get(self.url("availability-list"))
        self.assertEqual(listing.data["count"], 2)

    def test_inverted_slot_rejected(self):
        self.client.force_authenticate(user=self.owner)

        response = self.client.post(
            self.url("availability-list"),
            {"date": self.day.isoformat(), "start_time": "18:00", "end_time": "17:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_booked_slot_cannot_be_deleted(self):
        self.client.force_authenticate(user=self.owner)
        booking = create_test_booking(
            self.artist, self.day, time(10, 0), time(12, 0), status=BookingStatus.QUOTED
        )
        Availability.objects.filter(id=self.slot.id).update(is_booked=True, booking=booking)

        response = self.client.delete(self.url("availability-detail", pk=self.slot.id))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "state_violation")

    def test_reserve_and_release(self):
        self.client.force_authenticate(user=self.owner)
        booking = create_test_booking(
            self.artist, self.day, time(10, 0), time(12, 0), status=BookingStatus.QUOTED
        )
        rival = create_test_booking(
            self.artist, self.day, time(10, 0), time(12, 0), status=BookingStatus.QUOTED
        )
        payload = {
            "date": self.day.isoformat(),
            "start_time": "10:00",
            "duration_minutes": 120,
        }

        reserved = self.client.post(
            self.url("availability-reserve"), {**payload, "booking_id": str(booking.id)}, format="json"
        )
        self.assertEqual(reserved.status_code, status.HTTP_200_OK)

        refused = self.client.post(
            self.url("availability-reserve"), {**payload, "booking_id": str(rival.id)}, format="json"
        )
        self.assertEqual(refused.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(refused.data["available"])

        released = self.client.post(
            self.url("availability-release"), {"booking_id": str(booking.id)}, format="json"
        )
        self.assertEqual(released.status_code, status.HTTP_200_OK)
        self.assertTrue(released.data["released"])
        self.slot.refresh_from_db()
        self.assertFalse(self.slot.is_booked)


class BlackoutDateViewSetTest(ArtistCalendarAPITestCase):
    """Test cases for the BlackoutDateViewSet"""

    def setUp(self):
        super().setUp()
        self.client.force_authenticate(user=self.owner)
        self.payload = {
            "start_date": self.day.isoformat(),
            "end_date": (self.day + timedelta(days=2)).isoformat(),
            "title": "Maintenance",
            "blackout_type": "maintenance",
        }

    def test_create_flips_slots(self):
        response = self.client.post(self.url("blackout-list"), self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["title"], "Maintenance")
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.status, AvailabilityStatus.UNAVAILABLE)

    def test_create_refused_over_confirmed_booking(self):
        booking = create_test_booking(self.artist, self.day, time(19, 0), time(23, 0))

        response = self.client.post(self.url("blackout-list"), self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(
            response.data["detail"]["rejected_because_confirmed_bookings"][0]["id"], str(booking.id)
        )
        self.assertFalse(BlackoutDate.objects.exists())

    def test_filter_upcoming(self):
        BlackoutDate.objects.create(
            artist=self.artist,
            start_date=date.today() - timedelta(days=30),
            end_date=date.today() - timedelta(days=20),
            title="Past",
        )
        self.client.post(self.url("blackout-list"), self.payload, format="json")

        response = self.client.get(self.url("blackout-list"), {"upcoming": "true"})

        self.assertEqual([item["title"] for item in response.data["results"]], ["Maintenance"])


class TemplateAndPatternViewSetTest(ArtistCalendarAPITestCase):
    """Test cases for template and recurring pattern endpoints"""

    def setUp(self):
        super().setUp()
        self.client.force_authenticate(user=self.owner)

    def test_apply_template(self):
        created = self.client.post(
            self.url("template-list"),
            {"name": "Evening", "duration_minutes": 180, "is_default": True},
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)

        dates = [(self.day + timedelta(days=offset)).isoformat() for offset in (0, 1, 2)]
        response = self.client.post(
            self.url("template-apply"),
            {"template_id": created.data["id"], "dates": dates, "start_time": "18:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["processed"], 3)
        self.assertEqual(
            Availability.objects.filter(
                artist=self.artist, source_template_id=created.data["id"]
            ).count(),
            3,
        )

    def test_apply_unknown_template(self):
        response = self.client.post(
            self.url("template-apply"),
            {"template_id": str(uuid.uuid4()), "dates": [self.day.isoformat()], "start_time": "18:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_apply_too_many_dates(self):
        template = TimeSlotTemplate.objects.create(
            artist=self.artist, name="Short", duration_minutes=60
        )
        dates = [(self.day + timedelta(days=offset)).isoformat() for offset in range(32)]

        response = self.client.post(
            self.url("template-apply"),
            {"template_id": str(template.id), "dates": dates, "start_time": "18:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pattern_lifecycle(self):
        created = self.client.post(
            self.url("recurring-pattern-list"),
            {
                "name": "Weekly set",
                "frequency": "weekly",
                "day_of_week": sunday_based_weekday(self.day),
                "start_time": "18:00",
                "end_time": "23:00",
                "valid_from": date.today().isoformat(),
            },
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        pattern_id = created.data["id"]

        occurrences = self.client.get(
            self.url("recurring-pattern-occurrences", pk=pattern_id),
            {"year": self.day.year, "month": self.day.month},
        )
        self.assertEqual(occurrences.status_code, status.HTTP_200_OK)
        self.assertIn(
            self.day.isoformat(), [item["date"] for item in occurrences.data["occurrences"]]
        )

        materialized = self.client.post(
            self.url("recurring-pattern-materialize"), {"horizon_days": 14}, format="json"
        )
        self.assertEqual(materialized.status_code, status.HTTP_200_OK)
        self.assertGreaterEqual(materialized.data["processed"], 2)

        deleted = self.client.delete(self.url("recurring-pattern-detail", pk=pattern_id))
        self.assertEqual(deleted.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(RecurringPattern.objects.filter(id=pattern_id).exists())

    def test_weekly_pattern_requires_day(self):
        response = self.client.post(
            self.url("recurring-pattern-list"),
            {
                "name": "Weekly set",
                "frequency": "weekly",
                "start_time": "18:00",
                "end_time": "23:00",
                "valid_from": date.today().isoformat(),
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("day_of_week", response.data)
