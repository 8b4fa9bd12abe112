from datetime import time
from decimal import Decimal

from django.conf import settings
from django.test import TestCase, override_settings

from apps.availabilityapp.enums import AlternativeReason, CheckOutcome
from apps.availabilityapp.models import BlackoutDate
from apps.availabilityapp.services.alternative_search import (
    AlternativeSlotSearch,
    alternative_reason,
    clamp_radius,
)
from apps.availabilityapp.services.conflict_checker import AvailabilityChecker

from .helpers import NOW, create_test_artist, create_test_booking, create_test_slot, d


class AlternativeSlotSearchTest(TestCase):
    """Test cases for ranked alternative slots"""

    def setUp(self):
        self.artist = create_test_artist()

    def search(self, day="2025-06-10", minutes=120, **kwargs):
        return AlternativeSlotSearch.search(self.artist, d(day), minutes, now=NOW, **kwargs)

    def test_adjacent_day_offered_when_requested_day_empty(self):
        create_test_slot(self.artist, d("2025-06-11"), time(9, 0), time(17, 0))

        result = AvailabilityChecker.check(
            self.artist, d("2025-06-10"), time(10, 0), 120, include_alternatives=True, now=NOW
        )

        self.assertEqual(result.outcome, CheckOutcome.NO_AVAILABILITY)
        first = result.alternatives[0]
        self.assertEqual(first.day_difference, 1)
        self.assertEqual(first.reason, AlternativeReason.ADJACENT_DAY)

        data = result.as_dict()["alternatives"][0]
        self.assertEqual(data["date"], "2025-06-11")
        self.assertEqual(data["start_time"], "09:00")
        self.assertEqual(data["end_time"], "11:00")
        self.assertEqual(data["reason"], "ADJACENT_DAY")

    def test_ordering_by_distance_then_time(self):
        create_test_slot(self.artist, d("2025-06-13"), time(9, 0), time(12, 0))
        create_test_slot(self.artist, d("2025-06-11"), time(14, 0), time(18, 0))
        create_test_slot(self.artist, d("2025-06-09"), time(10, 0), time(12, 0))
        create_test_slot(self.artist, d("2025-06-10"), time(15, 0), time(18, 0))

        alternatives = self.search()

        self.assertEqual(
            [(alt.slot.date, alt.day_difference) for alt in alternatives],
            [
                (d("2025-06-10"), 0),
                (d("2025-06-09"), -1),
                (d("2025-06-11"), 1),
                (d("2025-06-13"), 3),
            ],
        )
        self.assertEqual(alternatives[0].reason, AlternativeReason.SAME_DAY_ALTERNATIVE)
        self.assertEqual(alternatives[3].reason, AlternativeReason.ALTERNATIVE_TIME)

    def test_result_is_capped(self):
        for offset in range(1, 8):
            create_test_slot(self.artist, d(f"2025-06-{10 + offset:02d}"))

        with override_settings(ARTISTBOOK={**settings.ARTISTBOOK, "MAX_ALTERNATIVES": 3}):
            alternatives = self.search()

        self.assertEqual(len(alternatives), 3)
        self.assertEqual([alt.day_difference for alt in alternatives], [1, 2, 3])

    def test_excludes_unusable_slots(self):
        # Too short
        create_test_slot(self.artist, d("2025-06-11"), time(9, 0), time(10, 0))
        # Blacked out
        create_test_slot(self.artist, d("2025-06-12"))
        BlackoutDate.objects.create(
            artist=self.artist, start_date=d("2025-06-12"), end_date=d("2025-06-12"), title="Off"
        )
        # Overlaps a confirmed booking
        create_test_slot(self.artist, d("2025-06-13"), time(9, 0), time(12, 0))
        create_test_booking(self.artist, d("2025-06-13"), time(10, 0), time(12, 0))
        # Outside the radius
        create_test_slot(self.artist, d("2025-06-25"))

        self.assertEqual(self.search(), [])

    def test_partly_booked_slot_offers_remaining_time(self):
        create_test_slot(self.artist, d("2025-06-11"), time(18, 0), time(23, 0))
        create_test_booking(self.artist, d("2025-06-11"), time(18, 0), time(20, 0))

        alternatives = self.search()

        self.assertEqual(len(alternatives), 1)
        data = alternatives[0].as_dict()
        self.assertEqual(data["start_time"], "20:00")
        self.assertEqual(data["end_time"], "22:00")
        self.assertEqual(data["slot_start_time"], "18:00")
        check = AvailabilityChecker.check(self.artist, d("2025-06-11"), time(20, 0), 120, now=NOW)
        self.assertEqual(check.outcome, CheckOutcome.AVAILABLE)

    def test_first_gap_between_bookings_that_fits(self):
        create_test_slot(self.artist, d("2025-06-11"), time(9, 0), time(18, 0))
        create_test_booking(self.artist, d("2025-06-11"), time(9, 0), time(10, 0))
        create_test_booking(self.artist, d("2025-06-11"), time(11, 0), time(13, 0))

        alternatives = self.search()

        self.assertEqual(alternatives[0].interval.start.strftime("%H:%M"), "13:00")

    def test_alternative_carries_slot_details(self):
        create_test_slot(
            self.artist,
            d("2025-06-11"),
            buffer_before=15,
            buffer_after=30,
            minimum_hours=Decimal("3.00"),
            notes="Bring own PA",
            requirements="Stage access",
        )

        data = self.search()[0].as_dict()

        self.assertEqual(data["buffer_before"], 15)
        self.assertEqual(data["buffer_after"], 30)
        self.assertEqual(data["minimum_hours"], Decimal("3.00"))
        self.assertEqual(data["notes"], "Bring own PA")
        self.assertEqual(data["requirements"], "Stage access")
        self.assertEqual(data["source"], "availability")
        self.assertEqual(data["start_time"], "09:00")

    def test_window_respects_minimum_advance(self):
        create_test_slot(self.artist, d("2025-06-02"), time(9, 0), time(12, 0))
        create_test_slot(self.artist, d("2025-06-03"), time(9, 0), time(12, 0))

        alternatives = self.search(day="2025-06-02")

        self.assertEqual([alt.slot.date for alt in alternatives], [d("2025-06-03")])

    def test_radius_limits_search(self):
        create_test_slot(self.artist, d("2025-06-14"))

        self.assertEqual(self.search(radius_days=3), [])
        self.assertEqual(len(self.search(radius_days=4)), 1)

    def test_reason_and_radius_helpers(self):
        self.assertEqual(alternative_reason(0), AlternativeReason.SAME_DAY_ALTERNATIVE)
        self.assertEqual(alternative_reason(-1), AlternativeReason.ADJACENT_DAY)
        self.assertEqual(alternative_reason(2), AlternativeReason.ALTERNATIVE_TIME)
        self.assertEqual(clamp_radius(None), 7)
        self.assertEqual(clamp_radius(0), 1)
        self.assertEqual(clamp_radius(100), 30)
