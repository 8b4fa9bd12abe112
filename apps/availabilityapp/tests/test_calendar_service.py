from datetime import date, time, timedelta
from decimal import Decimal

from django.db.models import RestrictedError
from django.test import TestCase

from apps.artistsapp.models import Artist
from apps.availabilityapp.enums import BatchFailureCode, DayOfWeek, RecurrenceFrequency
from apps.availabilityapp.models import (
    Availability,
    BlackoutDate,
    Holiday,
    RecurringPattern,
    TimeSlotTemplate,
)
from apps.availabilityapp.services.calendar_service import CalendarService
from apps.availabilityapp.tasks import materialize_recurring_patterns
from apps.bookingapp.models import BookingStatus
from utils.exceptions import StateViolationError, ValidationError

from .helpers import create_test_artist, create_test_booking, create_test_slot, d


def tuesday_pattern(artist, **kwargs):
    defaults = {
        "name": "Tuesday nights",
        "frequency": RecurrenceFrequency.WEEKLY,
        "day_of_week": DayOfWeek.TUESDAY,
        "start_time": time(18, 0),
        "end_time": time(23, 0),
        "price_multiplier": Decimal("1.00"),
        "valid_from": d("2025-06-01"),
    }
    defaults.update(kwargs)
    return RecurringPattern.objects.create(artist=artist, **defaults)


class ResolveRangeTest(TestCase):
    def test_defaults_to_next_thirty_days(self):
        self.assertEqual(
            CalendarService.resolve_range(d("2025-06-01")), (d("2025-06-01"), d("2025-07-01"))
        )

    def test_month_query(self):
        self.assertEqual(
            CalendarService.resolve_range(d("2025-06-01"), year=2025, month=2),
            (d("2025-02-01"), d("2025-02-28")),
        )

    def test_inverted_range_rejected(self):
        with self.assertRaises(ValidationError):
            CalendarService.resolve_range(
                d("2025-06-01"), start_date=d("2025-06-10"), end_date=d("2025-06-05")
            )


class PublicAvailabilityTest(TestCase):
    """Test cases for the public calendar"""

    def setUp(self):
        self.artist = create_test_artist()
        self.start, self.end = d("2025-06-01"), d("2025-06-30")

    def listing(self):
        return CalendarService.list_public_availability(self.artist, self.start, self.end)

    def test_lists_explicit_slots_and_occurrences(self):
        create_test_slot(self.artist, d("2025-06-12"))
        tuesday_pattern(self.artist)

        calendar = self.listing()

        self.assertEqual(
            [(slot["date"], slot["source"]) for slot in calendar],
            [
                ("2025-06-03", "recurring"),
                ("2025-06-10", "recurring"),
                ("2025-06-12", "availability"),
                ("2025-06-17", "recurring"),
                ("2025-06-24", "recurring"),
            ],
        )
        self.assertEqual(calendar[2]["duration_minutes"], 480)
        self.assertEqual(calendar[2]["price"]["final_price"], Decimal("800.00"))

    def test_hides_blocked_slots(self):
        booking = create_test_booking(
            self.artist, d("2025-06-11"), time(9, 0), time(10, 0), status=BookingStatus.QUOTED
        )
        create_test_slot(self.artist, d("2025-06-11"), is_booked=True, booking=booking)
        create_test_slot(self.artist, d("2025-06-12"))
        BlackoutDate.objects.create(
            artist=self.artist, start_date=d("2025-06-12"), end_date=d("2025-06-12"), title="Off"
        )
        create_test_slot(self.artist, d("2025-06-13"))
        create_test_booking(
            self.artist, d("2025-06-13"), time(10, 0), time(12, 0), status=BookingStatus.COMPLETED
        )
        create_test_booking(self.artist, d("2025-06-12"), time(16, 0), time(18, 0))
        create_test_slot(self.artist, d("2025-06-14"))

        self.assertEqual([slot["date"] for slot in self.listing()], ["2025-06-14"])

    def test_overnight_booking_hides_next_morning_slot(self):
        create_test_slot(self.artist, d("2025-06-11"), time(0, 30), time(4, 0))
        create_test_booking(self.artist, d("2025-06-10"), time(22, 0), time(2, 0))

        self.assertEqual(self.listing(), [])

    def test_results_are_cached_until_invalidated(self):
        create_test_slot(self.artist, d("2025-06-12"))
        self.assertEqual(len(self.listing()), 1)

        # Queryset updates bypass signals
        Availability.objects.filter(artist=self.artist).update(date=d("2025-07-12"))
        self.assertEqual(len(self.listing()), 1)

        CalendarService.invalidate(self.artist.id)
        self.assertEqual(self.listing(), [])

    def test_saving_a_slot_invalidates_on_commit(self):
        self.assertEqual(self.listing(), [])

        with self.captureOnCommitCallbacks(execute=True):
            create_test_slot(self.artist, d("2025-06-12"))

        self.assertEqual(len(self.listing()), 1)

    def test_holiday_change_invalidates_every_calendar(self):
        create_test_slot(self.artist, d("2025-06-12"))
        self.assertFalse(self.listing()[0]["price"]["is_holiday"])

        with self.captureOnCommitCallbacks(execute=True):
            Holiday.objects.create(date=d("2025-06-12"), name="Festival")

        self.assertTrue(self.listing()[0]["price"]["is_holiday"])


class MaterializePatternsTest(TestCase):
    """Test cases for persisting recurring occurrences"""

    def setUp(self):
        self.artist = create_test_artist(default_buffer_minutes=30)
        self.pattern = tuesday_pattern(self.artist)

    def test_materializes_occurrences(self):
        result = CalendarService.materialize_patterns(self.artist, d("2025-06-01"), 29)

        self.assertEqual(len(result.processed), 4)
        rows = Availability.objects.filter(artist=self.artist)
        self.assertEqual(rows.count(), 4)
        self.assertTrue(all(row.recurring_pattern_id == self.pattern.id for row in rows))
        self.assertTrue(all(row.buffer_before == 30 for row in rows))

    def test_second_run_creates_nothing(self):
        CalendarService.materialize_patterns(self.artist, d("2025-06-01"), 29)

        result = CalendarService.materialize_patterns(self.artist, d("2025-06-01"), 29)

        self.assertEqual(result.processed, [])
        self.assertEqual(Availability.objects.filter(artist=self.artist).count(), 4)

    def test_existing_rows_and_blackouts_are_respected(self):
        create_test_slot(self.artist, d("2025-06-03"), time(18, 0), time(20, 0))
        BlackoutDate.objects.create(
            artist=self.artist, start_date=d("2025-06-10"), end_date=d("2025-06-10"), title="Off"
        )

        result = CalendarService.materialize_patterns(self.artist, d("2025-06-01"), 29)

        self.assertEqual(
            [item.date for item in result.processed], [d("2025-06-17"), d("2025-06-24")]
        )
        self.assertEqual(result.failed[0].code, BatchFailureCode.BLACKOUT.value)
        self.assertEqual(
            Availability.objects.get(date=d("2025-06-03")).end_time, time(20, 0)
        )

    def test_task_materializes_active_artists(self):
        today = date.today()
        tuesday_pattern(
            self.artist,
            name="Daily",
            frequency=RecurrenceFrequency.DAILY,
            start_time=time(9, 0),
            end_time=time(12, 0),
            valid_from=today,
        )
        self.pattern.delete()

        message = materialize_recurring_patterns(artist_id=str(self.artist.id), horizon_days=6)

        self.assertEqual(message, "Materialized 7 availability slots")
        self.assertEqual(
            Availability.objects.filter(
                artist=self.artist, date__gte=today, date__lte=today + timedelta(days=6)
            ).count(),
            7,
        )


class DependentRecordTest(TestCase):
    """Deletes are refused while dependent records exist"""

    def setUp(self):
        self.artist = create_test_artist()

    def test_pattern_with_materialized_slots_is_kept(self):
        pattern = tuesday_pattern(self.artist)
        CalendarService.materialize_patterns(self.artist, d("2025-06-01"), 6)

        with self.assertRaises(StateViolationError) as ctx:
            CalendarService.delete_pattern(pattern)

        dependents = ctx.exception.detail["dependent_availability"]
        self.assertEqual([row["date"] for row in dependents], ["2025-06-03"])
        self.assertTrue(RecurringPattern.objects.filter(id=pattern.id).exists())

    def test_artist_delete_removes_materialized_calendar(self):
        pattern = tuesday_pattern(self.artist)
        CalendarService.materialize_patterns(self.artist, d("2025-06-01"), 13)
        self.assertEqual(pattern.availability_slots.count(), 2)

        with self.assertRaises(RestrictedError):
            pattern.delete()

        self.artist.delete()

        self.assertFalse(Artist.objects.exists())
        self.assertFalse(RecurringPattern.objects.exists())
        self.assertFalse(Availability.objects.exists())

    def test_pattern_without_slots_is_deleted(self):
        pattern = tuesday_pattern(self.artist)

        CalendarService.delete_pattern(pattern)

        self.assertFalse(RecurringPattern.objects.exists())

    def test_booked_slot_cannot_be_deleted(self):
        booking = create_test_booking(
            self.artist, d("2025-06-10"), time(10, 0), time(12, 0), status=BookingStatus.QUOTED
        )
        slot = create_test_slot(self.artist, d("2025-06-10"), is_booked=True, booking=booking)

        with self.assertRaises(StateViolationError):
            CalendarService.delete_availability(slot)

        self.assertTrue(Availability.objects.filter(id=slot.id).exists())

    def test_single_default_template(self):
        first = CalendarService.save_template(
            TimeSlotTemplate(artist=self.artist, name="Short", duration_minutes=60, is_default=True)
        )
        second = CalendarService.save_template(
            TimeSlotTemplate(artist=self.artist, name="Long", duration_minutes=240, is_default=True)
        )

        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)

    def test_expand_pattern_month(self):
        pattern = tuesday_pattern(self.artist)

        occurrences = CalendarService.expand_pattern_month(pattern, 2025, 7)

        self.assertEqual(
            [occurrence.date for occurrence in occurrences],
            [d("2025-07-01"), d("2025-07-08"), d("2025-07-15"), d("2025-07-22"), d("2025-07-29")],
        )
