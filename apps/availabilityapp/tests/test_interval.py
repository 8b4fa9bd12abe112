from datetime import date, datetime, time

from django.test import SimpleTestCase

from apps.availabilityapp.services.interval import Interval, clock_interval
from utils.exceptions import InvalidIntervalError


class IntervalTest(SimpleTestCase):
    """Test cases for half-open wall-clock intervals"""

    def setUp(self):
        self.day = date(2025, 6, 10)

    def test_adjacent_intervals_do_not_overlap(self):
        morning = Interval.from_times(self.day, time(9, 0), time(12, 0))
        afternoon = Interval.from_times(self.day, time(12, 0), time(15, 0))

        self.assertFalse(morning.overlaps(afternoon))
        self.assertFalse(afternoon.overlaps(morning))

    def test_overlap_is_symmetric(self):
        a = Interval.from_times(self.day, time(9, 0), time(12, 0))
        b = Interval.from_times(self.day, time(11, 0), time(13, 0))

        self.assertTrue(a.overlaps(b))
        self.assertTrue(b.overlaps(a))

    def test_contains(self):
        slot = Interval.from_times(self.day, time(9, 0), time(17, 0))

        self.assertTrue(slot.contains(Interval.from_duration(self.day, time(9, 0), 480)))
        self.assertTrue(slot.contains(Interval.from_duration(self.day, time(10, 0), 180)))
        self.assertFalse(slot.contains(Interval.from_duration(self.day, time(16, 0), 120)))

    def test_empty_interval_rejected(self):
        with self.assertRaises(InvalidIntervalError):
            Interval.from_times(self.day, time(10, 0), time(10, 0))
        with self.assertRaises(InvalidIntervalError):
            Interval.from_times(self.day, time(10, 0), time(9, 0))

    def test_from_duration_crosses_midnight(self):
        interval = Interval.from_duration(self.day, time(23, 0), 120)

        self.assertEqual(interval.end, datetime(2025, 6, 11, 1, 0))
        self.assertEqual(interval.duration_minutes, 120)

    def test_clock_interval_wraps_past_midnight(self):
        interval = clock_interval(self.day, time(22, 0), time(2, 0))

        self.assertEqual(interval.start, datetime(2025, 6, 10, 22, 0))
        self.assertEqual(interval.end, datetime(2025, 6, 11, 2, 0))

    def test_with_buffers(self):
        interval = Interval.from_times(self.day, time(10, 0), time(12, 0)).with_buffers(30, 15)

        self.assertEqual(interval.start, datetime(2025, 6, 10, 9, 30))
        self.assertEqual(interval.end, datetime(2025, 6, 10, 12, 15))
