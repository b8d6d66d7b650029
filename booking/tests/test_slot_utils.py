# booking/tests/test_slot_utils.py

from datetime import date

from django.test import SimpleTestCase

from booking.exceptions import FormatError
from booking.services.slot_utils import (
    date_to_range,
    day_of_week,
    format_time,
    generate_slots,
    get_zone,
    merge_intervals,
    minute_to_datetime,
    parse_date,
    parse_time,
    validate_day_of_week,
)


class TimeArithmeticTests(SimpleTestCase):
    def test_parse_time(self):
        self.assertEqual(parse_time("00:00"), 0)
        self.assertEqual(parse_time("09:30"), 570)
        self.assertEqual(parse_time("23:59"), 1439)

    def test_format_time_is_inverse_of_parse_time(self):
        for value in ("00:00", "00:05", "09:30", "12:00", "17:45", "23:59"):
            self.assertEqual(format_time(parse_time(value)), value)

    def test_malformed_times_are_rejected(self):
        for value in ("9:00", "09:0", "0900", "24:00", "12:60", "ab:cd", "", None, 540):
            with self.assertRaises(FormatError):
                parse_time(value)

    def test_format_time_outside_one_day(self):
        with self.assertRaises(FormatError):
            format_time(1440)
        with self.assertRaises(FormatError):
            format_time(-1)

    def test_day_of_week_is_sunday_based(self):
        self.assertEqual(day_of_week(date(2030, 1, 6)), 0)  # Sunday
        self.assertEqual(day_of_week(date(2030, 1, 7)), 1)  # Monday
        self.assertEqual(day_of_week(date(2030, 1, 12)), 6)  # Saturday

    def test_validate_day_of_week(self):
        self.assertEqual(validate_day_of_week(0), 0)
        self.assertEqual(validate_day_of_week(6), 6)
        for value in (-1, 7, "1", True, None):
            with self.assertRaises(FormatError):
                validate_day_of_week(value)

    def test_parse_date(self):
        self.assertEqual(parse_date("2030-01-07"), date(2030, 1, 7))
        self.assertEqual(parse_date("2030-01-07T10:00:00Z"), date(2030, 1, 7))
        for value in ("07/01/2030", "2030-13-01", "", None):
            with self.assertRaises(FormatError):
                parse_date(value)


class IntervalTests(SimpleTestCase):
    def test_merge_sorts_and_merges_overlaps(self):
        self.assertEqual(
            merge_intervals([(780, 1020), (540, 720), (600, 660)]),
            [(540, 720), (780, 1020)],
        )

    def test_touching_intervals_merge(self):
        self.assertEqual(merge_intervals([(540, 720), (720, 780)]), [(540, 780)])

    def test_merge_empty(self):
        self.assertEqual(merge_intervals([]), [])

    def test_generate_slots_steps_by_duration(self):
        # 09:00-17:00 with 60 minute service -> 8 slots
        slots = generate_slots([(540, 1020)], 60)
        self.assertEqual([format_time(s) for s in slots][:2], ["09:00", "10:00"])
        self.assertEqual(len(slots), 8)
        self.assertEqual(format_time(slots[-1]), "16:00")

    def test_generate_slots_drops_partial_tail(self):
        # 09:00-10:30 with 45 minutes: 09:00, 09:45 (10:30 would overrun)
        self.assertEqual(generate_slots([(540, 630)], 45), [540, 585])

    def test_generate_slots_needs_positive_duration(self):
        with self.assertRaises(FormatError):
            generate_slots([(540, 600)], 0)


class TimezoneWindowTests(SimpleTestCase):
    def test_date_to_range_in_named_zone(self):
        tz = get_zone("Europe/Istanbul")
        start, end = date_to_range(date(2030, 1, 7), tz)
        self.assertEqual(start.utcoffset().total_seconds(), 3 * 3600)
        self.assertEqual((end - start).total_seconds(), 24 * 3600)

    def test_minute_to_datetime(self):
        tz = get_zone("UTC")
        value = minute_to_datetime(date(2030, 1, 7), 570, tz)
        self.assertEqual((value.hour, value.minute), (9, 30))
