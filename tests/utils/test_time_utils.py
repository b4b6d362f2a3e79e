import unittest
from datetime import timedelta

from utils.time_utils import format_duration, parse_duration


class TestParseDuration(unittest.TestCase):
    def test_minutes_and_seconds(self):
        self.assertEqual(parse_duration("3:45"), timedelta(minutes=3, seconds=45))

    def test_hours_minutes_seconds(self):
        self.assertEqual(
            parse_duration("1:02:03"), timedelta(hours=1, minutes=2, seconds=3)
        )

    def test_non_numeric_parts_count_as_zero(self):
        self.assertEqual(parse_duration("x:30"), timedelta(seconds=30))

    def test_unsupported_shapes(self):
        for text in ("", None, "42", "1:2:3:4"):
            with self.subTest(text=text):
                self.assertEqual(parse_duration(text), timedelta())


class TestFormatDuration(unittest.TestCase):
    def test_short(self):
        self.assertEqual(format_duration(timedelta(minutes=3, seconds=5)), "3:05")

    def test_with_hours(self):
        self.assertEqual(
            format_duration(timedelta(hours=1, minutes=2, seconds=3)), "1:02:03"
        )

    def test_empty_and_negative(self):
        self.assertEqual(format_duration(None), "0:00")
        self.assertEqual(format_duration(timedelta(seconds=-10)), "0:00")

    def test_parse_output_is_accepted(self):
        self.assertEqual(format_duration(parse_duration("12:34")), "12:34")
