import unittest
from datetime import datetime, timezone

from unifeed.core.errors import UnparseableDateError
from unifeed.dates.dateparser import parse_date, try_parse_date


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestStrictLayouts(unittest.TestCase):
    def test_rfc1123_and_rfc3339_are_the_same_instant(self):
        a = parse_date("Mon, 02 Jan 2006 15:04:05 GMT")
        b = parse_date("2006-01-02T15:04:05Z")
        self.assertEqual(a, b)
        self.assertEqual(a, _utc(2006, 1, 2, 15, 4, 5))

    def test_numeric_zone(self):
        self.assertEqual(
            parse_date("Mon, 02 Jan 2006 15:04:05 -0700", lenient=False),
            _utc(2006, 1, 2, 22, 4, 5),
        )

    def test_rfc822_short_form(self):
        # EST is five hours behind UTC
        self.assertEqual(parse_date("Mon, 2 Jan 06 15:04 EST", lenient=False), _utc(2006, 1, 2, 20, 4))

    def test_fractional_seconds_truncated_to_microseconds(self):
        value = parse_date("2024-03-05T10:00:00.123456789Z", lenient=False)
        self.assertEqual(value.microsecond, 123456)

    def test_rfc3339_offset(self):
        self.assertEqual(parse_date("2024-03-04T06:15:00+01:00"), _utc(2024, 3, 4, 5, 15))


class TestLenientLayouts(unittest.TestCase):
    def test_space_separated_iso(self):
        self.assertEqual(parse_date("2006-01-02 15:04:05"), _utc(2006, 1, 2, 15, 4, 5))
        with self.assertRaises(UnparseableDateError):
            parse_date("2006-01-02 15:04:05", lenient=False)

    def test_date_only(self):
        self.assertEqual(parse_date("2024-03-05"), _utc(2024, 3, 5))

    def test_full_weekday_and_month_names(self):
        self.assertEqual(parse_date("Thursday, 4 March 2024 10:00:00 +0100"), _utc(2024, 3, 4, 9))

    def test_us_shaped(self):
        self.assertEqual(parse_date("March 5, 2024"), _utc(2024, 3, 5))

    def test_trailing_zone_comment_ignored(self):
        self.assertEqual(parse_date("Tue, 05 Mar 2024 09:30:00 -0800 (PST)"), _utc(2024, 3, 5, 17, 30))

    def test_non_rfc822_zone_name(self):
        self.assertEqual(parse_date("Mon, 02 Jan 2006 15:04:05 CET"), _utc(2006, 1, 2, 14, 4, 5))
        with self.assertRaises(UnparseableDateError):
            parse_date("Mon, 02 Jan 2006 15:04:05 CET", lenient=False)

    def test_hour_24_rolls_over(self):
        self.assertEqual(parse_date("2024-03-05 24:00:00"), _utc(2024, 3, 6))

    def test_dateutil_fallback(self):
        self.assertEqual(parse_date("Sat Mar 2 10:00:00 2024"), _utc(2024, 3, 2, 10))


class TestUnparseable(unittest.TestCase):
    def test_garbage_raises_value_error(self):
        with self.assertRaises(UnparseableDateError) as ctx:
            parse_date("not-a-date")
        self.assertIsInstance(ctx.exception, ValueError)
        self.assertEqual(ctx.exception.raw, "not-a-date")

    def test_too_little_to_guess_from(self):
        with self.assertRaises(UnparseableDateError):
            parse_date("12")

    def test_offset_of_a_day_or_more(self):
        with self.assertRaises(UnparseableDateError):
            parse_date("Tue, 10 Jun 2003 04:00:00 -2500")
        self.assertIsNone(try_parse_date("2003-06-10T04:00:00+24:00"))

    def test_empty(self):
        with self.assertRaises(UnparseableDateError):
            parse_date("   ")

    def test_try_parse_date_never_raises(self):
        self.assertIsNone(try_parse_date(""))
        self.assertIsNone(try_parse_date(None))
        self.assertIsNone(try_parse_date("not-a-date"))
        self.assertEqual(try_parse_date("2006-01-02T15:04:05Z"), _utc(2006, 1, 2, 15, 4, 5))


if __name__ == "__main__":
    unittest.main()
