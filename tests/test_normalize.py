# tests/test_normalize.py
from __future__ import annotations

import unittest
import xmlrpc.client
from datetime import datetime, timedelta, timezone

from wp_posts.errors import MalformedDateError
from wp_posts.normalize import coerce_id, is_blank, parse_gmt_datetime


class TestIsBlank(unittest.TestCase):
    def test_blank_values(self) -> None:
        for value in (None, False, "", "   ", [], {}, (), b""):
            self.assertTrue(is_blank(value), msg=repr(value))

    def test_present_values(self) -> None:
        for value in ("x", 0, 1, [""], {"a": None}, True):
            self.assertFalse(is_blank(value), msg=repr(value))


class TestParseGmtDatetime(unittest.TestCase):
    def test_naive_datetime_is_taken_as_utc(self) -> None:
        dt = parse_gmt_datetime(datetime(2024, 1, 2, 3, 4, 5), field="post_date_gmt")
        self.assertEqual(dt, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))

    def test_aware_datetime_is_converted_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        dt = parse_gmt_datetime(datetime(2024, 1, 2, 5, 0, 0, tzinfo=plus_two), field="d")
        self.assertEqual(dt, datetime(2024, 1, 2, 3, 0, 0, tzinfo=timezone.utc))

    def test_xmlrpc_compact_forms(self) -> None:
        expected = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        self.assertEqual(parse_gmt_datetime("20240102T03:04:05", field="d"), expected)
        self.assertEqual(
            parse_gmt_datetime(xmlrpc.client.DateTime("20240102T03:04:05"), field="d"),
            expected,
        )

    def test_iso_string_with_z(self) -> None:
        dt = parse_gmt_datetime("2024-01-02T03:04:05Z", field="d")
        self.assertEqual(dt, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))

    def test_garbage_raises(self) -> None:
        for value in ("not a date", "", "00000000T00:00:00", 12345, None):
            with self.assertRaises(MalformedDateError) as ctx:
                parse_gmt_datetime(value, field="post_date_gmt")
            self.assertEqual(ctx.exception.field, "post_date_gmt")


class TestCoerceId(unittest.TestCase):
    def test_coerce_id(self) -> None:
        self.assertEqual(coerce_id(" 12 "), "12")
        self.assertEqual(coerce_id(12), "12")
        self.assertIsNone(coerce_id(""))
        self.assertIsNone(coerce_id(True))
        self.assertIsNone(coerce_id(1.5))


if __name__ == "__main__":
    unittest.main()
