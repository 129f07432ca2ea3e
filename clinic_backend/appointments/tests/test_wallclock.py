"""Tests for the clinic wall-clock converter (Asia/Jerusalem)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase, override_settings

from clinic_backend.appointments.exceptions import InvalidScheduleData
from clinic_backend.appointments.services.wallclock import (
    compose_instant,
    local_date_key,
    local_weekday,
    parse_date_key,
    parse_time_of_day,
    sample_offset,
    shift_date_key,
    sunday_weekday,
)

UTC = dt_timezone.utc


@override_settings(CLINIC_TIME_ZONE="Asia/Jerusalem")
class WallClockTest(SimpleTestCase):

    def test_local_date_key_crosses_midnight(self):
        # 22:30 UTC is 01:30 the next day in summer (UTC+3).
        instant = datetime(2024, 6, 4, 22, 30, tzinfo=UTC)
        self.assertEqual(local_date_key(instant), "2024-06-05")

    def test_local_weekday_is_sunday_based(self):
        self.assertEqual(local_weekday(datetime(2024, 6, 2, 9, 0, tzinfo=UTC)), 0)  # Sunday
        self.assertEqual(local_weekday(datetime(2024, 6, 4, 22, 30, tzinfo=UTC)), 3)  # Wed local
        self.assertEqual(local_weekday(datetime(2024, 6, 8, 9, 0, tzinfo=UTC)), 6)  # Saturday

    def test_sunday_weekday(self):
        self.assertEqual(sunday_weekday(date(2024, 6, 2)), 0)
        self.assertEqual(sunday_weekday(date(2024, 6, 3)), 1)

    def test_naive_instants_are_treated_as_utc(self):
        self.assertEqual(local_date_key(datetime(2024, 6, 4, 22, 30)), "2024-06-05")

    def test_compose_instant_winter_and_summer(self):
        self.assertEqual(
            compose_instant("2024-01-10", 14, 0),
            datetime(2024, 1, 10, 12, 0, tzinfo=UTC),
        )
        self.assertEqual(
            compose_instant("2024-06-05", 14, 0),
            datetime(2024, 6, 5, 11, 0, tzinfo=UTC),
        )

    def test_compose_instant_accepts_date_objects(self):
        self.assertEqual(
            compose_instant(date(2024, 6, 5), 9, 30),
            datetime(2024, 6, 5, 6, 30, tzinfo=UTC),
        )

    def test_compose_instant_uses_noon_offset_on_dst_start_day(self):
        # Israel switched to summer time on 2024-03-29 at 02:00. The offset is
        # sampled at local noon (UTC+3) and applied to 01:00 as well.
        self.assertEqual(sample_offset("2024-03-29"), timedelta(hours=3))
        self.assertEqual(
            compose_instant("2024-03-29", 1, 0),
            datetime(2024, 3, 28, 22, 0, tzinfo=UTC),
        )

    def test_compose_instant_round_trips_local_date(self):
        instant = compose_instant("2024-11-20", 23, 45)
        self.assertEqual(local_date_key(instant), "2024-11-20")

    def test_compose_instant_rejects_out_of_range_time(self):
        with self.assertRaises(InvalidScheduleData):
            compose_instant("2024-06-05", 24, 0)
        with self.assertRaises(InvalidScheduleData):
            compose_instant("2024-06-05", 10, 60)

    def test_parse_time_of_day(self):
        self.assertEqual(parse_time_of_day("14:00"), (14, 0))
        self.assertEqual(parse_time_of_day(" 09:05 "), (9, 5))
        for bad in ("25:00", "14:60", "1400", "ab:cd", "", None):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidScheduleData):
                    parse_time_of_day(bad)

    def test_parse_date_key(self):
        self.assertEqual(parse_date_key("2024-06-05"), date(2024, 6, 5))
        with self.assertRaises(InvalidScheduleData) as ctx:
            parse_date_key("2024-02-30")
        self.assertEqual(ctx.exception.to_dict()["code"], "INVALID_SCHEDULE")
        self.assertEqual(ctx.exception.to_dict()["field"], "date")

    def test_shift_date_key_crosses_month(self):
        self.assertEqual(shift_date_key("2024-06-26", 7), "2024-07-03")


@override_settings(CLINIC_TIME_ZONE="UTC")
class WallClockOtherZoneTest(SimpleTestCase):

    def test_zone_comes_from_settings(self):
        self.assertEqual(
            compose_instant("2024-06-05", 14, 0),
            datetime(2024, 6, 5, 14, 0, tzinfo=UTC),
        )
