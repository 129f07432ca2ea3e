"""Tests for recurring session generation, merge detection and next-session lookup.

Reference week (Asia/Jerusalem, summer time UTC+3):
    Mon 2024-06-03 ... Wed 2024-06-05, 12, 19, 26, 2024-07-03
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

from django.test import SimpleTestCase, override_settings

from clinic_backend.appointments.exceptions import InvalidScheduleData
from clinic_backend.appointments.services.recurring import (
    MERGE_THRESHOLD_SECONDS,
    NO_SCHEDULE_SUMMARY,
    detect_potential_merge,
    generate_upcoming_sessions,
    resolve_next_session,
)
from clinic_backend.appointments.services.wallclock import local_date_key

UTC = dt_timezone.utc

WEDNESDAY = 3
MONDAY_MORNING = datetime(2024, 6, 3, 6, 0, tzinfo=UTC)  # Mon 09:00 local


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def session(id, scheduled_at, status="SCHEDULED"):
    return SimpleNamespace(id=id, scheduled_at=scheduled_at, status=status)


@override_settings(CLINIC_TIME_ZONE="Asia/Jerusalem")
class GenerateUpcomingSessionsTest(SimpleTestCase):

    def test_no_schedule_is_an_empty_result(self):
        for day, time in ((None, "14:00"), (WEDNESDAY, ""), (WEDNESDAY, None), (None, None)):
            with self.subTest(day=day, time=time):
                plan = generate_upcoming_sessions(1, day, time, [], MONDAY_MORNING)
                self.assertEqual(plan.instants, [])
                self.assertEqual(plan.summary, NO_SCHEDULE_SUMMARY)

    def test_four_wednesdays_in_thirty_days(self):
        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", [], MONDAY_MORNING)

        self.assertEqual(
            plan.instants,
            [utc(2024, 6, 5, 11, 0), utc(2024, 6, 12, 11, 0), utc(2024, 6, 19, 11, 0), utc(2024, 6, 26, 11, 0)],
        )
        self.assertEqual(plan.summary, "Generated 4 upcoming sessions")

    def test_occupied_first_wednesday_is_skipped(self):
        existing = [session(10, utc(2024, 6, 5, 11, 0))]

        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", existing, MONDAY_MORNING)

        self.assertEqual(len(plan.instants), 3)
        self.assertNotIn("2024-06-05", [local_date_key(i) for i in plan.instants])
        self.assertEqual(plan.summary, "Generated 3 upcoming sessions")

    def test_any_session_on_the_date_occupies_it(self):
        # A canceled session at a different hour still blocks its local date.
        existing = [session(11, utc(2024, 6, 12, 5, 0), status="CANCELED")]

        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", existing, MONDAY_MORNING)

        self.assertNotIn("2024-06-12", [local_date_key(i) for i in plan.instants])
        self.assertEqual(len(plan.instants), 3)

    def test_sessions_outside_the_window_are_ignored(self):
        existing = [
            session(1, utc(2024, 5, 29, 11, 0)),  # past
            session(2, utc(2024, 7, 10, 11, 0)),  # beyond lookahead
        ]

        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", existing, MONDAY_MORNING)

        self.assertEqual(len(plan.instants), 4)

    def test_slot_later_today_is_included(self):
        now = utc(2024, 6, 5, 10, 0)  # Wed 13:00 local

        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", [], now)

        self.assertEqual(plan.instants[0], utc(2024, 6, 5, 11, 0))

    def test_passed_slot_today_moves_one_week(self):
        now = utc(2024, 6, 5, 12, 0)  # Wed 15:00 local

        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", [], now)

        self.assertEqual(plan.instants[0], utc(2024, 6, 12, 11, 0))
        self.assertEqual(plan.instants[0] - now, timedelta(days=6, hours=23))

    def test_window_end_is_inclusive(self):
        # now is exactly today's slot, so today is skipped; the slot four weeks
        # later lands exactly on now + 28 days.
        now = utc(2024, 6, 5, 11, 0)

        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", [], now, lookahead_days=28)

        self.assertEqual(plan.instants[0], utc(2024, 6, 12, 11, 0))
        self.assertEqual(plan.instants[-1], utc(2024, 7, 3, 11, 0))
        self.assertEqual(len(plan.instants), 4)

    def test_properties_hold_across_weekdays_and_times(self):
        existing = [session(1, utc(2024, 6, 10, 8, 0)), session(2, utc(2024, 6, 20, 17, 0))]
        for weekday in range(7):
            for time in ("00:15", "09:00", "14:00", "23:45"):
                for now in (MONDAY_MORNING, utc(2024, 6, 5, 20, 59), utc(2024, 6, 8, 23, 30)):
                    with self.subTest(weekday=weekday, time=time, now=now):
                        plan = generate_upcoming_sessions(1, weekday, time, existing, now)
                        keys = [local_date_key(i) for i in plan.instants]
                        window_end_key = local_date_key(now + timedelta(days=30))

                        self.assertEqual(len(keys), len(set(keys)))
                        self.assertTrue(all(i > now for i in plan.instants))
                        self.assertTrue(all(k <= window_end_key for k in keys))

    def test_invalid_schedule_raises(self):
        with self.assertRaises(InvalidScheduleData):
            generate_upcoming_sessions(1, 7, "14:00", [], MONDAY_MORNING)
        with self.assertRaises(InvalidScheduleData):
            generate_upcoming_sessions(1, WEDNESDAY, "2pm", [], MONDAY_MORNING)

    def test_plan_to_dict(self):
        plan = generate_upcoming_sessions(1, WEDNESDAY, "14:00", [], MONDAY_MORNING, lookahead_days=3)

        self.assertEqual(
            plan.to_dict(),
            {"instants": ["2024-06-05T11:00:00+00:00"], "summary": "Generated 1 upcoming sessions"},
        )


@override_settings(CLINIC_TIME_ZONE="Asia/Jerusalem")
class DetectPotentialMergeTest(SimpleTestCase):

    def setUp(self):
        self.patient = SimpleNamespace(fixed_session_day=WEDNESDAY, fixed_session_time="14:00")

    def test_without_schedule_candidate_is_its_own_expectation(self):
        patient = SimpleNamespace(fixed_session_day=None, fixed_session_time="")

        result = detect_potential_merge("2024-06-05", 14, 20, patient, [])

        self.assertFalse(result.should_merge)
        self.assertEqual(result.expected_instant, utc(2024, 6, 5, 11, 20))
        self.assertIsNone(result.time_difference_seconds)
        self.assertEqual(result.to_dict(), {
            "should_merge": False,
            "expected_instant": "2024-06-05T11:20:00+00:00",
        })

    def test_close_to_slot_merges_with_existing_session(self):
        existing = [session(7, utc(2024, 6, 5, 11, 0)), session(8, utc(2024, 6, 12, 11, 0))]

        result = detect_potential_merge("2024-06-05", 14, 20, self.patient, existing)

        self.assertTrue(result.should_merge)
        self.assertEqual(result.expected_instant, utc(2024, 6, 5, 11, 0))
        self.assertEqual(result.time_difference_seconds, 1200)
        self.assertEqual(result.merge_candidate_id, 7)

    def test_merge_without_existing_session_has_no_candidate(self):
        existing = [session(9, utc(2024, 6, 5, 5, 0))]  # same day, 08:00 local

        result = detect_potential_merge("2024-06-05", 13, 45, self.patient, existing)

        self.assertTrue(result.should_merge)
        self.assertIsNone(result.merge_candidate_id)
        self.assertNotIn("merge_candidate_id", result.to_dict())

    def test_closest_same_day_session_is_the_candidate(self):
        existing = [session(21, utc(2024, 6, 5, 10, 50)), session(22, utc(2024, 6, 5, 11, 5))]

        result = detect_potential_merge("2024-06-05", 14, 0, self.patient, existing)

        self.assertEqual(result.merge_candidate_id, 22)

    def test_threshold_boundary(self):
        at_threshold = detect_potential_merge("2024-06-05", 14, 30, self.patient, [])
        past_threshold = detect_potential_merge("2024-06-05", 14, 31, self.patient, [])

        self.assertTrue(at_threshold.should_merge)
        self.assertEqual(at_threshold.time_difference_seconds, MERGE_THRESHOLD_SECONDS)
        self.assertFalse(past_threshold.should_merge)
        self.assertEqual(past_threshold.time_difference_seconds, 1860)

    def test_expected_slot_is_relative_to_candidate_date(self):
        # A Thursday candidate is compared with the following Wednesday.
        result = detect_potential_merge("2024-06-06", 14, 0, self.patient, [])

        self.assertFalse(result.should_merge)
        self.assertEqual(result.expected_instant, utc(2024, 6, 12, 11, 0))
        self.assertEqual(result.time_difference_seconds, 6 * 24 * 3600)

    def test_should_merge_matches_threshold_everywhere(self):
        for day in ("2024-06-03", "2024-06-05", "2024-06-09"):
            for hour in (12, 13, 14, 15):
                for minute in (0, 14, 29, 30, 31, 45, 59):
                    with self.subTest(day=day, hour=hour, minute=minute):
                        result = detect_potential_merge(day, hour, minute, self.patient, [])
                        self.assertEqual(
                            result.should_merge,
                            result.time_difference_seconds <= MERGE_THRESHOLD_SECONDS,
                        )

    def test_invalid_candidate_date_raises(self):
        with self.assertRaises(InvalidScheduleData):
            detect_potential_merge("05/06/2024", 14, 0, self.patient, [])


@override_settings(CLINIC_TIME_ZONE="Asia/Jerusalem")
class ResolveNextSessionTest(SimpleTestCase):

    def test_returns_earliest_upcoming_non_canceled_session(self):
        sessions = [
            session(1, utc(2024, 6, 12, 11, 0)),
            session(2, utc(2024, 6, 4, 8, 0), status="CANCELED"),
            session(3, utc(2024, 6, 6, 8, 0)),
            session(4, utc(2024, 6, 1, 8, 0)),
        ]

        self.assertEqual(
            resolve_next_session(WEDNESDAY, "14:00", sessions, MONDAY_MORNING),
            utc(2024, 6, 6, 8, 0),
        )

    def test_falls_back_to_expected_slot(self):
        sessions = [session(2, utc(2024, 6, 4, 8, 0), status="CANCELED_LATE")]

        self.assertEqual(
            resolve_next_session(WEDNESDAY, "14:00", sessions, MONDAY_MORNING),
            utc(2024, 6, 5, 11, 0),
        )

    def test_none_without_sessions_or_schedule(self):
        self.assertIsNone(resolve_next_session(None, "", [], MONDAY_MORNING))
        self.assertIsNone(resolve_next_session(WEDNESDAY, "bad", [], MONDAY_MORNING))
