"""
Recurring session scheduling.

Pure planning functions (no database access):
- generate_upcoming_sessions: weekly instants for a patient's fixed slot,
  skipping local dates that already hold a session
- detect_potential_merge: whether a manually entered appointment coincides
  with the patient's expected recurring slot
- resolve_next_session: next upcoming session, or the next expected slot

Persistence is left to the caller; ``create_recurring_sessions`` is the
caller-side helper used by the API.

Generation runs only when a caller asks for it. There is no periodic job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from clinic_backend.appointments.exceptions import InvalidScheduleData
from clinic_backend.appointments.models import SessionStatus, TherapySession
from clinic_backend.appointments.services.wallclock import (
    compose_instant,
    local_date_key,
    local_weekday,
    parse_date_key,
    parse_time_of_day,
    shift_date_key,
    sunday_weekday,
)

logger = logging.getLogger(__name__)


DEFAULT_LOOKAHEAD_DAYS = 30
MERGE_THRESHOLD_SECONDS = 30 * 60
NO_SCHEDULE_SUMMARY = 'no schedule set'

CANCELED_STATUSES = frozenset({SessionStatus.CANCELED.value, SessionStatus.CANCELED_LATE.value})


@dataclass
class RecurringPlan:
    """Instants proposed by the generator, not yet persisted."""
    instants: list[datetime] = field(default_factory=list)
    summary: str = NO_SCHEDULE_SUMMARY

    def to_dict(self) -> dict[str, Any]:
        return {
            'instants': [i.isoformat() for i in self.instants],
            'summary': self.summary,
        }


@dataclass
class MergeSuggestion:
    should_merge: bool
    expected_instant: datetime
    merge_candidate_id: int | None = None
    time_difference_seconds: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            'should_merge': self.should_merge,
            'expected_instant': self.expected_instant.isoformat(),
        }
        if self.merge_candidate_id is not None:
            result['merge_candidate_id'] = self.merge_candidate_id
        if self.time_difference_seconds is not None:
            result['time_difference_seconds'] = self.time_difference_seconds
        return result


def _parse_schedule(fixed_session_day, fixed_session_time) -> tuple[int, int, int] | None:
    """Return ``(weekday, hour, minute)`` or None when no schedule is configured."""
    if fixed_session_day is None or not fixed_session_time:
        return None
    if not 0 <= int(fixed_session_day) <= 6:
        raise InvalidScheduleData(
            f'Weekday must be between 0 (Sunday) and 6 (Saturday), got {fixed_session_day}.',
            field='fixed_session_day',
        )
    hour, minute = parse_time_of_day(fixed_session_time)
    return int(fixed_session_day), hour, minute


def _first_slot_after(now: datetime, weekday: int, hour: int, minute: int) -> str:
    """Date key of the first slot on ``weekday`` at or after today that has not passed yet."""
    today = local_date_key(now)
    delta = (weekday - local_weekday(now)) % 7
    if delta == 0 and compose_instant(today, hour, minute) <= now:
        delta = 7
    return shift_date_key(today, delta)


def generate_upcoming_sessions(
    patient_id,
    fixed_session_day: int | None,
    fixed_session_time: str | None,
    existing_sessions: Iterable,
    now: datetime,
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
) -> RecurringPlan:
    """
    Propose weekly session instants for a patient's fixed slot.

    A local date that already holds any session inside ``[now, now + lookahead]``
    counts as occupied, whatever that session's status (a canceled session
    still occupies its date). The window end is inclusive.

    Args:
        patient_id: Patient the plan is for (used for logging only)
        fixed_session_day: Weekday, 0=Sunday ... 6=Saturday, or None
        fixed_session_time: "HH:MM" wall-clock time, or empty
        existing_sessions: Objects exposing ``scheduled_at``
        now: Reference instant
        lookahead_days: Size of the forward window

    Returns:
        RecurringPlan. An empty plan with summary "no schedule set" when the
        patient has no fixed slot.
    """
    schedule = _parse_schedule(fixed_session_day, fixed_session_time)
    if schedule is None:
        return RecurringPlan(instants=[], summary=NO_SCHEDULE_SUMMARY)
    weekday, hour, minute = schedule

    window_end = now + timedelta(days=lookahead_days)
    occupied = {
        local_date_key(s.scheduled_at)
        for s in existing_sessions
        if now <= s.scheduled_at <= window_end
    }

    instants: list[datetime] = []
    date_key = _first_slot_after(now, weekday, hour, minute)
    while True:
        instant = compose_instant(date_key, hour, minute)
        if instant > window_end:
            break
        if date_key not in occupied:
            instants.append(instant)
        date_key = shift_date_key(date_key, 7)

    logger.info(
        'Recurring plan for patient_id=%s: %d instant(s), %d occupied date(s) skipped',
        patient_id, len(instants), len(occupied),
    )
    return RecurringPlan(
        instants=instants,
        summary=f'Generated {len(instants)} upcoming sessions',
    )


def detect_potential_merge(
    candidate_local_date,
    candidate_hour: int,
    candidate_minute: int,
    patient,
    existing_sessions: Iterable,
) -> MergeSuggestion:
    """
    Check whether a manually entered appointment matches the patient's recurring slot.

    The expected slot is the next occurrence of the fixed weekday counted from
    the candidate's own local date (same weekday means the same date). The
    candidate should be merged when it lies within ``MERGE_THRESHOLD_SECONDS``
    of that slot; in that case an existing session on the same local date and
    within the same threshold is reported as ``merge_candidate_id``.

    Nothing is modified; the caller decides whether to reuse the session.
    """
    date_key = parse_date_key(candidate_local_date).isoformat()
    candidate_instant = compose_instant(date_key, candidate_hour, candidate_minute)

    schedule = _parse_schedule(
        getattr(patient, 'fixed_session_day', None),
        getattr(patient, 'fixed_session_time', None),
    )
    if schedule is None:
        return MergeSuggestion(should_merge=False, expected_instant=candidate_instant)
    weekday, hour, minute = schedule

    delta = (weekday - sunday_weekday(parse_date_key(date_key))) % 7
    expected_instant = compose_instant(shift_date_key(date_key, delta), hour, minute)
    diff_seconds = int(abs((candidate_instant - expected_instant).total_seconds()))

    if diff_seconds > MERGE_THRESHOLD_SECONDS:
        return MergeSuggestion(
            should_merge=False,
            expected_instant=expected_instant,
            time_difference_seconds=diff_seconds,
        )

    same_day = [
        s for s in existing_sessions
        if local_date_key(s.scheduled_at) == date_key
        and abs((s.scheduled_at - candidate_instant).total_seconds()) <= MERGE_THRESHOLD_SECONDS
    ]
    candidate = min(
        same_day,
        key=lambda s: (abs((s.scheduled_at - candidate_instant).total_seconds()), s.scheduled_at),
        default=None,
    )

    return MergeSuggestion(
        should_merge=True,
        expected_instant=expected_instant,
        merge_candidate_id=candidate.id if candidate is not None else None,
        time_difference_seconds=diff_seconds,
    )


def resolve_next_session(
    fixed_session_day: int | None,
    fixed_session_time: str | None,
    sessions: Iterable,
    now: datetime,
) -> datetime | None:
    """Next upcoming non-canceled session, else the next expected recurring slot."""
    upcoming = sorted(
        s.scheduled_at for s in sessions
        if s.scheduled_at > now and s.status not in CANCELED_STATUSES
    )
    if upcoming:
        return upcoming[0]

    try:
        schedule = _parse_schedule(fixed_session_day, fixed_session_time)
    except InvalidScheduleData:
        return None
    if schedule is None:
        return None
    weekday, hour, minute = schedule
    return compose_instant(_first_slot_after(now, weekday, hour, minute), hour, minute)


def create_recurring_sessions(patient, *, now: datetime | None = None, lookahead_days: int | None = None):
    """
    Generate and persist upcoming recurring sessions for ``patient``.

    Returns:
        (RecurringPlan, list[TherapySession]) - the plan and the rows created
    """
    now = now or timezone.now()
    if lookahead_days is None:
        lookahead_days = getattr(settings, 'RECURRING_LOOKAHEAD_DAYS', DEFAULT_LOOKAHEAD_DAYS)

    with transaction.atomic():
        existing = list(
            TherapySession.objects.filter(
                patient=patient,
                scheduled_at__gte=now,
                scheduled_at__lte=now + timedelta(days=lookahead_days),
            )
        )
        plan = generate_upcoming_sessions(
            patient.id,
            patient.fixed_session_day,
            patient.fixed_session_time,
            existing,
            now,
            lookahead_days=lookahead_days,
        )
        created = [
            TherapySession.objects.create(
                patient=patient,
                scheduled_at=instant,
                status=SessionStatus.SCHEDULED,
                is_recurring_template=True,
            )
            for instant in plan.instants
        ]

    logger.info('Created %d recurring session(s) for patient_id=%s', len(created), patient.id)
    return plan, created
