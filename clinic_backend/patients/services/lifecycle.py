"""
Patient lifecycle state machine (ACTIVE <-> INACTIVE).

Each transition runs in a single ``transaction.atomic()`` block covering the
session cascade, the task cascade, the patient update and the lifecycle event
insert. Validation failures are raised before the first write; storage errors
propagate unchanged after the rollback.

Setting an already inactive patient inactive again is allowed: the cascades
run and a new event is appended every time, so callers can re-apply the
cascade with different flags.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, time

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from clinic_backend.appointments.models import SessionStatus, Task, TaskStatus, TherapySession
from clinic_backend.appointments.services.wallclock import clinic_zone
from clinic_backend.patients.exceptions import (
    INVALID_DATE,
    MISSING_DATE,
    MISSING_REASON,
    PATIENT_NOT_FOUND,
    PatientStatusError,
)
from clinic_backend.patients.models import (
    LifecycleEventType,
    Patient,
    PatientLifecycleEvent,
    PatientStatus,
)

logger = logging.getLogger(__name__)


INACTIVE_CANCELLATION_REASON = 'Patient was set to inactive'
ARCHIVE_REACTIVATION_REASON = 'Reactivated from archive'


@dataclass
class InactivationResult:
    patient_id: int
    status: str
    was_already_inactive: bool
    canceled_sessions_count: int
    closed_tasks_count: int

    def to_dict(self):
        return asdict(self)


@dataclass
class ReactivationResult:
    patient_id: int
    status: str
    was_already_active: bool

    def to_dict(self):
        return asdict(self)


def parse_required_date(raw, field_label: str) -> datetime:
    """
    Parse a required date/datetime input into an aware datetime.

    Date-only values mean local midnight in the clinic timezone; naive
    datetimes are interpreted in the clinic timezone as well.

    Raises:
        PatientStatusError: MISSING_DATE when blank, INVALID_DATE when unparseable
    """
    if isinstance(raw, datetime):
        value = raw
    else:
        text = str(raw if raw is not None else '').strip()
        if not text:
            raise PatientStatusError(f'{field_label} is required.', 400, MISSING_DATE)
        try:
            value = parse_datetime(text)
            if value is None:
                day = parse_date(text)
                value = datetime.combine(day, time.min) if day is not None else None
        except ValueError:
            value = None
        if value is None:
            raise PatientStatusError(f'{field_label} is not a valid date.', 400, INVALID_DATE)

    if timezone.is_naive(value):
        value = timezone.make_aware(value, clinic_zone())
    return value


def _get_owned_patient(patient_id, actor) -> Patient:
    patient = (
        Patient.objects.select_for_update()
        .filter(pk=patient_id, owner_id=getattr(actor, 'pk', None))
        .first()
    )
    if patient is None:
        raise PatientStatusError('Patient not found.', 404, PATIENT_NOT_FOUND)
    return patient


def create_lifecycle_event(
    *,
    patient: Patient,
    actor,
    event_type: str,
    occurred_at: datetime,
    reason: str | None = None,
    metadata: dict | None = None,
) -> PatientLifecycleEvent:
    """Append a lifecycle event. Blank reasons are stored as NULL."""
    normalized = (reason or '').strip() or None
    return PatientLifecycleEvent.objects.create(
        patient=patient,
        actor=actor,
        event_type=event_type,
        occurred_at=occurred_at,
        reason=normalized,
        metadata=metadata,
    )


def _cancel_future_sessions(patient: Patient, inactive_at: datetime) -> int:
    now = timezone.now()
    return TherapySession.objects.filter(
        patient=patient,
        status=SessionStatus.SCHEDULED,
        scheduled_at__gte=inactive_at,
    ).update(
        status=SessionStatus.CANCELED,
        canceled_at=now,
        cancellation_reason=INACTIVE_CANCELLATION_REASON,
        updated_at=now,
    )


def _close_open_tasks(patient: Patient) -> int:
    return Task.objects.filter(
        patient=patient,
        status=TaskStatus.OPEN,
    ).update(
        status=TaskStatus.CANCELED,
        completed_at=None,
        updated_at=timezone.now(),
    )


def set_patient_inactive(
    *,
    patient_id,
    actor,
    inactive_at: datetime,
    reason: str | None = None,
    cancel_future_sessions: bool = False,
    close_open_tasks: bool = False,
) -> InactivationResult:
    """
    Move a patient to INACTIVE, optionally cascading to sessions and tasks.

    Args:
        patient_id: Patient to transition
        actor: User performing the change (must own the patient)
        inactive_at: Moment the patient becomes inactive; SCHEDULED sessions
            at or after it are canceled when ``cancel_future_sessions`` is set
        reason: Optional free-text reason stored on the event
        cancel_future_sessions: Cancel SCHEDULED sessions from ``inactive_at`` on
        close_open_tasks: Cancel every OPEN task of the patient

    Raises:
        PatientStatusError: MISSING_DATE, PATIENT_NOT_FOUND
    """
    if inactive_at is None:
        raise PatientStatusError('Inactive date is required.', 400, MISSING_DATE)

    cancel_sessions = bool(cancel_future_sessions)
    close_tasks = bool(close_open_tasks)

    with transaction.atomic():
        patient = _get_owned_patient(patient_id, actor)
        was_already_inactive = patient.archived_at is not None

        canceled_sessions_count = _cancel_future_sessions(patient, inactive_at) if cancel_sessions else 0
        closed_tasks_count = _close_open_tasks(patient) if close_tasks else 0

        patient.archived_at = inactive_at
        patient.save(update_fields=['archived_at', 'updated_at'])

        create_lifecycle_event(
            patient=patient,
            actor=actor,
            event_type=LifecycleEventType.SET_INACTIVE,
            occurred_at=inactive_at,
            reason=reason,
            metadata={
                'cancel_future_sessions': cancel_sessions,
                'close_open_tasks': close_tasks,
                'canceled_sessions_count': canceled_sessions_count,
                'closed_tasks_count': closed_tasks_count,
            },
        )

    logger.info(
        'Patient %s set inactive (already_inactive=%s, canceled_sessions=%d, closed_tasks=%d)',
        patient.pk, was_already_inactive, canceled_sessions_count, closed_tasks_count,
    )
    return InactivationResult(
        patient_id=patient.pk,
        status=PatientStatus.INACTIVE.value,
        was_already_inactive=was_already_inactive,
        canceled_sessions_count=canceled_sessions_count,
        closed_tasks_count=closed_tasks_count,
    )


def reactivate_patient(
    *,
    patient_id,
    actor,
    reactivated_at: datetime,
    reason: str | None = None,
    metadata: dict | None = None,
) -> ReactivationResult:
    """
    Move a patient back to ACTIVE.

    A non-blank reason is mandatory. Sessions and tasks canceled by an earlier
    inactivation are left as they are.

    Raises:
        PatientStatusError: MISSING_REASON, MISSING_DATE, PATIENT_NOT_FOUND
    """
    normalized_reason = (reason or '').strip()
    if not normalized_reason:
        raise PatientStatusError('A reason is required to reactivate a patient.', 400, MISSING_REASON)
    if reactivated_at is None:
        raise PatientStatusError('Reactivation date is required.', 400, MISSING_DATE)

    with transaction.atomic():
        patient = _get_owned_patient(patient_id, actor)
        was_already_active = patient.archived_at is None

        patient.archived_at = None
        patient.save(update_fields=['archived_at', 'updated_at'])

        create_lifecycle_event(
            patient=patient,
            actor=actor,
            event_type=LifecycleEventType.REACTIVATED,
            occurred_at=reactivated_at,
            reason=normalized_reason,
            metadata=metadata,
        )

    logger.info('Patient %s reactivated (already_active=%s)', patient.pk, was_already_active)
    return ReactivationResult(
        patient_id=patient.pk,
        status=PatientStatus.ACTIVE.value,
        was_already_active=was_already_active,
    )


def lifecycle_history(patient: Patient):
    """Lifecycle events of ``patient``, newest first."""
    return PatientLifecycleEvent.objects.filter(patient=patient).select_related('actor')
