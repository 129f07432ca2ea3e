"""
Merging a duplicate session into the one that is kept.

This is the action behind a merge suggestion: the caller picks the session to
keep (``primary``) and the duplicate (``secondary``). Tasks, payment
allocations and guidance links of the duplicate move to the kept session,
then the duplicate is deleted. The merge detector itself never calls this.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from django.db import transaction

from clinic_backend.appointments.exceptions import SessionMergeError
from clinic_backend.appointments.models import Task, TherapySession
from clinic_backend.records.models import PaymentAllocation

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    kept: int
    deleted: int
    patient_id: int
    moved_tasks: int
    moved_allocations: int

    def to_dict(self):
        return {'merged': True, **asdict(self)}


def merge_sessions(*, primary_id, secondary_id, owner) -> MergeResult:
    """
    Keep ``primary_id`` and fold ``secondary_id`` into it.

    Both sessions must belong to patients owned by ``owner``.

    Raises:
        SessionMergeError: SAME_SESSION (400), SESSION_NOT_FOUND (404),
            PATIENT_MISMATCH (400)
    """
    if str(primary_id) == str(secondary_id):
        raise SessionMergeError('A session cannot be merged with itself.', 400, 'SAME_SESSION')

    with transaction.atomic():
        sessions = {
            s.pk: s
            for s in TherapySession.objects.select_for_update()
            .select_related('patient')
            .filter(pk__in=[primary_id, secondary_id], patient__owner=owner)
        }
        primary = sessions.get(int(primary_id))
        secondary = sessions.get(int(secondary_id))
        if primary is None or secondary is None:
            raise SessionMergeError('One or both sessions not found.', 404, 'SESSION_NOT_FOUND')
        if primary.patient_id != secondary.patient_id:
            raise SessionMergeError('Sessions belong to different patients.', 400, 'PATIENT_MISMATCH')

        moved_tasks = Task.objects.filter(session=secondary).update(session=primary)
        moved_allocations = PaymentAllocation.objects.filter(session=secondary).update(session=primary)
        for guidance in secondary.guidances.all():
            guidance.sessions.add(primary)

        secondary.delete()

    logger.info(
        'Merged session %s into %s (patient_id=%s, tasks=%d, allocations=%d)',
        secondary_id, primary_id, primary.patient_id, moved_tasks, moved_allocations,
    )
    return MergeResult(
        kept=primary.pk,
        deleted=int(secondary_id),
        patient_id=primary.patient_id,
        moved_tasks=moved_tasks,
        moved_allocations=moved_allocations,
    )
