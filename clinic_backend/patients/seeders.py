import random
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic_backend.appointments.models import SessionStatus, Task, TaskStatus, TherapySession
from clinic_backend.appointments.services.recurring import create_recurring_sessions
from clinic_backend.patients.models import Patient

User = get_user_model()

RANDOM_SEED = 42

PATIENT_NAMES = [
    ("Avi", "Ben-David"),
    ("Tamar", "Shapiro"),
    ("Eitan", "Katz"),
    ("Shira", "Friedman"),
    ("Omer", "Goldberg"),
    ("Yael", "Rosen"),
]


def seed_patients(flush: bool = False) -> dict:
    """
    Seeds patients for every therapist account, each with a fixed weekly slot,
    a few completed past sessions, one open task and the generated upcoming
    recurring sessions.

    When flush=True, patients of seed therapists (and everything hanging off
    them) are deleted first.
    """
    random.seed(RANDOM_SEED)
    stats = {"patients": 0, "past_sessions": 0, "recurring_sessions": 0, "tasks": 0}

    therapists = list(User.objects.filter(role__name="therapist").order_by("id"))
    if not therapists:
        return stats

    with transaction.atomic():
        if flush:
            TherapySession.objects.filter(patient__owner__in=therapists).delete()
            Task.objects.filter(patient__owner__in=therapists).delete()
            Patient.objects.filter(owner__in=therapists).delete()

        now = timezone.now()
        for index, (first_name, last_name) in enumerate(PATIENT_NAMES):
            owner = therapists[index % len(therapists)]
            patient, created = Patient.objects.get_or_create(
                owner=owner,
                first_name=first_name,
                last_name=last_name,
                defaults={
                    "fixed_session_day": random.randint(0, 4),
                    "fixed_session_time": random.choice(["09:00", "10:30", "14:00", "16:45"]),
                },
            )
            if not created:
                continue
            stats["patients"] += 1

            for weeks_ago in (3, 2, 1):
                TherapySession.objects.create(
                    patient=patient,
                    scheduled_at=now - timedelta(weeks=weeks_ago),
                    status=SessionStatus.COMPLETED,
                )
                stats["past_sessions"] += 1

            Task.objects.create(
                patient=patient,
                title=f"Send summary to {patient.full_name}",
                status=TaskStatus.OPEN,
                due_at=now + timedelta(days=3),
            )
            stats["tasks"] += 1

            _plan, sessions = create_recurring_sessions(patient, now=now)
            stats["recurring_sessions"] += len(sessions)

    return stats
