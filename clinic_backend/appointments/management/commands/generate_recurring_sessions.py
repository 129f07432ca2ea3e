"""
Django Management Command: generate_recurring_sessions

Create the upcoming recurring sessions for patients with a fixed weekly slot.
Generation never runs on its own; this command (or the API) triggers it.

Usage:
    python manage.py generate_recurring_sessions
    python manage.py generate_recurring_sessions --patient 12 --patient 15
    python manage.py generate_recurring_sessions --days 14
    python manage.py generate_recurring_sessions --dry-run --json
"""

import json

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from clinic_backend.appointments.models import TherapySession
from clinic_backend.appointments.services.recurring import (
    DEFAULT_LOOKAHEAD_DAYS,
    create_recurring_sessions,
    generate_upcoming_sessions,
)
from clinic_backend.patients.models import Patient


class Command(BaseCommand):
    help = "Generate upcoming recurring sessions for active patients with a fixed slot"

    def add_arguments(self, parser):
        parser.add_argument(
            "--patient",
            action="append",
            type=int,
            dest="patient_ids",
            help="Restrict to this patient id (repeatable).",
        )
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Lookahead window in days (default: RECURRING_LOOKAHEAD_DAYS).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report the planned sessions, do not create them.",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the result as JSON.",
        )

    def handle(self, *args, **options):
        days = options.get("days")
        if days is None:
            days = getattr(settings, "RECURRING_LOOKAHEAD_DAYS", DEFAULT_LOOKAHEAD_DAYS)
        if days < 1:
            raise CommandError("--days must be at least 1.")

        patients = (
            Patient.objects.filter(archived_at__isnull=True, fixed_session_day__isnull=False)
            .exclude(fixed_session_time="")
            .order_by("id")
        )
        if options.get("patient_ids"):
            patients = patients.filter(id__in=options["patient_ids"])

        now = timezone.now()
        results = []
        for patient in patients:
            if options.get("dry_run"):
                existing = TherapySession.objects.filter(patient=patient, scheduled_at__gte=now)
                plan = generate_upcoming_sessions(
                    patient.id,
                    patient.fixed_session_day,
                    patient.fixed_session_time,
                    existing,
                    now,
                    lookahead_days=days,
                )
                created = 0
            else:
                plan, sessions = create_recurring_sessions(patient, now=now, lookahead_days=days)
                created = len(sessions)
            results.append({
                "patient_id": patient.id,
                "planned": [i.isoformat() for i in plan.instants],
                "created": created,
                "summary": plan.summary,
            })

        if options.get("json"):
            self.stdout.write(json.dumps({"dry_run": bool(options.get("dry_run")), "results": results}, indent=2))
            return

        for item in results:
            self.stdout.write(f"patient #{item['patient_id']}: {item['summary']} (created {item['created']})")
            if options.get("verbosity", 1) >= 2:
                for instant in item["planned"]:
                    self.stdout.write(f"    {instant}")
        total = sum(item["created"] for item in results)
        self.stdout.write(self.style.SUCCESS(f"{len(results)} patient(s) processed, {total} session(s) created."))
