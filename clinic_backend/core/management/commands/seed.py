"""
Seed command - creates reproducible development data.

Usage:
    python manage.py seed           # roles, users, patients, sessions
    python manage.py seed --flush   # delete seed data first, then rebuild

Lifecycle events are never seeded or flushed; they are append-only.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from clinic_backend.core.seeders import seed_core
from clinic_backend.patients.seeders import seed_patients


class Command(BaseCommand):
    help = "Seed database with realistic development data for the clinic backend"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete existing seed data before seeding.",
        )

    def handle(self, *args, **options):
        flush = options.get("flush", False)

        self.stdout.write("=" * 80)
        self.stdout.write("  Clinic seed - generating development data")
        self.stdout.write("=" * 80)

        with transaction.atomic():
            stats = {}

            self.stdout.write("\n[1/2] Seeding core (roles, users)...")
            core_stats = seed_core(flush=flush)
            stats.update(core_stats)
            self._print_stats(core_stats)

            self.stdout.write("\n[2/2] Seeding patients (patients, sessions, tasks)...")
            patient_stats = seed_patients(flush=flush)
            stats.update(patient_stats)
            self._print_stats(patient_stats)

        self.stdout.write("\n" + "=" * 80)
        self.stdout.write(self.style.SUCCESS("  Seeding finished."))
        self.stdout.write("=" * 80)
        self._print_summary(stats)

    def _print_stats(self, stats):
        for key, value in stats.items():
            self.stdout.write(f"  - {key}: {value}")

    def _print_summary(self, stats):
        self.stdout.write("\nRecords created (total):")
        for key, value in sorted(stats.items()):
            self.stdout.write(f"  - {key}: {value}")
