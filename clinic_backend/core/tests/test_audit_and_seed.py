"""Tests for the audit helper and the seed command."""

from __future__ import annotations

from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase

from clinic_backend.appointments.models import TherapySession
from clinic_backend.core.models import AuditLog, Role, User
from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.models import Patient


class LogPatientActionTest(TestCase):
    databases = {"default"}

    def setUp(self):
        role = Role.objects.create(name="therapist", label="Therapist")
        self.user = User.objects.create_user(
            username="audit_user",
            email="audit@example.com",
            password="pass1234",
            role=role,
        )

    def test_writes_row_with_role_name(self):
        log_patient_action(self.user, "patient_updated", patient_id=7, meta={"fields": ["first_name"]})

        entry = AuditLog.objects.get()
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.role_name, "therapist")
        self.assertEqual(entry.patient_id, 7)
        self.assertEqual(entry.meta, {"fields": ["first_name"]})

    def test_write_failure_is_logged_not_raised(self):
        with mock.patch.object(AuditLog.objects, "create", side_effect=RuntimeError("db down")):
            with self.assertLogs("clinic_backend.core.utils", level="ERROR"):
                log_patient_action(self.user, "patient_updated", patient_id=7)

        self.assertEqual(AuditLog.objects.count(), 0)


class SeedCommandTest(TestCase):
    databases = {"default"}

    def test_seed_creates_roles_users_and_patients(self):
        call_command("seed", stdout=StringIO())

        self.assertEqual(
            set(Role.objects.values_list("name", flat=True)),
            {"admin", "therapist", "assistant", "billing"},
        )
        self.assertTrue(User.objects.filter(username="therapist1", role__name="therapist").exists())
        self.assertTrue(Patient.objects.exists())
        self.assertTrue(TherapySession.objects.filter(is_recurring_template=True).exists())

    def test_seed_is_idempotent(self):
        call_command("seed", stdout=StringIO())
        patients = Patient.objects.count()
        users = User.objects.count()

        call_command("seed", stdout=StringIO())

        self.assertEqual(Patient.objects.count(), patients)
        self.assertEqual(User.objects.count(), users)
