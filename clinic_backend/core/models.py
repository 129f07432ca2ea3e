"""Clinic staff accounts, their roles and the patient access trail."""

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class RoleName(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    THERAPIST = 'therapist', 'Therapist'
    ASSISTANT = 'assistant', 'Assistant'
    BILLING = 'billing', 'Billing'


class Role(models.Model):
    name = models.CharField(max_length=32, unique=True, choices=RoleName.choices)
    label = models.CharField(max_length=64)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.label or self.name


class User(AbstractUser):
    """A clinic staff account.

    Patients are owned by a user; only the owner may see them or change
    their lifecycle status.
    """

    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='users',
    )

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role_id else None


class AuditLog(models.Model):
    """Best-effort trail of patient-related API actions.

    Status history is kept in ``patients.PatientLifecycleEvent``; this table
    only records who touched which patient through the API.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries',
    )
    role_name = models.CharField(max_length=32, blank=True, default='')
    action = models.CharField(max_length=64)
    patient_id = models.BigIntegerField(null=True, blank=True)
    meta = models.JSONField(null=True, blank=True)
    occurred_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-occurred_at', '-id']
        indexes = [
            models.Index(fields=['action', 'occurred_at'], name='auditlog_action_ts_idx'),
            models.Index(fields=['patient_id', 'occurred_at'], name='auditlog_patient_ts_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action} patient_id={self.patient_id} at {self.occurred_at}"
