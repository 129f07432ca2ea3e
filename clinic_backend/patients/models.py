"""Patient master data and the patient lifecycle history.

Lifecycle note:

- ``archived_at`` is the single source of the current status: NULL means
  ACTIVE, a timestamp means INACTIVE since that moment.
- ``PatientLifecycleEvent`` is append-only. It is the durable record of every
  status change and is never updated or deleted.
"""

import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


FIXED_SESSION_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class PatientStatus(models.TextChoices):
	ACTIVE = "ACTIVE", "Active"
	INACTIVE = "INACTIVE", "Inactive"


class Patient(models.Model):
	"""A patient owned by exactly one therapist account.

	Recurring schedule:
	- ``fixed_session_day``: weekday of the standing appointment, 0=Sunday ... 6=Saturday
	- ``fixed_session_time``: wall-clock time "HH:MM" (24h) in the clinic timezone
	Both must be set for recurring sessions to be generated.
	"""
	owner = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.PROTECT,
		related_name="patients",
	)
	first_name = models.CharField(max_length=100)
	last_name = models.CharField(max_length=100, blank=True, default="")
	fixed_session_day = models.PositiveSmallIntegerField(null=True, blank=True)
	fixed_session_time = models.CharField(max_length=5, blank=True, default="")
	archived_at = models.DateTimeField(null=True, blank=True, db_index=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["last_name", "first_name", "id"]
		indexes = [
			models.Index(fields=["owner", "archived_at"], name="patient_owner_archived_idx"),
		]

	def __str__(self) -> str:
		return self.full_name or f"Patient #{self.pk}"

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()

	@property
	def is_active(self) -> bool:
		return self.archived_at is None

	@property
	def lifecycle_status(self) -> str:
		return PatientStatus.ACTIVE if self.is_active else PatientStatus.INACTIVE

	@property
	def has_fixed_schedule(self) -> bool:
		return self.fixed_session_day is not None and bool(self.fixed_session_time)

	def clean(self):
		super().clean()
		errors = {}
		if self.fixed_session_day is not None and not 0 <= self.fixed_session_day <= 6:
			errors["fixed_session_day"] = "Weekday must be between 0 (Sunday) and 6 (Saturday)."
		if self.fixed_session_time and not FIXED_SESSION_TIME_RE.match(self.fixed_session_time):
			errors["fixed_session_time"] = "Time must be in 24-hour HH:MM format."
		if errors:
			raise ValidationError(errors)


class LifecycleEventType(models.TextChoices):
	SET_INACTIVE = "SET_INACTIVE", "Set inactive"
	REACTIVATED = "REACTIVATED", "Reactivated"


class PatientLifecycleEvent(models.Model):
	"""Immutable audit record of a patient status change."""
	patient = models.ForeignKey(
		Patient,
		on_delete=models.CASCADE,
		related_name="lifecycle_events",
	)
	actor = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.PROTECT,
		related_name="patient_lifecycle_events",
	)
	event_type = models.CharField(max_length=32, choices=LifecycleEventType.choices)
	occurred_at = models.DateTimeField()
	reason = models.TextField(null=True, blank=True)
	metadata = models.JSONField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ["-occurred_at", "-id"]
		indexes = [
			models.Index(fields=["patient", "occurred_at"], name="lifecycle_patient_time_idx"),
		]

	def __str__(self) -> str:
		return f"{self.event_type} patient_id={self.patient_id} at {self.occurred_at}"

	def save(self, *args, **kwargs):
		if self.pk is not None and not self._state.adding:
			raise ValueError("Lifecycle events are append-only and cannot be modified.")
		super().save(*args, **kwargs)

	def delete(self, *args, **kwargs):
		raise ValueError("Lifecycle events are append-only and cannot be deleted.")
