"""Domain models for therapy sessions and follow-up tasks.

Sessions are created by the recurring generator or by manual entry and are
never deleted by the scheduling/lifecycle services: cancellation is a status
transition that keeps the row (and its date) in place.
"""

from django.db import models


class SessionStatus(models.TextChoices):
	SCHEDULED = "SCHEDULED", "Scheduled"
	COMPLETED = "COMPLETED", "Completed"
	CANCELED = "CANCELED", "Canceled"
	CANCELED_LATE = "CANCELED_LATE", "Canceled late"
	UNDOCUMENTED = "UNDOCUMENTED", "Undocumented"


class TherapySession(models.Model):
	"""A single appointment of a patient at an absolute instant (UTC)."""
	patient = models.ForeignKey(
		"patients.Patient",
		on_delete=models.CASCADE,
		related_name="sessions",
	)
	scheduled_at = models.DateTimeField(db_index=True)
	status = models.CharField(
		max_length=20,
		choices=SessionStatus.choices,
		default=SessionStatus.SCHEDULED,
	)
	cancellation_reason = models.TextField(null=True, blank=True)
	canceled_at = models.DateTimeField(null=True, blank=True)
	is_recurring_template = models.BooleanField(default=False)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["scheduled_at", "id"]
		indexes = [
			models.Index(fields=["patient", "status", "scheduled_at"], name="session_patient_status_idx"),
		]

	def __str__(self) -> str:
		return f"TherapySession #{self.pk} patient_id={self.patient_id} {self.scheduled_at} ({self.status})"


class TaskStatus(models.TextChoices):
	OPEN = "OPEN", "Open"
	DONE = "DONE", "Done"
	CANCELED = "CANCELED", "Canceled"


class Task(models.Model):
	"""Follow-up item attached to a patient, a session, both or neither ("general")."""
	patient = models.ForeignKey(
		"patients.Patient",
		on_delete=models.CASCADE,
		null=True,
		blank=True,
		related_name="tasks",
	)
	session = models.ForeignKey(
		TherapySession,
		on_delete=models.SET_NULL,
		null=True,
		blank=True,
		related_name="tasks",
	)
	title = models.CharField(max_length=255)
	status = models.CharField(
		max_length=20,
		choices=TaskStatus.choices,
		default=TaskStatus.OPEN,
	)
	due_at = models.DateTimeField(null=True, blank=True)
	completed_at = models.DateTimeField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["status", "due_at", "id"]
		indexes = [
			models.Index(fields=["patient", "status"], name="task_patient_status_idx"),
		]

	def __str__(self) -> str:
		return f"Task #{self.pk} {self.title} ({self.status})"
