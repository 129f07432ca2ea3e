"""Clinical records that reference patients and sessions.

Guidance (supervision) sessions, research notes and documents, receipts and
external concept links. Their editing flows live outside this backend; the
models exist so that a patient's connection graph can be assembled from
storage.
"""

from django.db import models


class GuidanceStatus(models.TextChoices):
	ACTIVE = "ACTIVE", "Active"
	COMPLETED = "COMPLETED", "Completed"


class Guidance(models.Model):
	"""Supervision/guidance session covering one or more therapy sessions."""
	patient = models.ForeignKey(
		"patients.Patient",
		on_delete=models.CASCADE,
		related_name="guidances",
	)
	title = models.CharField(max_length=255, blank=True, default="")
	status = models.CharField(
		max_length=20,
		choices=GuidanceStatus.choices,
		default=GuidanceStatus.ACTIVE,
	)
	scheduled_at = models.DateTimeField(null=True, blank=True)
	sessions = models.ManyToManyField(
		"appointments.TherapySession",
		blank=True,
		related_name="guidances",
	)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["-updated_at", "id"]

	def __str__(self) -> str:
		return self.title or f"Guidance #{self.pk}"


class ResearchDocument(models.Model):
	title = models.CharField(max_length=255, blank=True, default="")
	patients = models.ManyToManyField(
		"patients.Patient",
		blank=True,
		related_name="research_documents",
	)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["title", "id"]

	def __str__(self) -> str:
		return self.title or f"ResearchDocument #{self.pk}"


class ResearchNote(models.Model):
	"""Research note, optionally citing a document, linked to patients."""
	title = models.CharField(max_length=255, blank=True, default="")
	document = models.ForeignKey(
		ResearchDocument,
		on_delete=models.SET_NULL,
		null=True,
		blank=True,
		related_name="notes",
	)
	patients = models.ManyToManyField(
		"patients.Patient",
		blank=True,
		related_name="research_notes",
	)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["-updated_at", "id"]

	def __str__(self) -> str:
		return self.title or f"ResearchNote #{self.pk}"


class Receipt(models.Model):
	patient = models.ForeignKey(
		"patients.Patient",
		on_delete=models.CASCADE,
		related_name="receipts",
	)
	receipt_number = models.CharField(max_length=32)
	amount_nis = models.DecimalField(max_digits=10, decimal_places=2)
	issued_at = models.DateTimeField()
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ["-issued_at", "id"]

	def __str__(self) -> str:
		return f"Receipt #{self.receipt_number}"


class PaymentAllocation(models.Model):
	"""Part of a receipt's amount allocated to a specific session."""
	receipt = models.ForeignKey(
		Receipt,
		on_delete=models.CASCADE,
		related_name="payment_allocations",
	)
	session = models.ForeignKey(
		"appointments.TherapySession",
		on_delete=models.CASCADE,
		related_name="payment_allocations",
	)
	amount_nis = models.DecimalField(max_digits=10, decimal_places=2)

	class Meta:
		ordering = ["receipt_id", "id"]

	def __str__(self) -> str:
		return f"PaymentAllocation receipt_id={self.receipt_id} session_id={self.session_id}"


class PatientConceptLink(models.Model):
	"""External reference (article, concept page) attached to a patient."""
	patient = models.ForeignKey(
		"patients.Patient",
		on_delete=models.CASCADE,
		related_name="concept_links",
	)
	label = models.CharField(max_length=255, blank=True, default="")
	href = models.URLField(max_length=1000, null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["label", "id"]

	def __str__(self) -> str:
		return self.label or self.href or f"PatientConceptLink #{self.pk}"
