"""
Records App - read-mostly admin for records referenced by the connection graph
"""

from django.contrib import admin

from clinic_backend.core.admin import clinic_admin_site
from clinic_backend.records.models import (
    Guidance,
    PatientConceptLink,
    PaymentAllocation,
    Receipt,
    ResearchDocument,
    ResearchNote,
)


@admin.register(Guidance, site=clinic_admin_site)
class GuidanceAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "patient", "status", "scheduled_at")
    list_filter = ("status",)
    search_fields = ("title", "patient__first_name", "patient__last_name")
    filter_horizontal = ("sessions",)


@admin.register(ResearchDocument, site=clinic_admin_site)
class ResearchDocumentAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "updated_at")
    search_fields = ("title",)
    filter_horizontal = ("patients",)


@admin.register(ResearchNote, site=clinic_admin_site)
class ResearchNoteAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "document", "updated_at")
    search_fields = ("title",)
    filter_horizontal = ("patients",)


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    raw_id_fields = ("session",)


@admin.register(Receipt, site=clinic_admin_site)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ("receipt_number", "patient", "amount_nis", "issued_at")
    search_fields = ("receipt_number", "patient__last_name")
    ordering = ("-issued_at",)
    inlines = [PaymentAllocationInline]


@admin.register(PatientConceptLink, site=clinic_admin_site)
class PatientConceptLinkAdmin(admin.ModelAdmin):
    list_display = ("id", "label", "href", "patient")
    search_fields = ("label", "href")
