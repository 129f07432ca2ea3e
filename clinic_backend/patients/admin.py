"""
Patients App - admin for patients and their lifecycle history
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site
from clinic_backend.patients.models import Patient, PatientLifecycleEvent


class PatientLifecycleEventInline(admin.TabularInline):
    model = PatientLifecycleEvent
    extra = 0
    can_delete = False
    fields = ("event_type", "occurred_at", "reason", "actor", "created_at")
    readonly_fields = fields
    ordering = ("-occurred_at", "-id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Patient, site=clinic_admin_site)
class PatientAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "full_name",
        "owner",
        "fixed_slot_display",
        "status_badge",
        "created_at",
    )
    list_filter = ("fixed_session_day", "created_at")
    search_fields = ("first_name", "last_name")
    ordering = ("last_name", "first_name")
    list_per_page = 50

    # Status changes must go through the lifecycle service so they are recorded.
    readonly_fields = ("id", "archived_at", "created_at", "updated_at")
    inlines = [PatientLifecycleEventInline]

    fieldsets = (
        ("Patient", {
            "fields": ("owner", "first_name", "last_name")
        }),
        ("Recurring slot", {
            "fields": ("fixed_session_day", "fixed_session_time")
        }),
        ("System", {
            "fields": ("id", "archived_at", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

    def fixed_slot_display(self, obj):
        if not obj.has_fixed_schedule:
            return "-"
        return f"{self.WEEKDAYS[obj.fixed_session_day]} {obj.fixed_session_time}"
    fixed_slot_display.short_description = "Fixed slot"

    def status_badge(self, obj):
        color = "#34A853" if obj.is_active else "#9AA0A6"
        return format_html(
            '<span style="background-color: {}; color: white; padding: 2px 8px; '
            'border-radius: 4px;">{}</span>',
            color,
            obj.lifecycle_status,
        )
    status_badge.short_description = "Status"


@admin.register(PatientLifecycleEvent, site=clinic_admin_site)
class PatientLifecycleEventAdmin(admin.ModelAdmin):
    """Append-only history: visible, never editable."""

    list_display = ("occurred_at", "event_type", "patient", "actor", "reason")
    list_filter = ("event_type",)
    search_fields = ("patient__first_name", "patient__last_name", "reason")
    readonly_fields = ("patient", "actor", "event_type", "occurred_at", "reason", "metadata", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
