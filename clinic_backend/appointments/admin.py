"""
Appointments App - admin for therapy sessions and tasks
"""

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site

from .models import SessionStatus, Task, TaskStatus, TherapySession


STATUS_COLORS = {
    SessionStatus.SCHEDULED: "#1A73E8",
    SessionStatus.COMPLETED: "#34A853",
    SessionStatus.CANCELED: "#9AA0A6",
    SessionStatus.CANCELED_LATE: "#EA4335",
    SessionStatus.UNDOCUMENTED: "#FBBC04",
}


class TaskInline(admin.TabularInline):
    model = Task
    extra = 0
    fields = ("title", "status", "due_at", "completed_at")


@admin.register(TherapySession, site=clinic_admin_site)
class TherapySessionAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "scheduled_at", "status_badge", "is_recurring_template")
    list_filter = ("status", "is_recurring_template", "scheduled_at")
    search_fields = ("patient__first_name", "patient__last_name")
    date_hierarchy = "scheduled_at"
    ordering = ("-scheduled_at",)
    raw_id_fields = ("patient",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [TaskInline]

    def status_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 2px 8px; '
            'border-radius: 4px;">{}</span>',
            STATUS_COLORS.get(obj.status, "#9AA0A6"),
            obj.get_status_display(),
        )
    status_badge.short_description = "Status"


@admin.register(Task, site=clinic_admin_site)
class TaskAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "patient", "session", "status", "due_at")
    list_filter = ("status",)
    search_fields = ("title", "patient__first_name", "patient__last_name")
    raw_id_fields = ("patient", "session")
    actions = ["mark_done"]

    @admin.action(description="Mark selected tasks as done")
    def mark_done(self, request, queryset):
        updated = queryset.filter(status=TaskStatus.OPEN).update(
            status=TaskStatus.DONE,
            completed_at=timezone.now(),
        )
        self.message_user(request, f"{updated} task(s) marked as done.")
