"""
Clinic admin site and admin classes for users, roles and the audit log.
"""

from django.contrib import admin
from django.contrib.admin import AdminSite
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.html import format_html

from .models import AuditLog, Role, User


class ClinicAdminSite(AdminSite):
    """Custom admin site for the clinic back office."""
    site_header = "Clinic Administration"
    site_title = "Clinic Admin"
    index_title = "System overview"
    site_url = None


clinic_admin_site = ClinicAdminSite(name='clinicadmin')


@admin.register(Role, site=clinic_admin_site)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "label", "user_count_badge")
    search_fields = ("name", "label")
    ordering = ("name",)

    def user_count_badge(self, obj):
        count = obj.users.count()
        color = "#9AA0A6" if count == 0 else "#1A73E8"
        return format_html('<span style="color: {};">{} users</span>', color, count)

    user_count_badge.short_description = "Users"


@admin.register(User, site=clinic_admin_site)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "role", "is_active")
    list_filter = ("role", "is_active", "is_staff")
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Role", {"fields": ("role",)}),
    )


@admin.register(AuditLog, site=clinic_admin_site)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only view of the access audit log."""

    list_display = ("occurred_at", "action", "patient_id", "user", "role_name")
    list_filter = ("action", "role_name")
    search_fields = ("action", "patient_id")
    readonly_fields = ("user", "role_name", "action", "patient_id", "occurred_at", "meta")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
