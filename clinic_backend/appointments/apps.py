"""
Appointments App Configuration
"""

from django.apps import AppConfig


class AppointmentsConfig(AppConfig):
    """Therapy sessions, tasks and recurring scheduling."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.appointments'
    verbose_name = 'Appointments (Sessions & Tasks)'
