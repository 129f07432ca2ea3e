"""
Records App Configuration
"""

from django.apps import AppConfig


class RecordsConfig(AppConfig):
    """Guidance, research, receipts and external links referencing patients."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.records'
    verbose_name = 'Clinical records'
