"""
Patient status exceptions.

Raised by the lifecycle services before any write happens and translated to
DRF responses (``status`` + ``to_dict()``) in the views.
"""

from __future__ import annotations

from clinic_backend.core.exceptions import DomainError


MISSING_DATE = 'MISSING_DATE'
INVALID_DATE = 'INVALID_DATE'
PATIENT_NOT_FOUND = 'PATIENT_NOT_FOUND'
MISSING_REASON = 'MISSING_REASON'
UNSUPPORTED_ACTION = 'UNSUPPORTED_ACTION'


class PatientStatusError(DomainError):
    """A patient lifecycle transition was rejected."""
    default_code = 'PATIENT_STATUS_ERROR'
    default_status = 400
