"""
Scheduling-specific exceptions for the appointments app.

These exceptions are raised by the scheduling services and are translated
to DRF responses in the views.
"""

from __future__ import annotations

from typing import Any

from clinic_backend.core.exceptions import DomainError


class InvalidScheduleData(DomainError):
    """
    Raised when scheduling input is malformed (e.g. "25:00", weekday 9,
    an unparseable date key).
    """
    default_code = 'INVALID_SCHEDULE'
    default_status = 400

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result['field'] = self.field
        return result


class SessionMergeError(DomainError):
    """Two sessions could not be merged (missing, foreign or different patients)."""
    default_code = 'SESSION_MERGE_REJECTED'
    default_status = 400
