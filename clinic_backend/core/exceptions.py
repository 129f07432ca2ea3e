"""
Base exception for typed domain failures.

Domain errors carry a machine-readable ``code`` and an HTTP-style ``status``
so that views can translate them into DRF responses without inspecting the
message text.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain failures raised by the service layer."""

    default_code = 'DOMAIN_ERROR'
    default_status = 400

    def __init__(self, message: str, status: int | None = None, code: str | None = None):
        self.message = message
        self.status = status if status is not None else self.default_status
        self.code = code or self.default_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            'detail': self.message,
            'code': self.code,
        }
