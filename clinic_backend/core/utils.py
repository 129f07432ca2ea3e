import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def log_patient_action(user, action, patient_id=None, meta=None):
    """Record a patient-related API action in the audit log.

    Audit writes never break the calling request: failures are logged and
    swallowed.
    """

    authenticated = getattr(user, 'is_authenticated', False)
    try:
        AuditLog.objects.create(
            user=user if authenticated else None,
            role_name=(getattr(user, 'role_name', None) or '') if authenticated else '',
            action=action,
            patient_id=patient_id,
            meta=meta,
        )
    except Exception:
        logger.exception('AuditLog write failed (action=%s, patient_id=%s)', action, patient_id)
