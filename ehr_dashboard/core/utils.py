import logging

audit_logger = logging.getLogger('ehr_dashboard.audit')


def log_patient_action(user, action, patient_id=None, meta=None):
    """Writes a patient-access action to the audit log (key=value)."""

    username = 'anonymous'
    if getattr(user, 'is_authenticated', False):
        username = user.get_username()

    audit_logger.info(
        'user=%s action=%s patient_id=%s meta=%s',
        username,
        action,
        patient_id,
        meta or {},
    )
