"""
ORM-level append-only enforcement for audit log rows.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners below reject both for ``AuditLogRecord``:

    session.flush()
         |
         v
    [before_update] --> _check_audit_log_update() --> ImmutabilityViolationError
    [before_delete] --> _check_audit_log_delete() --> ImmutabilityViolationError

The flush is aborted and the database is never modified.  Bulk statements
issued with ``session.execute(update(...))`` bypass mapper events; the
storage adapter never issues them for audit logs.
"""

from sqlalchemy import event

from budget_kernel.exceptions import ImmutabilityViolationError
from budget_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(target, operation: str, reason: str):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "AuditLog",
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type="AuditLog",
        entity_id=str(target.id),
        reason=reason,
    )


def _check_audit_log_update(mapper, connection, target):
    _block(target, "UPDATE", "Audit log entries are immutable and cannot be modified")


def _check_audit_log_delete(mapper, connection, target):
    _block(target, "DELETE", "Audit log entries cannot be deleted")


def register_immutability_listeners():
    """
    Register the append-only listeners.

    Call after models are imported and before any database operations.
    Registering twice is a no-op.
    """
    from budget_kernel.models.audit_log import AuditLogRecord

    if not event.contains(AuditLogRecord, "before_update", _check_audit_log_update):
        event.listen(AuditLogRecord, "before_update", _check_audit_log_update)
    if not event.contains(AuditLogRecord, "before_delete", _check_audit_log_delete):
        event.listen(AuditLogRecord, "before_delete", _check_audit_log_delete)


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the append-only listeners.

    WARNING: Only use this in tests that must write around the rule.
    """
    from budget_kernel.models.audit_log import AuditLogRecord

    _safe_remove_listener(AuditLogRecord, "before_update", _check_audit_log_update)
    _safe_remove_listener(AuditLogRecord, "before_delete", _check_audit_log_delete)
