"""
Module: budget_kernel.models.audit_log
Responsibility: ORM persistence for the field-level audit trail.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: no UPDATE or DELETE (ORM listeners in db/immutability.py).
    - ``changes`` is a JSON list of ``{"field", "old_value", "new_value"}``
      objects holding JSON-safe values.

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE attempt.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import Base, UUIDString


class AuditLogRecord(Base):
    """
    One create/update/delete of a user, category, expense or budget.

    ``performed_by_name`` and ``performed_by_role`` are snapshots taken at
    write time, so renaming or re-roling a user does not rewrite history.
    """

    __tablename__ = "audit_logs"

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_action", "action"),
        Index("idx_audit_timestamp", "timestamp"),
    )

    # EntityType value
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    # AuditAction value
    action: Mapped[str] = mapped_column(String(20), nullable=False)

    performed_by: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    performed_by_name: Mapped[str] = mapped_column(String(100), nullable=False)
    performed_by_role: Mapped[str] = mapped_column(String(20), nullable=False)

    changes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    timestamp: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<AuditLogRecord {self.action} on {self.entity_type}:{self.entity_id}>"
