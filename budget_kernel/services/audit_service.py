"""
AuditService -- field-level audit trail of every mutation.

Responsibility:
    Write side: turns create/update/delete of a user, category, expense or
    budget into an append-only ``AuditEntry`` attributed to the acting user
    (id, name and role snapshot).  Read side: filtered listing, per-entity
    history, recent activity and statistics for admins and accountants.

Architecture position:
    Kernel > Services.  Called by every mutating access service after the
    primary write succeeded.

Invariants enforced:
    - Entries are never updated or deleted (storage and ORM enforce it).
    - Update entries list only changed, non-bookkeeping fields; an update
      with no such change writes no entry.
    - Write-side failures are logged as ``audit_write_failed`` and never
      propagate: the primary mutation has already happened.

Failure modes:
    - UnauthorizedError from every read-side method for role ``user``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID, uuid4

from budget_kernel.domain.audit_diff import create_changes, delete_changes, update_changes
from budget_kernel.domain.dtos import (
    ActorContext,
    AuditAction,
    AuditChange,
    AuditEntry,
    AuditFilters,
    AuditStats,
    EntityType,
)
from budget_kernel.logging_config import get_logger
from budget_kernel.services.base import BaseService
from budget_kernel.storage.interface import Collection

logger = get_logger("services.audit")


class AuditService(BaseService):
    # -- write side ----------------------------------------------------------

    def log_create(
        self, entity_type: EntityType, record: Any, context: ActorContext
    ) -> AuditEntry | None:
        return self._write(
            entity_type, record.id, AuditAction.CREATE, context, lambda: create_changes(record)
        )

    def log_update(
        self,
        entity_type: EntityType,
        old_record: Any,
        new_record: Any,
        context: ActorContext,
    ) -> AuditEntry | None:
        return self._write(
            entity_type,
            new_record.id,
            AuditAction.UPDATE,
            context,
            lambda: update_changes(old_record, new_record),
        )

    def log_delete(
        self, entity_type: EntityType, record: Any, context: ActorContext
    ) -> AuditEntry | None:
        return self._write(
            entity_type, record.id, AuditAction.DELETE, context, lambda: delete_changes(record)
        )

    def _write(
        self,
        entity_type: EntityType,
        entity_id: UUID,
        action: AuditAction,
        context: ActorContext,
        build_changes,
    ) -> AuditEntry | None:
        try:
            changes: Sequence[AuditChange] = build_changes()
            if action is AuditAction.UPDATE and not changes:
                logger.debug(
                    "audit_update_skipped_no_changes",
                    extra={"entity_type": entity_type.value, "entity_id": str(entity_id)},
                )
                return None

            actor = self.storage.get(Collection.USERS, context.user_id)
            entry = AuditEntry(
                id=uuid4(),
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                performed_by=context.user_id,
                performed_by_name=actor.name if actor else str(context.user_id),
                performed_by_role=context.role,
                changes=tuple(changes),
                timestamp=self.clock.now(),
            )
            self.storage.create(Collection.AUDIT_LOGS, entry)
        except Exception:
            # The primary mutation is already applied; report and carry on.
            logger.exception(
                "audit_write_failed",
                extra={
                    "entity_type": entity_type.value,
                    "entity_id": str(entity_id),
                    "action": action.value,
                },
            )
            return None

        logger.info(
            "audit_entry_written",
            extra={
                "entity_type": entity_type.value,
                "entity_id": str(entity_id),
                "action": action.value,
                "change_count": len(entry.changes),
            },
        )
        return entry

    # -- read side -----------------------------------------------------------

    def _require_audit_access(self, context: ActorContext) -> None:
        self._require(
            self.permissions.can_view_audit_logs(context.role),
            "view",
            "audit logs",
            context,
        )

    @staticmethod
    def _newest_first(entries: list[AuditEntry]) -> list[AuditEntry]:
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    def get_audit_logs(
        self, context: ActorContext, filters: AuditFilters | None = None
    ) -> list[AuditEntry]:
        self._require_audit_access(context)
        entries = self.storage.get_all(Collection.AUDIT_LOGS)

        if filters is not None:
            if filters.entity_type is not None:
                entries = [e for e in entries if e.entity_type == filters.entity_type]
            if filters.action is not None:
                entries = [e for e in entries if e.action == filters.action]
            if filters.performed_by is not None:
                entries = [e for e in entries if e.performed_by == filters.performed_by]
            if filters.start is not None:
                entries = [e for e in entries if e.timestamp >= filters.start]
            if filters.end is not None:
                entries = [e for e in entries if e.timestamp <= filters.end]
            if filters.search:
                needle = filters.search.lower()
                entries = [
                    e
                    for e in entries
                    if needle in e.entity_type.value
                    or needle in e.performed_by_name.lower()
                    or needle in str(e.entity_id).lower()
                ]

        return self._newest_first(entries)

    def get_entity_history(
        self, entity_type: EntityType, entity_id: UUID, context: ActorContext
    ) -> list[AuditEntry]:
        self._require_audit_access(context)
        entries = self.storage.query(
            Collection.AUDIT_LOGS,
            lambda e: e.entity_type == entity_type and e.entity_id == entity_id,
        )
        return self._newest_first(entries)

    def get_recent_activity(
        self, context: ActorContext, limit: int | None = None
    ) -> list[AuditEntry]:
        self._require_audit_access(context)
        limit = self.policy.recent_activity_limit if limit is None else limit
        return self._newest_first(self.storage.get_all(Collection.AUDIT_LOGS))[:limit]

    def get_audit_stats(self, context: ActorContext) -> AuditStats:
        self._require_audit_access(context)
        entries = self.storage.get_all(Collection.AUDIT_LOGS)

        by_action = {action: 0 for action in AuditAction}
        by_entity_type: dict[str, int] = {}
        by_user: dict[str, int] = {}
        for e in entries:
            by_action[e.action] += 1
            by_entity_type[e.entity_type.value] = by_entity_type.get(e.entity_type.value, 0) + 1
            by_user[e.performed_by_name] = by_user.get(e.performed_by_name, 0) + 1

        return AuditStats(
            total_logs=len(entries),
            by_action=by_action,
            by_entity_type=by_entity_type,
            by_user=by_user,
        )
