"""
Module: budget_kernel.storage.sqlalchemy_storage
Responsibility: StorageAdapter backed by the SQLAlchemy ORM models.
Architecture position: Kernel > Storage.  The only place where domain
    records and ORM rows meet: rows are built from record fields on the way
    in and converted with ``Info.from_model`` on the way out.

Invariants enforced:
    - flush() only, never commit(): the caller owns the transaction.
    - Audit inserts run in a savepoint; a failed one leaves the rest of
      the transaction usable.
    - Enum fields are stored as their string values; audit changes as a
      JSON list of dicts.
    - Audit log rows are protected by the ORM listeners in
      db/immutability.py; the adapter also refuses update/delete on them
      before touching the session.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budget_kernel.domain.dtos import AuditChange
from budget_kernel.exceptions import ImmutabilityViolationError
from budget_kernel.logging_config import get_logger
from budget_kernel.models import AuditLogRecord, Budget, Category, Expense, User
from budget_kernel.storage.interface import RECORD_TYPES, Collection, StorageAdapter

logger = get_logger("storage.sqlalchemy")

_MODELS: dict[Collection, type] = {
    Collection.USERS: User,
    Collection.CATEGORIES: Category,
    Collection.EXPENSES: Expense,
    Collection.BUDGETS: Budget,
    Collection.AUDIT_LOGS: AuditLogRecord,
}

_ORDER_BY: dict[Collection, tuple] = {
    Collection.USERS: (User.created_at, User.id),
    Collection.CATEGORIES: (Category.name, Category.id),
    Collection.EXPENSES: (Expense.created_at, Expense.id),
    Collection.BUDGETS: (Budget.created_at, Budget.id),
    Collection.AUDIT_LOGS: (AuditLogRecord.timestamp, AuditLogRecord.id),
}


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple) and value and isinstance(value[0], AuditChange):
        return [dataclasses.asdict(change) for change in value]
    if isinstance(value, tuple):
        return list(value)
    return value


def _row_values(record: Any) -> dict[str, Any]:
    return {
        f.name: _column_value(getattr(record, f.name)) for f in dataclasses.fields(record)
    }


class SqlAlchemyStorage(StorageAdapter):
    def __init__(self, session: Session):
        self.session = session

    def get(self, collection: Collection, record_id: UUID) -> Any | None:
        row = self.session.get(_MODELS[collection], record_id)
        if row is None:
            return None
        return RECORD_TYPES[collection].from_model(row)

    def get_all(self, collection: Collection) -> list[Any]:
        model = _MODELS[collection]
        rows = self.session.scalars(select(model).order_by(*_ORDER_BY[collection])).all()
        return [RECORD_TYPES[collection].from_model(row) for row in rows]

    def create(self, collection: Collection, record: Any) -> Any:
        expected = RECORD_TYPES[collection]
        if not isinstance(record, expected):
            raise TypeError(
                f"{collection.value} stores {expected.__name__}, not {type(record).__name__}"
            )
        row = _MODELS[collection](**_row_values(record))
        if collection is Collection.AUDIT_LOGS:
            self._insert_isolated(row)
        else:
            self.session.add(row)
            self.session.flush()
        logger.debug(
            "record_inserted",
            extra={"collection": collection.value, "record_id": str(record.id)},
        )
        return RECORD_TYPES[collection].from_model(row)

    def update(
        self, collection: Collection, record_id: UUID, changes: Mapping[str, Any]
    ) -> Any | None:
        self._reject_audit_mutation(collection, record_id, "modified")
        model = _MODELS[collection]
        row = self.session.get(model, record_id)
        if row is None:
            return None

        known = {f.name for f in dataclasses.fields(RECORD_TYPES[collection])} - {"id"}
        bad = set(changes) - known
        if bad:
            raise ValueError(f"Cannot update fields: {sorted(bad)}")

        for name, value in changes.items():
            setattr(row, name, _column_value(value))
        self.session.flush()
        return RECORD_TYPES[collection].from_model(row)

    def delete(self, collection: Collection, record_id: UUID) -> bool:
        self._reject_audit_mutation(collection, record_id, "deleted")
        row = self.session.get(_MODELS[collection], record_id)
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        return True

    def _insert_isolated(self, row: Any) -> None:
        """
        Flush ``row`` inside a savepoint.

        A failed audit insert rolls back only the savepoint, so the
        mutation it describes stays in the caller's transaction.
        """
        savepoint = self.session.begin_nested()
        try:
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError:
            savepoint.rollback()
            raise
        savepoint.commit()

    @staticmethod
    def _reject_audit_mutation(collection: Collection, record_id: UUID, verb: str) -> None:
        if collection is Collection.AUDIT_LOGS:
            raise ImmutabilityViolationError(
                entity_type="AuditLog",
                entity_id=str(record_id),
                reason=f"Audit log entries cannot be {verb}",
            )
