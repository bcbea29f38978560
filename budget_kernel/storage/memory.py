"""
In-memory StorageAdapter.

Dictionaries of frozen records keyed by id, one per collection, kept in
insertion order.  Used as the persistence double in tests and for
single-process tools that do not need a database.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from budget_kernel.exceptions import ImmutabilityViolationError
from budget_kernel.storage.interface import RECORD_TYPES, Collection, StorageAdapter


class InMemoryStorage(StorageAdapter):
    def __init__(self):
        self._data: dict[Collection, dict[UUID, Any]] = {c: {} for c in Collection}

    def get(self, collection: Collection, record_id: UUID) -> Any | None:
        return self._data[collection].get(record_id)

    def get_all(self, collection: Collection) -> list[Any]:
        return list(self._data[collection].values())

    def create(self, collection: Collection, record: Any) -> Any:
        expected = RECORD_TYPES[collection]
        if not isinstance(record, expected):
            raise TypeError(
                f"{collection.value} stores {expected.__name__}, not {type(record).__name__}"
            )
        if record.id in self._data[collection]:
            raise ValueError(f"Duplicate id in {collection.value}: {record.id}")
        self._data[collection][record.id] = record
        return record

    def update(
        self, collection: Collection, record_id: UUID, changes: Mapping[str, Any]
    ) -> Any | None:
        self._reject_audit_mutation(collection, record_id, "modified")
        current = self._data[collection].get(record_id)
        if current is None:
            return None
        known = {f.name for f in dataclasses.fields(current)} - {"id"}
        bad = set(changes) - known
        if bad:
            raise ValueError(f"Cannot update fields: {sorted(bad)}")
        updated = dataclasses.replace(current, **changes)
        self._data[collection][record_id] = updated
        return updated

    def delete(self, collection: Collection, record_id: UUID) -> bool:
        self._reject_audit_mutation(collection, record_id, "deleted")
        return self._data[collection].pop(record_id, None) is not None

    @staticmethod
    def _reject_audit_mutation(collection: Collection, record_id: UUID, verb: str) -> None:
        if collection is Collection.AUDIT_LOGS:
            raise ImmutabilityViolationError(
                entity_type="AuditLog",
                entity_id=str(record_id),
                reason=f"Audit log entries cannot be {verb}",
            )
