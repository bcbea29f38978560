"""
Module: budget_kernel.storage.interface
Responsibility: The persistence contract consumed by every access service.
    A ``StorageAdapter`` stores frozen domain records in five named
    collections and answers get / get_all / query / create / update /
    delete against them.
Architecture position: Kernel > Storage.  May import from domain/ and
    exceptions.py.  Concrete adapters live beside this module.

Invariants enforced:
    - Adapters accept and return domain records (``UserInfo``,
      ``CategoryInfo``, ``ExpenseInfo``, ``BudgetInfo``, ``AuditEntry``),
      never ORM instances.
    - ``audit_logs`` is append-only: ``update``/``delete`` on it raise
      ``ImmutabilityViolationError``.
    - Adapters never commit; the caller owns the transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any
from uuid import UUID

from budget_kernel.domain.dtos import AuditEntry, BudgetInfo, CategoryInfo, ExpenseInfo, UserInfo


class Collection(str, Enum):
    USERS = "users"
    CATEGORIES = "categories"
    EXPENSES = "expenses"
    BUDGETS = "budgets"
    AUDIT_LOGS = "audit_logs"


RECORD_TYPES: dict[Collection, type] = {
    Collection.USERS: UserInfo,
    Collection.CATEGORIES: CategoryInfo,
    Collection.EXPENSES: ExpenseInfo,
    Collection.BUDGETS: BudgetInfo,
    Collection.AUDIT_LOGS: AuditEntry,
}

Predicate = Callable[[Any], bool]


class StorageAdapter(ABC):
    """
    Contract:
        Generic record store keyed by ``(collection, id)``.

    Non-goals:
        - Does NOT check permissions; services do.
        - Does NOT validate field values; services do before calling.
    """

    @abstractmethod
    def get(self, collection: Collection, record_id: UUID) -> Any | None:
        """Record with ``record_id``, or None."""

    @abstractmethod
    def get_all(self, collection: Collection) -> list[Any]:
        """Every record in the collection, in a stable order."""

    def query(self, collection: Collection, predicate: Predicate) -> list[Any]:
        """Records for which ``predicate`` is true, in ``get_all`` order."""
        return [record for record in self.get_all(collection) if predicate(record)]

    @abstractmethod
    def create(self, collection: Collection, record: Any) -> Any:
        """Persist a new record (its ``id`` already assigned) and return it."""

    @abstractmethod
    def update(
        self, collection: Collection, record_id: UUID, changes: Mapping[str, Any]
    ) -> Any | None:
        """
        Apply ``changes`` (field name -> new value) and return the updated
        record, or None if no such record exists.

        Raises:
            ValueError: If ``changes`` names a field the record does not have.
            ImmutabilityViolationError: On the audit log collection.
        """

    @abstractmethod
    def delete(self, collection: Collection, record_id: UUID) -> bool:
        """
        Remove the record; True if it existed.

        Raises:
            ImmutabilityViolationError: On the audit log collection.
        """
