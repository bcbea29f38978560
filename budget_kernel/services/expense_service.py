"""
ExpenseService -- permission-scoped expense access.

Responsibility:
    List, get, create, update and delete expenses for an acting user.
    Every operation checks the PermissionChecker predicate against the
    record just read, validates input before any write, and emits an audit
    entry after each successful mutation.

Architecture position:
    Kernel > Services -- imperative shell over StorageAdapter, with
    PermissionChecker and the validation functions as pure collaborators.

Invariants enforced:
    - Role ``user`` only ever sees or touches their own expenses.
    - ``created_by`` is always the acting user; only an admin may create an
      expense owned by someone else.
    - Amounts are integer cents.
    - Listing sorts by expense date, newest first.

Failure modes:
    - UnauthorizedError: permission predicate false.
    - ExpenseNotFoundError: update/delete of a missing id.
    - UserNotFoundError: create on behalf of a user that does not exist.
    - InvalidCategoryError: category missing or inactive.
    - ValidationError: malformed field values or filter combination.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from budget_kernel.domain.clock import Clock
from budget_kernel.domain.dates import is_date_in_range
from budget_kernel.domain.dtos import (
    ActorContext,
    EntityType,
    ExpenseFilters,
    ExpenseInfo,
    ExpenseInput,
)
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import BudgetPolicy
from budget_kernel.domain.validation import FieldError, raise_if_invalid, validate_expense_input
from budget_kernel.exceptions import ExpenseNotFoundError, UserNotFoundError
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.services.audit_service import AuditService
from budget_kernel.services.base import BaseService, bound_operation
from budget_kernel.storage.interface import Collection, StorageAdapter

logger = get_logger("services.expense")

EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "category_id",
        "amount",
        "date",
        "description",
        "payment_method",
        "notes",
        "reference_id",
    }
)


def check_date_range(entity_type: str, start: date | None, end: date | None) -> None:
    """Both ends or neither, and ``start <= end``."""
    errors: list[FieldError] = []
    if (start is None) != (end is None):
        missing = "end_date" if end is None else "start_date"
        errors.append(FieldError(missing, "Date range filters need both start and end"))
    elif start is not None and start > end:
        errors.append(FieldError("end_date", "End date must not be before start date"))
    raise_if_invalid(entity_type, errors)


class ExpenseService(BaseService):
    def __init__(
        self,
        storage: StorageAdapter,
        clock: Clock | None = None,
        permissions: PermissionChecker | None = None,
        policy: BudgetPolicy | None = None,
        audit: AuditService | None = None,
    ):
        super().__init__(storage, clock, permissions, policy)
        self.audit = audit or AuditService(storage, self.clock, self.permissions, self.policy)

    # -- reads ---------------------------------------------------------------

    def get_expenses(
        self, filters: ExpenseFilters | None, context: ActorContext
    ) -> list[ExpenseInfo]:
        """
        Expenses visible to ``context`` that match ``filters``, newest first.

        An empty list means nothing matched; it never stands in for a
        denial.
        """
        filters = filters or ExpenseFilters()
        check_date_range("expense filter", filters.start_date, filters.end_date)

        expenses = self.permissions.filter_by_permissions(
            self.storage.get_all(Collection.EXPENSES), context
        )

        if filters.user_id is not None:
            expenses = [e for e in expenses if e.user_id == filters.user_id]
        if filters.category_id is not None:
            expenses = [e for e in expenses if e.category_id == filters.category_id]
        if filters.start_date is not None and filters.end_date is not None:
            expenses = [
                e
                for e in expenses
                if is_date_in_range(e.date, filters.start_date, filters.end_date)
            ]
        if filters.min_amount is not None:
            expenses = [e for e in expenses if e.amount >= filters.min_amount]
        if filters.max_amount is not None:
            expenses = [e for e in expenses if e.amount <= filters.max_amount]
        if filters.payment_method is not None:
            expenses = [e for e in expenses if e.payment_method == filters.payment_method]
        if filters.search:
            needle = filters.search.lower()
            expenses = [
                e
                for e in expenses
                if needle in e.description.lower()
                or (e.notes is not None and needle in e.notes.lower())
                or (e.reference_id is not None and needle in e.reference_id.lower())
            ]

        expenses.sort(key=lambda e: e.date, reverse=True)
        return expenses

    def get_expense(self, expense_id: UUID, context: ActorContext) -> ExpenseInfo | None:
        """The expense, or None if it does not exist."""
        expense = self.storage.get(Collection.EXPENSES, expense_id)
        if expense is None:
            return None
        self._require(
            self.permissions.can_view_expense(context.role, expense.user_id, context.user_id),
            "view",
            "expense",
            context,
            expense_id,
        )
        return expense

    def get_total_expenses(self, filters: ExpenseFilters | None, context: ActorContext) -> int:
        return sum(e.amount for e in self.get_expenses(filters, context))

    def get_expenses_by_category(
        self, category_id: UUID, context: ActorContext
    ) -> list[ExpenseInfo]:
        return self.get_expenses(ExpenseFilters(category_id=category_id), context)

    def get_expenses_by_date_range(
        self, start_date: date, end_date: date, context: ActorContext
    ) -> list[ExpenseInfo]:
        return self.get_expenses(
            ExpenseFilters(start_date=start_date, end_date=end_date), context
        )

    # -- writes --------------------------------------------------------------

    @bound_operation(EntityType.EXPENSE)
    def create_expense(
        self,
        data: ExpenseInput,
        context: ActorContext,
        user_id: UUID | None = None,
    ) -> ExpenseInfo:
        """
        Record an expense owned by ``user_id`` (default: the actor).

        Raises:
            UnauthorizedError: A non-admin creating for someone else.
            UserNotFoundError: ``user_id`` names no user.
            ValidationError: Field values out of range.
            InvalidCategoryError: Category missing or inactive.
        """
        owner_id = user_id or context.user_id
        self._require(
            self.permissions.can_create_expense_for(context.role, owner_id, context.user_id),
            "create",
            "expense",
            context,
        )
        if owner_id != context.user_id and self.storage.get(Collection.USERS, owner_id) is None:
            raise UserNotFoundError(str(owner_id))

        raise_if_invalid("expense", validate_expense_input(data, self.policy))
        self._require_active_category(data.category_id)

        expense = ExpenseInfo(
            id=uuid4(),
            user_id=owner_id,
            category_id=data.category_id,
            amount=data.amount,
            date=data.date,
            description=data.description.strip(),
            payment_method=data.payment_method,
            notes=data.notes,
            reference_id=data.reference_id,
            created_by=context.user_id,
            created_at=self.clock.now(),
        )
        expense = self.storage.create(Collection.EXPENSES, expense)

        with LogContext.bind(entity_id=str(expense.id)):
            logger.info(
                "expense_created",
                extra={
                    "user_id": str(owner_id),
                    "category_id": str(expense.category_id),
                    "amount": expense.amount,
                },
            )
            self.audit.log_create(EntityType.EXPENSE, expense, context)
        return expense

    @bound_operation(EntityType.EXPENSE)
    def update_expense(
        self, expense_id: UUID, changes: Mapping[str, Any], context: ActorContext
    ) -> ExpenseInfo:
        """
        Apply ``changes`` (a subset of the editable fields) to an expense.

        The merged record is validated as a whole.  The audit entry lists
        only fields whose values actually changed.
        """
        self._check_editable("expense", changes, EDITABLE_FIELDS)

        existing = self.storage.get(Collection.EXPENSES, expense_id)
        if existing is None:
            raise ExpenseNotFoundError(str(expense_id))
        self._require(
            self.permissions.can_edit_expense(context.role, existing.user_id, context.user_id),
            "edit",
            "expense",
            context,
            expense_id,
        )

        merged = replace(
            ExpenseInput(
                category_id=existing.category_id,
                amount=existing.amount,
                date=existing.date,
                description=existing.description,
                payment_method=existing.payment_method,
                notes=existing.notes,
                reference_id=existing.reference_id,
            ),
            **changes,
        )
        raise_if_invalid("expense", validate_expense_input(merged, self.policy))
        if "category_id" in changes:
            self._require_active_category(merged.category_id)

        updates = dict(changes)
        if "description" in updates:
            updates["description"] = merged.description.strip()
        updates["updated_by"] = context.user_id
        updates["updated_at"] = self.clock.now()
        updated = self.storage.update(Collection.EXPENSES, expense_id, updates)

        logger.info(
            "expense_updated",
            extra={"expense_id": str(expense_id), "fields": sorted(changes)},
        )
        self.audit.log_update(EntityType.EXPENSE, existing, updated, context)
        return updated

    @bound_operation(EntityType.EXPENSE)
    def delete_expense(self, expense_id: UUID, context: ActorContext) -> None:
        existing = self.storage.get(Collection.EXPENSES, expense_id)
        if existing is None:
            raise ExpenseNotFoundError(str(expense_id))
        self._require(
            self.permissions.can_delete_expense(context.role, existing.user_id, context.user_id),
            "delete",
            "expense",
            context,
            expense_id,
        )

        self.storage.delete(Collection.EXPENSES, expense_id)
        logger.info("expense_deleted", extra={"expense_id": str(expense_id)})
        self.audit.log_delete(EntityType.EXPENSE, existing, context)
