"""
BudgetService -- permission-scoped budget access, statuses and rollover.

Responsibility:
    List, get, create, update, deactivate and delete budgets; compute their
    statuses and summary through BudgetCalculator; roll an ended budget
    into its next period through RolloverManager.

Architecture position:
    Kernel > Services -- imperative shell.  BudgetCalculator and
    RolloverManager are the pure cores it feeds.

Invariants enforced:
    - At most one active budget per (owner, category, period) covers any
      day.  Checked on create, on any update whose result is active, and
      for the successor of a rollover.
    - ``end_date > start_date`` on every user-supplied window.
    - Statuses match expenses by the budget's own owner, so the expense
      set fed to the calculator is not permission-filtered.
    - Only an ended budget can be rolled over; the predecessor is
      deactivated in the same unit of work as the successor is created.

Failure modes:
    - UnauthorizedError, BudgetNotFoundError, UserNotFoundError,
      InvalidCategoryError, ValidationError.
    - BudgetOverlapError on a conflicting active window.
    - BudgetPeriodNotEndedError when rolling over too early.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from budget_kernel.domain.budget_calculator import BudgetCalculator
from budget_kernel.domain.clock import Clock
from budget_kernel.domain.dates import ranges_overlap
from budget_kernel.domain.dtos import (
    ActorContext,
    BudgetFilters,
    BudgetInfo,
    BudgetInput,
    BudgetPeriod,
    BudgetStatus,
    BudgetSummary,
    EntityType,
)
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import BudgetPolicy
from budget_kernel.domain.rollover import RolloverManager
from budget_kernel.domain.validation import FieldError, raise_if_invalid, validate_budget_input
from budget_kernel.exceptions import (
    BudgetNotFoundError,
    BudgetOverlapError,
    BudgetPeriodNotEndedError,
    UserNotFoundError,
)
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.services.audit_service import AuditService
from budget_kernel.services.base import BaseService, bound_operation
from budget_kernel.storage.interface import Collection, StorageAdapter

logger = get_logger("services.budget")

EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "category_id",
        "period",
        "amount",
        "rollover_rule",
        "start_date",
        "end_date",
        "alert_at_80",
        "alert_at_100",
        "is_active",
    }
)


class BudgetService(BaseService):
    def __init__(
        self,
        storage: StorageAdapter,
        clock: Clock | None = None,
        permissions: PermissionChecker | None = None,
        policy: BudgetPolicy | None = None,
        audit: AuditService | None = None,
        calculator: BudgetCalculator | None = None,
        rollover: RolloverManager | None = None,
    ):
        super().__init__(storage, clock, permissions, policy)
        self.audit = audit or AuditService(storage, self.clock, self.permissions, self.policy)
        self.calculator = calculator or BudgetCalculator(self.policy)
        self.rollover = rollover or RolloverManager(self.clock)

    # -- reads ---------------------------------------------------------------

    def get_budgets(
        self, filters: BudgetFilters | None, context: ActorContext
    ) -> list[BudgetInfo]:
        """
        Budgets visible to ``context`` matching ``filters``, in storage order.

        ``filters.user_id`` narrows the result for roles that can see all
        data; role ``user`` is always restricted to their own budgets.
        """
        filters = filters or BudgetFilters()
        budgets = self.storage.get_all(Collection.BUDGETS)

        if not self.permissions.can_view_all_data(context.role):
            budgets = [b for b in budgets if b.user_id == context.user_id]
        elif filters.user_id is not None:
            budgets = [b for b in budgets if b.user_id == filters.user_id]

        if filters.category_id is not None:
            budgets = [b for b in budgets if b.category_id == filters.category_id]
        if filters.period is not None:
            budgets = [b for b in budgets if b.period == filters.period]
        if filters.is_active is not None:
            budgets = [b for b in budgets if b.is_active == filters.is_active]
        return budgets

    def get_budget(self, budget_id: UUID, context: ActorContext) -> BudgetInfo | None:
        budget = self.storage.get(Collection.BUDGETS, budget_id)
        if budget is None:
            return None
        self._require(
            self.permissions.can_view_budget(context.role, budget.user_id, context.user_id),
            "view",
            "budget",
            context,
            budget_id,
        )
        return budget

    def get_budget_statuses(
        self, filters: BudgetFilters | None, context: ActorContext
    ) -> list[BudgetStatus]:
        budgets = self.get_budgets(filters, context)
        return self.calculator.calculate_multiple_budget_statuses(
            budgets,
            self.storage.get_all(Collection.EXPENSES),
            self.storage.get_all(Collection.CATEGORIES),
        )

    def get_budget_summary(
        self, filters: BudgetFilters | None, context: ActorContext
    ) -> BudgetSummary:
        return self.calculator.get_budget_summary(self.get_budget_statuses(filters, context))

    def find_ended_budgets(self, context: ActorContext) -> list[BudgetInfo]:
        """Active, visible budgets whose period is over: rollover candidates."""
        return [
            b
            for b in self.get_budgets(BudgetFilters(is_active=True), context)
            if self.rollover.has_budget_period_ended(b)
        ]

    # -- writes --------------------------------------------------------------

    @bound_operation(EntityType.BUDGET)
    def create_budget(
        self,
        data: BudgetInput,
        context: ActorContext,
        user_id: UUID | None = None,
    ) -> BudgetInfo:
        """
        Create an active budget owned by ``user_id`` (default: the actor).

        Raises:
            UnauthorizedError: Actor may not manage the owner's budgets.
            UserNotFoundError: ``user_id`` names no user.
            ValidationError: Field values out of range.
            InvalidCategoryError: Category missing or inactive.
            BudgetOverlapError: An active budget already covers the window.
        """
        owner_id = user_id or context.user_id
        self._require(
            self.permissions.can_manage_budget(context.role, owner_id, context.user_id),
            "create",
            "budget",
            context,
        )
        if owner_id != context.user_id and self.storage.get(Collection.USERS, owner_id) is None:
            raise UserNotFoundError(str(owner_id))

        raise_if_invalid("budget", validate_budget_input(data, self.policy))
        self._require_active_category(data.category_id)
        self._check_overlap(
            owner_id, data.category_id, data.period, data.start_date, data.end_date
        )

        budget = BudgetInfo(
            id=uuid4(),
            user_id=owner_id,
            category_id=data.category_id,
            period=data.period,
            amount=data.amount,
            rollover_rule=data.rollover_rule,
            start_date=data.start_date,
            end_date=data.end_date,
            alert_at_80=data.alert_at_80,
            alert_at_100=data.alert_at_100,
            is_active=True,
            created_at=self.clock.now(),
        )
        budget = self.storage.create(Collection.BUDGETS, budget)

        with LogContext.bind(entity_id=str(budget.id)):
            logger.info(
                "budget_created",
                extra={
                    "user_id": str(owner_id),
                    "category_id": str(budget.category_id),
                    "period": budget.period.value,
                    "amount": budget.amount,
                },
            )
            self.audit.log_create(EntityType.BUDGET, budget, context)
        return budget

    @bound_operation(EntityType.BUDGET)
    def update_budget(
        self, budget_id: UUID, changes: Mapping[str, Any], context: ActorContext
    ) -> BudgetInfo:
        self._check_editable("budget", changes, EDITABLE_FIELDS)

        existing = self.storage.get(Collection.BUDGETS, budget_id)
        if existing is None:
            raise BudgetNotFoundError(str(budget_id))
        self._require(
            self.permissions.can_manage_budget(context.role, existing.user_id, context.user_id),
            "manage",
            "budget",
            context,
            budget_id,
        )

        input_changes = {k: v for k, v in changes.items() if k != "is_active"}
        merged = replace(
            BudgetInput(
                category_id=existing.category_id,
                period=existing.period,
                amount=existing.amount,
                rollover_rule=existing.rollover_rule,
                start_date=existing.start_date,
                end_date=existing.end_date,
                alert_at_80=existing.alert_at_80,
                alert_at_100=existing.alert_at_100,
            ),
            **input_changes,
        )
        errors = validate_budget_input(merged, self.policy)
        is_active = changes.get("is_active", existing.is_active)
        if not isinstance(is_active, bool):
            errors.append(FieldError("is_active", "Must be true or false"))
        raise_if_invalid("budget", errors)

        if "category_id" in changes:
            self._require_active_category(merged.category_id)
        if is_active:
            self._check_overlap(
                existing.user_id,
                merged.category_id,
                merged.period,
                merged.start_date,
                merged.end_date,
                exclude_id=budget_id,
            )

        updated = self.storage.update(Collection.BUDGETS, budget_id, dict(changes))
        logger.info(
            "budget_updated",
            extra={"budget_id": str(budget_id), "fields": sorted(changes)},
        )
        self.audit.log_update(EntityType.BUDGET, existing, updated, context)
        return updated

    def deactivate_budget(self, budget_id: UUID, context: ActorContext) -> BudgetInfo:
        return self.update_budget(budget_id, {"is_active": False}, context)

    @bound_operation(EntityType.BUDGET)
    def delete_budget(self, budget_id: UUID, context: ActorContext) -> None:
        existing = self.storage.get(Collection.BUDGETS, budget_id)
        if existing is None:
            raise BudgetNotFoundError(str(budget_id))
        self._require(
            self.permissions.can_manage_budget(context.role, existing.user_id, context.user_id),
            "delete",
            "budget",
            context,
            budget_id,
        )

        self.storage.delete(Collection.BUDGETS, budget_id)
        logger.info("budget_deleted", extra={"budget_id": str(budget_id)})
        self.audit.log_delete(EntityType.BUDGET, existing, context)

    @bound_operation(EntityType.BUDGET)
    def roll_over_budget(self, budget_id: UUID, context: ActorContext) -> BudgetInfo:
        """
        Close an ended budget and open its successor.

        The successor's amount is the old allocation plus the rollover
        contribution of the old period; it is stored as computed, even when
        a carried deficit leaves it at or below zero.

        Returns:
            The newly created successor budget.
        """
        budget = self.storage.get(Collection.BUDGETS, budget_id)
        if budget is None:
            raise BudgetNotFoundError(str(budget_id))
        self._require(
            self.permissions.can_manage_budget(context.role, budget.user_id, context.user_id),
            "roll over",
            "budget",
            context,
            budget_id,
        )
        if not self.rollover.has_budget_period_ended(budget):
            raise BudgetPeriodNotEndedError(str(budget_id), budget.end_date.isoformat())

        category = self.storage.get(
            Collection.CATEGORIES, budget.category_id
        ) or self.calculator.unknown_category(budget.category_id)
        status = self.calculator.calculate_budget_status(
            budget, self.storage.get_all(Collection.EXPENSES), category
        )
        carried = self.rollover.calculate_rollover(budget, status.spent, status.remaining)
        draft = self.rollover.create_next_period_budget(budget, carried)

        self._check_overlap(
            draft.user_id,
            draft.category_id,
            draft.period,
            draft.start_date,
            draft.end_date,
            exclude_id=budget_id,
        )

        successor = self.storage.create(
            Collection.BUDGETS,
            BudgetInfo(
                id=uuid4(),
                user_id=draft.user_id,
                category_id=draft.category_id,
                period=draft.period,
                amount=draft.amount,
                rollover_rule=draft.rollover_rule,
                start_date=draft.start_date,
                end_date=draft.end_date,
                alert_at_80=draft.alert_at_80,
                alert_at_100=draft.alert_at_100,
                is_active=draft.is_active,
                created_at=self.clock.now(),
            ),
        )
        closed = self.storage.update(Collection.BUDGETS, budget_id, {"is_active": False})

        logger.info(
            "budget_rolled_over",
            extra={
                "budget_id": str(budget_id),
                "successor_id": str(successor.id),
                "rollover_rule": budget.rollover_rule.value,
                "spent": status.spent,
                "rollover_amount": carried,
                "new_amount": successor.amount,
            },
        )
        self.audit.log_create(EntityType.BUDGET, successor, context)
        self.audit.log_update(EntityType.BUDGET, budget, closed, context)
        return successor

    # -- helpers -------------------------------------------------------------

    def _check_overlap(
        self,
        user_id: UUID,
        category_id: UUID,
        period: BudgetPeriod,
        start_date: date,
        end_date: date,
        exclude_id: UUID | None = None,
    ) -> None:
        conflicts = self.storage.query(
            Collection.BUDGETS,
            lambda b: b.id != exclude_id
            and b.user_id == user_id
            and b.category_id == category_id
            and b.period == period
            and b.is_active
            and ranges_overlap(start_date, end_date, b.start_date, b.end_date),
        )
        if not conflicts:
            return

        existing = conflicts[0]
        logger.warning(
            "budget_overlap_rejected",
            extra={
                "user_id": str(user_id),
                "category_id": str(category_id),
                "period": period.value,
                "existing_budget_id": str(existing.id),
            },
        )
        raise BudgetOverlapError(
            user_id=str(user_id),
            category_id=str(category_id),
            period=period.value,
            existing_budget_id=str(existing.id),
            overlap_start=max(start_date, existing.start_date).isoformat(),
            overlap_end=min(end_date, existing.end_date).isoformat(),
        )
