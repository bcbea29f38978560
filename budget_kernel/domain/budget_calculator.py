"""
BudgetCalculator -- spend position and alert level of budgets.

Responsibility:
    Matches expenses to a budget (same category, same owner, expense date in
    the budget's closed window), sums them and derives remaining,
    percentage used and the alert level gated by the budget's own toggles.
    Also buckets many statuses into an on-track/warning/over-budget summary.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Called by
    BudgetService (statuses, rollover) and the analytics selector.

Invariants enforced:
    - ``spent + remaining == budget.amount`` exactly (integer arithmetic).
    - Threshold tests are exact: ``spent * 100 >= threshold * amount`` on
      integers, so 79.999...% never reaches an 80% threshold.
    - Alert level is decided on the uncapped percentage; only the returned
      ``percentage_used`` is capped.
    - ``amount == 0`` gives ``percentage_used == 0`` and ``AlertLevel.NONE``
      regardless of spend.
    - ``get_budget_summary`` counts sum to the number of statuses.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from uuid import UUID

from budget_kernel.domain.dtos import (
    AlertLevel,
    BudgetInfo,
    BudgetStatus,
    BudgetSummary,
    CategoryInfo,
    ExpenseInfo,
)
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy


class BudgetCalculator:
    """
    Contract:
        Pure functions over already-fetched collections; the calculator
        never filters by permission (the budget's own ``user_id`` is the
        scope).

    Non-goals:
        - Does NOT detect period expiry (see RolloverManager).
        - Does NOT load categories; callers pass them in.
    """

    def __init__(self, policy: BudgetPolicy | None = None):
        self._policy = policy or DEFAULT_POLICY

    def matching_expenses(
        self, budget: BudgetInfo, expenses: Iterable[ExpenseInfo]
    ) -> list[ExpenseInfo]:
        """Expenses that count against ``budget``."""
        return [
            e
            for e in expenses
            if e.category_id == budget.category_id
            and e.user_id == budget.user_id
            and budget.covers(e.date)
        ]

    def alert_level(self, budget: BudgetInfo, spent: int) -> AlertLevel:
        """Alert level for ``spent`` against ``budget``, gated by its toggles."""
        if budget.amount <= 0:
            return AlertLevel.NONE
        scaled = spent * 100
        if budget.alert_at_100 and scaled >= self._policy.critical_threshold_percent * budget.amount:
            return AlertLevel.CRITICAL
        if budget.alert_at_80 and scaled >= self._policy.warning_threshold_percent * budget.amount:
            return AlertLevel.WARNING
        return AlertLevel.NONE

    def calculate_budget_status(
        self,
        budget: BudgetInfo,
        expenses: Iterable[ExpenseInfo],
        category: CategoryInfo,
    ) -> BudgetStatus:
        spent = sum(e.amount for e in self.matching_expenses(budget, expenses))
        remaining = budget.amount - spent
        percentage = spent / budget.amount * 100 if budget.amount > 0 else 0.0

        return BudgetStatus(
            budget=budget,
            spent=spent,
            remaining=remaining,
            percentage_used=min(percentage, float(self._policy.percentage_display_cap)),
            alert_level=self.alert_level(budget, spent),
            category_name=category.name,
        )

    def calculate_multiple_budget_statuses(
        self,
        budgets: Iterable[BudgetInfo],
        expenses: Iterable[ExpenseInfo],
        categories: Iterable[CategoryInfo],
    ) -> list[BudgetStatus]:
        """
        One status per budget, in input order.  Each budget resolves its own
        category; a missing one is replaced by the Unknown placeholder.
        """
        expenses = list(expenses)
        by_id = {c.id: c for c in categories}
        return [
            self.calculate_budget_status(
                budget,
                expenses,
                by_id.get(budget.category_id) or self.unknown_category(budget.category_id),
            )
            for budget in budgets
        ]

    def unknown_category(self, category_id: UUID) -> CategoryInfo:
        return CategoryInfo(
            id=category_id,
            name=self._policy.unknown_category_name,
            description="",
            color=self._policy.unknown_category_color,
            icon=self._policy.unknown_category_icon,
            is_default=False,
            is_active=True,
            created_by=None,
            created_at=None,
        )

    def get_budget_summary(self, statuses: Sequence[BudgetStatus]) -> BudgetSummary:
        on_track = warning = over_budget = 0
        for status in statuses:
            match status.alert_level:
                case AlertLevel.NONE:
                    on_track += 1
                case AlertLevel.WARNING:
                    warning += 1
                case AlertLevel.CRITICAL:
                    over_budget += 1
                case _:
                    raise ValueError(f"Unknown alert level: {status.alert_level!r}")
        return BudgetSummary(on_track=on_track, warning=warning, over_budget=over_budget)
