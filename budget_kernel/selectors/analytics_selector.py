"""
Module: budget_kernel.selectors.analytics_selector
Responsibility: Reporting reads.  Loads the expenses, budgets and
    categories an actor may see and feeds them to the pure functions in
    domain/analytics.py.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Expenses are scoped with ``PermissionChecker.filter_by_permissions``
      before any aggregation, so role ``user`` only ever aggregates their
      own spending.
    - Budget statuses are computed over all expenses: a status always
      reflects its owner's full spending.
    - "Today" comes from the injected Clock.
"""

from __future__ import annotations

from datetime import date

from budget_kernel.domain import analytics
from budget_kernel.domain.budget_calculator import BudgetCalculator
from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.dates import is_date_in_range
from budget_kernel.domain.dtos import ActorContext, BudgetStatus, ExpenseInfo
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy
from budget_kernel.selectors.base import BaseSelector
from budget_kernel.storage.interface import Collection, StorageAdapter


class AnalyticsSelector(BaseSelector):
    def __init__(
        self,
        storage: StorageAdapter,
        clock: Clock | None = None,
        permissions: PermissionChecker | None = None,
        policy: BudgetPolicy | None = None,
    ):
        super().__init__(storage)
        self.clock = clock or SystemClock()
        self.permissions = permissions or PermissionChecker()
        self.policy = policy or DEFAULT_POLICY
        self.calculator = BudgetCalculator(self.policy)

    def visible_expenses(
        self,
        context: ActorContext,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[ExpenseInfo]:
        """Expenses the actor may see, optionally limited to an inclusive window."""
        expenses = self.permissions.filter_by_permissions(
            self.storage.get_all(Collection.EXPENSES), context
        )
        if start_date is not None:
            expenses = [e for e in expenses if e.date >= start_date]
        if end_date is not None:
            expenses = [e for e in expenses if e.date <= end_date]
        return expenses

    def active_budget_statuses(self, context: ActorContext) -> list[BudgetStatus]:
        budgets = self.permissions.filter_by_permissions(
            self.storage.query(Collection.BUDGETS, lambda b: b.is_active), context
        )
        return self.calculator.calculate_multiple_budget_statuses(
            budgets,
            self.storage.get_all(Collection.EXPENSES),
            self.storage.get_all(Collection.CATEGORIES),
        )

    def category_breakdown(
        self,
        context: ActorContext,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[analytics.CategoryBreakdown]:
        return analytics.category_breakdown(
            self.visible_expenses(context, start_date, end_date),
            self.storage.get_all(Collection.CATEGORIES),
        )

    def monthly_trend(self, context: ActorContext) -> list[analytics.MonthlyTrend]:
        return analytics.monthly_trend(self.visible_expenses(context))

    def budget_vs_actual(self, context: ActorContext) -> list[analytics.BudgetVsActual]:
        return analytics.budget_vs_actual(self.active_budget_statuses(context))

    def spending_by_payment_method(
        self,
        context: ActorContext,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[analytics.PaymentMethodSpending]:
        return analytics.spending_by_payment_method(
            self.visible_expenses(context, start_date, end_date)
        )

    def average_daily_spending(self, context: ActorContext) -> int:
        return analytics.average_daily_spending(self.visible_expenses(context))

    def current_month_expenses(self, context: ActorContext) -> list[ExpenseInfo]:
        today = self.clock.today()
        first = today.replace(day=1)
        return [
            e for e in self.visible_expenses(context) if is_date_in_range(e.date, first, today)
        ]

    def dashboard_stats(self, context: ActorContext) -> analytics.DashboardStats:
        return analytics.dashboard_stats(
            self.visible_expenses(context),
            self.active_budget_statuses(context),
            self.storage.get_all(Collection.CATEGORIES),
            self.clock.today(),
            self.calculator,
            recent_limit=self.policy.recent_expenses_limit,
        )
