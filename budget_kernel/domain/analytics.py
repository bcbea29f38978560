"""
Analytics -- spending aggregates for dashboards and reports.

Responsibility:
    Groups already-scoped expenses by category, month and payment method;
    projects budget statuses into budget-vs-actual rows; assembles the
    dashboard statistics record.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  ``AnalyticsSelector``
    supplies permission-filtered expenses and the current date.

Invariants enforced:
    - Totals are integer cents; only percentages are floats.
    - A zero total yields 0.0 percentages, never a division error.
    - Sorting ties keep first-seen order (stable sorts).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from budget_kernel.domain.budget_calculator import BudgetCalculator
from budget_kernel.domain.dates import month_key
from budget_kernel.domain.dtos import (
    BudgetStatus,
    BudgetSummary,
    CategoryInfo,
    ExpenseInfo,
)

NOT_SPECIFIED = "not specified"


@dataclass(frozen=True)
class CategoryBreakdown:
    category_id: UUID
    category: str
    amount: int
    percentage: float
    color: str


@dataclass(frozen=True)
class MonthlyTrend:
    month: str
    amount: int


@dataclass(frozen=True)
class BudgetVsActual:
    category: str
    budgeted: int
    actual: int
    percentage: float


@dataclass(frozen=True)
class PaymentMethodSpending:
    method: str
    amount: int
    percentage: float


@dataclass(frozen=True)
class TopCategory:
    name: str
    amount: int
    percentage: float


@dataclass(frozen=True)
class DashboardStats:
    total_spent: int
    monthly_spent: int
    top_category: TopCategory | None
    budget_status: BudgetSummary
    recent_expenses: tuple[ExpenseInfo, ...]


def _percent(part: int, total: int) -> float:
    return part / total * 100 if total > 0 else 0.0


def _totals_by_category(expenses: Iterable[ExpenseInfo]) -> dict[UUID, int]:
    totals: dict[UUID, int] = {}
    for expense in expenses:
        totals[expense.category_id] = totals.get(expense.category_id, 0) + expense.amount
    return totals


def category_breakdown(
    expenses: Iterable[ExpenseInfo], categories: Iterable[CategoryInfo]
) -> list[CategoryBreakdown]:
    """
    Spend per category, largest first.

    Expenses whose category record is missing count toward the total (and
    so toward every other row's percentage) but get no row of their own.
    """
    totals = _totals_by_category(expenses)
    grand_total = sum(totals.values())
    by_id = {c.id: c for c in categories}

    rows = [
        CategoryBreakdown(
            category_id=category_id,
            category=by_id[category_id].name,
            amount=amount,
            percentage=_percent(amount, grand_total),
            color=by_id[category_id].color,
        )
        for category_id, amount in totals.items()
        if category_id in by_id
    ]
    return sorted(rows, key=lambda r: r.amount, reverse=True)


def monthly_trend(expenses: Iterable[ExpenseInfo]) -> list[MonthlyTrend]:
    totals: dict[str, int] = {}
    for expense in expenses:
        key = month_key(expense.date)
        totals[key] = totals.get(key, 0) + expense.amount
    return [MonthlyTrend(month=k, amount=totals[k]) for k in sorted(totals)]


def budget_vs_actual(statuses: Iterable[BudgetStatus]) -> list[BudgetVsActual]:
    return [
        BudgetVsActual(
            category=s.category_name,
            budgeted=s.budget.amount,
            actual=s.spent,
            percentage=s.percentage_used,
        )
        for s in statuses
    ]


def spending_by_payment_method(expenses: Iterable[ExpenseInfo]) -> list[PaymentMethodSpending]:
    totals: dict[str, int] = {}
    for expense in expenses:
        method = expense.payment_method.value if expense.payment_method else NOT_SPECIFIED
        totals[method] = totals.get(method, 0) + expense.amount
    grand_total = sum(totals.values())
    rows = [
        PaymentMethodSpending(method=m, amount=a, percentage=_percent(a, grand_total))
        for m, a in totals.items()
    ]
    return sorted(rows, key=lambda r: r.amount, reverse=True)


def average_daily_spending(expenses: Sequence[ExpenseInfo]) -> int:
    """Total over the inclusive span between the first and last expense date, floored."""
    if not expenses:
        return 0
    days = [e.date for e in expenses]
    span = (max(days) - min(days)).days + 1
    return sum(e.amount for e in expenses) // span


def recent_expenses(expenses: Iterable[ExpenseInfo], limit: int) -> list[ExpenseInfo]:
    return sorted(expenses, key=lambda e: e.date, reverse=True)[:limit]


def dashboard_stats(
    expenses: Sequence[ExpenseInfo],
    statuses: Sequence[BudgetStatus],
    categories: Iterable[CategoryInfo],
    today: date,
    calculator: BudgetCalculator,
    recent_limit: int = 5,
) -> DashboardStats:
    total_spent = sum(e.amount for e in expenses)
    current_month = month_key(today)
    monthly_spent = sum(e.amount for e in expenses if month_key(e.date) == current_month)

    top: TopCategory | None = None
    totals = _totals_by_category(expenses)
    if totals:
        top_id, top_amount = max(totals.items(), key=lambda item: item[1])
        by_id = {c.id: c for c in categories}
        category = by_id.get(top_id) or calculator.unknown_category(top_id)
        top = TopCategory(
            name=category.name,
            amount=top_amount,
            percentage=_percent(top_amount, total_spent),
        )

    return DashboardStats(
        total_spent=total_spent,
        monthly_spent=monthly_spent,
        top_category=top,
        budget_status=calculator.get_budget_summary(statuses),
        recent_expenses=tuple(recent_expenses(expenses, recent_limit)),
    )
