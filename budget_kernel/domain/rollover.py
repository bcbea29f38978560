"""
RolloverManager -- carry a period's surplus or deficit into the next one.

Responsibility:
    Computes the rollover contribution of an ending budget from its rule,
    builds the unsaved definition of the successor budget, and decides
    whether a budget's period has ended according to the injected clock.

Architecture position:
    Kernel > Domain -- pure functional core.  Time enters only through the
    ``Clock``.  ``BudgetService.roll_over_budget`` persists the draft.

Invariants enforced:
    - ``NO_ROLLOVER`` contributes 0; ``ROLLOVER_SURPLUS`` contributes
      ``max(remaining, 0)``; ``ROLLOVER_ALL`` contributes ``remaining``
      including a deficit.
    - Successor window starts the day after the predecessor ends.
    - Successor amount is ``budget.amount + rollover`` and is not clamped.
"""

from __future__ import annotations

from datetime import timedelta

from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.dates import add_months, add_years, end_of_month, end_of_year
from budget_kernel.domain.dtos import BudgetDraft, BudgetInfo, BudgetPeriod, RolloverRule
from budget_kernel.logging_config import get_logger

logger = get_logger("domain.rollover")


class RolloverManager:
    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    def calculate_rollover(self, budget: BudgetInfo, spent: int, remaining: int) -> int:
        """
        Amount (cents) carried into the next period.

        ``spent`` is accepted for symmetry with the status record; only
        ``remaining`` feeds the rules.
        """
        match budget.rollover_rule:
            case RolloverRule.NO_ROLLOVER:
                return 0
            case RolloverRule.ROLLOVER_SURPLUS:
                return remaining if remaining > 0 else 0
            case RolloverRule.ROLLOVER_ALL:
                return remaining
            case _:
                raise ValueError(f"Unknown rollover rule: {budget.rollover_rule!r}")

    def create_next_period_budget(self, budget: BudgetInfo, rollover_amount: int) -> BudgetDraft:
        start = budget.end_date + timedelta(days=1)
        match budget.period:
            case BudgetPeriod.MONTHLY:
                # End of the month after the new start month.
                end = end_of_month(add_months(start, 1))
            case BudgetPeriod.ANNUAL:
                end = end_of_year(add_years(start, 1))
            case _:
                raise ValueError(f"Unknown budget period: {budget.period!r}")

        draft = BudgetDraft(
            user_id=budget.user_id,
            category_id=budget.category_id,
            period=budget.period,
            amount=budget.amount + rollover_amount,
            rollover_rule=budget.rollover_rule,
            start_date=start,
            end_date=end,
            alert_at_80=budget.alert_at_80,
            alert_at_100=budget.alert_at_100,
            is_active=True,
        )
        logger.debug(
            "next_period_budget_drafted",
            extra={
                "budget_id": str(budget.id),
                "rollover_amount": rollover_amount,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
            },
        )
        return draft

    def has_budget_period_ended(self, budget: BudgetInfo) -> bool:
        return self._clock.today() > budget.end_date
