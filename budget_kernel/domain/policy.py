"""
BudgetPolicy -- tunable limits and thresholds consumed by the pure core.

The kernel never reads configuration files.  ``budget_config`` compiles a
YAML configuration set into a ``BudgetPolicy`` and callers inject it;
everything defaults to ``DEFAULT_POLICY``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BudgetPolicy:
    # Alert thresholds, in whole percent of the allocation
    warning_threshold_percent: int = 80
    critical_threshold_percent: int = 100
    percentage_display_cap: int = 999

    # Input limits
    max_amount_cents: int = 99_999_999
    description_max_length: int = 200
    notes_max_length: int = 500
    reference_id_max_length: int = 50
    user_name_max_length: int = 100
    category_name_max_length: int = 50

    # Stand-in for budgets whose category record is missing
    unknown_category_name: str = "Unknown"
    unknown_category_color: str = "#808080"
    unknown_category_icon: str = "package"

    # Read-side defaults
    recent_activity_limit: int = 50
    recent_expenses_limit: int = 5


DEFAULT_POLICY = BudgetPolicy()
