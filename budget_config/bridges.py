"""
Config -> Kernel bridge.

Converts a validated ``BudgetConfigurationSet`` into the kernel's
``BudgetPolicy``.  Lives here (the producer) because the kernel never
imports ``budget_config``.
"""

from __future__ import annotations

from budget_config.schema import BudgetConfigurationSet
from budget_kernel.domain.policy import BudgetPolicy


def build_budget_policy(config: BudgetConfigurationSet) -> BudgetPolicy:
    return BudgetPolicy(
        warning_threshold_percent=config.alerts.warning_threshold_percent,
        critical_threshold_percent=config.alerts.critical_threshold_percent,
        percentage_display_cap=config.alerts.percentage_display_cap,
        max_amount_cents=config.limits.max_amount_cents,
        description_max_length=config.limits.description_max_length,
        notes_max_length=config.limits.notes_max_length,
        reference_id_max_length=config.limits.reference_id_max_length,
        user_name_max_length=config.limits.user_name_max_length,
        category_name_max_length=config.limits.category_name_max_length,
        unknown_category_name=config.placeholder_category.name,
        unknown_category_color=config.placeholder_category.color,
        unknown_category_icon=config.placeholder_category.icon,
        recent_activity_limit=config.reporting.recent_activity_limit,
        recent_expenses_limit=config.reporting.recent_expenses_limit,
    )
