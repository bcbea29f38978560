"""
Configuration Validator (``budget_config.validator``).

Checks the cross-field rules a parsed ``BudgetConfigurationSet`` must
satisfy before it is turned into a ``BudgetPolicy``.  Errors block
``get_active_config()``; warnings are logged and allowed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from budget_config.schema import BudgetConfigurationSet

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` is True only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: BudgetConfigurationSet) -> ConfigValidationResult:
    result = ConfigValidationResult()

    alerts = config.alerts
    if alerts.warning_threshold_percent <= 0:
        result.add_error("alerts.warning_threshold_percent must be positive")
    if alerts.warning_threshold_percent >= alerts.critical_threshold_percent:
        result.add_error(
            "alerts.warning_threshold_percent must be below critical_threshold_percent"
        )
    if alerts.percentage_display_cap < alerts.critical_threshold_percent:
        result.add_error(
            "alerts.percentage_display_cap must be at least critical_threshold_percent"
        )

    limits = config.limits
    for name in (
        "max_amount_cents",
        "description_max_length",
        "notes_max_length",
        "reference_id_max_length",
        "user_name_max_length",
        "category_name_max_length",
    ):
        if getattr(limits, name) <= 0:
            result.add_error(f"limits.{name} must be positive")

    placeholder = config.placeholder_category
    if not placeholder.name.strip():
        result.add_error("placeholder_category.name must not be empty")
    if not _HEX_COLOR_RE.match(placeholder.color):
        result.add_error(f"placeholder_category.color is not a hex colour: {placeholder.color}")
    if not placeholder.icon.strip():
        result.add_error("placeholder_category.icon must not be empty")

    reporting = config.reporting
    if reporting.recent_activity_limit <= 0:
        result.add_error("reporting.recent_activity_limit must be positive")
    if reporting.recent_expenses_limit <= 0:
        result.add_error("reporting.recent_expenses_limit must be positive")
    if reporting.recent_activity_limit > 1000:
        result.add_warning("reporting.recent_activity_limit above 1000 loads large audit pages")

    return result
