"""
BudgetConfigurationSet schema.

The human-authored source artifact: YAML configuration sets are parsed
into these frozen types by the loader, checked by the validator and turned
into the kernel's ``BudgetPolicy`` by ``bridges.build_budget_policy``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AlertConfig:
    warning_threshold_percent: int
    critical_threshold_percent: int
    percentage_display_cap: int


@dataclass(frozen=True)
class LimitsConfig:
    max_amount_cents: int
    description_max_length: int
    notes_max_length: int
    reference_id_max_length: int
    user_name_max_length: int
    category_name_max_length: int


@dataclass(frozen=True)
class PlaceholderCategoryConfig:
    """Stand-in category shown when a budget's category is missing."""

    name: str
    color: str
    icon: str


@dataclass(frozen=True)
class ReportingConfig:
    recent_activity_limit: int
    recent_expenses_limit: int


@dataclass(frozen=True)
class BudgetConfigurationSet:
    """One named, versioned configuration set (``sets/<config_id>.yaml``)."""

    config_id: str
    version: int
    alerts: AlertConfig
    limits: LimitsConfig
    placeholder_category: PlaceholderCategoryConfig
    reporting: ReportingConfig
    description: str = ""
    checksum: str = ""
