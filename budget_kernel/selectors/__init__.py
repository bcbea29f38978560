"""Selectors for the budget kernel (read side)."""

from budget_kernel.selectors.analytics_selector import AnalyticsSelector
from budget_kernel.selectors.base import BaseSelector

__all__ = [
    "AnalyticsSelector",
    "BaseSelector",
]
