"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Storage adapters

Time enters only through an injected Clock.  All records are immutable.
"""

from budget_kernel.domain.budget_calculator import BudgetCalculator
from budget_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from budget_kernel.domain.dates import DateRange, is_date_in_range, ranges_overlap
from budget_kernel.domain.dtos import (
    ActorContext,
    AlertLevel,
    AuditAction,
    AuditChange,
    AuditEntry,
    BudgetDraft,
    BudgetFilters,
    BudgetInfo,
    BudgetInput,
    BudgetPeriod,
    BudgetStatus,
    BudgetSummary,
    CategoryInfo,
    CategoryInput,
    EntityType,
    ExpenseFilters,
    ExpenseInfo,
    ExpenseInput,
    PaymentMethod,
    RolloverRule,
    UserInfo,
    UserInput,
    UserRole,
)
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy
from budget_kernel.domain.rollover import RolloverManager
from budget_kernel.domain.values import Money, from_cents, to_cents

__all__ = [
    # Core components
    "BudgetCalculator",
    "PermissionChecker",
    "RolloverManager",
    "BudgetPolicy",
    "DEFAULT_POLICY",
    # Time
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "DateRange",
    "is_date_in_range",
    "ranges_overlap",
    # Money
    "Money",
    "from_cents",
    "to_cents",
    # Enumerations
    "AlertLevel",
    "AuditAction",
    "BudgetPeriod",
    "EntityType",
    "PaymentMethod",
    "RolloverRule",
    "UserRole",
    # Records
    "ActorContext",
    "AuditChange",
    "AuditEntry",
    "BudgetDraft",
    "BudgetInfo",
    "BudgetStatus",
    "BudgetSummary",
    "CategoryInfo",
    "ExpenseInfo",
    "UserInfo",
    # Inputs and filters
    "BudgetFilters",
    "BudgetInput",
    "CategoryInput",
    "ExpenseFilters",
    "ExpenseInput",
    "UserInput",
]
