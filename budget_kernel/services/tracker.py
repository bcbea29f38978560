"""
BudgetTracker -- single wiring point for the access services.

Responsibility:
    Creates every access service and the analytics selector exactly once,
    all sharing one storage adapter, Clock, PermissionChecker, policy and
    AuditService.

Invariants enforced:
    - Single-instance lifecycle: one AuditService feeds every mutation.
    - All services see the same Clock, so "today" is consistent within a
      unit of work.

Usage:
    from budget_config import get_active_config

    tracker = BudgetTracker(
        SqlAlchemyStorage(session),
        policy=get_active_config(),
    )
    tracker.budgets.get_budget_statuses(None, actor)
"""

from __future__ import annotations

from budget_kernel.domain.budget_calculator import BudgetCalculator
from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy
from budget_kernel.domain.rollover import RolloverManager
from budget_kernel.selectors.analytics_selector import AnalyticsSelector
from budget_kernel.services.audit_service import AuditService
from budget_kernel.services.budget_service import BudgetService
from budget_kernel.services.category_service import CategoryService
from budget_kernel.services.expense_service import ExpenseService
from budget_kernel.services.user_service import UserService
from budget_kernel.storage.interface import StorageAdapter


class BudgetTracker:
    """
    Contract:
        Construction order follows the dependency graph; services are
        public attributes.

    Non-goals:
        - Does NOT manage transaction boundaries (caller's responsibility).
    """

    def __init__(
        self,
        storage: StorageAdapter,
        clock: Clock | None = None,
        permissions: PermissionChecker | None = None,
        policy: BudgetPolicy | None = None,
    ) -> None:
        self.storage = storage
        self.clock = clock or SystemClock()
        self.permissions = permissions or PermissionChecker()
        self.policy = policy or DEFAULT_POLICY

        shared = (storage, self.clock, self.permissions, self.policy)
        self.audit = AuditService(*shared)
        self.users = UserService(*shared, audit=self.audit)
        self.categories = CategoryService(*shared, audit=self.audit)
        self.expenses = ExpenseService(*shared, audit=self.audit)
        self.budgets = BudgetService(
            *shared,
            audit=self.audit,
            calculator=BudgetCalculator(self.policy),
            rollover=RolloverManager(self.clock),
        )
        self.analytics = AnalyticsSelector(*shared)
