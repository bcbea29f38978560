"""
budget_kernel.services -- access services over a StorageAdapter.

Each service checks permissions, validates input, writes through the
storage adapter and records an audit entry.  None of them commits.
"""

from budget_kernel.services.audit_service import AuditService
from budget_kernel.services.base import BaseService
from budget_kernel.services.budget_service import BudgetService
from budget_kernel.services.category_service import CategoryService
from budget_kernel.services.expense_service import ExpenseService
from budget_kernel.services.tracker import BudgetTracker
from budget_kernel.services.user_service import UserService

__all__ = [
    "AuditService",
    "BaseService",
    "BudgetService",
    "BudgetTracker",
    "CategoryService",
    "ExpenseService",
    "UserService",
]
