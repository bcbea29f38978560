"""ORM models for the budget kernel."""

from budget_kernel.models.audit_log import AuditLogRecord
from budget_kernel.models.budget import Budget
from budget_kernel.models.category import Category
from budget_kernel.models.expense import Expense
from budget_kernel.models.user import User

__all__ = [
    "AuditLogRecord",
    "Budget",
    "Category",
    "Expense",
    "User",
]
