"""
Typed Exception Hierarchy for the Budget Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the access services (HTTP handlers, jobs, CLIs) must map each
failure to a distinct outcome: "you may not do this" is not "this does not
exist", and neither is "your input is malformed".  Matching on message text
is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        budget_service.update_budget(budget_id, {"amount": 5000}, context)
    except UnauthorizedError as e:
        return api_error(403, code=e.code, action=e.action)
    except BudgetNotFoundError as e:
        return api_error(404, code=e.code, budget_id=e.entity_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BudgetKernelError (base)
    |
    +-- UnauthorizedError
    |
    +-- NotFoundError
    |   +-- ExpenseNotFoundError
    |   +-- BudgetNotFoundError
    |   +-- CategoryNotFoundError
    |   +-- UserNotFoundError
    |
    +-- InvalidReferenceError
    |   +-- InvalidCategoryError
    |
    +-- ConflictError
    |   +-- BudgetOverlapError
    |   +-- DuplicateCategoryError
    |   +-- DuplicateEmailError
    |
    +-- ValidationError
    |
    +-- OperationNotAllowedError
    |   +-- DefaultCategoryProtectedError
    |   +-- SelfDeletionError
    |   +-- BudgetPeriodNotEndedError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                        | When Raised
----------------------------|---------------------------------------------------
UNAUTHORIZED                | Role/ownership check failed
EXPENSE_NOT_FOUND           | Expense id does not exist (update/delete)
BUDGET_NOT_FOUND            | Budget id does not exist (update/delete/rollover)
CATEGORY_NOT_FOUND          | Category id does not exist (category admin ops)
USER_NOT_FOUND              | User id does not exist
INVALID_CATEGORY            | category_id missing or inactive on create/update
BUDGET_OVERLAP              | Active budget already covers the window
DUPLICATE_CATEGORY          | Active category with same name exists
DUPLICATE_EMAIL             | User with same email exists
VALIDATION_ERROR            | Field values malformed or out of range
DEFAULT_CATEGORY_PROTECTED  | Attempt to delete a seeded default category
SELF_DELETION               | Admin attempted to delete their own account
BUDGET_PERIOD_NOT_ENDED     | Rollover requested before the window closed
IMMUTABILITY_VIOLATION      | Attempt to modify or delete an audit log row

None of these are retried internally: each one is a caller/input problem.
"""

from __future__ import annotations

from typing import Any


class BudgetKernelError(Exception):
    """
    Base exception for all budget kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BUDGET_KERNEL_ERROR"


# Authorization


class UnauthorizedError(BudgetKernelError):
    """Actor's role or ownership fails the relevant permission predicate."""

    code: str = "UNAUTHORIZED"

    def __init__(
        self,
        action: str,
        resource: str,
        actor_id: str,
        resource_id: str | None = None,
    ):
        self.action = action
        self.resource = resource
        self.actor_id = actor_id
        self.resource_id = resource_id
        target = f"{resource} {resource_id}" if resource_id else resource
        super().__init__(f"Unauthorized: cannot {action} {target}")


# Missing records


class NotFoundError(BudgetKernelError):
    """Base exception for references to records that do not exist."""

    code: str = "NOT_FOUND"
    entity_type: str = "record"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity_type.capitalize()} not found: {entity_id}")


class ExpenseNotFoundError(NotFoundError):
    code: str = "EXPENSE_NOT_FOUND"
    entity_type: str = "expense"


class BudgetNotFoundError(NotFoundError):
    code: str = "BUDGET_NOT_FOUND"
    entity_type: str = "budget"


class CategoryNotFoundError(NotFoundError):
    code: str = "CATEGORY_NOT_FOUND"
    entity_type: str = "category"


class UserNotFoundError(NotFoundError):
    code: str = "USER_NOT_FOUND"
    entity_type: str = "user"


# Referential integrity


class InvalidReferenceError(BudgetKernelError):
    """A supplied foreign key does not resolve to a usable record."""

    code: str = "INVALID_REFERENCE"

    def __init__(self, field: str, value: str, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value}: {reason}")


class InvalidCategoryError(InvalidReferenceError):
    """category_id does not resolve to an active category."""

    code: str = "INVALID_CATEGORY"

    def __init__(self, category_id: str, reason: str = "category missing or inactive"):
        self.category_id = category_id
        super().__init__("category_id", category_id, reason)


# Conflicts


class ConflictError(BudgetKernelError):
    """Base exception for uniqueness/overlap conflicts."""

    code: str = "CONFLICT"


class BudgetOverlapError(ConflictError):
    """
    An active budget for the same owner/category/period already covers
    part of the requested date window.
    """

    code: str = "BUDGET_OVERLAP"

    def __init__(
        self,
        user_id: str,
        category_id: str,
        period: str,
        existing_budget_id: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.user_id = user_id
        self.category_id = category_id
        self.period = period
        self.existing_budget_id = existing_budget_id
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"An active {period} budget already exists for this category "
            f"(budget {existing_budget_id} overlaps {overlap_start}..{overlap_end})"
        )


class DuplicateCategoryError(ConflictError):
    code: str = "DUPLICATE_CATEGORY"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A category with this name already exists: {name}")


class DuplicateEmailError(ConflictError):
    code: str = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User with this email already exists: {email}")


# Input validation


class ValidationError(BudgetKernelError):
    """
    Field values are malformed or out of range.

    Raised before any persistence call.  ``field_errors`` is a list of
    ``{"field": ..., "message": ...}`` dicts, one per failed rule.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, entity_type: str, field_errors: list[dict[str, Any]]):
        self.entity_type = entity_type
        self.field_errors = field_errors
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in field_errors)
        super().__init__(f"Invalid {entity_type}: {summary}")

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(e["field"] for e in self.field_errors)


# Business rules


class OperationNotAllowedError(BudgetKernelError):
    """Base exception for operations forbidden regardless of role."""

    code: str = "OPERATION_NOT_ALLOWED"


class DefaultCategoryProtectedError(OperationNotAllowedError):
    code: str = "DEFAULT_CATEGORY_PROTECTED"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Cannot delete default category {category_id}")


class SelfDeletionError(OperationNotAllowedError):
    code: str = "SELF_DELETION"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("Cannot delete your own account")


class BudgetPeriodNotEndedError(OperationNotAllowedError):
    code: str = "BUDGET_PERIOD_NOT_ENDED"

    def __init__(self, budget_id: str, end_date: str):
        self.budget_id = budget_id
        self.end_date = end_date
        super().__init__(
            f"Budget {budget_id} cannot be rolled over before its period ends ({end_date})"
        )


# Append-only enforcement


class ImmutabilityViolationError(BudgetKernelError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
