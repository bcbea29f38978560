"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the closed enumerations (roles, periods, rollover rules, alert
    levels, audit actions) and the immutable records that flow between the
    storage adapters, the pure calculators and the access services:
    ``UserInfo``, ``CategoryInfo``, ``ExpenseInfo``, ``BudgetInfo``,
    ``BudgetDraft``, ``BudgetStatus``, ``AuditEntry`` plus the caller-supplied
    inputs and filters.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters invoked only by
    the SQLAlchemy storage adapter.

Invariants enforced:
    - Amounts are ``int`` cents on every record.
    - Optional fields (payment method, notes, reference id, updated_by,
      updated_at) are explicit ``X | None``; absence is ``None``.
    - Records are frozen; updates produce new instances via ``replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from budget_kernel.domain.dates import is_date_in_range

if TYPE_CHECKING:
    from budget_kernel.models.audit_log import AuditLogRecord
    from budget_kernel.models.budget import Budget as BudgetModel
    from budget_kernel.models.category import Category as CategoryModel
    from budget_kernel.models.expense import Expense as ExpenseModel
    from budget_kernel.models.user import User as UserModel


# =============================================================================
# Closed enumerations
# =============================================================================


class UserRole(str, Enum):
    """Role of an actor.  Determines default visibility scope."""

    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    USER = "user"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    OTHER = "other"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class RolloverRule(str, Enum):
    """What happens to a period's surplus/deficit when it rolls over."""

    NO_ROLLOVER = "no_rollover"
    ROLLOVER_SURPLUS = "rollover_surplus"
    ROLLOVER_ALL = "rollover_all"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AlertLevel(str, Enum):
    NONE = "none"
    WARNING = "warning"
    CRITICAL = "critical"


class EntityType(str, Enum):
    """Audited entity kinds."""

    USER = "user"
    CATEGORY = "category"
    EXPENSE = "expense"
    BUDGET = "budget"


# =============================================================================
# Actor
# =============================================================================


@dataclass(frozen=True)
class ActorContext:
    """Who is calling: required by every permission-sensitive operation."""

    user_id: UUID
    role: UserRole


# =============================================================================
# Persisted records
# =============================================================================


@dataclass(frozen=True)
class UserInfo:
    id: UUID
    email: str
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def actor(self) -> ActorContext:
        return ActorContext(user_id=self.id, role=self.role)

    @classmethod
    def from_model(cls, model: UserModel) -> UserInfo:
        return cls(
            id=model.id,
            email=model.email,
            name=model.name,
            role=UserRole(model.role),
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class CategoryInfo:
    """
    Named grouping of expenses.

    ``is_default`` marks seeded categories (never hard-deleted);
    ``is_active=False`` is the soft-delete marker.
    """

    id: UUID
    name: str
    description: str
    color: str
    icon: str
    is_default: bool
    is_active: bool
    created_by: UUID | None
    created_at: datetime | None

    @classmethod
    def from_model(cls, model: CategoryModel) -> CategoryInfo:
        return cls(
            id=model.id,
            name=model.name,
            description=model.description,
            color=model.color,
            icon=model.icon,
            is_default=model.is_default,
            is_active=model.is_active,
            created_by=model.created_by,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class ExpenseInfo:
    """
    One spend event.

    ``date`` is the economic date of the expense, distinct from
    ``created_at``.  ``created_by`` differs from ``user_id`` when an admin
    records an expense on behalf of another user.
    """

    id: UUID
    user_id: UUID
    category_id: UUID
    amount: int
    date: date
    description: str
    payment_method: PaymentMethod | None
    notes: str | None
    reference_id: str | None
    created_by: UUID
    created_at: datetime
    updated_by: UUID | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: ExpenseModel) -> ExpenseInfo:
        return cls(
            id=model.id,
            user_id=model.user_id,
            category_id=model.category_id,
            amount=model.amount,
            date=model.date,
            description=model.description,
            payment_method=PaymentMethod(model.payment_method) if model.payment_method else None,
            notes=model.notes,
            reference_id=model.reference_id,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_by=model.updated_by,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class BudgetInfo:
    """
    Allocation of ``amount`` cents to one category for one owner over the
    closed window ``[start_date, end_date]``.
    """

    id: UUID
    user_id: UUID
    category_id: UUID
    period: BudgetPeriod
    amount: int
    rollover_rule: RolloverRule
    start_date: date
    end_date: date
    alert_at_80: bool
    alert_at_100: bool
    is_active: bool
    created_at: datetime

    def covers(self, day: date) -> bool:
        """True when ``day`` falls inside the inclusive budget window."""
        return is_date_in_range(day, self.start_date, self.end_date)

    @classmethod
    def from_model(cls, model: BudgetModel) -> BudgetInfo:
        return cls(
            id=model.id,
            user_id=model.user_id,
            category_id=model.category_id,
            period=BudgetPeriod(model.period),
            amount=model.amount,
            rollover_rule=RolloverRule(model.rollover_rule),
            start_date=model.start_date,
            end_date=model.end_date,
            alert_at_80=model.alert_at_80,
            alert_at_100=model.alert_at_100,
            is_active=model.is_active,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class BudgetDraft:
    """
    Unsaved budget definition (no id, no created_at).

    Produced by the rollover manager; the caller persists it and stamps the
    bookkeeping fields.
    """

    user_id: UUID
    category_id: UUID
    period: BudgetPeriod
    amount: int
    rollover_rule: RolloverRule
    start_date: date
    end_date: date
    alert_at_80: bool
    alert_at_100: bool
    is_active: bool = True


@dataclass(frozen=True)
class AuditChange:
    field: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class AuditEntry:
    """
    Append-only record of one create/update/delete.

    ``changes`` holds JSON-safe values (ids and dates as strings, enums as
    their values) so the entry serializes the same way it compares.
    """

    id: UUID
    entity_type: EntityType
    entity_id: UUID
    action: AuditAction
    performed_by: UUID
    performed_by_name: str
    performed_by_role: UserRole
    changes: tuple[AuditChange, ...]
    timestamp: datetime

    def changed_fields(self) -> tuple[str, ...]:
        return tuple(c.field for c in self.changes)

    @classmethod
    def from_model(cls, model: AuditLogRecord) -> AuditEntry:
        return cls(
            id=model.id,
            entity_type=EntityType(model.entity_type),
            entity_id=model.entity_id,
            action=AuditAction(model.action),
            performed_by=model.performed_by,
            performed_by_name=model.performed_by_name,
            performed_by_role=UserRole(model.performed_by_role),
            changes=tuple(
                AuditChange(
                    field=c["field"],
                    old_value=c.get("old_value"),
                    new_value=c.get("new_value"),
                )
                for c in (model.changes or [])
            ),
            timestamp=model.timestamp,
        )


# =============================================================================
# Derived (never persisted)
# =============================================================================


@dataclass(frozen=True)
class BudgetStatus:
    """
    Spend position of one budget.

    ``remaining`` may be negative.  ``percentage_used`` is capped for
    display; ``alert_level`` was decided on the uncapped value.
    """

    budget: BudgetInfo
    spent: int
    remaining: int
    percentage_used: float
    alert_level: AlertLevel
    category_name: str


@dataclass(frozen=True)
class BudgetSummary:
    on_track: int = 0
    warning: int = 0
    over_budget: int = 0

    @property
    def total(self) -> int:
        return self.on_track + self.warning + self.over_budget


# =============================================================================
# Caller-supplied inputs
# =============================================================================


@dataclass(frozen=True)
class ExpenseInput:
    """Form data for creating an expense.  ``amount`` is in cents."""

    category_id: UUID
    amount: int
    date: date
    description: str
    payment_method: PaymentMethod | None = None
    notes: str | None = None
    reference_id: str | None = None


@dataclass(frozen=True)
class BudgetInput:
    """Form data for creating a budget.  ``amount`` is in cents."""

    category_id: UUID
    period: BudgetPeriod
    amount: int
    rollover_rule: RolloverRule
    start_date: date
    end_date: date
    alert_at_80: bool = True
    alert_at_100: bool = True


@dataclass(frozen=True)
class CategoryInput:
    name: str
    description: str = ""
    color: str = "#808080"
    icon: str = "package"


@dataclass(frozen=True)
class UserInput:
    email: str
    name: str
    role: UserRole = UserRole.USER
    is_active: bool = True


# =============================================================================
# Filters -- every field optional; None means "no constraint"
# =============================================================================


@dataclass(frozen=True)
class ExpenseFilters:
    user_id: UUID | None = None
    category_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    min_amount: int | None = None
    max_amount: int | None = None
    payment_method: PaymentMethod | None = None
    search: str | None = None


@dataclass(frozen=True)
class BudgetFilters:
    user_id: UUID | None = None
    category_id: UUID | None = None
    period: BudgetPeriod | None = None
    is_active: bool | None = None


@dataclass(frozen=True)
class AuditFilters:
    entity_type: EntityType | None = None
    action: AuditAction | None = None
    performed_by: UUID | None = None
    start: datetime | None = None
    end: datetime | None = None
    search: str | None = None


@dataclass(frozen=True)
class AuditStats:
    total_logs: int
    by_action: dict[AuditAction, int] = field(default_factory=dict)
    by_entity_type: dict[str, int] = field(default_factory=dict)
    by_user: dict[str, int] = field(default_factory=dict)
