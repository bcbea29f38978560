"""Field validation for expense, budget, user and category input."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from budget_kernel.domain.dtos import (
    BudgetInput,
    BudgetPeriod,
    CategoryInput,
    ExpenseInput,
    PaymentMethod,
    RolloverRule,
    UserInput,
    UserRole,
)
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy
from budget_kernel.exceptions import ValidationError
from budget_kernel.logging_config import get_logger

logger = get_logger("domain.validation")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def raise_if_invalid(entity_type: str, errors: Sequence[FieldError]) -> None:
    """Raise ``ValidationError`` carrying every field error, if any."""
    if not errors:
        return
    logger.warning(
        "validation_failed",
        extra={
            "entity_type": entity_type,
            "error_count": len(errors),
            "fields": [e.field for e in errors],
        },
    )
    raise ValidationError(entity_type, [e.to_dict() for e in errors])


# -- shared rules -------------------------------------------------------------


def validate_amount(
    amount: Any, policy: BudgetPolicy, field: str = "amount"
) -> list[FieldError]:
    """``0 < amount <= policy.max_amount_cents``, integer cents only."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        return [FieldError(field, "Amount must be an integer number of cents")]
    if amount <= 0:
        return [FieldError(field, "Amount must be positive")]
    if amount > policy.max_amount_cents:
        return [FieldError(field, f"Amount cannot exceed {policy.max_amount_cents} cents")]
    return []


def validate_text(
    value: Any,
    field: str,
    max_length: int,
    *,
    required: bool,
) -> list[FieldError]:
    if value is None:
        return [FieldError(field, "Required")] if required else []
    if not isinstance(value, str):
        return [FieldError(field, "Must be text")]
    text = value.strip() if required else value
    if required and not text:
        return [FieldError(field, "Required")]
    if len(text) > max_length:
        return [FieldError(field, f"Must be at most {max_length} characters")]
    return []


def _is_calendar_date(value: Any) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


# -- entity validators --------------------------------------------------------


def validate_expense_input(
    data: ExpenseInput, policy: BudgetPolicy = DEFAULT_POLICY
) -> list[FieldError]:
    errors: list[FieldError] = []
    if data.category_id is None:
        errors.append(FieldError("category_id", "Category is required"))
    errors.extend(validate_amount(data.amount, policy))
    if not _is_calendar_date(data.date):
        errors.append(FieldError("date", "Date is required"))
    errors.extend(
        validate_text(data.description, "description", policy.description_max_length, required=True)
    )
    if data.payment_method is not None and not isinstance(data.payment_method, PaymentMethod):
        errors.append(FieldError("payment_method", "Unknown payment method"))
    errors.extend(validate_text(data.notes, "notes", policy.notes_max_length, required=False))
    errors.extend(
        validate_text(
            data.reference_id, "reference_id", policy.reference_id_max_length, required=False
        )
    )
    return errors


def validate_budget_input(
    data: BudgetInput, policy: BudgetPolicy = DEFAULT_POLICY
) -> list[FieldError]:
    errors: list[FieldError] = []
    if data.category_id is None:
        errors.append(FieldError("category_id", "Category is required"))
    if not isinstance(data.period, BudgetPeriod):
        errors.append(FieldError("period", "Unknown budget period"))
    errors.extend(validate_amount(data.amount, policy))
    if not isinstance(data.rollover_rule, RolloverRule):
        errors.append(FieldError("rollover_rule", "Unknown rollover rule"))

    start_ok = _is_calendar_date(data.start_date)
    end_ok = _is_calendar_date(data.end_date)
    if not start_ok:
        errors.append(FieldError("start_date", "Start date is required"))
    if not end_ok:
        errors.append(FieldError("end_date", "End date is required"))
    if start_ok and end_ok and data.end_date <= data.start_date:
        errors.append(FieldError("end_date", "End date must be after start date"))

    for toggle in ("alert_at_80", "alert_at_100"):
        if not isinstance(getattr(data, toggle), bool):
            errors.append(FieldError(toggle, "Must be true or false"))
    return errors


def validate_user_input(
    data: UserInput, policy: BudgetPolicy = DEFAULT_POLICY
) -> list[FieldError]:
    errors: list[FieldError] = []
    if not isinstance(data.email, str) or not _EMAIL_RE.match(data.email.strip()):
        errors.append(FieldError("email", "Invalid email address"))
    errors.extend(validate_text(data.name, "name", policy.user_name_max_length, required=True))
    if not isinstance(data.role, UserRole):
        errors.append(FieldError("role", "Unknown role"))
    if not isinstance(data.is_active, bool):
        errors.append(FieldError("is_active", "Must be true or false"))
    return errors


def validate_category_input(
    data: CategoryInput, policy: BudgetPolicy = DEFAULT_POLICY
) -> list[FieldError]:
    errors: list[FieldError] = []
    errors.extend(
        validate_text(data.name, "name", policy.category_name_max_length, required=True)
    )
    if not isinstance(data.description, str):
        errors.append(FieldError("description", "Must be text"))
    if not isinstance(data.color, str) or not _HEX_COLOR_RE.match(data.color):
        errors.append(FieldError("color", "Color must be a hex value like #1a2b3c"))
    if not isinstance(data.icon, str) or not data.icon.strip():
        errors.append(FieldError("icon", "Icon is required"))
    return errors
