"""
Module: budget_kernel.models.budget
Responsibility: ORM persistence for budgets.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ``end_date > start_date`` (validated by BudgetService).
    - At most one active budget per (user, category, period) covers any day
      (BudgetService overlap check; not a database constraint because the
      rule spans date ranges).
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import Base, UUIDString


class Budget(Base):
    __tablename__ = "budgets"

    __table_args__ = (
        Index("idx_budget_owner_category", "user_id", "category_id", "period"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("users.id"), nullable=False)
    category_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("categories.id"), nullable=False
    )

    # BudgetPeriod value: monthly / annual
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(nullable=False)
    # RolloverRule value
    rollover_rule: Mapped[str] = mapped_column(String(20), nullable=False)

    start_date: Mapped[date] = mapped_column(nullable=False)
    end_date: Mapped[date] = mapped_column(nullable=False)

    alert_at_80: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    alert_at_100: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<Budget {self.period} {self.start_date}..{self.end_date} amount={self.amount}>"
