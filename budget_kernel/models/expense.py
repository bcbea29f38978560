"""
Module: budget_kernel.models.expense
Responsibility: ORM persistence for expenses.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ``amount`` is integer cents (BigInteger), validated positive upstream.
    - ``date`` is the economic date; ``created_at`` is the record time.
    - ``created_by`` may differ from ``user_id`` (admin on behalf of a user).
"""

from datetime import date as date_type, datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import Base, UUIDString


class Expense(Base):
    __tablename__ = "expenses"

    __table_args__ = (
        Index("idx_expense_user_date", "user_id", "date"),
        Index("idx_expense_category", "category_id"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("users.id"), nullable=False)
    category_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("categories.id"), nullable=False
    )

    amount: Mapped[int] = mapped_column(nullable=False)
    date: Mapped[date_type] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)

    # PaymentMethod value, or NULL when not specified
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    reference_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_by: Mapped[UUID] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_by: Mapped[UUID | None] = mapped_column(nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Expense {self.amount} on {self.date} ({self.description})>"
