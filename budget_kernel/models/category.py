"""
Module: budget_kernel.models.category
Responsibility: ORM persistence for expense categories.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Default (seeded) categories are never deleted (CategoryService).
    - Deletion is a soft delete: ``is_active=False``.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Seeded categories have no creator
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Category {self.name}>"
