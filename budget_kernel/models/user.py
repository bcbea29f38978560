"""
Module: budget_kernel.models.user
Responsibility: ORM persistence for users (identity and role).
Architecture position: Kernel > Models.  May import from db/base.py only.

Users are never hard-deleted once referenced; ``is_active=False`` is the
soft-disable marker.  Credentials live outside this table.
"""

from datetime import datetime

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import Base


class User(Base):
    __tablename__ = "users"

    __table_args__ = (Index("idx_user_email", "email"),)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # UserRole value: admin / accountant / user
    role: Mapped[str] = mapped_column(String(20), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
