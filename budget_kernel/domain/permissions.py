"""
PermissionChecker -- role/ownership predicates for every guarded operation.

Responsibility:
    Maps ``(actor role, resource owner id, actor id)`` to allow/deny for
    each action on expenses, budgets, categories, users and audit logs, and
    narrows collections to what an actor may see.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Injected into every
    access service; the services translate ``False`` into
    ``UnauthorizedError``.

Invariants enforced:
    - Every predicate is total over ``UserRole``: a ``match`` with one arm
      per role, so a new role cannot fall through to an unintended default.
    - No predicate raises for a valid role and none has side effects.

Rules (kept deliberately asymmetric):
    ===================  ========  ==========  ===========
    action               admin     accountant  user
    ===================  ========  ==========  ===========
    view expense         any       any         own
    edit expense         any       any         own
    delete expense       any       own         own
    create expense for   any       self        self
    view budget          any       any         own
    manage budget        any       own         own
    manage categories    yes       no          no
    manage users         yes       no          no
    view audit logs      yes       yes         no
    ===================  ========  ==========  ===========
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar
from uuid import UUID

from budget_kernel.domain.dtos import ActorContext, UserRole


class _Owned(Protocol):
    user_id: UUID


OwnedT = TypeVar("OwnedT", bound=_Owned)


class PermissionChecker:
    """
    Stateless permission predicates.

    Constructed once and passed to the services that need it, so tests can
    substitute a stricter or looser checker.
    """

    def is_admin(self, role: UserRole) -> bool:
        match role:
            case UserRole.ADMIN:
                return True
            case UserRole.ACCOUNTANT | UserRole.USER:
                return False
            case _:
                raise ValueError(f"Unknown role: {role!r}")

    def is_accountant_or_admin(self, role: UserRole) -> bool:
        match role:
            case UserRole.ADMIN | UserRole.ACCOUNTANT:
                return True
            case UserRole.USER:
                return False
            case _:
                raise ValueError(f"Unknown role: {role!r}")

    def can_view_all_data(self, role: UserRole) -> bool:
        return self.is_accountant_or_admin(role)

    # -- expenses ------------------------------------------------------------

    def can_view_expense(self, role: UserRole, owner_id: UUID, actor_id: UUID) -> bool:
        return self.can_view_all_data(role) or owner_id == actor_id

    def can_edit_expense(self, role: UserRole, owner_id: UUID, actor_id: UUID) -> bool:
        # Accountants may correct anyone's expense but get no delete rights.
        return self.is_accountant_or_admin(role) or owner_id == actor_id

    def can_delete_expense(self, role: UserRole, owner_id: UUID, actor_id: UUID) -> bool:
        return self.is_admin(role) or owner_id == actor_id

    def can_create_expense_for(self, role: UserRole, owner_id: UUID, actor_id: UUID) -> bool:
        return self.is_admin(role) or owner_id == actor_id

    # -- budgets -------------------------------------------------------------

    def can_view_budget(self, role: UserRole, owner_id: UUID, actor_id: UUID) -> bool:
        return self.can_view_all_data(role) or owner_id == actor_id

    def can_manage_budget(self, role: UserRole, owner_id: UUID, actor_id: UUID) -> bool:
        return self.is_admin(role) or owner_id == actor_id

    # -- administration ------------------------------------------------------

    def can_manage_categories(self, role: UserRole) -> bool:
        return self.is_admin(role)

    def can_manage_users(self, role: UserRole) -> bool:
        return self.is_admin(role)

    def can_view_user(self, role: UserRole, user_id: UUID, actor_id: UUID) -> bool:
        return self.can_manage_users(role) or user_id == actor_id

    def can_view_audit_logs(self, role: UserRole) -> bool:
        return self.is_accountant_or_admin(role)

    def can_export_reports(self, role: UserRole) -> bool:
        """Every role may export; the export is scoped by ``filter_by_permissions``."""
        match role:
            case UserRole.ADMIN | UserRole.ACCOUNTANT | UserRole.USER:
                return True
            case _:
                raise ValueError(f"Unknown role: {role!r}")

    # -- collections ---------------------------------------------------------

    def filter_by_permissions(
        self, items: Iterable[OwnedT], actor: ActorContext
    ) -> list[OwnedT]:
        """
        All items for roles that can view all data (same order, unchanged);
        otherwise only the items owned by the actor.
        """
        items = list(items)
        if self.can_view_all_data(actor.role):
            return items
        return [item for item in items if item.user_id == actor.user_id]
