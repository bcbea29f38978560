"""
UserService -- account records and roles.

Responsibility:
    Self-registration plus the admin-only user management surface
    (list, create, update, disable).  Credentials are handled outside the
    kernel; this service owns identity, role and the active flag only.

Invariants enforced:
    - Emails are unique, compared case-insensitively.
    - Self-registration always yields role ``user``.
    - Deleting a user is a soft disable; expenses, budgets and audit
      entries keep a resolvable owner.
    - An admin cannot delete their own account.

Failure modes:
    - UnauthorizedError, UserNotFoundError, ValidationError,
      DuplicateEmailError, SelfDeletionError.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any
from uuid import UUID, uuid4

from budget_kernel.domain.clock import Clock
from budget_kernel.domain.dtos import ActorContext, EntityType, UserInfo, UserInput, UserRole
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import BudgetPolicy
from budget_kernel.domain.validation import raise_if_invalid, validate_user_input
from budget_kernel.exceptions import DuplicateEmailError, SelfDeletionError, UserNotFoundError
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.services.audit_service import AuditService
from budget_kernel.services.base import BaseService, bound_operation
from budget_kernel.storage.interface import Collection, StorageAdapter

logger = get_logger("services.user")

EDITABLE_FIELDS: frozenset[str] = frozenset({"email", "name", "role", "is_active"})


class UserService(BaseService):
    def __init__(
        self,
        storage: StorageAdapter,
        clock: Clock | None = None,
        permissions: PermissionChecker | None = None,
        policy: BudgetPolicy | None = None,
        audit: AuditService | None = None,
    ):
        super().__init__(storage, clock, permissions, policy)
        self.audit = audit or AuditService(storage, self.clock, self.permissions, self.policy)

    @bound_operation(EntityType.USER)
    def register(self, data: UserInput) -> UserInfo:
        """Create a ``user``-role account for an unauthenticated caller."""
        user = self._insert(replace(data, role=UserRole.USER, is_active=True))
        with LogContext.bind(
            entity_id=str(user.id), actor_id=str(user.id), actor_role=user.role.value
        ):
            logger.info("user_registered")
            self.audit.log_create(EntityType.USER, user, user.actor)
        return user

    def list_users(self, context: ActorContext) -> list[UserInfo]:
        self._require(self.permissions.can_manage_users(context.role), "list", "user", context)
        return self.storage.get_all(Collection.USERS)

    def get_user(self, user_id: UUID, context: ActorContext) -> UserInfo | None:
        self._require(
            self.permissions.can_view_user(context.role, user_id, context.user_id),
            "view",
            "user",
            context,
            user_id,
        )
        return self.storage.get(Collection.USERS, user_id)

    @bound_operation(EntityType.USER)
    def create_user(self, data: UserInput, context: ActorContext) -> UserInfo:
        self._require(self.permissions.can_manage_users(context.role), "create", "user", context)
        user = self._insert(data)
        with LogContext.bind(entity_id=str(user.id)):
            logger.info("user_created", extra={"role": user.role.value})
            self.audit.log_create(EntityType.USER, user, context)
        return user

    @bound_operation(EntityType.USER)
    def update_user(
        self, user_id: UUID, changes: Mapping[str, Any], context: ActorContext
    ) -> UserInfo:
        self._require(
            self.permissions.can_manage_users(context.role), "edit", "user", context, user_id
        )
        self._check_editable("user", changes, EDITABLE_FIELDS)

        existing = self.storage.get(Collection.USERS, user_id)
        if existing is None:
            raise UserNotFoundError(str(user_id))

        merged = replace(
            UserInput(
                email=existing.email,
                name=existing.name,
                role=existing.role,
                is_active=existing.is_active,
            ),
            **changes,
        )
        raise_if_invalid("user", validate_user_input(merged, self.policy))

        updates = dict(changes)
        if "email" in updates:
            updates["email"] = merged.email.strip()
            self._check_unique_email(updates["email"], exclude_id=user_id)
        if "name" in updates:
            updates["name"] = merged.name.strip()
        updates["updated_at"] = self.clock.now()

        updated = self.storage.update(Collection.USERS, user_id, updates)
        logger.info("user_updated", extra={"user_id": str(user_id), "fields": sorted(changes)})
        self.audit.log_update(EntityType.USER, existing, updated, context)
        return updated

    @bound_operation(EntityType.USER)
    def delete_user(self, user_id: UUID, context: ActorContext) -> UserInfo:
        """Disable an account.  Admins cannot disable themselves."""
        self._require(
            self.permissions.can_manage_users(context.role), "delete", "user", context, user_id
        )
        if user_id == context.user_id:
            raise SelfDeletionError(str(user_id))

        existing = self.storage.get(Collection.USERS, user_id)
        if existing is None:
            raise UserNotFoundError(str(user_id))

        disabled = self.storage.update(
            Collection.USERS, user_id, {"is_active": False, "updated_at": self.clock.now()}
        )
        logger.info("user_disabled", extra={"user_id": str(user_id)})
        self.audit.log_delete(EntityType.USER, existing, context)
        return disabled

    def _insert(self, data: UserInput) -> UserInfo:
        raise_if_invalid("user", validate_user_input(data, self.policy))
        email = data.email.strip()
        self._check_unique_email(email)

        now = self.clock.now()
        return self.storage.create(
            Collection.USERS,
            UserInfo(
                id=uuid4(),
                email=email,
                name=data.name.strip(),
                role=data.role,
                is_active=data.is_active,
                created_at=now,
                updated_at=now,
            ),
        )

    def _check_unique_email(self, email: str, exclude_id: UUID | None = None) -> None:
        folded = email.casefold()
        clash = self.storage.query(
            Collection.USERS, lambda u: u.id != exclude_id and u.email.casefold() == folded
        )
        if clash:
            raise DuplicateEmailError(email)
