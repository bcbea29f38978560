"""
CategoryService -- shared expense categories.

Every role can read active categories; only admins create, edit or
retire them.  Names are unique among active categories, compared
case-insensitively.  Seeded (``is_default``) categories can be edited but
never retired, and retiring is a soft delete so existing expenses keep a
resolvable category.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any
from uuid import UUID, uuid4

from budget_kernel.domain.clock import Clock
from budget_kernel.domain.dtos import ActorContext, CategoryInfo, CategoryInput, EntityType
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import BudgetPolicy
from budget_kernel.domain.validation import raise_if_invalid, validate_category_input
from budget_kernel.exceptions import (
    CategoryNotFoundError,
    DefaultCategoryProtectedError,
    DuplicateCategoryError,
)
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.services.audit_service import AuditService
from budget_kernel.services.base import BaseService, bound_operation
from budget_kernel.storage.interface import Collection, StorageAdapter

logger = get_logger("services.category")

EDITABLE_FIELDS: frozenset[str] = frozenset({"name", "description", "color", "icon"})


class CategoryService(BaseService):
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

    def get_categories(self, context: ActorContext) -> list[CategoryInfo]:
        """Active categories sorted by name (case-insensitive)."""
        categories = self.storage.query(Collection.CATEGORIES, lambda c: c.is_active)
        categories.sort(key=lambda c: (c.name.lower(), str(c.id)))
        return categories

    def get_category(self, category_id: UUID, context: ActorContext) -> CategoryInfo | None:
        return self.storage.get(Collection.CATEGORIES, category_id)

    @bound_operation(EntityType.CATEGORY)
    def create_category(self, data: CategoryInput, context: ActorContext) -> CategoryInfo:
        self._require(
            self.permissions.can_manage_categories(context.role), "create", "category", context
        )
        raise_if_invalid("category", validate_category_input(data, self.policy))
        name = data.name.strip()
        self._check_unique_name(name)

        category = self.storage.create(
            Collection.CATEGORIES,
            CategoryInfo(
                id=uuid4(),
                name=name,
                description=data.description,
                color=data.color,
                icon=data.icon,
                is_default=False,
                is_active=True,
                created_by=context.user_id,
                created_at=self.clock.now(),
            ),
        )
        with LogContext.bind(entity_id=str(category.id)):
            logger.info("category_created", extra={"category_name": category.name})
            self.audit.log_create(EntityType.CATEGORY, category, context)
        return category

    @bound_operation(EntityType.CATEGORY)
    def update_category(
        self, category_id: UUID, changes: Mapping[str, Any], context: ActorContext
    ) -> CategoryInfo:
        self._require(
            self.permissions.can_manage_categories(context.role),
            "edit",
            "category",
            context,
            category_id,
        )
        self._check_editable("category", changes, EDITABLE_FIELDS)

        existing = self.storage.get(Collection.CATEGORIES, category_id)
        if existing is None:
            raise CategoryNotFoundError(str(category_id))

        merged = replace(
            CategoryInput(
                name=existing.name,
                description=existing.description,
                color=existing.color,
                icon=existing.icon,
            ),
            **changes,
        )
        raise_if_invalid("category", validate_category_input(merged, self.policy))

        updates = dict(changes)
        if "name" in updates:
            updates["name"] = merged.name.strip()
            self._check_unique_name(updates["name"], exclude_id=category_id)

        updated = self.storage.update(Collection.CATEGORIES, category_id, updates)
        logger.info(
            "category_updated",
            extra={"category_id": str(category_id), "fields": sorted(changes)},
        )
        self.audit.log_update(EntityType.CATEGORY, existing, updated, context)
        return updated

    @bound_operation(EntityType.CATEGORY)
    def delete_category(self, category_id: UUID, context: ActorContext) -> CategoryInfo:
        """
        Retire a category (``is_active=False``).

        Raises:
            DefaultCategoryProtectedError: The category is one of the
                seeded defaults.
        """
        self._require(
            self.permissions.can_manage_categories(context.role),
            "delete",
            "category",
            context,
            category_id,
        )
        existing = self.storage.get(Collection.CATEGORIES, category_id)
        if existing is None:
            raise CategoryNotFoundError(str(category_id))
        if existing.is_default:
            raise DefaultCategoryProtectedError(str(category_id))

        retired = self.storage.update(Collection.CATEGORIES, category_id, {"is_active": False})
        logger.info("category_deactivated", extra={"category_id": str(category_id)})
        self.audit.log_delete(EntityType.CATEGORY, existing, context)
        return retired

    def _check_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        folded = name.casefold()
        clash = self.storage.query(
            Collection.CATEGORIES,
            lambda c: c.is_active and c.id != exclude_id and c.name.casefold() == folded,
        )
        if clash:
            raise DuplicateCategoryError(name)
