"""
BaseService -- abstract base for all access services.

Responsibility:
    Holds the collaborators every access service needs (storage adapter,
    clock, permission checker, policy) and the shared guard that turns a
    denied permission predicate into a logged ``UnauthorizedError``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Services never commit: the storage adapter flushes inside the
      caller's transaction and the caller owns commit/rollback.
    - Time is read only through the injected Clock.
    - Every denial is raised, never converted into an empty result.
"""

from __future__ import annotations

import functools
from abc import ABC
from collections.abc import Callable, Mapping
from typing import Any
from uuid import UUID, uuid4

from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.dtos import ActorContext, CategoryInfo, EntityType
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy
from budget_kernel.exceptions import InvalidCategoryError, UnauthorizedError, ValidationError
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.storage.interface import Collection, StorageAdapter

logger = get_logger("services.base")


def bound_operation(entity_type: EntityType) -> Callable:
    """
    Decorator that binds LogContext fields for one service operation.

    Every log line emitted during the call, audit writes included, carries
    a fresh ``correlation_id``, the caller's ``actor_id``/``actor_role``
    (from the ``context`` argument, when there is one) and
    ``entity_type``.  ``entity_id`` is bound when the first positional
    argument is the target record's UUID; create operations bind it
    themselves once the id exists.

    Args:
        entity_type: Kind of record the operation acts on.

    Returns:
        Decorator function.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            context = kwargs.get("context")
            if context is None:
                context = next((a for a in args if isinstance(a, ActorContext)), None)
            target = args[0] if args and isinstance(args[0], UUID) else None

            with LogContext.bind(
                correlation_id=str(uuid4()),
                actor_id=str(context.user_id) if context else None,
                actor_role=context.role.value if context else None,
                entity_type=entity_type.value,
                entity_id=str(target) if target else None,
            ):
                return func(self, *args, **kwargs)

        return wrapper

    return decorator


class BaseService(ABC):
    """
    Contract:
        Collaborators are passed in at construction; nothing is looked up
        from process-wide singletons.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(
        self,
        storage: StorageAdapter,
        clock: Clock | None = None,
        permissions: PermissionChecker | None = None,
        policy: BudgetPolicy | None = None,
    ):
        self.storage = storage
        self.clock = clock or SystemClock()
        self.permissions = permissions or PermissionChecker()
        self.policy = policy or DEFAULT_POLICY

    @staticmethod
    def _check_editable(
        entity_type: str, changes: Mapping[str, Any], editable: frozenset[str]
    ) -> None:
        """Reject updates naming fields callers may not change."""
        unknown = sorted(set(changes) - editable)
        if unknown:
            raise ValidationError(
                entity_type,
                [{"field": name, "message": "Field cannot be updated"} for name in unknown],
            )

    def _require_active_category(self, category_id: UUID) -> CategoryInfo:
        """The referenced category, which must exist and be active."""
        category = self.storage.get(Collection.CATEGORIES, category_id)
        if category is None:
            raise InvalidCategoryError(str(category_id), reason="category does not exist")
        if not category.is_active:
            raise InvalidCategoryError(str(category_id), reason="category is inactive")
        return category

    def _require(
        self,
        allowed: bool,
        action: str,
        resource: str,
        context: ActorContext,
        resource_id: UUID | None = None,
    ) -> None:
        """Raise ``UnauthorizedError`` (and log the denial) unless ``allowed``."""
        if allowed:
            return
        logger.warning(
            "permission_denied",
            extra={
                "action": action,
                "resource": resource,
                "resource_id": str(resource_id) if resource_id else None,
                "actor_id": str(context.user_id),
                "actor_role": context.role.value,
            },
        )
        raise UnauthorizedError(
            action=action,
            resource=resource,
            actor_id=str(context.user_id),
            resource_id=str(resource_id) if resource_id else None,
        )
