"""
Module: budget_kernel.selectors.base
Responsibility: Abstract base class for the read-only query selectors that
    back reporting.  Selectors read through the storage adapter and hand the
    records to pure domain functions; they never write.
Architecture position: Kernel > Selectors.  May import from storage/ and
    domain/.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: no create, update or delete through the adapter.
    - Results are frozen domain records or computed dataclasses.
    - Every result is scoped to what the actor may see.
"""

from abc import ABC

from budget_kernel.storage.interface import StorageAdapter


class BaseSelector(ABC):
    """
    Contract:
        Selectors accept a StorageAdapter from the caller, perform read-only
        queries, and return DTOs or computed results.

    Non-goals:
        - BaseSelector does NOT define any query methods.
    """

    def __init__(self, storage: StorageAdapter):
        self.storage = storage
