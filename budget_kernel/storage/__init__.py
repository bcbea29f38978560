"""Persistence collaborators: the StorageAdapter contract and its adapters."""

from budget_kernel.storage.interface import Collection, StorageAdapter
from budget_kernel.storage.memory import InMemoryStorage
from budget_kernel.storage.sqlalchemy_storage import SqlAlchemyStorage

__all__ = [
    "Collection",
    "StorageAdapter",
    "InMemoryStorage",
    "SqlAlchemyStorage",
]
