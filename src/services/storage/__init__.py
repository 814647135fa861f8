"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for data
storage. Remote backends implement the same interfaces.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
    SubscriptionStorageInterface,
)
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySubscriptionStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SubscriptionStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemorySubscriptionStorage",
]
