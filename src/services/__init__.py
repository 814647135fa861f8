"""Services package."""

from src.services.export import CSV_HEADERS, export_filename, to_csv
from src.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemorySubscriptionStorage,
    NotFoundError,
    StorageError,
    SubscriptionStorageInterface,
)

__all__ = [
    # Export
    "CSV_HEADERS",
    "export_filename",
    "to_csv",
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemorySubscriptionStorage",
    "NotFoundError",
    "StorageError",
    "SubscriptionStorageInterface",
]
