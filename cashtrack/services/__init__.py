"""Services package."""

from cashtrack.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    FinanceStoreInterface,
    InMemoryAuditStorage,
    InMemoryFinanceStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "FinanceStoreInterface",
    "InMemoryAuditStorage",
    "InMemoryFinanceStore",
    "NotFoundError",
    "StorageError",
]
