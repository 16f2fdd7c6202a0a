"""
Storage Services Package

Provides abstract interfaces and the in-memory implementation for the
finance store and the audit log. A hosted database adapter plugs in by
implementing the same interfaces.
"""

from cashtrack.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    FinanceStoreInterface,
    NotFoundError,
    RawRecord,
    StorageError,
)
from cashtrack.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryFinanceStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "FinanceStoreInterface",
    "RawRecord",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryFinanceStore",
]
