"""
Abstract Storage Interface

DESIGN DECISION: The transaction store is an external collaborator.
The engine only needs a handful of operations from it, so we define an
abstract interface instead of binding to any particular database. This
allows us to:
1. Back the app with a hosted document database in production
2. Use in-memory storage for tests and local runs
3. Keep aggregation and insights decoupled from storage

Fetches return RAW mappings, exactly as stored. Coercion into models is
the normalization layer's job, so malformed records reach it untouched.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from cashtrack.models.audit import AuditEvent
from cashtrack.models.finance import CategoryType


RawRecord = dict[str, Any]


class FinanceStoreInterface(ABC):
    """
    Abstract interface for the per-user finance store.

    Every fetch returns the user's records ordered by timestamp,
    newest first.
    """

    @abstractmethod
    async def fetch_income(self) -> list[RawRecord]:
        """All income records, newest first."""
        pass

    @abstractmethod
    async def fetch_expenses(self) -> list[RawRecord]:
        """All expense records, newest first."""
        pass

    @abstractmethod
    async def fetch_savings(self) -> list[RawRecord]:
        """The savings history, newest first."""
        pass

    @abstractmethod
    async def fetch_savings_goals(self) -> list[RawRecord]:
        """All savings goals that have not been closed."""
        pass

    @abstractmethod
    async def fetch_categories(self, category_type: Optional[CategoryType] = None) -> list[RawRecord]:
        """
        User-defined categories.

        Args:
            category_type: Only categories of this type; all when None

        Returns:
            Category records, newest first
        """
        pass

    @abstractmethod
    async def get_goal(self, goal_id: str) -> Optional[RawRecord]:
        """
        Retrieve one savings goal.

        Args:
            goal_id: The goal's identifier

        Returns:
            The raw goal if found, None otherwise
        """
        pass

    @abstractmethod
    async def add_goal(self, goal: RawRecord) -> str:
        """
        Store a new savings goal.

        Args:
            goal: Goal fields in store naming

        Returns:
            The id of the stored goal
        """
        pass

    @abstractmethod
    async def update_goal(self, goal_id: str, fields: RawRecord) -> bool:
        """
        Merge fields into an existing goal.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        pass

    @abstractmethod
    async def delete_goal(self, goal_id: str) -> bool:
        """
        Delete a savings goal.

        Returns:
            True if a goal was deleted
        """
        pass

    @abstractmethod
    async def add_income(self, income: RawRecord) -> str:
        """Store a new income record. Returns its id."""
        pass

    @abstractmethod
    async def add_expense(self, expense: RawRecord) -> str:
        """Store a new expense record. Returns its id."""
        pass

    @abstractmethod
    async def reset(self) -> None:
        """
        Delete all income, expenses, savings and savings goals.

        Categories are kept.
        """
        pass

    @abstractmethod
    async def add_saving(self, saving: RawRecord) -> str:
        """
        Append an entry to the savings history.

        Returns:
            The id of the stored entry
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
