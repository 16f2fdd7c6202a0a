"""
In-Memory Storage Implementation

Reference adapter for the storage interfaces. Used by the test suite and
for local runs without a hosted database.

Records are kept as raw dicts, exactly like a document store would hand
them back: nothing is validated on the way in, so malformed records can be
seeded to exercise the normalization layer.
"""

import copy
from datetime import datetime
from typing import Iterable, Optional
from uuid import uuid4

from cashtrack.models.audit import AuditEvent
from cashtrack.models.finance import CategoryType
from cashtrack.normalization import parse_timestamp, utc_now
from cashtrack.services.storage.interface import (
    AuditStorageInterface,
    FinanceStoreInterface,
    NotFoundError,
    RawRecord,
)


def _newest_first(records: Iterable[RawRecord]) -> list[RawRecord]:
    """Copies of the records, newest first; unreadable timestamps go last."""
    def key(record: RawRecord) -> tuple[bool, datetime]:
        ts = parse_timestamp(record.get("timestamp")) if isinstance(record, dict) else None
        return (ts is not None, ts or datetime.min)

    return [copy.deepcopy(record) for record in sorted(records, key=key, reverse=True)]


def _stamped(record: RawRecord) -> RawRecord:
    stored = dict(record)
    stored.setdefault("id", uuid4().hex)
    stored.setdefault("timestamp", utc_now())
    return stored


class InMemoryFinanceStore(FinanceStoreInterface):
    """
    Finance store backed by plain lists of dicts.

    Seed collections may contain anything, including non-dict entries;
    they are returned as-is (copied) for the normalizer to deal with.
    """

    def __init__(
        self,
        income: Optional[list] = None,
        expenses: Optional[list] = None,
        savings: Optional[list] = None,
        savings_goals: Optional[list] = None,
        categories: Optional[list] = None,
    ):
        self._income: list = list(income or [])
        self._expenses: list = list(expenses or [])
        self._savings: list = list(savings or [])
        self._goals: list = list(savings_goals or [])
        self._categories: list = list(categories or [])

    # -------------------------------------------------------------------------
    # Fetches
    # -------------------------------------------------------------------------

    async def fetch_income(self) -> list[RawRecord]:
        return _newest_first(self._income)

    async def fetch_expenses(self) -> list[RawRecord]:
        return _newest_first(self._expenses)

    async def fetch_savings(self) -> list[RawRecord]:
        return _newest_first(self._savings)

    async def fetch_savings_goals(self) -> list[RawRecord]:
        return _newest_first(self._goals)

    async def fetch_categories(self, category_type: Optional[CategoryType] = None) -> list[RawRecord]:
        categories = self._categories
        if category_type is not None:
            wanted = CategoryType(category_type).value
            categories = [
                c for c in categories
                if isinstance(c, dict) and str(c.get("type", "")).lower() == wanted
            ]
        return _newest_first(categories)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def add_income(self, income: RawRecord) -> str:
        stored = _stamped(income)
        self._income.append(stored)
        return stored["id"]

    async def add_expense(self, expense: RawRecord) -> str:
        stored = _stamped(expense)
        self._expenses.append(stored)
        return stored["id"]

    async def add_category(self, category: RawRecord) -> str:
        stored = _stamped(category)
        self._categories.append(stored)
        return stored["id"]

    async def add_saving(self, saving: RawRecord) -> str:
        stored = _stamped(saving)
        self._savings.append(stored)
        return stored["id"]

    async def add_goal(self, goal: RawRecord) -> str:
        stored = _stamped(goal)
        self._goals.append(stored)
        return stored["id"]

    def _find_goal(self, goal_id: str) -> Optional[dict]:
        for goal in self._goals:
            if isinstance(goal, dict) and goal.get("id") == goal_id:
                return goal
        return None

    async def get_goal(self, goal_id: str) -> Optional[RawRecord]:
        goal = self._find_goal(goal_id)
        return copy.deepcopy(goal) if goal is not None else None

    async def update_goal(self, goal_id: str, fields: RawRecord) -> bool:
        goal = self._find_goal(goal_id)
        if goal is None:
            raise NotFoundError(f"Savings goal not found: {goal_id}")
        goal.update({k: v for k, v in fields.items() if k != "id"})
        return True

    async def delete_goal(self, goal_id: str) -> bool:
        goal = self._find_goal(goal_id)
        if goal is None:
            return False
        self._goals.remove(goal)
        return True

    async def reset(self) -> None:
        self._income = []
        self._expenses = []
        self._savings = []
        self._goals = []


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

    @property
    def events(self) -> list[AuditEvent]:
        """Every event in append order."""
        return list(self._events)
