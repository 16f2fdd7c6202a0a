"""Shared fixtures for the CashTrack test suite."""

from datetime import datetime

import pytest

from cashtrack.config import get_settings
from cashtrack.services.storage import InMemoryAuditStorage, InMemoryFinanceStore


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    """No back-off between store fetch attempts."""
    monkeypatch.setenv("CASHTRACK_STORE_FETCH_RETRY_MULTIPLIER", "0")
    monkeypatch.setenv("CASHTRACK_STORE_FETCH_RETRY_MIN_WAIT", "0")
    monkeypatch.setenv("CASHTRACK_STORE_FETCH_RETRY_MAX_WAIT", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now() -> datetime:
    """A fixed Wednesday."""
    return datetime(2024, 3, 20, 12, 0, 0)


@pytest.fixture
def raw_income(now):
    return [
        {"id": "i1", "amount": 5000, "category": "Salary", "timestamp": datetime(2024, 3, 18, 9, 0)},
        {"id": "i2", "amount": "1500", "category": "Freelance", "timestamp": datetime(2024, 3, 5, 9, 0)},
        {"id": "i3", "amount": 4000, "category": "Salary", "timestamp": datetime(2024, 2, 15, 9, 0)},
    ]


@pytest.fixture
def raw_expenses(now):
    return [
        {"id": "e1", "amount": 500, "category": "Food", "description": "Groceries",
         "timestamp": datetime(2024, 3, 19, 18, 0)},
        {"id": "e2", "amount": 100, "category": "Transport", "description": "Bus",
         "timestamp": datetime(2024, 3, 12, 8, 0)},
        {"id": "e3", "amount": 700, "category": "Rent",
         "timestamp": datetime(2024, 2, 1, 8, 0)},
    ]


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def store(raw_income, raw_expenses) -> InMemoryFinanceStore:
    return InMemoryFinanceStore(
        income=raw_income,
        expenses=raw_expenses,
        savings=[{"id": "s1", "amount": 800, "description": "Monthly", "timestamp": datetime(2024, 3, 10)}],
        savings_goals=[{
            "id": "g1",
            "goalName": "Laptop",
            "targetAmount": 60000,
            "savedAmount": 15000,
            "durationType": "monthly",
            "goalDeadline": datetime(2024, 9, 1),
            "status": "ongoing",
            "timestamp": datetime(2024, 3, 1),
        }],
        categories=[
            {"id": "c1", "type": "expense", "name": "Food", "createdAt": datetime(2024, 1, 1)},
            {"id": "c2", "type": "income", "name": "Salary", "createdAt": datetime(2024, 1, 2)},
        ],
    )
