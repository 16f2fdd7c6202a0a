"""
Data Models Package

This package contains all Pydantic models used by CashTrack.
Everything the engine consumes or produces conforms to these schemas.
"""

from cashtrack.models.finance import (
    AggregateSnapshot,
    BackupContents,
    Category,
    CategorySlice,
    CategorySummary,
    CategoryType,
    Currency,
    DashboardView,
    DurationType,
    Expense,
    FeasibilityCheck,
    GoalProgress,
    GoalStatus,
    Income,
    MonthlyBucket,
    RecentTransaction,
    Saving,
    SavingsGoal,
    TransactionKind,
    TrendPoint,
)
from cashtrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "AggregateSnapshot",
    "BackupContents",
    "Category",
    "CategorySlice",
    "CategorySummary",
    "CategoryType",
    "Currency",
    "DashboardView",
    "DurationType",
    "Expense",
    "FeasibilityCheck",
    "GoalProgress",
    "GoalStatus",
    "Income",
    "MonthlyBucket",
    "RecentTransaction",
    "Saving",
    "SavingsGoal",
    "TransactionKind",
    "TrendPoint",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
