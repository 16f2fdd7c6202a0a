"""
Core Data Models for CashTrack

These models define the canonical shape of every record the engine
works on, and of every value it derives.

Records arrive from the store as loosely-typed mappings. They are turned
into these models by the normalization layer, which guarantees:
1. Amounts are finite floats (never NaN or Infinity)
2. Timestamps are naive UTC datetimes, or None when missing
3. Enumerated fields hold a known value

DESIGN DECISION: Transactions reference categories by NAME, not by id.
Renaming or deleting a category leaves historical transactions untouched,
so orphaned category names are expected and must be handled gracefully.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid4().hex


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """The three transaction variants."""
    INCOME = "income"
    EXPENSE = "expense"
    SAVING = "saving"


class CategoryType(str, Enum):
    """Categories exist for income and expenses only."""
    INCOME = "income"
    EXPENSE = "expense"


class DurationType(str, Enum):
    """How a savings goal is paced."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalStatus(str, Enum):
    """
    Savings goal lifecycle.

    ONGOING -> COMPLETED happens lazily, when the goal is re-read after
    its deadline. ARCHIVED and NOT_ACHIEVED are terminal and are set when
    the user closes the goal (which also removes it from the store).
    """
    ONGOING = "ongoing"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    NOT_ACHIEVED = "not_achieved"


class Currency(str, Enum):
    """Currencies with a known display symbol."""
    INR = "INR"
    USD = "USD"
    EUR = "EUR"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Income(BaseModel):
    """A single income record."""
    model_config = ConfigDict(str_strip_whitespace=True)

    kind: ClassVar[TransactionKind] = TransactionKind.INCOME

    id: str = Field(default_factory=_new_id)
    amount: float = 0.0
    category: Optional[str] = Field(
        default=None,
        description="Category name (loose link to a Category)"
    )
    timestamp: Optional[datetime] = None


class Expense(BaseModel):
    """A single expense record. Amounts are stored positive."""
    model_config = ConfigDict(str_strip_whitespace=True)

    kind: ClassVar[TransactionKind] = TransactionKind.EXPENSE

    id: str = Field(default_factory=_new_id)
    amount: float = 0.0
    category: Optional[str] = None
    description: str = ""
    timestamp: Optional[datetime] = None


class Saving(BaseModel):
    """A single entry in the savings history."""
    model_config = ConfigDict(str_strip_whitespace=True)

    kind: ClassVar[TransactionKind] = TransactionKind.SAVING

    id: str = Field(default_factory=_new_id)
    amount: float = 0.0
    description: str = ""
    timestamp: Optional[datetime] = None


class Category(BaseModel):
    """A user-defined label for income or expense records."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    type: CategoryType
    name: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None


class SavingsGoal(BaseModel):
    """
    A target amount with a deadline.

    target_amount is expected to be positive but this is not enforced:
    progress math treats a zero target as "no progress" instead of failing.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    name: str = ""
    target_amount: float = 0.0
    saved_amount: float = 0.0
    duration_type: DurationType = DurationType.MONTHLY
    deadline: Optional[datetime] = None
    status: GoalStatus = GoalStatus.ONGOING
    timestamp: Optional[datetime] = None


# =============================================================================
# DERIVED VALUES
# =============================================================================

class MonthlyBucket(BaseModel):
    """Income and expense sums for one calendar month (YYYY-MM)."""

    month_key: str
    income: float = 0.0
    expenses: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expenses


class RecentTransaction(BaseModel):
    """
    An entry in the mixed recent-activity list.

    Expense amounts are sign-negated so the list can be rendered as a
    single signed ledger.
    """

    id: str
    kind: TransactionKind
    category: Optional[str] = None
    description: str = ""
    amount: float
    timestamp: Optional[datetime] = None


class AggregateSnapshot(BaseModel):
    """
    Every aggregate derived from the current data.

    Recomputed in full on each request. Nothing here is persisted.
    """

    total_income: float = 0.0
    total_expenses: float = 0.0
    total_savings: float = 0.0
    expense_category_totals: dict[str, float] = Field(default_factory=dict)
    monthly_trend: list[MonthlyBucket] = Field(default_factory=list)
    recent_transactions: list[RecentTransaction] = Field(default_factory=list)

    @property
    def remaining_income(self) -> float:
        """Income left after expenses (what a new goal is checked against)."""
        return self.total_income - self.total_expenses


class CategorySlice(BaseModel):
    """One slice of the expense breakdown."""

    name: str
    amount: float


class TrendPoint(BaseModel):
    """One displayed month of the income/expense trend."""

    month_key: str
    label: str = Field(description="Short label, e.g. 03/24")
    income: float
    expenses: float
    net: float


class DashboardView(BaseModel):
    """Display-ready numbers for the dashboard."""

    total_income: float = 0.0
    total_expenses: float = 0.0
    total_savings: float = 0.0
    top_categories: list[CategorySlice] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)
    recent_transactions: list[RecentTransaction] = Field(default_factory=list)
    savings_progress: float = Field(default=0.0, ge=0.0, le=1.0)
    savings_target: float = 0.0


class GoalProgress(BaseModel):
    """How far along a savings goal is."""

    goal_id: str
    progress: float = Field(ge=0.0, le=1.0)
    remaining: float = Field(
        description="Target minus saved; negative once the goal is exceeded"
    )

    @property
    def exceeded(self) -> bool:
        return self.remaining < 0


class FeasibilityCheck(BaseModel):
    """
    Advisory result of checking a new goal against remaining income.

    Never blocks goal creation.
    """

    achievable: bool
    target_amount: float
    remaining_income: float
    message: Optional[str] = None


class CategorySummary(BaseModel):
    """Total and count of the records filed under one category name."""

    name: str
    type: CategoryType
    total: float = 0.0
    transaction_count: int = 0


class BackupContents(BaseModel):
    """Records recovered from a backup payload, already normalized."""

    income: list[Income] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    savings: list[Saving] = Field(default_factory=list)
    savings_goals: list[SavingsGoal] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)
    profile: dict[str, Any] = Field(default_factory=dict)
    backup_date: Optional[datetime] = None
    app_version: Optional[str] = None

    @property
    def record_count(self) -> int:
        return (
            len(self.income)
            + len(self.expenses)
            + len(self.savings)
            + len(self.savings_goals)
        )
