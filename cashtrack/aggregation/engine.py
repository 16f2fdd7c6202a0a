"""
Aggregation Engine

Pure functions from transaction collections to totals, category groupings,
time-bucketed trends and the recent-activity list.

DESIGN DECISION: Aggregation is TOTAL.
Every function is defined for empty or partial input: empty collections
produce zeroed totals and empty sequences, never exceptions. Inputs are
passed through normalization first, so raw store mappings and already
normalized models are both accepted.

DESIGN DECISION: No caching, no incremental updates.
A snapshot is recomputed in full from the current collections on every
request. Personal-finance volumes (thousands of records at most) do not
justify anything smarter.

Records without a timestamp still count toward totals and category
groupings, but are skipped by anything bucketed by time.
"""

import math
from datetime import datetime
from typing import Iterable, Optional, Sequence, Union

from cashtrack.config import DashboardSettings, get_settings
from cashtrack.models.finance import (
    AggregateSnapshot,
    Category,
    CategorySlice,
    CategorySummary,
    CategoryType,
    DashboardView,
    Expense,
    Income,
    MonthlyBucket,
    RecentTransaction,
    Saving,
    TrendPoint,
)
from cashtrack.normalization import (
    normalize_expenses,
    normalize_incomes,
    normalize_savings,
    utc_now,
    validate_number,
)


DEFAULT_CATEGORY = "Other"

Transaction = Union[Income, Expense, Saving]


# =============================================================================
# TOTALS AND GROUPING
# =============================================================================

def total_amount(records: Iterable[Transaction]) -> float:
    """Sum of amounts over a collection."""
    return sum((record.amount for record in records), 0.0)


def category_of(record: Transaction) -> str:
    """Category name of a record, "Other" when absent."""
    return getattr(record, "category", None) or DEFAULT_CATEGORY


def category_totals(records: Iterable[Union[Income, Expense]]) -> dict[str, float]:
    """
    Sum amounts per category name.

    Keys keep first-encountered order.
    """
    totals: dict[str, float] = {}
    for record in records:
        key = category_of(record)
        totals[key] = totals.get(key, 0.0) + record.amount
    return totals


def top_categories(totals: dict[str, float], limit: int = 5) -> list[tuple[str, float]]:
    """
    Largest categories first, truncated to `limit`.

    The sort is stable, so ties keep first-encountered order.
    """
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ordered[:max(0, limit)]


def transactions_by_category(
    records: Iterable[Transaction],
    category: Optional[str],
) -> list[Transaction]:
    """
    Records filed under a category name.

    Categories are linked by name only, so the match is on trimmed,
    case-folded names. Orphaned names on old records still match.
    """
    if not category or not category.strip():
        return []
    wanted = category.strip().casefold()
    return [
        record for record in records
        if (getattr(record, "category", None) or "").strip().casefold() == wanted
    ]


def summarize_categories(
    categories: Sequence[Category],
    income: Sequence[Income],
    expenses: Sequence[Expense],
) -> list[CategorySummary]:
    """Total and count of matching records for each user-defined category."""
    summaries = []
    for category in categories:
        pool = income if category.type == CategoryType.INCOME else expenses
        matches = transactions_by_category(pool, category.name)
        summaries.append(CategorySummary(
            name=category.name,
            type=category.type,
            total=total_amount(matches),
            transaction_count=len(matches),
        ))
    return summaries


# =============================================================================
# TIME BUCKETS
# =============================================================================

def month_key(timestamp: datetime) -> str:
    """Calendar month key, e.g. 2024-03."""
    return f"{timestamp.year:04d}-{timestamp.month:02d}"


def monthly_trend(
    income: Iterable[Income],
    expenses: Iterable[Expense],
) -> list[MonthlyBucket]:
    """
    Income and expense sums per calendar month, oldest first.

    Only months with at least one record exist. Months without activity
    are absent, not zero-filled.
    """
    buckets: dict[str, MonthlyBucket] = {}

    def bucket_for(timestamp: datetime) -> MonthlyBucket:
        key = month_key(timestamp)
        if key not in buckets:
            buckets[key] = MonthlyBucket(month_key=key)
        return buckets[key]

    for record in income:
        if record.timestamp is not None:
            bucket_for(record.timestamp).income += record.amount
    for record in expenses:
        if record.timestamp is not None:
            bucket_for(record.timestamp).expenses += record.amount

    return [buckets[key] for key in sorted(buckets)]


def latest_months(trend: Sequence[MonthlyBucket], count: int = 6) -> list[MonthlyBucket]:
    """
    The `count` lexicographically-last month buckets.

    These are the most recent months THAT HAVE DATA, not the trailing
    calendar months from today.
    """
    if count <= 0:
        return []
    ordered = sorted(trend, key=lambda bucket: bucket.month_key)
    return ordered[-count:]


def bucket_net(bucket: MonthlyBucket) -> float:
    """Income minus expenses for a bucket, 0 if the result is not finite."""
    net = validate_number(bucket.income) - validate_number(bucket.expenses)
    return net if math.isfinite(net) else 0.0


def week_of_month(day: int) -> int:
    """Index of the fixed day-of-month range: 1-7, 8-14, 15-21, 22-end."""
    if day <= 7:
        return 0
    if day <= 14:
        return 1
    if day <= 21:
        return 2
    return 3


def weekly_income(
    income: Iterable[Income],
    now: Optional[datetime] = None,
) -> list[float]:
    """
    Income of the current calendar month split into four week buckets.

    Records from any other month or year are excluded entirely.
    """
    now = now or utc_now()
    totals = [0.0, 0.0, 0.0, 0.0]

    for record in income:
        ts = record.timestamp
        if ts is None or ts.year != now.year or ts.month != now.month:
            continue
        totals[week_of_month(ts.day)] += record.amount

    return totals


# =============================================================================
# RECENT ACTIVITY
# =============================================================================

def _recency_key(entry: RecentTransaction) -> tuple[bool, datetime]:
    return (entry.timestamp is not None, entry.timestamp or datetime.min)


def recent_transactions(
    income: Sequence[Income],
    expenses: Sequence[Expense],
    per_kind: int = 5,
) -> list[RecentTransaction]:
    """
    Merge the most recent income and expense records, newest first.

    Both inputs must already be sorted newest first (the store does this);
    only the merged list is re-sorted. Expense amounts are negated.
    Entries without a timestamp sort last.
    """
    merged = [
        RecentTransaction(
            id=record.id,
            kind=record.kind,
            category=record.category,
            amount=record.amount,
            timestamp=record.timestamp,
        )
        for record in income[:per_kind]
    ]
    merged.extend(
        RecentTransaction(
            id=record.id,
            kind=record.kind,
            category=record.category,
            description=record.description,
            amount=-record.amount,
            timestamp=record.timestamp,
        )
        for record in expenses[:per_kind]
    )

    merged.sort(key=_recency_key, reverse=True)
    return merged


# =============================================================================
# SNAPSHOT AND DASHBOARD
# =============================================================================

def aggregate(
    income: Sequence,
    expenses: Sequence,
    savings: Sequence,
    settings: Optional[DashboardSettings] = None,
) -> AggregateSnapshot:
    """
    Compute the full aggregate snapshot.

    Args:
        income: Income records, newest first
        expenses: Expense records, newest first
        savings: Savings-history records
        settings: Dashboard limits (recent_per_kind)

    Returns:
        A fresh AggregateSnapshot. Identical inputs give identical output.
    """
    settings = settings or get_settings().dashboard

    income_records = normalize_incomes(income)
    expense_records = normalize_expenses(expenses)
    saving_records = normalize_savings(savings)

    return AggregateSnapshot(
        total_income=total_amount(income_records),
        total_expenses=total_amount(expense_records),
        total_savings=total_amount(saving_records),
        expense_category_totals=category_totals(expense_records),
        monthly_trend=monthly_trend(income_records, expense_records),
        recent_transactions=recent_transactions(
            income_records, expense_records, per_kind=settings.recent_per_kind
        ),
    )


def month_label(key: str) -> str:
    """Short chart label for a month key: 2024-03 -> 03/24."""
    year, _, month = key.partition("-")
    return f"{month}/{year[-2:]}"


def savings_progress(total_savings: float, target: float) -> float:
    """Fraction of the profile savings target reached, clamped to [0, 1]."""
    if not target or target <= 0:
        return 0.0
    progress = validate_number(total_savings) / target
    return max(0.0, min(1.0, progress))


def build_dashboard(
    snapshot: AggregateSnapshot,
    settings: Optional[DashboardSettings] = None,
) -> DashboardView:
    """
    Reduce a snapshot to what the dashboard shows.

    - Top expense categories, positive amounts only
    - The latest populated months, each with a finite net
    - The newest merged transactions
    - Progress toward the profile savings target
    """
    settings = settings or get_settings().dashboard

    slices = []
    for name, amount in top_categories(snapshot.expense_category_totals, settings.top_categories):
        amount = validate_number(amount)
        if amount > 0:
            slices.append(CategorySlice(name=name or "Unknown", amount=amount))

    trend = [
        TrendPoint(
            month_key=bucket.month_key,
            label=month_label(bucket.month_key),
            income=validate_number(bucket.income),
            expenses=validate_number(bucket.expenses),
            net=bucket_net(bucket),
        )
        for bucket in latest_months(snapshot.monthly_trend, settings.trend_months)
    ]

    return DashboardView(
        total_income=validate_number(snapshot.total_income),
        total_expenses=validate_number(snapshot.total_expenses),
        total_savings=validate_number(snapshot.total_savings),
        top_categories=slices,
        trend=trend,
        recent_transactions=snapshot.recent_transactions[:settings.recent_limit],
        savings_progress=savings_progress(snapshot.total_savings, settings.savings_target),
        savings_target=settings.savings_target,
    )
