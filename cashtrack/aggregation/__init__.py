"""Aggregation engine package."""

from cashtrack.aggregation.engine import (
    DEFAULT_CATEGORY,
    aggregate,
    bucket_net,
    build_dashboard,
    category_of,
    category_totals,
    latest_months,
    month_key,
    month_label,
    monthly_trend,
    recent_transactions,
    savings_progress,
    summarize_categories,
    top_categories,
    total_amount,
    transactions_by_category,
    week_of_month,
    weekly_income,
)
from cashtrack.aggregation.goals import (
    add_months,
    check_goal_feasibility,
    deadline_from_duration,
    evaluate_goal_status,
    goal_progress,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "add_months",
    "aggregate",
    "bucket_net",
    "build_dashboard",
    "category_of",
    "category_totals",
    "check_goal_feasibility",
    "deadline_from_duration",
    "evaluate_goal_status",
    "goal_progress",
    "latest_months",
    "month_key",
    "month_label",
    "monthly_trend",
    "recent_transactions",
    "savings_progress",
    "summarize_categories",
    "top_categories",
    "total_amount",
    "transactions_by_category",
    "week_of_month",
    "weekly_income",
]
