"""
Normalization Package

Coerces raw store records (live or restored from a backup) into the
canonical models before they reach the aggregation engine.
"""

from cashtrack.normalization.normalizer import (
    normalize_backup,
    normalize_categories,
    normalize_category,
    normalize_expense,
    normalize_expenses,
    normalize_goal,
    normalize_goal_status,
    normalize_goals,
    normalize_income,
    normalize_incomes,
    normalize_saving,
    normalize_savings,
    parse_timestamp,
    utc_now,
    validate_array,
    validate_number,
    validate_object,
)

__all__ = [
    "normalize_backup",
    "normalize_categories",
    "normalize_category",
    "normalize_expense",
    "normalize_expenses",
    "normalize_goal",
    "normalize_goal_status",
    "normalize_goals",
    "normalize_income",
    "normalize_incomes",
    "normalize_saving",
    "normalize_savings",
    "parse_timestamp",
    "utc_now",
    "validate_array",
    "validate_number",
    "validate_object",
]
