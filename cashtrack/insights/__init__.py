"""Insight generation package."""

from cashtrack.insights.generator import (
    FALLBACK_INSIGHTS,
    build_insight_context,
    generate_insights,
    run_rules,
    within_window,
)
from cashtrack.insights.rules import (
    DEFAULT_RULES,
    InsightContext,
    InsightRule,
    activity_rule,
    filler_message,
    goal_progress_rule,
    goal_prompt_rule,
    goals_completed_rule,
    group_expenses_by_category_and_week,
    income_expense_ratio_rule,
    percentage_change,
    savings_trend_rule,
    top_category_rule,
    week_start_key,
    weekly_change_rule,
)

__all__ = [
    "DEFAULT_RULES",
    "FALLBACK_INSIGHTS",
    "InsightContext",
    "InsightRule",
    "activity_rule",
    "build_insight_context",
    "filler_message",
    "generate_insights",
    "goal_progress_rule",
    "goal_prompt_rule",
    "goals_completed_rule",
    "group_expenses_by_category_and_week",
    "income_expense_ratio_rule",
    "percentage_change",
    "run_rules",
    "savings_trend_rule",
    "top_category_rule",
    "week_start_key",
    "weekly_change_rule",
    "within_window",
]
