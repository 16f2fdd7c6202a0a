"""
Insight Generator

Runs the rule battery over the trailing window of transactions plus the
full goal list and returns between `min_insights` and `max_insights`
short messages.

GUARANTEES:
- Output length is always within [3, 5] with default settings,
  including for empty input
- Messages come out in rule order; padding goes last
- Any error while deriving insights yields the fixed fallback list.
  The insights panel must never crash.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

import structlog

from cashtrack.config import InsightSettings, get_settings
from cashtrack.insights.rules import DEFAULT_RULES, InsightContext, InsightRule, filler_message
from cashtrack.normalization import (
    normalize_expenses,
    normalize_goals,
    normalize_incomes,
    normalize_savings,
    utc_now,
)


logger = structlog.get_logger(__name__)

FALLBACK_INSIGHTS = (
    "Unable to generate insights at this time. Please check your data and try again. 🤔",
    "Make sure you're logged in and have some financial data to analyze. 📱",
    "Regular tracking helps generate better financial insights! 💪",
)


def within_window(records: list, now: datetime, days: int) -> list:
    """Records stamped within the last `days` days. Unstamped records are dropped."""
    cutoff = now - timedelta(days=days)
    return [
        record for record in records
        if record.timestamp is not None and record.timestamp >= cutoff
    ]


def build_insight_context(
    income: Sequence,
    expenses: Sequence,
    savings: Sequence,
    goals: Sequence,
    now: Optional[datetime] = None,
    settings: Optional[InsightSettings] = None,
) -> InsightContext:
    """Normalize the inputs and restrict transactions to the trailing window."""
    settings = settings or get_settings().insights
    now = now or utc_now()

    return InsightContext.from_records(
        income=within_window(normalize_incomes(income), now, settings.window_days),
        expenses=within_window(normalize_expenses(expenses), now, settings.window_days),
        savings=within_window(normalize_savings(savings), now, settings.window_days),
        goals=normalize_goals(goals),
        settings=settings,
    )


def run_rules(
    ctx: InsightContext,
    rules: Sequence[InsightRule] = DEFAULT_RULES,
) -> list[str]:
    """Apply rules in order, pad up to the minimum, cap at the maximum."""
    insights = []
    for rule in rules:
        message = rule(ctx)
        if message:
            insights.append(message)

    while len(insights) < ctx.settings.min_insights:
        insights.append(filler_message(ctx))

    return insights[:ctx.settings.max_insights]


def generate_insights(
    income: Sequence,
    expenses: Sequence,
    savings: Sequence,
    goals: Sequence,
    now: Optional[datetime] = None,
    settings: Optional[InsightSettings] = None,
    rules: Sequence[InsightRule] = DEFAULT_RULES,
) -> list[str]:
    """
    Generate the insight list for the given data.

    Args:
        income, expenses, savings: Full collections (raw or normalized);
            only the trailing window is considered
        goals: Every savings goal
        now: Reference time for the window (defaults to the current time)
        settings: Insight thresholds
        rules: Rule battery, in order

    Returns:
        Insight strings; the fallback list if anything goes wrong
    """
    try:
        ctx = build_insight_context(income, expenses, savings, goals, now, settings)
        return run_rules(ctx, rules)
    except Exception as e:
        logger.error("insight_generation_failed", error=str(e), exc_info=True)
        return list(FALLBACK_INSIGHTS)
