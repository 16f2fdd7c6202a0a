"""
Insight Rules

Each rule is an independent pure function that looks at an InsightContext
and contributes at most one short message (or None). The generator runs
them in a fixed order.

DESIGN DECISION: One function per heuristic instead of one big branching
function. Rules can be tested, reordered or replaced individually.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import BaseModel, Field

from cashtrack.aggregation import category_of, category_totals, total_amount
from cashtrack.config import InsightSettings
from cashtrack.formatting import to_fixed
from cashtrack.models.finance import Expense, GoalStatus, Income, Saving, SavingsGoal


class InsightContext(BaseModel):
    """
    Everything the rules look at.

    Transactions are already restricted to the trailing window; goals are
    the full list.
    """

    income: list[Income] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    savings: list[Saving] = Field(default_factory=list)
    goals: list[SavingsGoal] = Field(default_factory=list)

    total_income: float = 0.0
    total_expenses: float = 0.0
    total_savings: float = 0.0
    expense_category_totals: dict[str, float] = Field(default_factory=dict)

    settings: InsightSettings = Field(default_factory=InsightSettings)

    @classmethod
    def from_records(
        cls,
        income: list[Income],
        expenses: list[Expense],
        savings: list[Saving],
        goals: list[SavingsGoal],
        settings: InsightSettings,
    ) -> "InsightContext":
        return cls(
            income=income,
            expenses=expenses,
            savings=savings,
            goals=goals,
            total_income=total_amount(income),
            total_expenses=total_amount(expenses),
            total_savings=total_amount(savings),
            expense_category_totals=category_totals(expenses),
            settings=settings,
        )

    @property
    def transaction_count(self) -> int:
        return len(self.income) + len(self.expenses) + len(self.savings)


InsightRule = Callable[[InsightContext], Optional[str]]


# =============================================================================
# HELPERS
# =============================================================================

def week_start_key(timestamp: datetime) -> str:
    """ISO date of the Sunday that starts the timestamp's week."""
    days_since_sunday = (timestamp.weekday() + 1) % 7
    return (timestamp.date() - timedelta(days=days_since_sunday)).isoformat()


def group_expenses_by_category_and_week(
    expenses: list[Expense],
) -> dict[str, dict[str, float]]:
    """
    Expense sums per category, then per Sunday-started week.

    Categories keep first-encountered order. Expenses without a
    timestamp are skipped.
    """
    grouped: dict[str, dict[str, float]] = {}
    for expense in expenses:
        if expense.timestamp is None:
            continue
        weeks = grouped.setdefault(category_of(expense), {})
        key = week_start_key(expense.timestamp)
        weeks[key] = weeks.get(key, 0.0) + expense.amount
    return grouped


def percentage_change(current: float, previous: float) -> float:
    """
    Change from previous to current, in percent.

    A zero baseline reports 100% for any nonzero current value, else 0%.
    """
    if previous == 0:
        return 100.0 if current != 0 else 0.0
    return (current - previous) / abs(previous) * 100


def _percent(part: float, whole: float) -> str:
    return to_fixed(part / whole * 100, 1) if whole > 0 else "0"


# =============================================================================
# RULES
# =============================================================================

def savings_trend_rule(ctx: InsightContext) -> Optional[str]:
    total = ctx.total_savings
    if total > 0:
        return f"You've saved {to_fixed(total, 0)} in the last {ctx.settings.window_days} days. Great job! 💰"
    if total < 0:
        return (
            f"Your savings decreased by {to_fixed(abs(total), 0)} in the last "
            f"{ctx.settings.window_days} days. Consider reviewing your expenses. 📉"
        )
    return None


def top_category_rule(ctx: InsightContext) -> Optional[str]:
    if not ctx.expense_category_totals:
        return None
    # max() keeps the first category among ties
    category, amount = max(ctx.expense_category_totals.items(), key=lambda item: item[1])
    share = _percent(amount, ctx.total_expenses)
    return f"{category} is your biggest expense category at {share}% of total spending. 🎯"


def weekly_change_rule(ctx: InsightContext) -> Optional[str]:
    grouped = group_expenses_by_category_and_week(ctx.expenses)

    for category, weeks in grouped.items():
        if len(weeks) < 2:
            continue
        previous_week, current_week = sorted(weeks)[-2:]
        change = percentage_change(weeks[current_week], weeks[previous_week])
        if abs(change) <= ctx.settings.weekly_change_threshold:
            return None
        direction = "increased" if change > 0 else "decreased"
        arrow = "📈" if change > 0 else "📉"
        return (
            f"Your {category} expenses {direction} by {to_fixed(abs(change), 1)}% "
            f"compared to last week. {arrow}"
        )

    return None


def income_expense_ratio_rule(ctx: InsightContext) -> Optional[str]:
    income, expenses = ctx.total_income, ctx.total_expenses
    if income <= 0 or expenses <= 0:
        return None

    net = income - expenses
    if net > 0:
        return f"You're saving {_percent(net, income)}% of your income this month. Keep it up! 🎉"
    if net < 0:
        return (
            f"Your expenses exceed income by {_percent(abs(net), income)}%. "
            "Consider budgeting to improve this. ⚠️"
        )
    return None


def activity_rule(ctx: InsightContext) -> Optional[str]:
    per_day = ctx.transaction_count / ctx.settings.window_days
    if per_day < ctx.settings.low_activity_per_day:
        return (
            f"You have about {to_fixed(per_day, 1)} transactions per day. "
            "Consider tracking more regularly for better insights. 📊"
        )
    if per_day > ctx.settings.high_activity_per_day:
        return (
            f"You're actively tracking with {to_fixed(per_day, 1)} transactions per day. "
            "Great financial awareness! 👏"
        )
    return None


def _ongoing_goals(ctx: InsightContext) -> list[SavingsGoal]:
    return [goal for goal in ctx.goals if goal.status == GoalStatus.ONGOING]


def _finished_goals(ctx: InsightContext) -> list[SavingsGoal]:
    return [
        goal for goal in ctx.goals
        if goal.status in (GoalStatus.COMPLETED, GoalStatus.ARCHIVED)
    ]


def goal_progress_rule(ctx: InsightContext) -> Optional[str]:
    ongoing = _ongoing_goals(ctx)
    if not ongoing:
        return None
    target = sum(goal.target_amount for goal in ongoing)
    saved = sum(goal.saved_amount for goal in ongoing)
    return f"You're {_percent(saved, target)}% towards your savings goals. Keep saving! 🎯"


def goals_completed_rule(ctx: InsightContext) -> Optional[str]:
    finished = len(_finished_goals(ctx))
    if not finished:
        return None
    plural = "s" if finished > 1 else ""
    return f"You've achieved {finished} savings goal{plural}! Amazing progress! 🏆"


def goal_prompt_rule(ctx: InsightContext) -> Optional[str]:
    if not ctx.goals:
        return "Consider setting savings goals to stay motivated and track your progress! 🎯"
    if not _ongoing_goals(ctx) and not _finished_goals(ctx):
        return "Set some savings goals to track your progress and stay motivated! 💪"
    return None


DEFAULT_RULES: tuple[InsightRule, ...] = (
    savings_trend_rule,
    top_category_rule,
    weekly_change_rule,
    income_expense_ratio_rule,
    activity_rule,
    goal_progress_rule,
    goals_completed_rule,
    goal_prompt_rule,
)


def filler_message(ctx: InsightContext) -> str:
    """Generic message used to pad the list up to the minimum."""
    if ctx.total_income > ctx.total_expenses:
        return "Your income exceeds expenses - you're on the right track! 🌟"
    if ctx.total_expenses > ctx.total_income:
        return "Consider reviewing your budget to reduce expenses. 💡"
    return "Keep tracking your finances regularly for better insights. 📈"
