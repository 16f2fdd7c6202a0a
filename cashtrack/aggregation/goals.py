"""
Savings Goal Math

Progress, feasibility and lazy status evaluation for savings goals.
All of it is pure: persisting a status change is the goal service's job.
"""

import calendar
from datetime import datetime
from typing import Any, Optional

from cashtrack.config import DisplaySettings
from cashtrack.formatting import format_amount
from cashtrack.models.finance import (
    FeasibilityCheck,
    GoalProgress,
    GoalStatus,
    SavingsGoal,
)
from cashtrack.normalization import utc_now, validate_number


DEFAULT_DURATION_MONTHS = 3


def goal_progress(goal: SavingsGoal) -> GoalProgress:
    """
    Fraction saved and amount left for a goal.

    A zero or negative target short-circuits to zero progress. The
    remaining amount goes negative once the goal is exceeded.
    """
    target = validate_number(goal.target_amount)
    saved = validate_number(goal.saved_amount)

    if target <= 0:
        progress = 0.0
    else:
        progress = max(0.0, min(1.0, saved / target))

    return GoalProgress(
        goal_id=goal.id,
        progress=progress,
        remaining=target - saved,
    )


def check_goal_feasibility(
    target_amount: Any,
    total_income: float,
    total_expenses: float,
    display: Optional[DisplaySettings] = None,
) -> FeasibilityCheck:
    """
    Compare a proposed goal with the income left after expenses.

    Advisory only: an unachievable goal gets a warning message but is
    still created.
    """
    target = validate_number(target_amount)
    remaining = validate_number(total_income) - validate_number(total_expenses)
    achievable = target <= remaining

    message = None
    if not achievable:
        sign = "-" if remaining < 0 else ""
        message = (
            "This goal may not be achievable with your current income. "
            f"Remaining income: {sign}{format_amount(remaining, display)}"
        )

    return FeasibilityCheck(
        achievable=achievable,
        target_amount=target,
        remaining_income=remaining,
        message=message,
    )


def evaluate_goal_status(goal: SavingsGoal, now: Optional[datetime] = None) -> GoalStatus:
    """
    Status a goal should have at `now`.

    Only ongoing goals move, and only to completed once the deadline has
    passed. This runs when a goal is read; there is no background sweep,
    so goals that are never re-read keep their stored status.
    """
    if goal.status != GoalStatus.ONGOING or goal.deadline is None:
        return goal.status
    now = now or utc_now()
    if now >= goal.deadline:
        return GoalStatus.COMPLETED
    return goal.status


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's end."""
    index = moment.month - 1 + months
    year = moment.year + index // 12
    month = index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def deadline_from_duration(months: Any, now: Optional[datetime] = None) -> datetime:
    """
    Deadline for a goal expressed as a duration in months.

    Unparseable or non-positive durations default to 3 months.
    """
    try:
        count = int(str(months).strip())
    except (TypeError, ValueError):
        count = DEFAULT_DURATION_MONTHS
    if count <= 0:
        count = DEFAULT_DURATION_MONTHS

    return add_months(now or utc_now(), count)
