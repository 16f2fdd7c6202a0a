"""Tests for savings goal math."""

from datetime import datetime

import pytest

from cashtrack.aggregation import (
    add_months,
    check_goal_feasibility,
    deadline_from_duration,
    evaluate_goal_status,
    goal_progress,
)
from cashtrack.config import DisplaySettings
from cashtrack.models.finance import GoalStatus, SavingsGoal


class TestGoalProgress:
    """Tests for progress and remaining amounts."""

    def test_partial_progress(self):
        """Test a quarter-funded goal."""
        progress = goal_progress(SavingsGoal(id="g", target_amount=1000, saved_amount=250))
        assert progress.progress == 0.25
        assert progress.remaining == 750
        assert progress.exceeded is False

    def test_exceeded_goal(self):
        """Test progress caps at 1 and remaining goes negative."""
        progress = goal_progress(SavingsGoal(target_amount=1000, saved_amount=1200))
        assert progress.progress == 1.0
        assert progress.remaining == -200
        assert progress.exceeded is True

    def test_zero_target(self):
        """Test a zero target means no progress."""
        progress = goal_progress(SavingsGoal(target_amount=0, saved_amount=50))
        assert progress.progress == 0.0

    @pytest.mark.parametrize("target,saved", [(100, -50), (-10, 5), (1e9, 1e9), (3, 1)])
    def test_progress_always_bounded(self, target, saved):
        """Test progress stays within [0, 1]."""
        progress = goal_progress(SavingsGoal(target_amount=target, saved_amount=saved))
        assert 0.0 <= progress.progress <= 1.0


class TestFeasibility:
    """Tests for the advisory feasibility check."""

    def test_achievable(self):
        """Test a goal within remaining income."""
        check = check_goal_feasibility(1000, 5000, 3000)
        assert check.achievable is True
        assert check.message is None

    def test_not_achievable_message(self):
        """Test the warning text uses the display currency."""
        check = check_goal_feasibility(5000, 4000, 1000, DisplaySettings(currency="INR"))
        assert check.achievable is False
        assert check.remaining_income == 3000
        assert check.message == (
            "This goal may not be achievable with your current income. "
            "Remaining income: ₹3,000.00"
        )

    def test_negative_remaining_keeps_sign(self):
        """Test a deficit is rendered with a minus sign."""
        check = check_goal_feasibility(100, 1000, 1500, DisplaySettings(currency="USD"))
        assert check.message.endswith("Remaining income: -$500.00")

    def test_garbage_target(self):
        """Test a non-numeric target is treated as zero."""
        check = check_goal_feasibility("abc", 0, 0)
        assert check.achievable is True


class TestGoalStatus:
    """Tests for lazy deadline evaluation."""

    def test_ongoing_past_deadline_completes(self):
        """Test an overdue ongoing goal becomes completed."""
        goal = SavingsGoal(deadline=datetime(2024, 3, 1))
        assert evaluate_goal_status(goal, datetime(2024, 3, 1)) == GoalStatus.COMPLETED

    def test_ongoing_before_deadline(self):
        """Test a goal before its deadline stays ongoing."""
        goal = SavingsGoal(deadline=datetime(2024, 4, 1))
        assert evaluate_goal_status(goal, datetime(2024, 3, 1)) == GoalStatus.ONGOING

    @pytest.mark.parametrize("status", [GoalStatus.ARCHIVED, GoalStatus.NOT_ACHIEVED, GoalStatus.COMPLETED])
    def test_closed_goals_do_not_move(self, status):
        """Test other statuses are left alone."""
        goal = SavingsGoal(deadline=datetime(2020, 1, 1), status=status)
        assert evaluate_goal_status(goal, datetime(2024, 1, 1)) == status

    def test_no_deadline(self):
        """Test goals without a deadline stay ongoing."""
        assert evaluate_goal_status(SavingsGoal(), datetime(2030, 1, 1)) == GoalStatus.ONGOING


class TestDeadlines:
    """Tests for deadline arithmetic."""

    def test_add_months_clamps_day(self):
        """Test month ends are clamped."""
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
        assert add_months(datetime(2023, 11, 15), 3) == datetime(2024, 2, 15)

    def test_duration(self):
        """Test a parsed month count."""
        assert deadline_from_duration("6", datetime(2024, 3, 20)) == datetime(2024, 9, 20)

    @pytest.mark.parametrize("months", [None, "", "abc", 0, -2])
    def test_duration_defaults_to_three_months(self, months):
        """Test invalid durations default to three months."""
        assert deadline_from_duration(months, datetime(2024, 3, 20)) == datetime(2024, 6, 20)
