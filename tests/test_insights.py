"""Tests for the heuristic insight rules and the generator."""

from datetime import datetime, timedelta

import pytest

from cashtrack.config import InsightSettings
from cashtrack.insights import (
    FALLBACK_INSIGHTS,
    InsightContext,
    activity_rule,
    filler_message,
    generate_insights,
    goal_progress_rule,
    goal_prompt_rule,
    goals_completed_rule,
    income_expense_ratio_rule,
    percentage_change,
    savings_trend_rule,
    top_category_rule,
    week_start_key,
    weekly_change_rule,
    within_window,
)
from cashtrack.models.finance import Expense, GoalStatus, Income, Saving, SavingsGoal


def make_context(income=(), expenses=(), savings=(), goals=(), settings=None) -> InsightContext:
    return InsightContext.from_records(
        income=list(income),
        expenses=list(expenses),
        savings=list(savings),
        goals=list(goals),
        settings=settings or InsightSettings(),
    )


class TestHelpers:
    """Tests for rule helpers."""

    def test_week_starts_on_sunday(self):
        """Test weeks are keyed by their Sunday."""
        assert week_start_key(datetime(2024, 3, 20)) == "2024-03-17"
        assert week_start_key(datetime(2024, 3, 17, 23, 59)) == "2024-03-17"
        assert week_start_key(datetime(2024, 3, 16)) == "2024-03-10"

    @pytest.mark.parametrize("current,previous,expected", [
        (150, 100, 50.0),
        (50, 100, -50.0),
        (10, 0, 100.0),
        (0, 0, 0.0),
    ])
    def test_percentage_change(self, current, previous, expected):
        """Test percentage change including a zero baseline."""
        assert percentage_change(current, previous) == expected

    def test_within_window(self, now):
        """Test the trailing window drops old and undated records."""
        records = [
            Income(id="new", timestamp=now - timedelta(days=1)),
            Income(id="edge", timestamp=now - timedelta(days=30)),
            Income(id="old", timestamp=now - timedelta(days=31)),
            Income(id="undated"),
        ]
        assert [r.id for r in within_window(records, now, 30)] == ["new", "edge"]


class TestRules:
    """Tests for the individual rules."""

    def test_savings_positive(self):
        """Test congratulation on positive savings."""
        ctx = make_context(savings=[Saving(amount=800)])
        assert savings_trend_rule(ctx) == "You've saved 800 in the last 30 days. Great job! 💰"

    def test_savings_negative(self):
        """Test caution on negative savings."""
        ctx = make_context(savings=[Saving(amount=-250)])
        assert savings_trend_rule(ctx).startswith("Your savings decreased by 250 in the last 30 days.")

    def test_savings_zero(self):
        """Test no message on zero savings."""
        assert savings_trend_rule(make_context()) is None

    def test_top_category_share(self):
        """Test the top category and its share."""
        ctx = make_context(expenses=[
            Expense(category="Food", amount=300),
            Expense(category="Food", amount=200),
            Expense(category="Transport", amount=100),
        ])
        assert ctx.expense_category_totals == {"Food": 500, "Transport": 100}
        assert top_category_rule(ctx) == (
            "Food is your biggest expense category at 83.3% of total spending. 🎯"
        )

    def test_top_category_zero_total(self):
        """Test a zero total reports 0%."""
        ctx = make_context(expenses=[Expense(category="Food", amount=0)])
        assert "at 0% of total spending" in top_category_rule(ctx)

    def test_weekly_increase_reported(self):
        """Test a 50% week-over-week increase."""
        ctx = make_context(expenses=[
            Expense(category="Food", amount=100, timestamp=datetime(2024, 3, 11)),
            Expense(category="Food", amount=150, timestamp=datetime(2024, 3, 18)),
        ])
        assert weekly_change_rule(ctx) == (
            "Your Food expenses increased by 50.0% compared to last week. 📈"
        )

    def test_weekly_small_change_ignored(self):
        """Test a 3% change is below the threshold."""
        ctx = make_context(expenses=[
            Expense(category="Food", amount=100, timestamp=datetime(2024, 3, 11)),
            Expense(category="Food", amount=103, timestamp=datetime(2024, 3, 18)),
        ])
        assert weekly_change_rule(ctx) is None

    def test_weekly_decrease_uses_latest_two_weeks(self):
        """Test only the two most recent weeks are compared."""
        ctx = make_context(expenses=[
            Expense(category="Rent", amount=999, timestamp=datetime(2024, 2, 26)),
            Expense(category="Rent", amount=200, timestamp=datetime(2024, 3, 4)),
            Expense(category="Rent", amount=100, timestamp=datetime(2024, 3, 12)),
        ])
        assert weekly_change_rule(ctx) == (
            "Your Rent expenses decreased by 50.0% compared to last week. 📉"
        )

    def test_weekly_skips_single_week_categories(self):
        """Test the first category with two weeks is used."""
        ctx = make_context(expenses=[
            Expense(category="Food", amount=100, timestamp=datetime(2024, 3, 18)),
            Expense(category="Fuel", amount=40, timestamp=datetime(2024, 3, 11)),
            Expense(category="Fuel", amount=80, timestamp=datetime(2024, 3, 18)),
        ])
        assert "Your Fuel expenses increased by 100.0%" in weekly_change_rule(ctx)

    def test_ratio_saving(self):
        """Test savings rate framing."""
        ctx = make_context(income=[Income(amount=1000)], expenses=[Expense(amount=250)])
        assert income_expense_ratio_rule(ctx) == (
            "You're saving 75.0% of your income this month. Keep it up! 🎉"
        )

    def test_ratio_deficit(self):
        """Test deficit warning."""
        ctx = make_context(income=[Income(amount=1000)], expenses=[Expense(amount=1200)])
        assert income_expense_ratio_rule(ctx).startswith("Your expenses exceed income by 20.0%.")

    def test_ratio_needs_both_totals(self):
        """Test nothing is said without income and expenses."""
        assert income_expense_ratio_rule(make_context(income=[Income(amount=10)])) is None

    def test_activity_low(self):
        """Test a nudge below one transaction a day."""
        ctx = make_context(income=[Income(amount=1)] * 3)
        assert activity_rule(ctx).startswith("You have about 0.1 transactions per day.")

    def test_activity_high(self):
        """Test praise above three transactions a day."""
        ctx = make_context(expenses=[Expense(amount=1)] * 100)
        assert activity_rule(ctx).startswith("You're actively tracking with 3.3 transactions per day.")

    def test_activity_moderate(self):
        """Test no message between the thresholds."""
        assert activity_rule(make_context(expenses=[Expense(amount=1)] * 60)) is None

    def test_goal_progress(self):
        """Test progress across ongoing goals only."""
        ctx = make_context(goals=[
            SavingsGoal(target_amount=1000, saved_amount=250),
            SavingsGoal(target_amount=1000, saved_amount=250),
            SavingsGoal(target_amount=5000, saved_amount=5000, status=GoalStatus.ARCHIVED),
        ])
        assert goal_progress_rule(ctx) == "You're 25.0% towards your savings goals. Keep saving! 🎯"

    def test_goals_completed_count(self):
        """Test completed and achieved goals are counted."""
        ctx = make_context(goals=[
            SavingsGoal(status=GoalStatus.COMPLETED),
            SavingsGoal(status=GoalStatus.ARCHIVED),
        ])
        assert goals_completed_rule(ctx) == "You've achieved 2 savings goals! Amazing progress! 🏆"

    def test_goal_prompt_without_goals(self):
        """Test the prompt to set a goal."""
        assert goal_prompt_rule(make_context()).startswith("Consider setting savings goals")

    def test_goal_prompt_only_not_achieved(self):
        """Test the prompt when no goal is ongoing or finished."""
        ctx = make_context(goals=[SavingsGoal(status=GoalStatus.NOT_ACHIEVED)])
        assert goal_prompt_rule(ctx).startswith("Set some savings goals")

    def test_filler_messages(self):
        """Test the padding message follows the balance."""
        assert "right track" in filler_message(make_context(income=[Income(amount=5)]))
        assert "reviewing your budget" in filler_message(make_context(expenses=[Expense(amount=5)]))
        assert "Keep tracking" in filler_message(make_context())


class TestGenerateInsights:
    """Tests for the full generator."""

    def test_empty_input_is_padded(self, now):
        """Test empty input still yields three insights."""
        insights = generate_insights([], [], [], [], now=now)
        assert len(insights) == 3
        assert insights[-1] == "Keep tracking your finances regularly for better insights. 📈"

    def test_garbage_input(self, now):
        """Test malformed collections still yield three to five insights."""
        insights = generate_insights("junk", None, [{"amount": "x"}], 42, now=now)
        assert 3 <= len(insights) <= 5

    def test_capped_at_five_in_rule_order(self, raw_income, raw_expenses, now):
        """Test truncation keeps the earliest rules."""
        insights = generate_insights(
            raw_income,
            raw_expenses,
            [{"amount": 800, "timestamp": datetime(2024, 3, 10)}],
            [{"goalName": "Laptop", "targetAmount": 60000, "savedAmount": 15000}],
            now=now,
        )
        assert insights == [
            "You've saved 800 in the last 30 days. Great job! 💰",
            "Food is your biggest expense category at 83.3% of total spending. 🎯",
            "You're saving 90.8% of your income this month. Keep it up! 🎉",
            "You have about 0.2 transactions per day. Consider tracking more regularly for better insights. 📊",
            "You're 25.0% towards your savings goals. Keep saving! 🎯",
        ]

    def test_window_excludes_old_records(self, now):
        """Test transactions older than the window are ignored."""
        old = now - timedelta(days=45)
        insights = generate_insights(
            [], [{"amount": 100, "category": "Food", "timestamp": old}], [], [], now=now
        )
        assert not any("biggest expense category" in i for i in insights)

    def test_failing_rule_yields_fallback(self, now):
        """Test any error produces the fixed fallback list."""
        def broken(ctx):
            raise RuntimeError("boom")

        insights = generate_insights([], [], [], [], now=now, rules=(broken,))
        assert insights == list(FALLBACK_INSIGHTS)
        assert len(insights) == 3

    def test_custom_limits(self, now):
        """Test the floor and ceiling come from settings."""
        settings = InsightSettings(min_insights=4, max_insights=4)
        assert len(generate_insights([], [], [], [], now=now, settings=settings)) == 4
