"""Tests for normalization and validation of raw store records."""

import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cashtrack.config import NormalizationSettings
from cashtrack.models.finance import CategoryType, DurationType, GoalStatus
from cashtrack.normalization import (
    normalize_backup,
    normalize_categories,
    normalize_expense,
    normalize_goal,
    normalize_goal_status,
    normalize_incomes,
    parse_timestamp,
    validate_array,
    validate_number,
    validate_object,
)


class TestValidateNumber:
    """Tests for numeric coercion."""

    @pytest.mark.parametrize("value", [None, "abc", "12abc", "", "   ", [], {}, object()])
    def test_non_numeric_returns_default(self, value):
        """Test non-numeric values fall back to the default."""
        assert validate_number(value) == 0
        assert validate_number(value, default=7) == 7

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, "NaN", "inf"])
    def test_non_finite_returns_default(self, value):
        """Test NaN and infinities fall back to the default."""
        assert validate_number(value) == 0

    def test_booleans_are_not_numbers(self):
        """Test booleans are treated as non-numeric."""
        assert validate_number(True) == 0
        assert validate_number(False, default=3) == 3

    def test_numeric_strings(self):
        """Test numeric strings are parsed."""
        assert validate_number(" 42.5 ") == 42.5
        assert validate_number("-10") == -10

    def test_decimal_and_int(self):
        """Test Decimal and int inputs."""
        assert validate_number(Decimal("19.99")) == pytest.approx(19.99)
        assert validate_number(12) == 12.0

    def test_clamps_to_bound(self):
        """Test values beyond one billion are clamped."""
        assert validate_number(2_000_000_000) == 1_000_000_000
        assert validate_number(-5e12) == -1_000_000_000

    def test_huge_int_does_not_raise(self):
        """Test an int too large for a float is treated as invalid."""
        assert validate_number(10 ** 400) == 0

    def test_bound_is_configurable(self):
        """Test the clamp bound comes from settings."""
        settings = NormalizationSettings(amount_bound=100)
        assert validate_number(150, settings=settings) == 100

    def test_idempotent(self):
        """Test applying twice changes nothing."""
        for value in ["12.5", None, 3e10, -7, "x"]:
            once = validate_number(value)
            assert validate_number(once) == once


class TestCollections:
    """Tests for array and object coercion."""

    def test_validate_array(self):
        """Test only lists and tuples pass through."""
        assert validate_array([1, 2]) == [1, 2]
        assert validate_array((1,)) == [1]
        assert validate_array("abc") == []
        assert validate_array(None, default=[0]) == [0]

    def test_validate_object(self):
        """Test only mappings pass through."""
        assert validate_object({"a": 1}) == {"a": 1}
        assert validate_object([("a", 1)]) == {}
        assert validate_object(None) == {}


class TestParseTimestamp:
    """Tests for timestamp parsing."""

    def test_iso_with_z(self):
        """Test ISO strings with a trailing Z."""
        assert parse_timestamp("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, 0)

    def test_aware_datetime_converted_to_utc(self):
        """Test aware datetimes become naive UTC."""
        ist = timezone(timedelta(hours=5, minutes=30))
        value = datetime(2024, 3, 1, 10, 0, tzinfo=ist)
        assert parse_timestamp(value) == datetime(2024, 3, 1, 4, 30)

    def test_date(self):
        """Test plain dates become midnight."""
        assert parse_timestamp(date(2024, 1, 2)) == datetime(2024, 1, 2)

    def test_epoch_seconds(self):
        """Test epoch seconds."""
        assert parse_timestamp(0) == datetime(1970, 1, 1)

    def test_store_native_mapping(self):
        """Test {seconds, nanoseconds} mappings."""
        value = {"seconds": 86400, "nanoseconds": 500_000_000}
        assert parse_timestamp(value) == datetime(1970, 1, 2, 0, 0, 0, 500000)

    @pytest.mark.parametrize("value", [None, "", "yesterday", True, {"foo": 1}, math.nan])
    def test_unparseable(self, value):
        """Test unreadable values become None."""
        assert parse_timestamp(value) is None


class TestRecordNormalization:
    """Tests for record-level coercion."""

    def test_income_collection_drops_non_mappings(self):
        """Test elements that are not mappings are dropped."""
        records = normalize_incomes([{"amount": "10"}, "junk", None, 5])
        assert len(records) == 1
        assert records[0].amount == 10

    def test_income_collection_of_wrong_type(self):
        """Test a non-list collection is empty."""
        assert normalize_incomes("not a list") == []

    def test_expense_fields(self):
        """Test expense fields are cleaned."""
        expense = normalize_expense({
            "id": "e1",
            "amount": "NaN",
            "category": "  ",
            "description": None,
            "timestamp": "2024-03-01",
        })
        assert expense.id == "e1"
        assert expense.amount == 0
        assert expense.category is None
        assert expense.description == ""
        assert expense.timestamp == datetime(2024, 3, 1)

    def test_missing_ids_are_stable(self):
        """Test id-less records get the same ids on every normalization."""
        raw = [{"amount": 5, "category": "Salary"}, {"amount": 5, "category": "Salary"}]

        first = [r.id for r in normalize_incomes(raw)]
        second = [r.id for r in normalize_incomes(raw)]

        assert first == second
        assert first[0] != first[1]
        assert normalize_incomes([{"id": " i9 ", "amount": 1}])[0].id == "i9"

    def test_goal_store_names(self):
        """Test stored goal field names."""
        goal = normalize_goal({
            "id": "g1",
            "goalName": "Trip",
            "targetAmount": "20000",
            "savedAmount": 500,
            "durationType": "Yearly",
            "goalDeadline": "2025-01-01T00:00:00Z",
            "status": "achieved",
        })
        assert goal.name == "Trip"
        assert goal.target_amount == 20000
        assert goal.saved_amount == 500
        assert goal.duration_type == DurationType.YEARLY
        assert goal.deadline == datetime(2025, 1, 1)
        assert goal.status == GoalStatus.ARCHIVED

    def test_goal_creation_form_names(self):
        """Test creation-form names are accepted."""
        goal = normalize_goal({"name": "Bike", "amount": 3000})
        assert goal.name == "Bike"
        assert goal.target_amount == 3000
        assert goal.duration_type == DurationType.MONTHLY

    @pytest.mark.parametrize("raw,expected", [
        ("completed", GoalStatus.COMPLETED),
        ("Archived", GoalStatus.ARCHIVED),
        ("not achieved", GoalStatus.NOT_ACHIEVED),
        ("not_achieved", GoalStatus.NOT_ACHIEVED),
        (None, GoalStatus.ONGOING),
        ("paused", GoalStatus.ONGOING),
    ])
    def test_goal_status_aliases(self, raw, expected):
        """Test raw status strings map to GoalStatus."""
        assert normalize_goal_status(raw) == expected

    def test_categories_need_type_and_name(self):
        """Test incomplete categories are dropped."""
        categories = normalize_categories([
            {"type": "Expense", "name": "Food"},
            {"type": "expense", "name": ""},
            {"type": "other", "name": "Misc"},
            {"name": "NoType"},
        ])
        assert [c.name for c in categories] == ["Food"]
        assert categories[0].type == CategoryType.EXPENSE


class TestBackup:
    """Tests for backup payload normalization."""

    def test_backup_shape(self):
        """Test the backup JSON shape is read."""
        contents = normalize_backup({
            "income": [{"amount": 100, "category": "Salary"}],
            "expenses": [{"amount": "20", "category": "Food"}, "bad"],
            "savings": [],
            "savingsGoals": [{"goalName": "Car", "targetAmount": 5000}],
            "settings": {"currency": "USD"},
            "profile": {"name": "Asha"},
            "backupDate": "2024-03-01T00:00:00Z",
            "appVersion": "1.0.0",
        })
        assert contents.record_count == 3
        assert contents.savings_goals[0].name == "Car"
        assert contents.settings == {"currency": "USD"}
        assert contents.backup_date == datetime(2024, 3, 1)
        assert contents.app_version == "1.0.0"

    def test_non_mapping_payload(self):
        """Test a malformed payload yields an empty backup."""
        contents = normalize_backup(["not", "a", "backup"])
        assert contents.record_count == 0
        assert contents.profile == {}
