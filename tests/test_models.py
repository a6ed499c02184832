"""
Tests for Finance Tracker

Test strategy:
1. Unit tests for individual components (models, aggregation, validator)
2. Integration tests for repositories over the in-memory store
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from finance_tracker.models import (
    Bank,
    Category,
    DateRange,
    GoalDeposit,
    Notification,
    NotificationLevel,
    NotificationSource,
    SavingsGoal,
    SpendingGoal,
    Transaction,
    TransactionFilter,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        transaction = Transaction(
            description="Groceries",
            amount=Decimal("120.50"),
            type=TransactionType.EXPENSE,
            category="food",
            date=datetime(2025, 6, 10, 14, 30),
        )
        assert transaction.amount == Decimal("120.50")
        assert transaction.type == TransactionType.EXPENSE
        assert transaction.bank_id is None
        assert transaction.id

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        transaction = Transaction(
            description="  Rent  ",
            amount=Decimal("900"),
            type="expense",
            category="housing",
            date=datetime(2025, 6, 1),
        )
        assert transaction.description == "Rent"

    def test_transaction_rejects_zero_amount(self):
        """Test that a zero amount is rejected."""
        with pytest.raises(ValueError):
            Transaction(
                description="Nothing",
                amount=Decimal("0"),
                type="expense",
                category="food",
                date=datetime(2025, 6, 1),
            )

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected; direction comes from type."""
        with pytest.raises(ValueError):
            Transaction(
                description="Refund",
                amount=Decimal("-10"),
                type="income",
                category="other-income",
                date=datetime(2025, 6, 1),
            )

    def test_transaction_accepts_plain_date(self):
        """Test that a date (or date string) is stored as midnight."""
        from_date = Transaction(
            description="Salary",
            amount=Decimal("3000"),
            type="income",
            category="salary",
            date=date(2025, 6, 5),
        )
        from_string = Transaction(
            description="Salary",
            amount=Decimal("3000"),
            type="income",
            category="salary",
            date="2025-06-05",
        )
        assert from_date.date == datetime(2025, 6, 5)
        assert from_string.date == datetime(2025, 6, 5)

    def test_signed_amount(self):
        """Test that income is positive and expense negative."""
        income = Transaction(
            description="Salary",
            amount=Decimal("50"),
            type="income",
            category="salary",
            date=datetime(2025, 6, 5),
        )
        expense = income.model_copy(update={"type": TransactionType.EXPENSE})
        assert income.signed_amount == Decimal("50")
        assert expense.signed_amount == Decimal("-50")

    def test_blank_bank_id_becomes_none(self):
        """Test that an empty bank reference is stored as None."""
        transaction = Transaction(
            description="Cash",
            amount=Decimal("5"),
            type="expense",
            category="food",
            date=datetime(2025, 6, 5),
            bank_id="",
        )
        assert transaction.bank_id is None


class TestEntityModels:
    """Tests for banks, categories and goals."""

    def test_bank_allows_negative_initial_balance(self):
        """Test that a bank can start overdrawn."""
        bank = Bank(name="Credit card", initial_balance=Decimal("-250.00"))
        assert bank.initial_balance == Decimal("-250.00")
        assert bank.color == "#3b82f6"

    def test_bank_rejects_bad_color(self):
        """Test that colors must be #rrggbb."""
        with pytest.raises(ValueError):
            Bank(name="Nubank", color="purple")

    def test_category_requires_name(self):
        """Test that a blank category name is rejected."""
        with pytest.raises(ValueError):
            Category(name="   ", type="expense")

    def test_spending_goal_month_format(self):
        """Test that month must be YYYY-MM."""
        goal = SpendingGoal(category="food", limit=Decimal("500"), month="2025-06")
        assert goal.key == ("food", "2025-06")

        with pytest.raises(ValueError):
            SpendingGoal(category="food", limit=Decimal("500"), month="2025-6")
        with pytest.raises(ValueError):
            SpendingGoal(category="food", limit=Decimal("500"), month="2025-13")

    def test_spending_goal_rejects_zero_limit(self):
        """Test that limits must be positive."""
        with pytest.raises(ValueError):
            SpendingGoal(category="food", limit=Decimal("0"), month="2025-06")

    def test_savings_goal_rejects_zero_target(self):
        """Test that targets must be positive."""
        with pytest.raises(ValueError):
            SavingsGoal(name="Trip", target_amount=Decimal("0"))

    def test_goal_deposit_defaults(self):
        """Test GoalDeposit defaults its date to now."""
        deposit = GoalDeposit(goal_id="g1", amount=Decimal("100"))
        assert deposit.date is not None
        assert deposit.description is None


class TestFilterModels:
    """Tests for date ranges and transaction filters."""

    def test_date_range_rejects_reversed_dates(self):
        """Test that end cannot be before start."""
        with pytest.raises(ValueError, match="End date cannot be before start date"):
            DateRange(start=date(2025, 6, 30), end=date(2025, 6, 1))

    def test_date_range_contains_is_inclusive(self):
        """Test both boundary days are included, whatever the time of day."""
        june = DateRange(start=date(2025, 6, 1), end=date(2025, 6, 30))
        assert june.contains(datetime(2025, 6, 1, 0, 0))
        assert june.contains(datetime(2025, 6, 30, 23, 59, 59))
        assert not june.contains(datetime(2025, 7, 1))

    def test_filter_rejects_reversed_dates(self):
        """Test that a filter with end before start is invalid."""
        with pytest.raises(ValueError):
            TransactionFilter(start_date=date(2025, 6, 30), end_date=date(2025, 6, 1))

    def test_empty_filter(self):
        """Test that a filter with no criteria is empty."""
        assert TransactionFilter().is_empty
        assert not TransactionFilter(category="food").is_empty


class TestValidationModels:
    """Tests for validation result models."""

    def test_validation_result_valid(self):
        """Test a result with only warnings is valid."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="unusual",
                message="Large amount",
                severity="warning",
            ),
        ])
        assert result.is_valid
        assert result.error_count == 0

    def test_validation_result_summary(self):
        """Test summary joins error messages."""
        result = ValidationResult(issues=[
            ValidationIssue(field="amount", issue_type="invalid_value", message="Amount must be greater than zero"),
            ValidationIssue(field="description", issue_type="missing", message="Description is required"),
        ])
        assert not result.is_valid
        assert result.error_count == 2
        assert result.summary() == "Amount must be greater than zero; Description is required"


class TestNotificationModels:
    """Tests for notification models."""

    def test_notification_creation(self):
        """Test Notification defaults."""
        notification = Notification(title="Transaction added")
        assert notification.level == NotificationLevel.INFO
        assert not notification.is_error

    def test_notification_to_log_dict(self):
        """Test conversion to log dictionary."""
        notification = Notification(
            level=NotificationLevel.ERROR,
            source=NotificationSource.BANKS,
            title="Failed to add bank",
            details={"table": "banks"},
        )
        log_dict = notification.to_log_dict()
        assert "notification_id" in log_dict
        assert log_dict["level"] == "error"
        assert log_dict["source"] == "banks"
        assert log_dict["details"]["table"] == "banks"
