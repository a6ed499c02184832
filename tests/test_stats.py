"""Tests for dashboard stats and category breakdown."""

from datetime import date, datetime
from decimal import Decimal

from finance_tracker.aggregation import (
    UNKNOWN_CATEGORY_LABEL,
    category_breakdown,
    compute_stats,
    filter_transactions,
    monthly_summary,
    summarize,
)
from finance_tracker.models import Category, TransactionFilter, TransactionType


class TestComputeStats:
    """Tests for income / expense / balance totals."""

    def test_totals(self, make_transaction):
        transactions = [
            make_transaction("3000", "income", "salary"),
            make_transaction("200", "expense", "food"),
            make_transaction("300.50", "expense", "transport"),
        ]
        stats = compute_stats(transactions)
        assert stats.income == Decimal("3000")
        assert stats.expenses == Decimal("500.50")
        assert stats.balance == Decimal("2499.50")
        assert stats.transaction_count == 3

    def test_empty(self):
        stats = compute_stats([])
        assert stats.income == stats.expenses == stats.balance == Decimal("0")
        assert stats.transaction_count == 0

    def test_idempotent(self, make_transaction):
        """Test computing twice on unchanged input gives identical results."""
        transactions = [
            make_transaction("10", "income", "salary"),
            make_transaction("7", "expense", "food"),
        ]
        assert compute_stats(transactions) == compute_stats(transactions)
        assert summarize(transactions) == summarize(transactions)


class TestCategoryBreakdown:
    """Tests for the expense breakdown."""

    def test_sorted_descending_with_shares(self, make_transaction):
        transactions = [
            make_transaction("100", category="food"),
            make_transaction("300", category="housing"),
            make_transaction("100", category="food"),
            make_transaction("999", "income", category="salary"),
        ]
        breakdown = category_breakdown(transactions)

        assert [c.category for c in breakdown] == ["housing", "food"]
        assert [c.amount for c in breakdown] == [Decimal("300"), Decimal("200")]
        assert [c.share for c in breakdown] == [Decimal("60.00"), Decimal("40.00")]
        assert breakdown[0].label == "Housing"

    def test_ties_are_ordered_by_category_id(self, make_transaction):
        transactions = [
            make_transaction("50", category="transport"),
            make_transaction("50", category="bills"),
        ]
        assert [c.category for c in category_breakdown(transactions)] == ["bills", "transport"]

    def test_orphaned_category_label(self, make_transaction):
        """Test a deleted category shows as Unknown category."""
        [entry] = category_breakdown([make_transaction("10", category="deleted-id")])
        assert entry.label == UNKNOWN_CATEGORY_LABEL

    def test_custom_category_label(self, make_transaction):
        pets = Category(id="pets", name="Pets", type="expense")
        [entry] = category_breakdown([make_transaction("10", category="pets")], [pets])
        assert entry.label == "Pets"

    def test_no_expenses(self, make_transaction):
        assert category_breakdown([make_transaction("10", "income", "salary")]) == []


class TestFilters:
    """Tests for composable filters."""

    def test_filter_composition(self, make_transaction):
        """type=expense AND category=food AND date in June."""
        match = make_transaction("10", "expense", "food", datetime(2025, 6, 15))
        transactions = [
            match,
            make_transaction("10", "income", "food", datetime(2025, 6, 15)),
            make_transaction("10", "expense", "transport", datetime(2025, 6, 15)),
            make_transaction("10", "expense", "food", datetime(2025, 7, 1)),
            make_transaction("10", "expense", "food", datetime(2025, 5, 31, 23, 59)),
        ]
        criteria = TransactionFilter(
            type=TransactionType.EXPENSE,
            category="food",
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 30),
        )
        assert filter_transactions(transactions, criteria) == [match]

    def test_end_date_includes_whole_day(self, make_transaction):
        late = make_transaction("10", when=datetime(2025, 6, 30, 23, 59, 59))
        criteria = TransactionFilter(end_date=date(2025, 6, 30))
        assert filter_transactions([late], criteria) == [late]

    def test_bank_filter(self, make_transaction):
        in_bank = make_transaction("10", bank_id="b1")
        transactions = [in_bank, make_transaction("10", bank_id="b2"), make_transaction("10")]
        assert filter_transactions(transactions, TransactionFilter(bank_id="b1")) == [in_bank]

    def test_no_criteria_keeps_everything(self, make_transaction):
        transactions = [make_transaction("1"), make_transaction("2")]
        assert filter_transactions(transactions) == transactions

    def test_summarize_applies_filter_before_aggregating(self, make_transaction):
        transactions = [
            make_transaction("100", "expense", "food"),
            make_transaction("40", "expense", "transport"),
            make_transaction("500", "income", "salary"),
        ]
        summary = summarize(transactions, TransactionFilter(type="expense"))
        assert summary.stats.income == Decimal("0")
        assert summary.stats.expenses == Decimal("140")
        assert summary.stats.transaction_count == 2
        assert [c.category for c in summary.category_breakdown] == ["food", "transport"]


class TestMonthlySummary:
    """Tests for the current vs previous month summary."""

    def test_current_and_previous_month(self, make_transaction):
        transactions = [
            make_transaction("1000", "income", "salary", datetime(2025, 6, 5)),
            make_transaction("300", "expense", "food", datetime(2025, 6, 10)),
            make_transaction("900", "income", "salary", datetime(2025, 5, 5)),
            make_transaction("200", "expense", "food", datetime(2025, 5, 20)),
            make_transaction("50", "expense", "food", datetime(2025, 4, 20)),
        ]
        summary = monthly_summary(transactions, today=date(2025, 6, 15))

        assert summary.month == "2025-06"
        assert summary.previous_month == "2025-05"
        assert summary.current.balance == Decimal("700")
        assert summary.previous.expenses == Decimal("200")
        assert [c.category for c in summary.expenses_by_category] == ["food"]

    def test_january_previous_month_is_december(self):
        summary = monthly_summary([], today=date(2025, 1, 3))
        assert summary.previous_month == "2024-12"
