"""
Stats / Dashboard Aggregation

Filters first, then aggregates. All functions are pure: the same
transaction list always yields the same result.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from finance_tracker.aggregation.categories import category_label
from finance_tracker.aggregation.goals import month_key
from finance_tracker.models import (
    Category,
    CategoryTotal,
    DashboardSummary,
    FinanceStats,
    MonthlySummary,
    Transaction,
    TransactionFilter,
    TransactionType,
)


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: Optional[TransactionFilter] = None,
) -> list[Transaction]:
    """Apply every active criterion (logical AND)."""
    if criteria is None or criteria.is_empty:
        return list(transactions)
    return [t for t in transactions if criteria.matches(t)]


def compute_stats(transactions: Iterable[Transaction]) -> FinanceStats:
    income = Decimal("0")
    expenses = Decimal("0")
    count = 0
    for transaction in transactions:
        count += 1
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.amount

    return FinanceStats(
        income=income,
        expenses=expenses,
        balance=income - expenses,
        transaction_count=count,
    )


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: Optional[Iterable[Category]] = None,
) -> list[CategoryTotal]:
    """
    Expense totals per category, largest first.

    Ties are broken by category id so the order is stable. Each entry
    carries its share of total expenses as a percentage.
    """
    categories = list(categories) if categories is not None else None

    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for transaction in transactions:
        if transaction.type == TransactionType.EXPENSE:
            totals[transaction.category] += transaction.amount

    grand_total = sum(totals.values(), Decimal("0"))
    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))

    breakdown = []
    for category_id, amount in ordered:
        share = Decimal("0")
        if grand_total:
            share = (amount / grand_total * 100).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
        breakdown.append(CategoryTotal(
            category=category_id,
            label=category_label(category_id, categories),
            amount=amount,
            share=share,
        ))
    return breakdown


def summarize(
    transactions: Iterable[Transaction],
    criteria: Optional[TransactionFilter] = None,
    categories: Optional[Iterable[Category]] = None,
) -> DashboardSummary:
    """Dashboard values for one filter selection."""
    criteria = criteria or TransactionFilter()
    selected = filter_transactions(transactions, criteria)
    return DashboardSummary(
        criteria=criteria,
        stats=compute_stats(selected),
        category_breakdown=category_breakdown(selected, categories),
    )


def transactions_in_month(
    transactions: Iterable[Transaction],
    month: str,
) -> list[Transaction]:
    return [t for t in transactions if month_key(t.date) == month]


def monthly_summary(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
    categories: Optional[Iterable[Category]] = None,
) -> MonthlySummary:
    """Current month against the previous one, with current expenses by category."""
    today = today or date.today()
    transactions = list(transactions)

    current_month = month_key(today)
    previous_month = month_key(today.replace(day=1) - timedelta(days=1))
    current = transactions_in_month(transactions, current_month)

    return MonthlySummary(
        month=current_month,
        current=compute_stats(current),
        previous_month=previous_month,
        previous=compute_stats(transactions_in_month(transactions, previous_month)),
        expenses_by_category=category_breakdown(current, categories),
    )
