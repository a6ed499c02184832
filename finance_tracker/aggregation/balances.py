"""
Bank Balance Aggregation

Two modes, chosen by whether a reporting period is given:

- Absolute balance (no period): initial_balance plus every signed
  transaction amount that references the bank.
- Period movement: starts at zero and only folds transactions dated
  inside the inclusive period, giving the net movement for that period.
"""

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from finance_tracker.models import (
    Bank,
    BankBalance,
    BanksOverview,
    DateRange,
    Transaction,
)


class ReportingPeriod(str, Enum):
    """Reporting period presets for the banks view."""
    ALL_TIME = "all_time"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    LAST_3_MONTHS = "last_3_months"
    THIS_YEAR = "this_year"

    def resolve(self, today: Optional[date] = None) -> Optional[DateRange]:
        """
        Turn the preset into a concrete date range.

        Returns None for ALL_TIME, which selects absolute balance mode.
        """
        today = today or date.today()
        month_start = today.replace(day=1)

        if self == ReportingPeriod.ALL_TIME:
            return None
        if self == ReportingPeriod.THIS_MONTH:
            return DateRange(start=month_start, end=today)
        if self == ReportingPeriod.LAST_MONTH:
            end = month_start - timedelta(days=1)
            return DateRange(start=end.replace(day=1), end=end)
        if self == ReportingPeriod.LAST_3_MONTHS:
            year, month = today.year, today.month - 2
            if month < 1:
                year, month = year - 1, month + 12
            return DateRange(start=date(year, month, 1), end=today)
        # THIS_YEAR
        return DateRange(start=date(today.year, 1, 1), end=today)


def _bank_transactions(
    bank: Bank,
    transactions: Iterable[Transaction],
    period: Optional[DateRange],
) -> list[Transaction]:
    return [
        t for t in transactions
        if t.bank_id == bank.id and (period is None or period.contains(t.date))
    ]


def calculate_bank_balance(
    bank: Bank,
    transactions: Iterable[Transaction],
    period: Optional[DateRange] = None,
) -> Decimal:
    """
    Balance of one bank.

    Args:
        bank: The bank to evaluate
        transactions: Any transaction collection; only rows whose
            bank_id matches are used
        period: Optional inclusive range; switches to net-movement mode

    Returns:
        initial_balance + signed amounts, or the period's net movement
    """
    balance = bank.initial_balance if period is None else Decimal("0")
    for transaction in _bank_transactions(bank, transactions, period):
        balance += transaction.signed_amount
    return balance


def summarize_banks(
    banks: Iterable[Bank],
    transactions: Iterable[Transaction],
    period: Optional[DateRange] = None,
) -> BanksOverview:
    """Balance of every bank plus the total across banks."""
    transactions = list(transactions)
    balances = []
    for bank in banks:
        matched = _bank_transactions(bank, transactions, period)
        balances.append(BankBalance(
            bank=bank,
            balance=calculate_bank_balance(bank, matched, period),
            transaction_count=len(matched),
            period=period,
        ))

    total = sum((b.balance for b in balances), Decimal("0"))
    return BanksOverview(balances=balances, total=total, period=period)
