"""
Data Models Package

This package contains all Pydantic models used by Finance Tracker.
Every row read from or written to a store passes through these schemas.
"""

from finance_tracker.models.finance import (
    Bank,
    BankBalance,
    BanksOverview,
    Category,
    CategoryTotal,
    CurrencyCode,
    DashboardSummary,
    DateRange,
    FinanceStats,
    GoalDeposit,
    GoalStatus,
    MonthlySummary,
    SavingsGoal,
    SavingsGoalProgress,
    SpendingGoal,
    SpendingGoalProgress,
    Transaction,
    TransactionFilter,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from finance_tracker.models.notification import (
    Notification,
    NotificationLevel,
    NotificationSource,
)

__all__ = [
    # Entities
    "Bank",
    "Category",
    "GoalDeposit",
    "SavingsGoal",
    "SpendingGoal",
    "Transaction",
    # Enums
    "CurrencyCode",
    "GoalStatus",
    "TransactionType",
    # Filters
    "DateRange",
    "TransactionFilter",
    # Derived values
    "BankBalance",
    "BanksOverview",
    "CategoryTotal",
    "DashboardSummary",
    "FinanceStats",
    "MonthlySummary",
    "SavingsGoalProgress",
    "SpendingGoalProgress",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Notifications
    "Notification",
    "NotificationLevel",
    "NotificationSource",
]
