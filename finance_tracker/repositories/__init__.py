"""
Repositories Package

One repository per collection. Each keeps the signed-in user's rows in
memory, refetches on store changes and after its own mutations, and
reports outcomes through the Notifier.
"""

from finance_tracker.repositories.banks import BankRepository
from finance_tracker.repositories.base import (
    SIGNED_OUT_MESSAGE,
    CollectionRepository,
    to_row,
)
from finance_tracker.repositories.categories import CategoryRepository
from finance_tracker.repositories.savings_goals import SavingsGoalRepository
from finance_tracker.repositories.spending_goals import SpendingGoalRepository
from finance_tracker.repositories.transactions import TransactionRepository

__all__ = [
    "SIGNED_OUT_MESSAGE",
    "BankRepository",
    "CategoryRepository",
    "CollectionRepository",
    "SavingsGoalRepository",
    "SpendingGoalRepository",
    "TransactionRepository",
    "to_row",
]
