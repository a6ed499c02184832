"""Shared fixtures: model factories and an in-memory tracker."""

from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from finance_tracker.models import (
    Bank,
    GoalDeposit,
    SavingsGoal,
    SpendingGoal,
    Transaction,
)
from finance_tracker.notifications import Notifier
from finance_tracker.orchestrator import FinanceTracker
from finance_tracker.formatting import CurrencyPreference
from finance_tracker.services.auth import SessionAuthProvider
from finance_tracker.services.storage import InMemoryTableStore, MemoryKeyValueStorage


@pytest.fixture
def make_transaction():
    def factory(
        amount,
        type="expense",
        category="food",
        when=datetime(2025, 6, 10, 12, 0),
        bank_id=None,
        description="Test transaction",
    ):
        return Transaction(
            description=description,
            amount=Decimal(str(amount)),
            type=type,
            category=category,
            date=when,
            bank_id=bank_id,
        )
    return factory


@pytest.fixture
def make_bank():
    def factory(initial_balance="0", name="Checking", id=None):
        fields = {"name": name, "initial_balance": Decimal(str(initial_balance))}
        if id:
            fields["id"] = id
        return Bank(**fields)
    return factory


@pytest.fixture
def make_spending_goal():
    def factory(category="food", limit="500", month="2025-06", created_at=None):
        fields = {"category": category, "limit": Decimal(str(limit)), "month": month}
        if created_at:
            fields["created_at"] = created_at
        return SpendingGoal(**fields)
    return factory


@pytest.fixture
def make_savings_goal():
    def factory(target="3000", name="Emergency fund"):
        return SavingsGoal(name=name, target_amount=Decimal(str(target)))
    return factory


@pytest.fixture
def make_deposit():
    def factory(goal, amount, when=datetime(2025, 6, 1), created_at=None):
        fields = {"goal_id": goal.id, "amount": Decimal(str(amount)), "date": when}
        if created_at:
            fields["created_at"] = created_at
        return GoalDeposit(**fields)
    return factory


@pytest.fixture
def kv_storage():
    return MemoryKeyValueStorage()


@pytest.fixture
def store(kv_storage):
    return InMemoryTableStore(kv_storage)


@pytest.fixture
def notifier():
    return Notifier(history_size=20)


@pytest_asyncio.fixture
async def tracker(store, kv_storage, notifier):
    """A started tracker with user-1 signed in."""
    app = FinanceTracker(
        store=store,
        auth=SessionAuthProvider(),
        notifier=notifier,
        currency=CurrencyPreference(kv_storage),
    )
    await app.start()
    await app.sign_in("user-1")
    yield app
    await app.close()
