"""
Goal Engine

Spending goals: a monthly limit per expense category, compared with the
actual expenses booked in that category during the goal's month.

Savings goals: a target amount reached through deposits.

DESIGN DECISION: Savings progress is never stored. current_amount,
status and completed_at are projected from the live deposit ledger on
every read, so deleting a deposit can re-open a completed goal.
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from finance_tracker.models import (
    GoalDeposit,
    GoalStatus,
    SavingsGoal,
    SavingsGoalProgress,
    SpendingGoal,
    SpendingGoalProgress,
    Transaction,
    TransactionType,
)


HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole as a percentage, capped to [0, 100]."""
    value = (part / whole * HUNDRED).quantize(_CENT, rounding=ROUND_HALF_UP)
    return max(min(value, HUNDRED), Decimal("0"))


# =============================================================================
# SPENDING GOALS
# =============================================================================

def month_key(value: date | datetime) -> str:
    """Calendar month key, e.g. 2025-06."""
    return f"{value.year:04d}-{value.month:02d}"


def current_month_key(today: Optional[date] = None) -> str:
    return month_key(today or date.today())


def spent_by_category(
    transactions: Iterable[Transaction],
    month: str,
) -> dict[str, Decimal]:
    """Sum of expense amounts per category for one month key."""
    sums: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        if month_key(transaction.date) != month:
            continue
        sums[transaction.category] += transaction.amount
    return dict(sums)


def latest_goal_per_key(goals: Iterable[SpendingGoal]) -> list[SpendingGoal]:
    """
    Keep one goal per (category, month): the most recently created.

    Replacing a goal is insert-then-delete; if the delete half fails
    the older row is still ignored here.
    """
    latest: dict[tuple[str, str], SpendingGoal] = {}
    for goal in goals:
        kept = latest.get(goal.key)
        if kept is None or goal.created_at >= kept.created_at:
            latest[goal.key] = goal
    return list(latest.values())


def evaluate_spending_goal(goal: SpendingGoal, spent: Decimal) -> SpendingGoalProgress:
    return SpendingGoalProgress(
        goal=goal,
        spent=spent,
        percentage=_percentage(spent, goal.limit),
        is_over_limit=spent > goal.limit,
        remaining=goal.limit - spent,
    )


def evaluate_spending_goals(
    goals: Iterable[SpendingGoal],
    transactions: Iterable[Transaction],
    month: Optional[str] = None,
    today: Optional[date] = None,
) -> list[SpendingGoalProgress]:
    """
    Evaluate every goal of one month (the current month by default).

    Args:
        goals: All spending goals of the user
        transactions: All transactions of the user
        month: Month key to evaluate; defaults to the month of `today`
        today: Reference date for the current month

    Returns:
        One progress entry per (category, month), in goal creation order
    """
    month = month or current_month_key(today)
    sums = spent_by_category(transactions, month)
    month_goals = latest_goal_per_key(g for g in goals if g.month == month)
    month_goals.sort(key=lambda g: (g.created_at, g.id))
    return [
        evaluate_spending_goal(goal, sums.get(goal.category, Decimal("0")))
        for goal in month_goals
    ]


# =============================================================================
# SAVINGS GOALS
# =============================================================================

def ledger_order(deposits: Iterable[GoalDeposit]) -> list[GoalDeposit]:
    """Deposits in booking order: deposit date, then creation time."""
    return sorted(deposits, key=lambda d: (d.date, d.created_at, d.id))


def project_savings_goal(
    goal: SavingsGoal,
    deposits: Iterable[GoalDeposit],
) -> SavingsGoalProgress:
    """
    Project a savings goal from its deposits.

    Deposits of other goals are ignored. completed_at is the creation
    time of the deposit whose running sum first reached the target.
    """
    ledger = ledger_order(d for d in deposits if d.goal_id == goal.id)

    current = Decimal("0")
    completed_at: Optional[datetime] = None
    for deposit in ledger:
        current += deposit.amount
        if completed_at is None and current >= goal.target_amount:
            completed_at = deposit.created_at

    is_completed = current >= goal.target_amount
    return SavingsGoalProgress(
        goal=goal,
        deposits=ledger,
        current_amount=current,
        percentage=_percentage(current, goal.target_amount),
        remaining=max(goal.target_amount - current, Decimal("0")),
        status=GoalStatus.COMPLETED if is_completed else GoalStatus.ACTIVE,
        completed_at=completed_at if is_completed else None,
    )


def project_savings_goals(
    goals: Iterable[SavingsGoal],
    deposits: Iterable[GoalDeposit],
) -> list[SavingsGoalProgress]:
    deposits = list(deposits)
    return [project_savings_goal(goal, deposits) for goal in goals]


def split_savings_goals(
    progress: Iterable[SavingsGoalProgress],
) -> tuple[list[SavingsGoalProgress], list[SavingsGoalProgress]]:
    """Split into (active, completed), keeping input order."""
    active, completed = [], []
    for item in progress:
        (completed if item.is_completed else active).append(item)
    return active, completed
