"""Spending goals repository."""

from datetime import date
from typing import Callable, Iterable, Optional

from finance_tracker.aggregation import (
    DEFAULT_CATEGORIES,
    current_month_key,
    evaluate_spending_goals,
)
from finance_tracker.models import (
    Category,
    NotificationSource,
    SpendingGoal,
    SpendingGoalProgress,
    Transaction,
)
from finance_tracker.repositories.base import CollectionRepository, to_row
from finance_tracker.services.storage import SPENDING_GOALS
from finance_tracker.validation.validator import AmountInput, parse_amount


class SpendingGoalRepository(CollectionRepository[SpendingGoal]):
    """
    Monthly spending limits per expense category.

    Adding a goal for a (category, month) that already has one replaces
    it: the new goal is inserted first, then every older goal with the
    same key is deleted.
    """

    table = SPENDING_GOALS
    model = SpendingGoal
    source = NotificationSource.SPENDING_GOALS
    order_by = "created_at"
    descending = True
    label = "goals"

    def __init__(
        self,
        *args,
        categories: Optional[Callable[[], list[Category]]] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._categories = categories or (lambda: list(DEFAULT_CATEGORIES))

    def progress(
        self,
        transactions: Iterable[Transaction],
        month: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[SpendingGoalProgress]:
        return evaluate_spending_goals(self._items, transactions, month, today)

    async def add_goal(
        self,
        category: str,
        limit: AmountInput,
        month: Optional[str] = None,
    ) -> Optional[SpendingGoal]:
        user_id = self._require_user()
        if user_id is None:
            return None

        month = month or current_month_key()
        result = self._validator.validate_spending_goal(
            category, limit, month, categories=self._categories(),
        )
        if not result.is_valid:
            self._reject(result)
            return None

        goal = self._build(
            SpendingGoal,
            user_id=user_id,
            category=category,
            limit=parse_amount(limit),
            month=month,
        )
        if goal is None:
            return None

        async def insert() -> SpendingGoal:
            await self._store.insert(self.table, to_row(goal))
            return goal

        async def remove_previous() -> None:
            previous = await self._store.select(
                self.table,
                filters={"user_id": user_id, "category": category, "month": month},
            )
            for row in previous:
                if row["id"] != goal.id:
                    await self._store.delete(self.table, row["id"])

        added = await self._mutate(
            insert,
            success="Goal added",
            failure="Failed to add goal",
        )
        if added is not None:
            # Progress keeps only the newest goal per month, so a leftover is harmless
            await self._cleanup(
                remove_previous,
                warning="Goal added, but the previous goal for this month could not be removed",
            )
        return added

    async def update_goal(self, goal_id: str, limit: AmountInput) -> Optional[SpendingGoal]:
        """Change a goal's limit; category and month stay as they are."""
        if self._require_user() is None:
            return None

        current = self.get(goal_id)
        if current is None:
            self._notifier.error("Goal not found", source=self.source)
            return None

        result = self._validator.validate_spending_goal(
            current.category, limit, current.month, categories=self._categories(),
        )
        # A goal whose category was since deleted can still be edited
        issues = [i for i in result.issues if i.field != "category"]
        if issues:
            self._reject(result.model_copy(update={"issues": issues}))
            return None

        new_limit = parse_amount(limit)

        async def update() -> SpendingGoal:
            await self._store.update(self.table, goal_id, {"limit": str(new_limit)})
            return current.model_copy(update={"limit": new_limit})

        return await self._mutate(
            update,
            success="Goal updated",
            failure="Failed to update goal",
        )

    async def delete_goal(self, goal_id: str) -> bool:
        if self._require_user() is None:
            return False
        if self.get(goal_id) is None:
            self._notifier.error("Goal not found", source=self.source)
            return False

        async def delete() -> bool:
            return await self._store.delete(self.table, goal_id)

        deleted = await self._mutate(
            delete,
            success="Goal deleted",
            failure="Failed to delete goal",
        )
        return bool(deleted)
