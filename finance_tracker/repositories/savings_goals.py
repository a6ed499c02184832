"""Savings goals and their deposit ledger."""

from datetime import date, datetime
from typing import Optional

from finance_tracker.aggregation import (
    project_savings_goal,
    project_savings_goals,
    split_savings_goals,
)
from finance_tracker.models import (
    GoalDeposit,
    NotificationSource,
    SavingsGoal,
    SavingsGoalProgress,
)
from finance_tracker.repositories.base import CollectionRepository, to_row
from finance_tracker.services.storage import GOAL_DEPOSITS, SAVINGS_GOALS
from finance_tracker.validation.validator import AmountInput, parse_amount


class SavingsGoalRepository(CollectionRepository[SavingsGoal]):
    """
    Savings goals plus every deposit made toward them.

    Progress is always projected from the deposits currently loaded;
    nothing about progress is written back to the goal row.
    """

    table = SAVINGS_GOALS
    model = SavingsGoal
    source = NotificationSource.SAVINGS_GOALS
    order_by = "created_at"
    descending = True
    label = "savings goals"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._deposits: list[GoalDeposit] = []

    @property
    def deposits(self) -> list[GoalDeposit]:
        return list(self._deposits)

    def _watched_tables(self) -> tuple[str, ...]:
        return (SAVINGS_GOALS, GOAL_DEPOSITS)

    def _clear(self) -> None:
        super()._clear()
        self._deposits = []

    async def _load(self, user_id: str) -> None:
        goals = await self._fetch(SAVINGS_GOALS, SavingsGoal, user_id)
        deposits = await self._fetch(
            GOAL_DEPOSITS, GoalDeposit, user_id, order_by="date", descending=False,
        )
        self._items = goals
        self._deposits = deposits

    # =========================================================================
    # PROGRESS
    # =========================================================================

    def get_progress(self, goal_id: str) -> Optional[SavingsGoalProgress]:
        goal = self.get(goal_id)
        if goal is None:
            return None
        return project_savings_goal(goal, self._deposits)

    def progress(self) -> list[SavingsGoalProgress]:
        return project_savings_goals(self._items, self._deposits)

    def split(self) -> tuple[list[SavingsGoalProgress], list[SavingsGoalProgress]]:
        """(active, completed)"""
        return split_savings_goals(self.progress())

    # =========================================================================
    # GOALS
    # =========================================================================

    async def add_goal(
        self,
        name: str,
        target_amount: AmountInput,
        description: Optional[str] = None,
    ) -> Optional[SavingsGoal]:
        user_id = self._require_user()
        if user_id is None:
            return None

        result = self._validator.validate_savings_goal(name, target_amount)
        if not result.is_valid:
            self._reject(result)
            return None

        goal = self._build(
            SavingsGoal,
            user_id=user_id,
            name=name,
            description=description or None,
            target_amount=parse_amount(target_amount),
        )
        if goal is None:
            return None

        async def insert() -> SavingsGoal:
            await self._store.insert(SAVINGS_GOALS, to_row(goal))
            return goal

        return await self._mutate(
            insert,
            success="Goal created",
            failure="Failed to create goal",
        )

    async def update_goal(
        self,
        goal_id: str,
        name: Optional[str] = None,
        target_amount: AmountInput = None,
        description: Optional[str] = None,
    ) -> Optional[SavingsGoal]:
        if self._require_user() is None:
            return None

        current = self.get(goal_id)
        if current is None:
            self._notifier.error("Goal not found", source=self.source)
            return None

        name = current.name if name is None else name
        target = current.target_amount if target_amount is None else target_amount
        result = self._validator.validate_savings_goal(name, target)
        if not result.is_valid:
            self._reject(result)
            return None

        updated = self._build(
            SavingsGoal,
            **{
                **current.model_dump(),
                "name": name,
                "target_amount": parse_amount(target),
                "description": (
                    current.description if description is None else (description or None)
                ),
            },
        )
        if updated is None:
            return None

        async def update() -> SavingsGoal:
            patch = to_row(updated)
            del patch["id"]
            await self._store.update(SAVINGS_GOALS, goal_id, patch)
            return updated

        return await self._mutate(
            update,
            success="Goal updated",
            failure="Failed to update goal",
        )

    async def delete_goal(self, goal_id: str) -> bool:
        """
        Delete a goal, then all of its deposits.

        The goal row goes first: if removing the deposits then fails,
        they are orphans that no goal projects, never a goal with a
        silently emptied ledger.
        """
        user_id = self._require_user()
        if user_id is None:
            return False
        if self.get(goal_id) is None:
            self._notifier.error("Goal not found", source=self.source)
            return False

        async def delete() -> bool:
            return await self._store.delete(SAVINGS_GOALS, goal_id)

        async def delete_deposits() -> int:
            return await self._store.delete_where(
                GOAL_DEPOSITS, {"user_id": user_id, "goal_id": goal_id},
            )

        deleted = await self._mutate(
            delete,
            success="Goal deleted",
            failure="Failed to delete goal",
        )
        if not deleted:
            return False
        await self._cleanup(
            delete_deposits,
            warning="Goal deleted, but its deposits could not be removed",
        )
        return True

    # =========================================================================
    # DEPOSITS
    # =========================================================================

    async def add_deposit(
        self,
        goal_id: str,
        amount: AmountInput,
        description: Optional[str] = None,
        date: Optional[date | datetime] = None,
    ) -> Optional[GoalDeposit]:
        """Record a deposit; refused for unknown or already completed goals."""
        user_id = self._require_user()
        if user_id is None:
            return None

        result = self._validator.validate_deposit(self.get_progress(goal_id), amount)
        if not result.is_valid:
            self._reject(result)
            return None

        deposit = self._build(
            GoalDeposit,
            user_id=user_id,
            goal_id=goal_id,
            amount=parse_amount(amount),
            description=description or None,
            date=date or datetime.utcnow(),
        )
        if deposit is None:
            return None

        async def insert() -> GoalDeposit:
            await self._store.insert(GOAL_DEPOSITS, to_row(deposit))
            return deposit

        added = await self._mutate(
            insert,
            success="Deposit added",
            failure="Failed to add deposit",
        )
        if added is not None:
            progress = self.get_progress(goal_id)
            if progress is not None and progress.is_completed:
                self._notifier.success(
                    "Goal reached!",
                    f"'{progress.goal.name}' is complete",
                    source=self.source,
                )
        return added

    async def delete_deposit(self, deposit_id: str) -> bool:
        if self._require_user() is None:
            return False
        if not any(d.id == deposit_id for d in self._deposits):
            self._notifier.error("Deposit not found", source=self.source)
            return False

        async def delete() -> bool:
            return await self._store.delete(GOAL_DEPOSITS, deposit_id)

        deleted = await self._mutate(
            delete,
            success="Deposit removed",
            failure="Failed to remove deposit",
        )
        return bool(deleted)
