"""Banks repository."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.aggregation import calculate_bank_balance, summarize_banks
from finance_tracker.models import (
    Bank,
    BanksOverview,
    DateRange,
    NotificationSource,
    Transaction,
)
from finance_tracker.repositories.base import CollectionRepository, to_row
from finance_tracker.services.storage import BANKS
from finance_tracker.validation.validator import AmountInput, parse_amount


class BankRepository(CollectionRepository[Bank]):
    """
    The user's banks, oldest first.

    Deleting a bank leaves its transactions in place; their bank_id
    simply no longer matches any bank.
    """

    table = BANKS
    model = Bank
    source = NotificationSource.BANKS
    order_by = "created_at"
    descending = False
    label = "banks"

    def calculate_bank_balance(
        self,
        bank: Bank,
        transactions: Iterable[Transaction],
        period: Optional[DateRange] = None,
    ) -> Decimal:
        return calculate_bank_balance(bank, transactions, period)

    def overview(
        self,
        transactions: Iterable[Transaction],
        period: Optional[DateRange] = None,
    ) -> BanksOverview:
        return summarize_banks(self._items, transactions, period)

    async def add_bank(
        self,
        name: str,
        initial_balance: AmountInput = 0,
        color: str = "#3b82f6",
        icon: Optional[str] = None,
    ) -> Optional[Bank]:
        user_id = self._require_user()
        if user_id is None:
            return None

        result = self._validator.validate_bank(name, initial_balance, color)
        if not result.is_valid:
            self._reject(result)
            return None

        bank = self._build(
            Bank,
            user_id=user_id,
            name=name,
            initial_balance=parse_amount(initial_balance) or Decimal("0"),
            color=color,
            icon=icon,
        )
        if bank is None:
            return None

        async def insert() -> Bank:
            await self._store.insert(self.table, to_row(bank))
            return bank

        return await self._mutate(
            insert,
            success="Bank added",
            failure="Failed to add bank",
        )

    async def update_bank(
        self,
        bank_id: str,
        name: Optional[str] = None,
        initial_balance: AmountInput = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Optional[Bank]:
        if self._require_user() is None:
            return None

        current = self.get(bank_id)
        if current is None:
            self._notifier.error("Bank not found", source=self.source)
            return None

        name = current.name if name is None else name
        balance = current.initial_balance if initial_balance is None else initial_balance
        color = current.color if color is None else color

        result = self._validator.validate_bank(name, balance, color)
        if not result.is_valid:
            self._reject(result)
            return None

        updated = self._build(
            Bank,
            **{
                **current.model_dump(),
                "name": name,
                "initial_balance": parse_amount(balance) or Decimal("0"),
                "color": color,
                "icon": current.icon if icon is None else (icon or None),
                "updated_at": datetime.utcnow(),
            },
        )
        if updated is None:
            return None

        async def update() -> Bank:
            patch = to_row(updated)
            del patch["id"]
            await self._store.update(self.table, bank_id, patch)
            return updated

        return await self._mutate(
            update,
            success="Bank updated",
            failure="Failed to update bank",
        )

    async def delete_bank(self, bank_id: str) -> bool:
        if self._require_user() is None:
            return False
        if self.get(bank_id) is None:
            self._notifier.error("Bank not found", source=self.source)
            return False

        async def delete() -> bool:
            return await self._store.delete(self.table, bank_id)

        deleted = await self._mutate(
            delete,
            success="Bank removed",
            failure="Failed to remove bank",
        )
        return bool(deleted)
