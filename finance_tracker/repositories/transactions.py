"""Transactions repository."""

from datetime import date, datetime
from typing import Callable, Optional

from finance_tracker.aggregation import DEFAULT_CATEGORIES, filter_transactions
from finance_tracker.models import (
    Bank,
    Category,
    NotificationSource,
    Transaction,
    TransactionFilter,
    TransactionType,
)
from finance_tracker.repositories.base import CollectionRepository, to_row
from finance_tracker.services.storage import TRANSACTIONS
from finance_tracker.validation.validator import AmountInput, parse_amount


class TransactionRepository(CollectionRepository[Transaction]):
    """
    The user's transactions, newest first.

    Category and bank lookups are injected so input can be checked
    against what the user actually has.
    """

    table = TRANSACTIONS
    model = Transaction
    source = NotificationSource.TRANSACTIONS
    order_by = "date"
    descending = True
    label = "transactions"

    def __init__(
        self,
        *args,
        categories: Optional[Callable[[], list[Category]]] = None,
        banks: Optional[Callable[[], list[Bank]]] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._categories = categories or (lambda: list(DEFAULT_CATEGORIES))
        self._banks = banks or (lambda: [])

    def filtered(self, criteria: Optional[TransactionFilter] = None) -> list[Transaction]:
        return filter_transactions(self._items, criteria)

    async def add_transaction(
        self,
        description: str,
        amount: AmountInput,
        type: TransactionType | str,
        category: str,
        date: Optional[date | datetime] = None,
        bank_id: Optional[str] = None,
    ) -> Optional[Transaction]:
        user_id = self._require_user()
        if user_id is None:
            return None

        result = self._validator.validate_transaction(
            description=description,
            amount=amount,
            type=type,
            category=category,
            bank_id=bank_id,
            categories=self._categories(),
            banks=self._banks(),
        )
        if not result.is_valid:
            self._reject(result)
            return None

        transaction = self._build(
            Transaction,
            user_id=user_id,
            description=description,
            amount=parse_amount(amount),
            type=type,
            category=category,
            date=date or datetime.utcnow(),
            bank_id=bank_id,
        )
        if transaction is None:
            return None

        async def insert() -> Transaction:
            await self._store.insert(self.table, to_row(transaction))
            return transaction

        return await self._mutate(
            insert,
            success="Transaction added",
            failure="Failed to add transaction",
        )

    async def update_transaction(
        self,
        transaction_id: str,
        description: Optional[str] = None,
        amount: AmountInput = None,
        type: TransactionType | str | None = None,
        category: Optional[str] = None,
        date: Optional[date | datetime] = None,
        bank_id: Optional[str] = None,
    ) -> Optional[Transaction]:
        """Update the given fields; the merged transaction is re-validated."""
        if self._require_user() is None:
            return None

        current = self.get(transaction_id)
        if current is None:
            self._notifier.error("Transaction not found", source=self.source)
            return None

        merged = {
            "description": current.description if description is None else description,
            "amount": current.amount if amount is None else amount,
            "type": current.type if type is None else type,
            "category": current.category if category is None else category,
            # "" clears the bank
            "bank_id": current.bank_id if bank_id is None else (bank_id or None),
        }
        result = self._validator.validate_transaction(
            **merged,
            categories=self._categories(),
            banks=self._banks(),
        )
        # A category or bank deleted since is only checked if it is being changed
        unchanged = set()
        if category is None:
            unchanged.add("category")
        if bank_id is None:
            unchanged.add("bank_id")
        issues = [
            i for i in result.issues
            if not (i.field in unchanged and i.issue_type == "not_found")
        ]
        if any(i.severity == "error" for i in issues):
            self._reject(result.model_copy(update={"issues": issues}))
            return None

        updated = self._build(
            Transaction,
            **{
                **current.model_dump(),
                **merged,
                "amount": parse_amount(merged["amount"]),
                "date": current.date if date is None else date,
            },
        )
        if updated is None:
            return None

        async def update() -> Transaction:
            patch = to_row(updated)
            del patch["id"]
            await self._store.update(self.table, transaction_id, patch)
            return updated

        return await self._mutate(
            update,
            success="Transaction updated",
            failure="Failed to update transaction",
        )

    async def delete_transaction(self, transaction_id: str) -> bool:
        if self._require_user() is None:
            return False
        if self.get(transaction_id) is None:
            self._notifier.error("Transaction not found", source=self.source)
            return False

        async def delete() -> bool:
            return await self._store.delete(self.table, transaction_id)

        deleted = await self._mutate(
            delete,
            success="Transaction deleted",
            failure="Failed to delete transaction",
        )
        return bool(deleted)
