"""Categories repository."""

from typing import Optional

from finance_tracker.aggregation import (
    categories_by_type,
    is_default_category,
    merge_categories,
)
from finance_tracker.models import Category, NotificationSource, TransactionType
from finance_tracker.repositories.base import CollectionRepository, to_row
from finance_tracker.services.storage import CATEGORIES


class CategoryRepository(CollectionRepository[Category]):
    """
    Built-in categories plus the user's own.

    Only user-defined categories are stored. Built-in ones are the same
    for everyone and can't be renamed or deleted. Deleting a category
    leaves its transactions alone; they show as "Unknown category".
    """

    table = CATEGORIES
    model = Category
    source = NotificationSource.CATEGORIES
    order_by = "created_at"
    descending = False
    label = "categories"

    @property
    def items(self) -> list[Category]:
        return merge_categories(self._items)

    @property
    def custom_items(self) -> list[Category]:
        return list(self._items)

    def get(self, category_id: str) -> Optional[Category]:
        for category in self.items:
            if category.id == category_id:
                return category
        return None

    def by_type(self, type: TransactionType) -> list[Category]:
        return categories_by_type(self.items, type)

    def _refuse_default(self, category_id: str) -> bool:
        if is_default_category(category_id):
            self._notifier.warning(
                "Built-in categories can't be changed",
                source=self.source,
                category=category_id,
            )
            return True
        return False

    async def add_category(
        self,
        name: str,
        type: TransactionType | str,
        icon: Optional[str] = None,
    ) -> Optional[Category]:
        user_id = self._require_user()
        if user_id is None:
            return None

        result = self._validator.validate_category(name, type)
        if not result.is_valid:
            self._reject(result)
            return None

        category = self._build(
            Category,
            user_id=user_id,
            name=name,
            type=type,
            icon=icon,
        )
        if category is None:
            return None

        async def insert() -> Category:
            await self._store.insert(self.table, to_row(category))
            return category

        return await self._mutate(
            insert,
            success="Category added",
            failure="Failed to add category",
        )

    async def update_category(
        self,
        category_id: str,
        name: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Optional[Category]:
        """Rename a category or change its icon; the type is fixed."""
        if self._require_user() is None or self._refuse_default(category_id):
            return None

        current = next((c for c in self._items if c.id == category_id), None)
        if current is None:
            self._notifier.error("Category not found", source=self.source)
            return None

        name = current.name if name is None else name
        result = self._validator.validate_category(name, current.type)
        if not result.is_valid:
            self._reject(result)
            return None

        updated = self._build(
            Category,
            **{
                **current.model_dump(),
                "name": name,
                "icon": current.icon if icon is None else (icon or None),
            },
        )
        if updated is None:
            return None

        async def update() -> Category:
            await self._store.update(
                self.table,
                category_id,
                {"name": updated.name, "icon": updated.icon},
            )
            return updated

        return await self._mutate(
            update,
            success="Category updated",
            failure="Failed to update category",
        )

    async def delete_category(self, category_id: str) -> bool:
        if self._require_user() is None or self._refuse_default(category_id):
            return False
        if not any(c.id == category_id for c in self._items):
            self._notifier.error("Category not found", source=self.source)
            return False

        async def delete() -> bool:
            return await self._store.delete(self.table, category_id)

        deleted = await self._mutate(
            delete,
            success="Category deleted",
            failure="Failed to delete category",
        )
        return bool(deleted)
