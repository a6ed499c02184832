"""
Category Registry

Thirteen built-in categories are always available; users add their own
on top. Transactions reference categories by id, and a category id with
no matching entry (deleted category) is shown as "Unknown category".
"""

from typing import Iterable, Optional

from finance_tracker.models import Category, TransactionType


UNKNOWN_CATEGORY_LABEL = "Unknown category"

_INCOME = TransactionType.INCOME
_EXPENSE = TransactionType.EXPENSE

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="salary", name="Salary", type=_INCOME),
    Category(id="freelance", name="Freelance", type=_INCOME),
    Category(id="investment", name="Investment", type=_INCOME),
    Category(id="other-income", name="Other income", type=_INCOME),
    Category(id="food", name="Food", type=_EXPENSE),
    Category(id="transport", name="Transport", type=_EXPENSE),
    Category(id="housing", name="Housing", type=_EXPENSE),
    Category(id="entertainment", name="Entertainment", type=_EXPENSE),
    Category(id="health", name="Health", type=_EXPENSE),
    Category(id="education", name="Education", type=_EXPENSE),
    Category(id="shopping", name="Shopping", type=_EXPENSE),
    Category(id="bills", name="Bills", type=_EXPENSE),
    Category(id="other-expense", name="Other expenses", type=_EXPENSE),
)

DEFAULT_CATEGORY_IDS = frozenset(c.id for c in DEFAULT_CATEGORIES)


def is_default_category(category_id: str) -> bool:
    return category_id in DEFAULT_CATEGORY_IDS


def merge_categories(custom: Iterable[Category]) -> list[Category]:
    """Built-in categories followed by the user's own."""
    return list(DEFAULT_CATEGORIES) + [
        c for c in custom if c.id not in DEFAULT_CATEGORY_IDS
    ]


def find_category(
    category_id: str,
    categories: Optional[Iterable[Category]] = None,
) -> Optional[Category]:
    pool = DEFAULT_CATEGORIES if categories is None else categories
    for category in pool:
        if category.id == category_id:
            return category
    return None


def category_label(
    category_id: str,
    categories: Optional[Iterable[Category]] = None,
) -> str:
    """Display name for a category id, tolerating orphaned references."""
    category = find_category(category_id, categories)
    return category.name if category else UNKNOWN_CATEGORY_LABEL


def categories_by_type(
    categories: Iterable[Category],
    type: TransactionType,
) -> list[Category]:
    return [c for c in categories if c.type == type]
