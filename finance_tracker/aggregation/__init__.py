"""
Aggregation Package

Pure functions that derive dashboard values from fetched collections:
bank balances, spending and savings goal progress, totals and category
breakdowns. Nothing here touches storage.
"""

from finance_tracker.aggregation.balances import (
    ReportingPeriod,
    calculate_bank_balance,
    summarize_banks,
)
from finance_tracker.aggregation.categories import (
    DEFAULT_CATEGORIES,
    UNKNOWN_CATEGORY_LABEL,
    categories_by_type,
    category_label,
    find_category,
    is_default_category,
    merge_categories,
)
from finance_tracker.aggregation.goals import (
    current_month_key,
    evaluate_spending_goal,
    evaluate_spending_goals,
    latest_goal_per_key,
    ledger_order,
    month_key,
    project_savings_goal,
    project_savings_goals,
    spent_by_category,
    split_savings_goals,
)
from finance_tracker.aggregation.stats import (
    category_breakdown,
    compute_stats,
    filter_transactions,
    monthly_summary,
    summarize,
    transactions_in_month,
)

__all__ = [
    # Balances
    "ReportingPeriod",
    "calculate_bank_balance",
    "summarize_banks",
    # Categories
    "DEFAULT_CATEGORIES",
    "UNKNOWN_CATEGORY_LABEL",
    "categories_by_type",
    "category_label",
    "find_category",
    "is_default_category",
    "merge_categories",
    # Goals
    "current_month_key",
    "evaluate_spending_goal",
    "evaluate_spending_goals",
    "latest_goal_per_key",
    "ledger_order",
    "month_key",
    "project_savings_goal",
    "project_savings_goals",
    "spent_by_category",
    "split_savings_goals",
    # Stats
    "category_breakdown",
    "compute_stats",
    "filter_transactions",
    "monthly_summary",
    "summarize",
    "transactions_in_month",
]
