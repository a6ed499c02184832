"""
Input Validation

DESIGN DECISION: Every form submission is validated before any store
call. A rejected submission never reaches storage, so a validation
failure can't leave partial state behind.

Checks are grouped per entity. Each returns a ValidationResult listing
every problem found, not just the first one.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the input.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from finance_tracker.aggregation.categories import find_category
from finance_tracker.models import (
    Bank,
    Category,
    SavingsGoalProgress,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

AmountInput = Decimal | int | float | str | None


def parse_amount(value: AmountInput) -> Optional[Decimal]:
    """
    Parse a user-entered amount.

    Accepts a decimal comma ("12,50"). Returns None when the input is
    empty or not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    else:
        text = value.strip().replace(" ", "")
        if not text:
            return None
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    return parsed if parsed.is_finite() else None


def _parse_type(value: TransactionType | str | None) -> Optional[TransactionType]:
    if not value:
        return None
    try:
        return TransactionType(value)
    except ValueError:
        return None


class InputValidator:
    """
    Validates form input for every entity.

    The validator is stateless; callers pass the categories and banks
    the input must refer to.
    """

    # =========================================================================
    # SHARED CHECKS
    # =========================================================================

    def _check_required(
        self,
        field: str,
        value: Optional[str],
        label: str,
        issues: list[ValidationIssue],
    ) -> None:
        if value is None or not str(value).strip():
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))

    def _check_amount(
        self,
        field: str,
        value: AmountInput,
        label: str,
        issues: list[ValidationIssue],
        positive: bool = True,
    ) -> Optional[Decimal]:
        amount = parse_amount(value)
        if amount is None:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing" if value in (None, "") else "invalid_value",
                message=f"{label} must be a number",
                suggested_fix="Enter a value such as 150.00",
            ))
            return None
        if positive and amount <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} must be greater than zero",
            ))
            return None
        try:
            too_precise = amount != amount.quantize(Decimal("0.01"))
        except InvalidOperation:
            # More digits than the decimal context can hold
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} is too large",
            ))
            return None
        if too_precise:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} can have at most two decimal places",
            ))
            return None
        return amount

    def _check_category(
        self,
        category_id: Optional[str],
        expected_type: Optional[TransactionType],
        categories: Optional[Iterable[Category]],
        issues: list[ValidationIssue],
    ) -> None:
        if not category_id:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Select a category",
            ))
            return

        category = find_category(category_id, categories)
        if category is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="not_found",
                message=f"Category '{category_id}' does not exist",
            ))
        elif expected_type is not None and category.type != expected_type:
            issues.append(ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=(
                    f"Category '{category.name}' is for {category.type.value}, "
                    f"not {expected_type.value}"
                ),
            ))

    def validate_date_range(
        self,
        start: Optional[date],
        end: Optional[date],
    ) -> ValidationResult:
        issues = []
        if start and end and end < start:
            issues.append(ValidationIssue(
                field="end_date",
                issue_type="invalid_value",
                message="End date cannot be before start date",
            ))
        return ValidationResult(issues=issues)

    def validate_month(self, month: Optional[str]) -> ValidationResult:
        issues = []
        if not month or not MONTH_KEY_PATTERN.match(month):
            issues.append(ValidationIssue(
                field="month",
                issue_type="invalid_value",
                message=f"Invalid month '{month}'",
                suggested_fix="Use the YYYY-MM format, e.g. 2025-06",
            ))
        return ValidationResult(issues=issues)

    # =========================================================================
    # ENTITIES
    # =========================================================================

    def validate_transaction(
        self,
        description: Optional[str],
        amount: AmountInput,
        type: TransactionType | str | None,
        category: Optional[str],
        bank_id: Optional[str] = None,
        categories: Optional[Iterable[Category]] = None,
        banks: Optional[Iterable[Bank]] = None,
    ) -> ValidationResult:
        """
        Validate a transaction form.

        Args:
            categories: Known categories; None means the built-in set
            banks: Known banks; required when bank_id is given
        """
        issues: list[ValidationIssue] = []

        self._check_required("description", description, "Description", issues)
        self._check_amount("amount", amount, "Amount", issues)

        transaction_type = _parse_type(type)
        if transaction_type is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value" if type else "missing",
                message="Type must be income or expense",
            ))

        self._check_category(category, transaction_type, categories, issues)

        if bank_id:
            known = {bank.id for bank in banks or []}
            if bank_id not in known:
                issues.append(ValidationIssue(
                    field="bank_id",
                    issue_type="not_found",
                    message="Selected bank does not exist",
                ))

        return ValidationResult(issues=issues)

    def validate_bank(
        self,
        name: Optional[str],
        initial_balance: AmountInput,
        color: Optional[str] = None,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._check_required("name", name, "Bank name", issues)
        if initial_balance not in (None, ""):
            self._check_amount(
                "initial_balance", initial_balance, "Initial balance", issues,
                positive=False,
            )
        if color is not None and not COLOR_PATTERN.match(color):
            issues.append(ValidationIssue(
                field="color",
                issue_type="invalid_value",
                message=f"Invalid color '{color}'",
                suggested_fix="Use a hex color such as #3b82f6",
            ))
        return ValidationResult(issues=issues)

    def validate_category(
        self,
        name: Optional[str],
        type: TransactionType | str | None,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._check_required("name", name, "Category name", issues)
        if _parse_type(type) is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value" if type else "missing",
                message="Type must be income or expense",
            ))
        return ValidationResult(issues=issues)

    def validate_spending_goal(
        self,
        category: Optional[str],
        limit: AmountInput,
        month: Optional[str],
        categories: Optional[Iterable[Category]] = None,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._check_category(category, TransactionType.EXPENSE, categories, issues)
        self._check_amount("limit", limit, "Limit", issues)
        issues.extend(self.validate_month(month).issues)
        return ValidationResult(issues=issues)

    def validate_savings_goal(
        self,
        name: Optional[str],
        target_amount: AmountInput,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._check_required("name", name, "Goal name", issues)
        self._check_amount("target_amount", target_amount, "Target amount", issues)
        return ValidationResult(issues=issues)

    def validate_deposit(
        self,
        progress: Optional[SavingsGoalProgress],
        amount: AmountInput,
    ) -> ValidationResult:
        """Deposits are accepted only for an existing, active goal."""
        issues: list[ValidationIssue] = []
        if progress is None:
            issues.append(ValidationIssue(
                field="goal_id",
                issue_type="not_found",
                message="Savings goal does not exist",
            ))
        elif progress.is_completed:
            issues.append(ValidationIssue(
                field="goal_id",
                issue_type="goal_completed",
                message=f"Goal '{progress.goal.name}' is already completed",
            ))
        self._check_amount("amount", amount, "Deposit amount", issues)
        return ValidationResult(issues=issues)
