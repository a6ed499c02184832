"""
Core Data Models for Finance Tracker

These models define the schemas for every row kept in the store:
transactions, banks, categories, spending goals, savings goals and
goal deposits.

DESIGN DECISION: Amounts are always Decimal with two decimal places.
A transaction amount is a positive magnitude; its direction comes
only from the transaction type.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def _new_id() -> str:
    return str(uuid4())


def _coerce_datetime(value):
    """Accept plain dates (and date-only strings) where a datetime is stored."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and len(value.strip()) == 10:
        return datetime.combine(date.fromisoformat(value.strip()), time.min)
    return value


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class GoalStatus(str, Enum):
    """Savings goal state, derived from the deposit ledger."""
    ACTIVE = "active"
    COMPLETED = "completed"


class CurrencyCode(str, Enum):
    """Display currencies a user can choose from."""
    BRL = "BRL"
    USD = "USD"
    EUR = "EUR"


# =============================================================================
# STORED ENTITIES
# =============================================================================

class Category(BaseModel):
    """
    A classification tag for transactions.

    Categories are scoped to income or expense. Deleting one never
    touches the transactions that reference it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    type: TransactionType
    icon: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Transaction(BaseModel):
    """
    A single dated money movement.

    CRITICAL: amount is always positive. Income adds, expense subtracts.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    description: str = Field(..., min_length=1, max_length=200)
    amount: Annotated[
        Decimal,
        Field(gt=0, decimal_places=2, description="Positive magnitude"),
    ]
    type: TransactionType
    category: str = Field(..., min_length=1, description="Category id")
    date: datetime
    bank_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        return _coerce_datetime(v)

    @field_validator("bank_id", mode="before")
    @classmethod
    def blank_bank_is_none(cls, v):
        return v or None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the type."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class Bank(BaseModel):
    """A named account with an initial balance (any sign)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    initial_balance: Annotated[Decimal, Field(decimal_places=2)] = Decimal("0")
    color: str = Field(default="#3b82f6", pattern=r"^#[0-9a-fA-F]{6}$")
    icon: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SpendingGoal(BaseModel):
    """
    A monthly cap on spend within one category.

    At most one goal may exist per (category, month) pair.
    """

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    category: str = Field(..., min_length=1)
    limit: Annotated[Decimal, Field(gt=0, decimal_places=2)]
    month: str = Field(
        ...,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="YYYY-MM",
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def key(self) -> tuple[str, str]:
        return self.category, self.month


class SavingsGoal(BaseModel):
    """
    A named savings objective.

    Progress fields (current amount, status, completion time) are not
    stored here; see `project_savings_goal` in the goals aggregation.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    target_amount: Annotated[Decimal, Field(gt=0, decimal_places=2)]
    created_at: datetime = Field(default_factory=datetime.utcnow)


class GoalDeposit(BaseModel):
    """One contribution toward a savings goal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    goal_id: str = Field(..., min_length=1)
    amount: Annotated[Decimal, Field(gt=0, decimal_places=2)]
    description: Optional[str] = Field(default=None, max_length=200)
    date: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        return _coerce_datetime(v)


# =============================================================================
# FILTERS AND PERIODS
# =============================================================================

class DateRange(BaseModel):
    """Inclusive range of calendar days."""

    start: date
    end: date

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("End date cannot be before start date")
        return self

    def contains(self, value: datetime | date) -> bool:
        day = value.date() if isinstance(value, datetime) else value
        return self.start <= day <= self.end


class TransactionFilter(BaseModel):
    """
    Composable transaction criteria.

    Every field that is set must match (logical AND). Dates are
    inclusive whole days: start of the start day to end of the end day.
    """

    type: Optional[TransactionType] = None
    category: Optional[str] = None
    bank_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def validate_dates(self) -> "TransactionFilter":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    @property
    def is_empty(self) -> bool:
        return not any(
            [self.type, self.category, self.bank_id, self.start_date, self.end_date]
        )

    def matches(self, transaction: Transaction) -> bool:
        if self.type and transaction.type != self.type:
            return False
        if self.category and transaction.category != self.category:
            return False
        if self.bank_id and transaction.bank_id != self.bank_id:
            return False
        day = transaction.date.date()
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True


# =============================================================================
# DERIVED VALUES
# =============================================================================

class BankBalance(BaseModel):
    """Balance of one bank, absolute or for a reporting period."""

    bank: Bank
    balance: Decimal
    transaction_count: int = Field(ge=0)
    period: Optional[DateRange] = None

    @property
    def initial_balance(self) -> Decimal:
        return self.bank.initial_balance

    @property
    def is_period_movement(self) -> bool:
        return self.period is not None


class BanksOverview(BaseModel):
    """Balances of every bank plus their total."""

    balances: list[BankBalance] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    period: Optional[DateRange] = None


class FinanceStats(BaseModel):
    """Dashboard totals for a set of transactions."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    transaction_count: int = 0


class CategoryTotal(BaseModel):
    """Expense total for one category, used for the breakdown chart."""

    category: str
    label: str
    amount: Decimal
    share: Decimal = Field(
        default=Decimal("0"),
        description="Percentage of total expenses (0-100)",
    )


class DashboardSummary(BaseModel):
    """Stats plus category breakdown for one filter selection."""

    criteria: TransactionFilter = Field(default_factory=TransactionFilter)
    stats: FinanceStats
    category_breakdown: list[CategoryTotal] = Field(default_factory=list)


class MonthlySummary(BaseModel):
    """Current vs previous month totals."""

    month: str
    current: FinanceStats
    previous_month: str
    previous: FinanceStats
    expenses_by_category: list[CategoryTotal] = Field(default_factory=list)


class SpendingGoalProgress(BaseModel):
    """Spend-vs-limit evaluation of one spending goal."""

    goal: SpendingGoal
    spent: Decimal
    percentage: Decimal = Field(ge=0, le=100)
    is_over_limit: bool
    remaining: Decimal = Field(description="May be negative when over limit")

    @property
    def exceeded_by(self) -> Decimal:
        if self.is_over_limit:
            return abs(self.remaining)
        return Decimal("0")


class SavingsGoalProgress(BaseModel):
    """A savings goal projected from its live deposit ledger."""

    goal: SavingsGoal
    deposits: list[GoalDeposit] = Field(default_factory=list)
    current_amount: Decimal
    percentage: Decimal = Field(ge=0, le=100)
    remaining: Decimal = Field(ge=0)
    status: GoalStatus
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == GoalStatus.COMPLETED


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'not_found')",
    )
    message: str = Field(..., description="Human-readable description")
    severity: str = Field(default="error", pattern="^(error|warning|info)$")
    suggested_fix: Optional[str] = Field(
        default=None,
        description="What the user can do about it",
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    def summary(self) -> str:
        """Join error messages into one user-facing sentence."""
        return "; ".join(
            issue.message for issue in self.issues if issue.severity == "error"
        )
