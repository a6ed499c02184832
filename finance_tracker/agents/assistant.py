"""
Finance Assistant

DESIGN DECISION: The assistant only ever sees a text summary built from
the user's own aggregated data. It explains and advises; it never
reads or writes the store.

CRITICAL BOUNDARIES:
- CAN: Explain the user's numbers, suggest ways to organize spending
- CANNOT: Invent figures that are not in the context
- MUST: Say so when the context has no data for a question
"""

from datetime import date
from typing import Iterable, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from finance_tracker.aggregation import (
    category_label,
    monthly_summary,
    summarize_banks,
)
from finance_tracker.config import GeminiSettings, get_settings
from finance_tracker.formatting import format_currency, format_goal_remaining
from finance_tracker.models import (
    Bank,
    Category,
    CurrencyCode,
    SavingsGoalProgress,
    SpendingGoalProgress,
    Transaction,
)


logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = """You are a friendly personal-finance assistant. You help the user:
- Understand their personal finances
- Find ways to save and invest
- Understand financial concepts in simple terms
- Organize spending by category
- Plan their savings goals

Only use figures that appear in the data below. If the data does not
cover the question, say that you don't have that information."""


class ChatMessage(BaseModel):
    """One turn of the conversation."""

    role: str = Field(pattern="^(user|model)$")
    content: str = Field(min_length=1)


class AssistantReply(BaseModel):
    """Assistant answer plus whether the model actually produced it."""

    answer: str
    succeeded: bool = True
    error: Optional[str] = None


def build_financial_context(
    transactions: Iterable[Transaction],
    banks: Iterable[Bank] = (),
    savings_goals: Iterable[SavingsGoalProgress] = (),
    spending_goals: Iterable[SpendingGoalProgress] = (),
    categories: Optional[Iterable[Category]] = None,
    currency: CurrencyCode = CurrencyCode.BRL,
    today: Optional[date] = None,
) -> str:
    """
    Render the user's financial situation as plain text.

    Covers current month expenses (total and per category), income and
    balance, last month's totals, bank balances and goals.
    """
    categories = list(categories) if categories is not None else None
    transactions = list(transactions)
    summary = monthly_summary(transactions, today=today, categories=categories)

    def money(value) -> str:
        return format_currency(value, currency)

    expense_lines = "\n".join(
        f"- {item.label}: {money(item.amount)}"
        for item in summary.expenses_by_category
    ) or "No expenses recorded"

    overview = summarize_banks(banks, transactions)
    bank_lines = "\n".join(
        f"- {b.bank.name}: balance {money(b.balance)} "
        f"(initial {money(b.initial_balance)})"
        for b in overview.balances
    ) or "No accounts registered"

    savings_lines = "\n".join(
        f"- {p.goal.name}: {money(p.current_amount)} / "
        f"{money(p.goal.target_amount)} ({p.status.value})"
        for p in savings_goals
    ) or "No savings goals"

    spending_lines = "\n".join(
        f"- {category_label(p.goal.category, categories)}: spent {money(p.spent)} "
        f"of {money(p.goal.limit)}, {format_goal_remaining(p, currency)}"
        for p in spending_goals
    ) or "No spending limits this month"

    return f"""USER FINANCIAL DATA (use it to answer):

=== EXPENSES THIS MONTH ({summary.month}) ===
Total expenses: {money(summary.current.expenses)}
By category:
{expense_lines}

=== INCOME THIS MONTH ===
Total income: {money(summary.current.income)}

=== BALANCE THIS MONTH ===
Balance (income - expenses): {money(summary.current.balance)}

=== LAST MONTH ({summary.previous_month}) ===
Total expenses: {money(summary.previous.expenses)}
Total income: {money(summary.previous.income)}

=== ACCOUNTS ===
{bank_lines}
Total: {money(overview.total)}

=== SAVINGS GOALS ===
{savings_lines}

=== SPENDING LIMITS ===
{spending_lines}
"""


class FinanceAssistant:
    """
    Gemini-backed chat over the financial context.

    BOUNDARIES:
    - NEVER touches storage
    - ALWAYS answers from the supplied context
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )

    @staticmethod
    def build_prompt(
        question: str,
        context: str,
        history: Iterable[ChatMessage] = (),
    ) -> str:
        turns = "\n".join(f"{m.role}: {m.content}" for m in history)
        parts = [SYSTEM_PROMPT, context]
        if turns:
            parts.append(f"Conversation so far:\n{turns}")
        parts.append(f"user: {question}")
        return "\n\n".join(parts)

    async def ask(
        self,
        question: str,
        context: str,
        history: Iterable[ChatMessage] = (),
    ) -> AssistantReply:
        """
        Answer a question using only the given context.

        A failed model call is logged and returned as an unsuccessful
        reply instead of raising.
        """
        prompt = self.build_prompt(question, context, history)
        try:
            response = await self._model.generate_content_async(prompt)
            return AssistantReply(answer=response.text.strip())
        except Exception as e:
            logger.error("assistant_request_failed", error=str(e))
            return AssistantReply(
                answer="The assistant is unavailable right now. Please try again later.",
                succeeded=False,
                error=str(e),
            )
