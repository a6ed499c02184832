"""Tests for the financial context and the Gemini assistant."""

from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from finance_tracker.agents import (
    AssistantReply,
    ChatMessage,
    FinanceAssistant,
    build_financial_context,
)
from finance_tracker.agents import assistant as assistant_module
from finance_tracker.aggregation import evaluate_spending_goal, project_savings_goal
from finance_tracker.config import GeminiSettings
from finance_tracker.models import CurrencyCode


@pytest.fixture
def fake_model(monkeypatch):
    """Replace the Gemini client so no request leaves the process."""
    model = MagicMock()
    model.generate_content_async = AsyncMock()
    fake_genai = MagicMock()
    fake_genai.GenerativeModel.return_value = model
    monkeypatch.setattr(assistant_module, "genai", fake_genai)
    return model


@pytest.fixture
def assistant(fake_model):
    return FinanceAssistant(GeminiSettings(api_key="test-key"))


class TestBuildFinancialContext:
    """Tests for the plain-text financial summary."""

    def test_empty_data(self):
        context = build_financial_context([], today=date(2025, 6, 15))

        assert "=== EXPENSES THIS MONTH (2025-06) ===" in context
        assert "=== LAST MONTH (2025-05) ===" in context
        assert "No expenses recorded" in context
        assert "No accounts registered" in context
        assert "No savings goals" in context
        assert "No spending limits this month" in context

    def test_full_context(
        self, make_transaction, make_bank, make_savings_goal, make_deposit, make_spending_goal,
    ):
        bank = make_bank("1000", name="Checking")
        transactions = [
            make_transaction("3000", "income", "salary", datetime(2025, 6, 5), bank_id=bank.id),
            make_transaction("620", "expense", "food", datetime(2025, 6, 8), bank_id=bank.id),
            make_transaction("80", "expense", "food", datetime(2025, 5, 8)),
        ]
        trip = make_savings_goal("3000", name="Trip")
        savings = [project_savings_goal(trip, [make_deposit(trip, "500")])]
        limits = [evaluate_spending_goal(make_spending_goal("food", "500"), transactions[1].amount)]

        context = build_financial_context(
            transactions,
            banks=[bank],
            savings_goals=savings,
            spending_goals=limits,
            currency=CurrencyCode.USD,
            today=date(2025, 6, 15),
        )

        assert "Total expenses: $620.00" in context
        assert "- Food: $620.00" in context
        assert "Total income: $3,000.00" in context
        assert "Balance (income - expenses): $2,380.00" in context
        assert "Total expenses: $80.00" in context
        assert "- Checking: balance $3,380.00 (initial $1,000.00)" in context
        assert "- Trip: $500.00 / $3,000.00 (active)" in context
        assert "Exceeded by $120.00" in context

    def test_currency_changes_formatting_only(self, make_transaction):
        transactions = [make_transaction("1234.5", when=datetime(2025, 6, 1))]
        context = build_financial_context(
            transactions, currency=CurrencyCode.EUR, today=date(2025, 6, 2),
        )
        assert "Total expenses: 1.234,50 €" in context


class TestFinanceAssistant:
    """Tests for the Gemini call, with the model mocked."""

    def test_prompt_includes_context_and_history(self):
        history = [
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="model", content="Hello!"),
        ]
        prompt = FinanceAssistant.build_prompt("How much did I spend?", "CONTEXT", history)

        assert prompt.index("CONTEXT") < prompt.index("user: Hi")
        assert "model: Hello!" in prompt
        assert prompt.endswith("user: How much did I spend?")

    @pytest.mark.asyncio
    async def test_answer(self, assistant, fake_model):
        fake_model.generate_content_async.return_value = MagicMock(text="  You spent $620.  ")

        reply = await assistant.ask("How much did I spend?", "CONTEXT")

        assert reply == AssistantReply(answer="You spent $620.")
        prompt = fake_model.generate_content_async.call_args.args[0]
        assert "CONTEXT" in prompt

    @pytest.mark.asyncio
    async def test_failure_becomes_unsuccessful_reply(self, assistant, fake_model):
        fake_model.generate_content_async.side_effect = RuntimeError("quota exceeded")

        reply = await assistant.ask("Hi", "CONTEXT")

        assert reply.succeeded is False
        assert reply.error == "quota exceeded"
        assert "unavailable" in reply.answer

    def test_configures_client_from_settings(self, monkeypatch):
        fake_genai = MagicMock()
        monkeypatch.setattr(assistant_module, "genai", fake_genai)

        FinanceAssistant(GeminiSettings(api_key="k", model_name="gemini-test", temperature=0.5))

        fake_genai.configure.assert_called_once_with(api_key="k")
        kwargs = fake_genai.GenerativeModel.call_args.kwargs
        assert kwargs["model_name"] == "gemini-test"
        assert kwargs["generation_config"]["temperature"] == 0.5
