"""Tests for currency display and the currency preference."""

from decimal import Decimal

import pytest

from finance_tracker.aggregation import evaluate_spending_goal
from finance_tracker.formatting import (
    CURRENCY_STORAGE_KEY,
    CurrencyPreference,
    format_currency,
    format_goal_remaining,
)
from finance_tracker.models import CurrencyCode
from finance_tracker.services.storage import MemoryKeyValueStorage


class TestFormatCurrency:
    """Tests for locale-style rendering."""

    @pytest.mark.parametrize("currency, expected", [
        (CurrencyCode.BRL, "R$ 1.234,56"),
        (CurrencyCode.USD, "$1,234.56"),
        (CurrencyCode.EUR, "1.234,56 €"),
    ])
    def test_formats(self, currency, expected):
        assert format_currency(Decimal("1234.56"), currency) == expected

    def test_defaults_to_brl(self):
        assert format_currency(Decimal("0")) == "R$ 0,00"

    def test_large_and_small_values(self):
        assert format_currency(Decimal("1234567.8"), CurrencyCode.USD) == "$1,234,567.80"
        assert format_currency(Decimal("999.999"), CurrencyCode.USD) == "$1,000.00"
        assert format_currency(5, CurrencyCode.USD) == "$5.00"

    def test_negative(self):
        assert format_currency(Decimal("-150.5"), CurrencyCode.BRL) == "-R$ 150,50"
        assert format_currency(Decimal("-150.5"), CurrencyCode.EUR) == "-150,50 €"

    def test_accepts_code_strings(self):
        assert format_currency(Decimal("1"), "USD") == "$1.00"


class TestGoalRemaining:
    """Tests for the spending-goal remaining text."""

    def test_remaining(self, make_spending_goal):
        progress = evaluate_spending_goal(make_spending_goal(limit="500"), Decimal("100"))
        assert format_goal_remaining(progress, CurrencyCode.USD) == "Remaining $400.00"

    def test_exceeded(self, make_spending_goal):
        progress = evaluate_spending_goal(make_spending_goal(limit="500"), Decimal("620"))
        assert format_goal_remaining(progress, CurrencyCode.BRL) == "Exceeded by R$ 120,00"


class TestCurrencyPreference:
    """Tests for the persisted display currency."""

    def test_default(self):
        preference = CurrencyPreference(MemoryKeyValueStorage())
        assert preference.currency == CurrencyCode.BRL
        assert preference.config.symbol == "R$"

    def test_configured_default(self):
        preference = CurrencyPreference(MemoryKeyValueStorage(), default="EUR")
        assert preference.currency == CurrencyCode.EUR

    def test_set_persists(self):
        storage = MemoryKeyValueStorage()
        CurrencyPreference(storage).set_currency("USD")

        assert storage.get(CURRENCY_STORAGE_KEY) == "USD"
        assert CurrencyPreference(storage).currency == CurrencyCode.USD

    def test_unknown_stored_value_falls_back(self):
        storage = MemoryKeyValueStorage({CURRENCY_STORAGE_KEY: "JPY"})
        assert CurrencyPreference(storage).currency == CurrencyCode.BRL

    def test_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            CurrencyPreference(MemoryKeyValueStorage()).set_currency("JPY")

    def test_listeners(self):
        preference = CurrencyPreference(MemoryKeyValueStorage())
        seen = []
        remove = preference.on_change(seen.append)

        preference.set_currency(CurrencyCode.EUR)
        remove()
        preference.set_currency(CurrencyCode.USD)

        assert seen == [CurrencyCode.EUR]

    def test_format_uses_current_currency(self):
        preference = CurrencyPreference(MemoryKeyValueStorage())
        preference.set_currency("EUR")
        assert preference.format(Decimal("10")) == "10,00 €"
        assert preference.format(Decimal("10"), CurrencyCode.USD) == "$10.00"
