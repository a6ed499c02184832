"""
Currency Display

The currency preference only changes how amounts are rendered; it never
converts values. The chosen code is persisted through the same key-value
port the local store uses.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

import structlog

from finance_tracker.models import CurrencyCode, SpendingGoalProgress
from finance_tracker.services.storage import KeyValueStorage


logger = structlog.get_logger(__name__)

CURRENCY_STORAGE_KEY = "finance-app-currency"


@dataclass(frozen=True)
class CurrencyFormat:
    code: CurrencyCode
    symbol: str
    name: str
    locale: str
    thousands_sep: str
    decimal_sep: str
    symbol_first: bool


CURRENCY_FORMATS: dict[CurrencyCode, CurrencyFormat] = {
    CurrencyCode.BRL: CurrencyFormat(
        code=CurrencyCode.BRL,
        symbol="R$",
        name="Brazilian real",
        locale="pt-BR",
        thousands_sep=".",
        decimal_sep=",",
        symbol_first=True,
    ),
    CurrencyCode.USD: CurrencyFormat(
        code=CurrencyCode.USD,
        symbol="$",
        name="US dollar",
        locale="en-US",
        thousands_sep=",",
        decimal_sep=".",
        symbol_first=True,
    ),
    CurrencyCode.EUR: CurrencyFormat(
        code=CurrencyCode.EUR,
        symbol="€",
        name="Euro",
        locale="de-DE",
        thousands_sep=".",
        decimal_sep=",",
        symbol_first=False,
    ),
}


def format_currency(
    value: Decimal | int | float,
    currency: CurrencyCode = CurrencyCode.BRL,
) -> str:
    """
    Render an amount in the conventions of the currency's locale.

    Examples:
        BRL: R$ 1.234,56
        USD: $1,234.56
        EUR: 1.234,56 €
    """
    fmt = CURRENCY_FORMATS[CurrencyCode(currency)]
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""

    whole, cents = f"{abs(amount):.2f}".split(".")
    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    number = fmt.thousands_sep.join(groups) + fmt.decimal_sep + cents

    if fmt.symbol_first:
        spacer = " " if fmt.code == CurrencyCode.BRL else ""
        return f"{sign}{fmt.symbol}{spacer}{number}"
    return f"{sign}{number} {fmt.symbol}"


def format_goal_remaining(
    progress: SpendingGoalProgress,
    currency: CurrencyCode = CurrencyCode.BRL,
) -> str:
    """'Remaining X' while under the limit, 'Exceeded by X' once over it."""
    if progress.is_over_limit:
        return f"Exceeded by {format_currency(progress.exceeded_by, currency)}"
    return f"Remaining {format_currency(progress.remaining, currency)}"


class CurrencyPreference:
    """
    The user's display currency.

    Unknown or missing stored values fall back to the default.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        default: CurrencyCode = CurrencyCode.BRL,
    ):
        self._storage = storage
        self._default = CurrencyCode(default)
        self._listeners: list[Callable[[CurrencyCode], None]] = []

    @property
    def currency(self) -> CurrencyCode:
        stored = self._storage.get(CURRENCY_STORAGE_KEY)
        try:
            return CurrencyCode(stored) if stored else self._default
        except ValueError:
            logger.warning("unknown_stored_currency", value=stored)
            return self._default

    @property
    def config(self) -> CurrencyFormat:
        return CURRENCY_FORMATS[self.currency]

    def set_currency(self, code: CurrencyCode | str) -> CurrencyCode:
        currency = CurrencyCode(code)
        self._storage.set(CURRENCY_STORAGE_KEY, currency.value)
        for listener in list(self._listeners):
            listener(currency)
        return currency

    def on_change(self, listener: Callable[[CurrencyCode], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def format(self, value: Decimal | int | float, currency: Optional[CurrencyCode] = None) -> str:
        return format_currency(value, currency or self.currency)
