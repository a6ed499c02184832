"""
Main Orchestrator for Finance Tracker

This module ties together all the components:
store -> repositories -> aggregation -> dashboard values.

DESIGN DECISION: The orchestrator owns no data. Repositories hold the
fetched collections; every dashboard value is recomputed from them on
request, so nothing derived can go stale.
"""

from datetime import date
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError

from finance_tracker.agents import (
    AssistantReply,
    ChatMessage,
    FinanceAssistant,
    build_financial_context,
)
from finance_tracker.aggregation import (
    ReportingPeriod,
    monthly_summary,
    summarize,
    summarize_banks,
)
from finance_tracker.config import get_settings
from finance_tracker.formatting import CurrencyPreference
from finance_tracker.models import (
    BanksOverview,
    DashboardSummary,
    DateRange,
    MonthlySummary,
    NotificationSource,
    SavingsGoalProgress,
    SpendingGoalProgress,
    TransactionFilter,
    TransactionType,
)
from finance_tracker.notifications import Notifier, configure_logging
from finance_tracker.repositories import (
    BankRepository,
    CategoryRepository,
    SavingsGoalRepository,
    SpendingGoalRepository,
    TransactionRepository,
)
from finance_tracker.services.auth import SessionAuthProvider
from finance_tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTableStore,
    InMemoryTableStore,
    JsonFileKeyValueStorage,
    KeyValueStorage,
    MemoryKeyValueStorage,
    TableStoreInterface,
)
from finance_tracker.validation import InputValidator


logger = structlog.get_logger(__name__)


class FinanceTracker:
    """
    Facade over one user session.

    Typical use:
        tracker = create_app_components(backend="memory")
        await tracker.start()
        await tracker.sign_in("user-1")
        await tracker.transactions.add_transaction(...)
        tracker.dashboard()
    """

    def __init__(
        self,
        store: TableStoreInterface,
        auth: SessionAuthProvider,
        notifier: Notifier,
        currency: CurrencyPreference,
        validator: Optional[InputValidator] = None,
        assistant: Optional[FinanceAssistant] = None,
    ):
        self.store = store
        self.auth = auth
        self.notifier = notifier
        self.currency = currency
        self._validator = validator or InputValidator()
        self._assistant = assistant

        shared = dict(notifier=notifier, validator=self._validator)
        self.categories = CategoryRepository(store, auth, **shared)
        self.banks = BankRepository(store, auth, **shared)
        self.transactions = TransactionRepository(
            store,
            auth,
            categories=lambda: self.categories.items,
            banks=lambda: self.banks.items,
            **shared,
        )
        self.spending_goals = SpendingGoalRepository(
            store,
            auth,
            categories=lambda: self.categories.items,
            **shared,
        )
        self.savings_goals = SavingsGoalRepository(store, auth, **shared)

    @property
    def repositories(self) -> tuple:
        # Lookups first: transaction validation reads categories and banks
        return (
            self.categories,
            self.banks,
            self.transactions,
            self.spending_goals,
            self.savings_goals,
        )

    # =========================================================================
    # SESSION
    # =========================================================================

    async def start(self) -> None:
        for repository in self.repositories:
            await repository.start()

    async def close(self) -> None:
        for repository in self.repositories:
            await repository.close()

    async def sign_in(self, user_id: str) -> None:
        await self.auth.sign_in(user_id)

    async def sign_out(self) -> None:
        await self.auth.sign_out()

    @property
    def loading(self) -> bool:
        return any(repository.loading for repository in self.repositories)

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def build_filter(
        self,
        type: Optional[TransactionType | str] = None,
        category: Optional[str] = None,
        bank_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Optional[TransactionFilter]:
        """
        Build dashboard criteria from form values.

        Returns None (and notifies) when the dates are out of order.
        """
        result = self._validator.validate_date_range(start_date, end_date)
        if not result.is_valid:
            self.notifier.error(
                "Invalid filter",
                result.summary(),
                source=NotificationSource.TRANSACTIONS,
            )
            return None
        return TransactionFilter(
            type=type or None,
            category=category or None,
            bank_id=bank_id or None,
            start_date=start_date,
            end_date=end_date,
        )

    def dashboard(self, criteria: Optional[TransactionFilter] = None) -> DashboardSummary:
        return summarize(
            self.transactions.items,
            criteria,
            categories=self.categories.items,
        )

    def bank_balances(
        self,
        period: ReportingPeriod | DateRange | None = ReportingPeriod.ALL_TIME,
        today: Optional[date] = None,
    ) -> BanksOverview:
        if isinstance(period, ReportingPeriod):
            period = period.resolve(today)
        return summarize_banks(self.banks.items, self.transactions.items, period)

    def spending_goal_progress(
        self,
        month: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[SpendingGoalProgress]:
        return self.spending_goals.progress(self.transactions.items, month, today)

    def savings_goal_progress(self) -> list[SavingsGoalProgress]:
        return self.savings_goals.progress()

    def monthly_summary(self, today: Optional[date] = None) -> MonthlySummary:
        return monthly_summary(
            self.transactions.items,
            today=today,
            categories=self.categories.items,
        )

    def format(self, value) -> str:
        return self.currency.format(value)

    # =========================================================================
    # ASSISTANT
    # =========================================================================

    def assistant_context(self, today: Optional[date] = None) -> str:
        return build_financial_context(
            transactions=self.transactions.items,
            banks=self.banks.items,
            savings_goals=self.savings_goal_progress(),
            spending_goals=self.spending_goal_progress(today=today),
            categories=self.categories.items,
            currency=self.currency.currency,
            today=today,
        )

    async def ask_assistant(
        self,
        question: str,
        history: Iterable[ChatMessage] = (),
    ) -> AssistantReply:
        if self._assistant is None:
            try:
                self._assistant = FinanceAssistant()
            except ValidationError as e:
                self.notifier.warning(
                    "Assistant is not configured",
                    "Set GEMINI_API_KEY to enable it",
                    source=NotificationSource.ASSISTANT,
                )
                return AssistantReply(
                    answer="The assistant is not configured.",
                    succeeded=False,
                    error=str(e),
                )

        reply = await self._assistant.ask(question, self.assistant_context(), history)
        if not reply.succeeded:
            self.notifier.error(
                "Assistant request failed",
                reply.error,
                source=NotificationSource.ASSISTANT,
            )
        return reply


def create_store(
    backend: str,
    storage: KeyValueStorage,
) -> TableStoreInterface:
    """Build the table store for a backend name."""
    if backend == "google_sheets":
        return GoogleSheetsTableStore(GoogleSheetsClient())
    if backend in ("memory", "local"):
        return InMemoryTableStore(storage)
    raise ValueError(f"Unknown storage backend: {backend}")


def create_app_components(
    backend: Optional[str] = None,
    storage: Optional[KeyValueStorage] = None,
) -> FinanceTracker:
    """
    Factory function to create all application components.

    Args:
        backend: "memory", "local" or "google_sheets"; defaults to
                 the configured storage backend.
        storage: Key-value port for local state. Defaults to memory for
                 the "memory" backend and the configured JSON file
                 otherwise.

    Returns:
        A FinanceTracker; call start() before use.
    """
    settings = get_settings().app
    configure_logging("DEBUG" if settings.debug_mode else settings.log_level)

    backend = backend or settings.storage_backend
    if storage is None:
        if backend == "memory":
            storage = MemoryKeyValueStorage()
        else:
            storage = JsonFileKeyValueStorage(settings.local_store_file)

    logger.info(
        "app_components_created",
        environment=settings.app_environment,
        backend=backend,
        debug=settings.debug_mode,
    )
    return FinanceTracker(
        store=create_store(backend, storage),
        auth=SessionAuthProvider(),
        notifier=Notifier(history_size=settings.notification_history_size),
        currency=CurrencyPreference(storage, default=settings.default_currency),
    )
