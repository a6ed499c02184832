"""
Collection Repository Base

A repository holds one user's rows of a table as a list of models and
keeps it fresh:

1. Fetch every row of the signed-in user on start and on sign-in
2. Subscribe to the store's change feed and refetch on any change
3. Refetch right after each successful mutation (no waiting for the feed)

DESIGN DECISION: Failures never escape a repository. Validation errors
and store errors become error notifications, the method returns None,
and the in-memory list stays exactly as it was.
"""

from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from finance_tracker.models import NotificationSource, ValidationResult
from finance_tracker.notifications import Notifier
from finance_tracker.services.auth import AuthProvider
from finance_tracker.services.storage import (
    StorageError,
    Subscription,
    TableStoreInterface,
)
from finance_tracker.validation import InputValidator


ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")

SIGNED_OUT_MESSAGE = "You must be signed in"


def to_row(model: BaseModel) -> dict[str, Any]:
    """Serialize a model into a JSON-compatible store row."""
    return model.model_dump(mode="json")


class CollectionRepository(Generic[ModelT]):
    """
    Base class for the per-table repositories.

    Subclasses set `table`, `model`, `source` and the sort order, and
    add their own mutation methods on top of `_mutate`.
    """

    table: str
    model: type[ModelT]
    source: NotificationSource
    order_by: Optional[str] = "created_at"
    descending: bool = True
    label: str = "items"

    def __init__(
        self,
        store: TableStoreInterface,
        auth: AuthProvider,
        notifier: Optional[Notifier] = None,
        validator: Optional[InputValidator] = None,
    ):
        self._store = store
        self._auth = auth
        self._notifier = notifier or Notifier()
        self._validator = validator or InputValidator()
        self._items: list[ModelT] = []
        self._loading = True
        self._subscriptions: list[Subscription] = []
        self._remove_auth_listener: Optional[Callable[[], None]] = None
        self._logger = structlog.get_logger().bind(
            repository=type(self).__name__,
        )

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def items(self) -> list[ModelT]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def user_id(self) -> Optional[str]:
        return self._auth.current_user_id

    def get(self, item_id: str) -> Optional[ModelT]:
        for item in self._items:
            if getattr(item, "id", None) == item_id:
                return item
        return None

    def _watched_tables(self) -> tuple[str, ...]:
        return (self.table,)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Follow the auth session and load the current user's rows."""
        if self._remove_auth_listener is None:
            self._remove_auth_listener = self._auth.add_listener(self._on_user_changed)
        await self._on_user_changed(self.user_id)

    async def close(self) -> None:
        """Stop listening to the store and the auth session."""
        self._unsubscribe()
        if self._remove_auth_listener is not None:
            self._remove_auth_listener()
            self._remove_auth_listener = None

    def _unsubscribe(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    async def _on_user_changed(self, user_id: Optional[str]) -> None:
        self._unsubscribe()
        if user_id is None:
            self._clear()
            self._loading = False
            return

        for table in self._watched_tables():
            self._subscriptions.append(
                self._store.subscribe(table, user_id, self._on_change)
            )
        await self.refresh()

    async def _on_change(self, event) -> None:
        await self.refresh()

    def _clear(self) -> None:
        self._items = []

    # =========================================================================
    # FETCHING
    # =========================================================================

    async def refresh(self) -> None:
        """Refetch the collection; keeps the old list if the fetch fails."""
        user_id = self.user_id
        if user_id is None:
            self._clear()
            self._loading = False
            return

        try:
            await self._load(user_id)
        except StorageError as e:
            self._logger.error(
                "fetch_failed",
                table=self.table,
                user_id=user_id,
                error=str(e),
            )
            self._notifier.error(
                f"Failed to load {self.label}",
                str(e),
                source=self.source,
            )
        finally:
            self._loading = False

    async def _load(self, user_id: str) -> None:
        self._items = await self._fetch(self.table, self.model, user_id)

    async def _fetch(
        self,
        table: str,
        model: type[BaseModel],
        user_id: str,
        order_by: Optional[str] = None,
        descending: Optional[bool] = None,
    ) -> list:
        rows = await self._store.select(
            table,
            filters={"user_id": user_id},
            order_by=order_by or self.order_by,
            descending=self.descending if descending is None else descending,
        )
        items = []
        for row in rows:
            try:
                items.append(model.model_validate(row))
            except ValidationError as e:
                self._logger.warning(
                    "invalid_row_skipped",
                    table=table,
                    row_id=row.get("id"),
                    error=str(e),
                )
        return items

    # =========================================================================
    # MUTATION HELPERS
    # =========================================================================

    def _require_user(self) -> Optional[str]:
        user_id = self.user_id
        if user_id is None:
            self._notifier.error(SIGNED_OUT_MESSAGE, source=self.source)
        return user_id

    def _reject(self, result: ValidationResult) -> None:
        self._notifier.error(
            "Invalid input",
            result.summary(),
            source=self.source,
            issues=[issue.model_dump() for issue in result.issues],
        )

    def _build(self, model: type[ModelT], **fields: Any) -> Optional[ModelT]:
        """Construct a model, reporting schema errors like validation errors."""
        try:
            return model(**fields)
        except ValidationError as e:
            self._notifier.error("Invalid input", str(e), source=self.source)
            return None

    async def _mutate(
        self,
        operation: Callable[[], Awaitable[ResultT]],
        success: str,
        failure: str,
    ) -> Optional[ResultT]:
        """
        Run a store mutation.

        On success: refetch, notify, return the operation's result.
        On StorageError: log, notify, return None; items are unchanged.
        """
        try:
            result = await operation()
        except StorageError as e:
            self._logger.error(
                "mutation_failed",
                table=self.table,
                user_id=self.user_id,
                action=failure,
                error=str(e),
            )
            self._notifier.error(failure, str(e), source=self.source)
            return None

        await self.refresh()
        self._notifier.success(success, source=self.source)
        return result

    async def _cleanup(
        self,
        operation: Callable[[], Awaitable[Any]],
        warning: str,
    ) -> bool:
        """
        Run a follow-up write after a mutation already succeeded.

        The mutation stands either way; a failed cleanup is logged and
        reported as a warning, then the collection is refetched.
        """
        try:
            await operation()
            completed = True
        except StorageError as e:
            self._logger.error(
                "cleanup_failed",
                table=self.table,
                user_id=self.user_id,
                action=warning,
                error=str(e),
            )
            self._notifier.warning(warning, str(e), source=self.source)
            completed = False
        await self.refresh()
        return completed
