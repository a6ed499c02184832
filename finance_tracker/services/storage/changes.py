"""
Change Notification Feed

Stores publish a ChangeEvent after every successful mutation. The event
carries no row data: it only says "this owner's rows in this table
changed", and subscribers refetch the whole collection.

Subscribers are keyed by (table, user_id). Callbacks may be plain
functions or coroutine functions.
"""

import inspect
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, NamedTuple, Union

import structlog


logger = structlog.get_logger(__name__)


class ChangeAction(str, Enum):
    """Kind of mutation that triggered a notification."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEvent(NamedTuple):
    table: str
    user_id: str
    action: ChangeAction
    ts: str


ChangeCallback = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by ChangeFeed.subscribe; call unsubscribe() on teardown."""

    def __init__(self, feed: "ChangeFeed", table: str, user_id: str, callback: ChangeCallback):
        self._feed = feed
        self.table = table
        self.user_id = user_id
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed.unsubscribe(self)
            self.active = False


class ChangeFeed:
    """In-process observer registry for store changes."""

    def __init__(self):
        self._subscribers: dict[tuple[str, str], list[Subscription]] = {}

    def subscribe(self, table: str, user_id: str, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(self, table, user_id, callback)
        self._subscribers.setdefault((table, user_id), []).append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        key = (subscription.table, subscription.user_id)
        if key in self._subscribers:
            if subscription in self._subscribers[key]:
                self._subscribers[key].remove(subscription)
            if not self._subscribers[key]:
                del self._subscribers[key]

    def subscriber_count(self, table: str, user_id: str) -> int:
        return len(self._subscribers.get((table, user_id), []))

    async def publish(
        self,
        table: str,
        user_id: str,
        action: ChangeAction,
    ) -> int:
        """
        Notify every subscriber of (table, user_id).

        A failing subscriber is logged and skipped; the mutation that
        triggered the event has already succeeded.

        Returns:
            Number of subscribers notified
        """
        event = ChangeEvent(
            table=table,
            user_id=user_id,
            action=action,
            ts=datetime.utcnow().isoformat(),
        )

        # Copy: callbacks may unsubscribe while we iterate
        subscribers = list(self._subscribers.get((table, user_id), []))
        notified = 0
        for subscription in subscribers:
            if not subscription.active:
                continue
            try:
                result = subscription.callback(event)
                if inspect.isawaitable(result):
                    await result
                notified += 1
            except Exception as e:
                logger.error(
                    "change_subscriber_failed",
                    table=table,
                    user_id=user_id,
                    action=action.value,
                    error=str(e),
                )
        return notified