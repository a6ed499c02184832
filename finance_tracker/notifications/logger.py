"""
Notifier

DESIGN DECISION: Every user-visible outcome goes through one place.
This provides:
1. A single channel for success / error messages
2. A structured log line for each message
3. A short in-memory history a UI can render as toasts

The notifier keeps a bounded history; the oldest messages drop off.
"""

import logging
from collections import deque
from typing import Any, Optional

import structlog

from finance_tracker.models.notification import (
    Notification,
    NotificationLevel,
    NotificationSource,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class Notifier:
    """
    Central user-notification service.

    Records notifications in memory and logs each one through structlog
    at the matching level.
    """

    def __init__(self, history_size: int = 50):
        """
        Initialize notifier.

        Args:
            history_size: How many notifications to keep; older ones
                are discarded.
        """
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._logger = structlog.get_logger()

    @property
    def history(self) -> list[Notification]:
        """Notifications, oldest first."""
        return list(self._history)

    @property
    def latest(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def errors(self) -> list[Notification]:
        return [n for n in self._history if n.is_error]

    def clear(self) -> None:
        self._history.clear()

    def notify(self, notification: Notification) -> Notification:
        """
        Record a notification.

        Always logs locally, then appends to the history.
        """
        log_dict = notification.to_log_dict()
        if notification.level == NotificationLevel.ERROR:
            self._logger.error("user_notification", **log_dict)
        elif notification.level == NotificationLevel.WARNING:
            self._logger.warning("user_notification", **log_dict)
        else:
            self._logger.info("user_notification", **log_dict)

        self._history.append(notification)
        return notification

    def success(
        self,
        title: str,
        message: Optional[str] = None,
        source: Optional[NotificationSource] = None,
        **details: Any,
    ) -> Notification:
        return self.notify(Notification(
            level=NotificationLevel.SUCCESS,
            source=source,
            title=title,
            message=message,
            details=details,
        ))

    def info(
        self,
        title: str,
        message: Optional[str] = None,
        source: Optional[NotificationSource] = None,
        **details: Any,
    ) -> Notification:
        return self.notify(Notification(
            level=NotificationLevel.INFO,
            source=source,
            title=title,
            message=message,
            details=details,
        ))

    def warning(
        self,
        title: str,
        message: Optional[str] = None,
        source: Optional[NotificationSource] = None,
        **details: Any,
    ) -> Notification:
        return self.notify(Notification(
            level=NotificationLevel.WARNING,
            source=source,
            title=title,
            message=message,
            details=details,
        ))

    def error(
        self,
        title: str,
        message: Optional[str] = None,
        source: Optional[NotificationSource] = None,
        **details: Any,
    ) -> Notification:
        return self.notify(Notification(
            level=NotificationLevel.ERROR,
            source=source,
            title=title,
            message=message,
            details=details,
        ))
