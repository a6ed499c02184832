"""Notification and logging package."""

from finance_tracker.notifications.logger import Notifier, configure_logging

__all__ = [
    "Notifier",
    "configure_logging",
]
