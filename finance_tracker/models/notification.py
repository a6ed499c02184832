"""
Notification Models

User-facing messages ("toasts") raised by repositories after a mutation
succeeds or fails. They are kept in a bounded in-memory history and
mirrored into the structured log.

DESIGN DECISION: Notifications are not persisted. The system keeps no
audit trail; the structured log is the only durable record.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


TITLE_MAX_LENGTH = 200
MESSAGE_MAX_LENGTH = 1000


def _shorten(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class NotificationLevel(str, Enum):
    """How a notification should be presented."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class NotificationSource(str, Enum):
    """Which collection raised the notification."""
    TRANSACTIONS = "transactions"
    BANKS = "banks"
    CATEGORIES = "categories"
    SPENDING_GOALS = "spending_goals"
    SAVINGS_GOALS = "savings_goals"
    SESSION = "session"
    ASSISTANT = "assistant"


class Notification(BaseModel):
    """A single message shown to the user."""

    notification_id: UUID = Field(
        default_factory=uuid4,
        description="Unique notification identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the notification was raised (UTC)"
    )
    level: NotificationLevel = NotificationLevel.INFO
    source: Optional[NotificationSource] = None
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    message: Optional[str] = Field(default=None, max_length=MESSAGE_MAX_LENGTH)
    details: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def shorten_title(cls, v):
        return _shorten(v, TITLE_MAX_LENGTH) if isinstance(v, str) else v

    @field_validator("message", mode="before")
    @classmethod
    def shorten_message(cls, v):
        # Store errors can carry whole API response bodies
        return _shorten(v, MESSAGE_MAX_LENGTH) if isinstance(v, str) else v

    @property
    def is_error(self) -> bool:
        return self.level == NotificationLevel.ERROR

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "notification_id": str(self.notification_id),
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "source": self.source.value if self.source else None,
            "title": self.title,
            "message": self.message,
            "details": self.details,
        }
