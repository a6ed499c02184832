"""AI Agents package."""

from finance_tracker.agents.assistant import (
    AssistantReply,
    ChatMessage,
    FinanceAssistant,
    build_financial_context,
)

__all__ = [
    "AssistantReply",
    "ChatMessage",
    "FinanceAssistant",
    "build_financial_context",
]
