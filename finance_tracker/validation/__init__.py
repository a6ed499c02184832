"""Input validation package."""

from finance_tracker.validation.validator import InputValidator, parse_amount

__all__ = ["InputValidator", "parse_amount"]
