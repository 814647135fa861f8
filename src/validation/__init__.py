"""Form validation package."""

from src.validation.validator import SubscriptionValidator, ValidationError

__all__ = ["SubscriptionValidator", "ValidationError"]
