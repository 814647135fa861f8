"""
Data Models Package

This package contains all Pydantic models used in SubTrack.
All data flowing through the tracker must conform to these schemas.
"""

from src.models.subscription import (
    CATEGORY_OPTIONS,
    CURRENCY_OPTIONS,
    SpendTotals,
    Subscription,
    SubscriptionForm,
    ValidationIssue,
    ValidationResult,
    quantize_amount,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Subscription models
    "CATEGORY_OPTIONS",
    "CURRENCY_OPTIONS",
    "SpendTotals",
    "Subscription",
    "SubscriptionForm",
    "ValidationIssue",
    "ValidationResult",
    "quantize_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
