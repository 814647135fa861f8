"""
Audit Models for SubTrack

Every change the tracker makes to a subscription is recorded as an event.
This provides:
1. Traceability of edits and "mark paid" actions
2. Debugging information when things go wrong
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Subscription lifecycle
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_UPDATED = "subscription_updated"
    SUBSCRIPTION_DELETED = "subscription_deleted"
    SUBSCRIPTION_MARKED_PAID = "subscription_marked_paid"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Exports
    CSV_EXPORTED = "csv_exported"
    REMINDER_GENERATED = "reminder_generated"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every tracker action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'subscription', 'export')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list[str]:
        """
        Convert to a flat row for tabular audit storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, correlation_id, description, details_json,
        error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, sort_keys=True) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.subscription_added(sub_id, name, correlation_id)
        event = AuditEventBuilder.marked_paid(sub_id, old, new, correlation_id)
    """

    @staticmethod
    def subscription_added(
        subscription_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_ADDED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription added: {name}"[:500],
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def subscription_updated(
        subscription_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_UPDATED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description="Subscription updated",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def subscription_deleted(
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_DELETED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description="Subscription deleted",
            is_user_action=True,
        )

    @staticmethod
    def marked_paid(
        subscription_id: str,
        previous_due: date,
        next_due: date,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_MARKED_PAID,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Marked paid, next due {next_due.isoformat()}",
            details={
                "previous_due": previous_due.isoformat(),
                "next_due": next_due.isoformat(),
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="subscription",
            correlation_id=correlation_id,
            description=f"Subscription form rejected with {len(issues)} issue(s)",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def csv_exported(
        row_count: int,
        filename: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_EXPORTED,
            entity_type="export",
            correlation_id=correlation_id,
            description=f"Exported {row_count} subscription(s) to {filename}",
            details={"row_count": row_count, "filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def reminder_generated(
        subscription_id: str,
        filename: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_GENERATED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Calendar reminder generated: {filename}",
            details={"filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
