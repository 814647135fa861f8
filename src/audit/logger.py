"""
Audit Logger

DESIGN DECISION: Every change the tracker makes is logged.
This provides:
1. Traceability of edits and "mark paid" actions
2. Debugging capability

The audit logger:
- Always writes a structured local log line
- Persists to audit storage when one is configured
- Never crashes the calling flow if persisting fails
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for history), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("subtrack.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_subscription_added(
        self,
        subscription_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscription_added(
            subscription_id=subscription_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_subscription_updated(
        self,
        subscription_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscription_updated(
            subscription_id=subscription_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    async def log_subscription_deleted(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscription_deleted(
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        ))

    async def log_marked_paid(
        self,
        subscription_id: str,
        previous_due: date,
        next_due: date,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a due date advanced by "mark paid"."""
        await self.log(AuditEventBuilder.marked_paid(
            subscription_id=subscription_id,
            previous_due=previous_due,
            next_due=next_due,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_csv_exported(
        self,
        row_count: int,
        filename: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.csv_exported(
            row_count=row_count,
            filename=filename,
            correlation_id=correlation_id,
        ))

    async def log_reminder_generated(
        self,
        subscription_id: str,
        filename: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.reminder_generated(
            subscription_id=subscription_id,
            filename=filename,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through.
    """
    return uuid4()
