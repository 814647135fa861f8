"""
Main Orchestrator for SubTrack

This module ties together all the components and defines the flows the
tracker screen performs:
1. Add / edit (form -> validate -> save)
2. Delete
3. Mark paid (advance next due by one cycle)
4. List, totals and due badges
5. CSV export and calendar reminder download

DESIGN DECISION: The orchestrator is the only place that may read the wall
clock. Every flow takes `today` / `generated_at` explicitly and falls back
to the clock only when the caller leaves it out. Everything below this
layer is deterministic.
"""

from datetime import date, datetime, time, timezone
from typing import Optional
from uuid import UUID

from src.audit import AuditLogger, create_correlation_id
from src.config import TrackerSettings, get_settings
from src.engine import LATEST_DUE_DATE, DueBadge, build_reminder, reminder_filename
from src.models.subscription import (
    SpendTotals,
    Subscription,
    SubscriptionForm,
    ValidationIssue,
)
from src.queries import QueryExecutor, QueryResult, SubscriptionQuery, compute_totals
from src.services.export import export_filename, to_csv
from src.services.storage import (
    InMemorySubscriptionStorage,
    NotFoundError,
    SubscriptionStorageInterface,
)
from src.validation import SubscriptionValidator, ValidationError


EDITABLE_FIELDS = ("name", "amount", "currency", "cycle", "next_due", "category", "notes")


class SubscriptionTracker:
    """
    Orchestrates the subscription tracker flows.

    A form that fails validation never reaches storage.
    The recurrence engine only ever changes next_due (via mark_paid).
    """

    def __init__(
        self,
        storage: Optional[SubscriptionStorageInterface] = None,
        validator: Optional[SubscriptionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[TrackerSettings] = None,
    ):
        self._settings = settings or get_settings().tracker
        self._storage = storage or InMemorySubscriptionStorage()
        self._validator = validator or SubscriptionValidator(self._settings)
        self._audit_logger = audit_logger
        self._queries = QueryExecutor(self._storage)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _require(self, subscription_id: str) -> Subscription:
        subscription = await self._storage.get(subscription_id)
        if subscription is None:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        return subscription

    async def _build(
        self,
        form: SubscriptionForm,
        subscription_id: Optional[str],
        correlation_id: UUID,
    ) -> Subscription:
        try:
            return self._validator.build(form, subscription_id=subscription_id)
        except ValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    issues=[issue.model_dump() for issue in e.issues],
                    correlation_id=correlation_id,
                )
            raise

    # -------------------------------------------------------------------------
    # Add / edit / delete
    # -------------------------------------------------------------------------

    async def add(
        self,
        form: SubscriptionForm,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Validate and store a new subscription.

        Raises:
            ValidationError: If the form is rejected (nothing is stored)
        """
        correlation_id = correlation_id or create_correlation_id()
        subscription = await self._build(form, None, correlation_id)

        await self._storage.save(subscription)

        if self._audit_logger:
            await self._audit_logger.log_subscription_added(
                subscription_id=subscription.id,
                name=subscription.name,
                correlation_id=correlation_id,
            )
        return subscription

    async def edit(
        self,
        subscription_id: str,
        form: SubscriptionForm,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Replace the user-editable fields of a subscription. The id is kept.

        Raises:
            NotFoundError: If no subscription has this id
            ValidationError: If the form is rejected (nothing is changed)
        """
        correlation_id = correlation_id or create_correlation_id()
        existing = await self._require(subscription_id)
        updated = await self._build(form, subscription_id, correlation_id)

        await self._storage.update(updated)

        if self._audit_logger:
            changed = [
                field for field in EDITABLE_FIELDS
                if getattr(existing, field) != getattr(updated, field)
            ]
            await self._audit_logger.log_subscription_updated(
                subscription_id=subscription_id,
                changed_fields=changed,
                correlation_id=correlation_id,
            )
        return updated

    async def delete(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Remove a subscription.

        Raises:
            NotFoundError: If no subscription has this id
        """
        if not await self._storage.delete(subscription_id):
            raise NotFoundError(f"Subscription {subscription_id} not found")

        if self._audit_logger:
            await self._audit_logger.log_subscription_deleted(
                subscription_id=subscription_id,
                correlation_id=correlation_id or create_correlation_id(),
            )

    # -------------------------------------------------------------------------
    # Mark paid
    # -------------------------------------------------------------------------

    async def mark_paid(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Advance next_due by one billing cycle.

        Calling this twice advances twice; it is not idempotent.

        Raises:
            NotFoundError: If no subscription has this id
            ValidationError: If the new due date is past LATEST_DUE_DATE
                (nothing is changed)
        """
        correlation_id = correlation_id or create_correlation_id()
        existing = await self._require(subscription_id)
        advanced = existing.advanced()

        if advanced.next_due > LATEST_DUE_DATE:
            issue = ValidationIssue(
                field="next_due",
                issue_type="out_of_range",
                message=f"Next due date cannot move past {LATEST_DUE_DATE.isoformat()}.",
                severity="error",
            )
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    issues=[issue.model_dump()],
                    correlation_id=correlation_id,
                )
            raise ValidationError([issue])

        await self._storage.update(advanced)

        if self._audit_logger:
            await self._audit_logger.log_marked_paid(
                subscription_id=subscription_id,
                previous_due=existing.next_due,
                next_due=advanced.next_due,
                correlation_id=correlation_id,
            )
        return advanced

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    async def list_subscriptions(
        self,
        query: Optional[SubscriptionQuery] = None,
        today: Optional[date] = None,
    ) -> QueryResult:
        """Filtered, due-date ordered list plus totals over everything."""
        query = query or SubscriptionQuery()
        if query.due_within_days is not None and today is None:
            today = date.today()
        return await self._queries.execute(query, today=today)

    async def totals(self) -> SpendTotals:
        return compute_totals(await self._storage.list_all())

    async def badges(self, today: Optional[date] = None) -> dict[str, DueBadge]:
        """Due badge per subscription id, as seen from today."""
        today = today or date.today()
        return {s.id: s.badge(today) for s in await self._storage.list_all()}

    # -------------------------------------------------------------------------
    # Downloads
    # -------------------------------------------------------------------------

    async def export_csv(
        self,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, str]:
        """
        Export every subscription as CSV.

        Returns:
            (filename, csv_text)
        """
        today = today or date.today()
        subscriptions = await self._storage.list_all()
        filename = export_filename(today, prefix=self._settings.export_prefix)
        content = to_csv(subscriptions)

        if self._audit_logger:
            await self._audit_logger.log_csv_exported(
                row_count=len(subscriptions),
                filename=filename,
                correlation_id=correlation_id or create_correlation_id(),
            )
        return filename, content

    async def reminder(
        self,
        subscription_id: str,
        generated_at: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, str]:
        """
        Build the calendar reminder for one subscription.

        Returns:
            (filename, ics_text)

        Raises:
            NotFoundError: If no subscription has this id
        """
        subscription = await self._require(subscription_id)
        generated_at = generated_at or datetime.now(timezone.utc)

        content = build_reminder(
            subscription,
            generated_at,
            reminder_time=time(self._settings.reminder_hour, self._settings.reminder_minute),
            lead_days=self._settings.reminder_lead_days,
            product_id=self._settings.calendar_product_id,
        )
        filename = reminder_filename(subscription.name)

        if self._audit_logger:
            await self._audit_logger.log_reminder_generated(
                subscription_id=subscription_id,
                filename=filename,
                correlation_id=correlation_id or create_correlation_id(),
            )
        return filename, content
