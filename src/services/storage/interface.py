"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Plug in whatever backend the host application syncs to
2. Use in-memory storage for testing and guest sessions
3. Keep the tracker flows decoupled from storage implementation

The recurrence engine never talks to storage. Only the tracker does.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.audit import AuditEvent
from src.models.subscription import Subscription


class SubscriptionStorageInterface(ABC):
    """
    Abstract interface for subscription storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def save(self, subscription: Subscription) -> bool:
        """
        Save a new subscription.

        Returns:
            True if saved successfully

        Raises:
            DuplicateError: If a subscription with the same id exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get(self, subscription_id: str) -> Optional[Subscription]:
        """
        Retrieve a subscription by its ID.

        Returns:
            The subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, subscription: Subscription) -> bool:
        """
        Replace an existing subscription (matched by id).

        Raises:
            NotFoundError: If the subscription doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, subscription_id: str) -> bool:
        """
        Delete a subscription by ID.

        Returns:
            True if something was deleted
        """
        pass

    @abstractmethod
    async def list_all(self) -> list[Subscription]:
        """
        List every stored subscription, ordered by next due date.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
