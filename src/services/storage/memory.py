"""
In-Memory Storage

Dict-backed implementations of the storage interfaces. Used for tests and
for guest sessions that never leave the process. Records are stored in
their plain persistence shape (Subscription.to_record) so the same
round trip a real backend performs is exercised here too.
"""

from typing import Optional

from src.models.audit import AuditEvent
from src.models.subscription import Subscription
from src.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    SubscriptionStorageInterface,
)


class InMemorySubscriptionStorage(SubscriptionStorageInterface):
    """Subscription storage kept in a dict keyed by id."""

    def __init__(self, subscriptions: Optional[list[Subscription]] = None):
        self._rows: dict[str, dict] = {}
        for subscription in subscriptions or []:
            self._rows[str(subscription.id)] = subscription.to_record()

    async def save(self, subscription: Subscription) -> bool:
        key = str(subscription.id)
        if key in self._rows:
            raise DuplicateError(f"Subscription {key} already exists")
        self._rows[key] = subscription.to_record()
        return True

    async def get(self, subscription_id: str) -> Optional[Subscription]:
        row = self._rows.get(str(subscription_id))
        if row is None:
            return None
        return Subscription.from_record(row)

    async def update(self, subscription: Subscription) -> bool:
        key = str(subscription.id)
        if key not in self._rows:
            raise NotFoundError(f"Subscription {key} not found")
        self._rows[key] = subscription.to_record()
        return True

    async def delete(self, subscription_id: str) -> bool:
        return self._rows.pop(str(subscription_id), None) is not None

    async def list_all(self) -> list[Subscription]:
        subscriptions = [Subscription.from_record(row) for row in self._rows.values()]
        return sorted(subscriptions, key=lambda s: s.next_due)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            event for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
