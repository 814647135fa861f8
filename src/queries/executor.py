"""
Query Execution

DESIGN DECISION: Listing is deterministic and side-effect free.
Filtering and ordering are plain functions over subscriptions; the
executor only fetches from storage and applies them.

Totals are always computed over every subscription, not the filtered
view, so the spend summary does not change while the user searches.
"""

from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from src.engine.recurrence import days_until
from src.models.subscription import SpendTotals, Subscription
from src.services.storage import SubscriptionStorageInterface


ALL_CATEGORIES = "All"


class SubscriptionQuery(BaseModel):
    """What the list view asks for."""

    text: str = Field(
        default="",
        description="Case-insensitive search over name, category and notes"
    )
    category: str = Field(
        default=ALL_CATEGORIES,
        description="Exact category to keep, or 'All'"
    )
    due_within_days: Optional[int] = Field(
        default=None,
        ge=0,
        description="Only subscriptions due within this many days (overdue included)"
    )


class QueryResult(BaseModel):
    """Result of executing a subscription query."""

    subscriptions: list[Subscription] = Field(default_factory=list)
    totals: SpendTotals = Field(default_factory=SpendTotals)
    result_count: int = Field(default=0, ge=0)

    @property
    def data_found(self) -> bool:
        return self.result_count > 0


def _matches_text(subscription: Subscription, needle: str) -> bool:
    if not needle:
        return True
    return any(
        needle in (value or "").lower()
        for value in (subscription.name, subscription.category, subscription.notes)
    )


def filter_subscriptions(
    subscriptions: Iterable[Subscription],
    text: str = "",
    category: str = ALL_CATEGORIES,
) -> list[Subscription]:
    """Apply search text and category filter, earliest due date first."""
    needle = text.strip().lower()
    matches = [
        s for s in subscriptions
        if _matches_text(s, needle)
        and (category == ALL_CATEGORIES or s.category == category)
    ]
    return sorted(matches, key=lambda s: s.next_due)


def due_within(
    subscriptions: Iterable[Subscription],
    today: date,
    days: int,
) -> list[Subscription]:
    """Subscriptions due on or before today + days (overdue ones included)."""
    return [s for s in subscriptions if days_until(s.next_due, today) <= days]


def compute_totals(subscriptions: Iterable[Subscription]) -> SpendTotals:
    """Sum monthly and yearly equivalents (no currency conversion)."""
    monthly = 0.0
    yearly = 0.0
    count = 0
    for subscription in subscriptions:
        monthly += subscription.monthly_cost
        yearly += subscription.yearly_cost
        count += 1
    return SpendTotals(monthly=monthly, yearly=yearly, count=count)


class QueryExecutor:
    """
    Executes list queries against subscription storage.

    GUARANTEES:
    - Only returns stored subscriptions
    - Ordering is by next due date
    """

    def __init__(self, storage: SubscriptionStorageInterface):
        self._storage = storage

    async def execute(
        self,
        query: SubscriptionQuery,
        today: Optional[date] = None,
    ) -> QueryResult:
        """
        Run a query.

        Args:
            query: Filters to apply
            today: Reference date, required when query.due_within_days is set
        """
        everything = await self._storage.list_all()
        matches = filter_subscriptions(everything, query.text, query.category)

        if query.due_within_days is not None:
            if today is None:
                raise ValueError("today is required to filter by due date")
            matches = due_within(matches, today, query.due_within_days)

        return QueryResult(
            subscriptions=matches,
            totals=compute_totals(everything),
            result_count=len(matches),
        )
