"""Query execution package."""

from src.queries.executor import (
    ALL_CATEGORIES,
    QueryExecutor,
    QueryResult,
    SubscriptionQuery,
    compute_totals,
    due_within,
    filter_subscriptions,
)

__all__ = [
    "ALL_CATEGORIES",
    "QueryExecutor",
    "QueryResult",
    "SubscriptionQuery",
    "compute_totals",
    "due_within",
    "filter_subscriptions",
]
