"""
CSV Export

Flat rows of name, amount, currency, cycle, nextDue, category, notes.
A field is quoted only when it contains a comma, a quote or a line break;
embedded quotes are doubled.
"""

import csv
import io
from datetime import date
from typing import Iterable

from src.engine.recurrence import format_ymd
from src.models.subscription import Subscription


CSV_HEADERS = ["name", "amount", "currency", "cycle", "nextDue", "category", "notes"]


def _row(subscription: Subscription) -> list[str]:
    return [
        subscription.name,
        f"{subscription.amount:.2f}",
        subscription.currency,
        subscription.cycle.value,
        format_ymd(subscription.next_due),
        subscription.category,
        subscription.notes,
    ]


def to_csv(subscriptions: Iterable[Subscription]) -> str:
    """Render subscriptions as CSV text (header first, "\\n" line breaks)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for subscription in subscriptions:
        writer.writerow(_row(subscription))
    # no trailing line break after the last row
    return buffer.getvalue().rstrip("\n")


def export_filename(today: date, prefix: str = "subtrack") -> str:
    """Name of a CSV export made on a given day, e.g. subtrack-2024-05-01.csv."""
    return f"{prefix}-{format_ymd(today)}.csv"
