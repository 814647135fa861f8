"""
Calendar Artifact Generator

Builds an iCalendar (RFC 5545) document holding one recurring reminder
event for a subscription:
- anchored at the subscription's next due date, at a fixed local time
- repeating with the subscription's billing cycle
- with one display alarm a fixed number of days before each occurrence

DESIGN DECISION: The output is byte-for-byte deterministic. The generation
timestamp is a parameter, the UID derives from the subscription id, and
nothing else varies. This makes golden-file testing possible.
"""

import re
from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Any

from src.engine.recurrence import BillingCycle, format_ymd, parse_ymd, rule_for

if TYPE_CHECKING:
    from src.models.subscription import Subscription


CRLF = "\r\n"
DEFAULT_PRODUCT_ID = "-//SubTrack//Subscription Reminder//EN"
DEFAULT_REMINDER_TIME = time(9, 0)
UID_DOMAIN = "subtrack"

# RFC 5545 3.1: content lines SHOULD NOT exceed 75 octets
_MAX_LINE_OCTETS = 75
# Every month has at least this many days
_SHORTEST_MONTH = 28


# =============================================================================
# TEXT HANDLING
# =============================================================================

def escape_text(value: Any) -> str:
    """
    Escape a TEXT property value.

    Backslash, newline, comma and semicolon are escaped, so no user input
    can end a property or introduce a new one.
    """
    text = "" if value is None else str(value)
    text = text.replace("\\", "\\\\")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\n", "\\n")
    text = text.replace(",", "\\,").replace(";", "\\;")
    return text


def fold_line(line: str) -> str:
    """
    Fold a content line at 75 octets.

    Continuation lines start with a single space. Multi-byte UTF-8
    characters are never split.
    """
    if len(line.encode("utf-8")) <= _MAX_LINE_OCTETS:
        return line

    chunks = []
    current = []
    size = 0
    limit = _MAX_LINE_OCTETS
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > limit:
            chunks.append("".join(current))
            current = []
            size = 0
            # the leading space of a continuation line counts toward its length
            limit = _MAX_LINE_OCTETS - 1
        current.append(char)
        size += width
    chunks.append("".join(current))

    return (CRLF + " ").join(chunks)


# =============================================================================
# RECURRENCE RULE
# =============================================================================

def recurrence_rule(cycle: Any, anchor: date) -> str:
    """
    RRULE value for a billing cycle anchored at a date.

    weekly -> every week, monthly -> every month, quarterly -> every 3
    months, yearly -> every year; unknown cycles recur monthly.

    A plain FREQ=MONTHLY rule starting on the 31st skips every shorter
    month. When the anchor day does not exist in every target month the
    rule selects the last of days 28..anchor day instead, so readers land
    on the month's last day, like advance_due_date does.
    """
    rule = rule_for(cycle)
    parts = [f"FREQ={rule.rrule_freq}", f"INTERVAL={rule.rrule_interval}"]

    if rule.rrule_freq == "YEARLY":
        needs_clamp = anchor.month == 2 and anchor.day == 29
        if needs_clamp:
            parts.append(f"BYMONTH={anchor.month}")
    else:
        needs_clamp = rule.months > 0 and anchor.day > _SHORTEST_MONTH

    if needs_clamp:
        days = ",".join(str(day) for day in range(_SHORTEST_MONTH, anchor.day + 1))
        parts.append(f"BYMONTHDAY={days}")
        parts.append("BYSETPOS=-1")

    return ";".join(parts)


# =============================================================================
# DOCUMENT
# =============================================================================

def _format_utc_stamp(generated_at: datetime) -> str:
    """Format as a UTC DATE-TIME; naive values are taken to be UTC."""
    if generated_at.tzinfo is None:
        stamp = generated_at.replace(tzinfo=timezone.utc)
    else:
        stamp = generated_at.astimezone(timezone.utc)
    return stamp.strftime("%Y%m%dT%H%M%SZ")


def _format_local_start(due: date, at: time) -> str:
    """Format as a floating (local) DATE-TIME."""
    return f"{due.year:04d}{due.month:02d}{due.day:02d}T{at.hour:02d}{at.minute:02d}{at.second:02d}"


def _describe(sub: "Subscription") -> str:
    cycle = BillingCycle.coerce(sub.cycle)
    lines = [
        f"Amount: {sub.currency} {sub.amount:.2f} ({cycle.value})",
        f"Next due: {format_ymd(parse_ymd(sub.next_due))}",
    ]
    if sub.category:
        lines.append(f"Category: {sub.category}")
    if sub.notes:
        lines.append(f"Notes: {sub.notes}")
    return "\n".join(lines)


def build_reminder(
    sub: "Subscription",
    generated_at: datetime,
    reminder_time: time = DEFAULT_REMINDER_TIME,
    lead_days: int = 1,
    product_id: str = DEFAULT_PRODUCT_ID,
) -> str:
    """
    Build the reminder calendar for a subscription.

    Args:
        sub: The subscription to remind about
        generated_at: Document creation time (DTSTAMP), supplied by the caller
        reminder_time: Local time of day the event starts
        lead_days: Days before each occurrence the alarm fires
        product_id: PRODID of the generating product

    Returns:
        A complete VCALENDAR document with CRLF line endings
    """
    if lead_days < 1:
        raise ValueError("lead_days must be at least 1")

    due = parse_ymd(sub.next_due)

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{product_id}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{sub.id}@{UID_DOMAIN}",
        f"DTSTAMP:{_format_utc_stamp(generated_at)}",
        f"DTSTART:{_format_local_start(due, reminder_time)}",
        f"RRULE:{recurrence_rule(sub.cycle, due)}",
        f"SUMMARY:{escape_text(f'{sub.name} payment due')}",
        f"DESCRIPTION:{escape_text(_describe(sub))}",
    ]
    if sub.category:
        lines.append(f"CATEGORIES:{escape_text(sub.category)}")
    lines.extend([
        "BEGIN:VALARM",
        "ACTION:DISPLAY",
        f"TRIGGER:-P{lead_days}D",
        f"DESCRIPTION:{escape_text(f'Reminder: {sub.name} is due soon')}",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ])

    return CRLF.join(fold_line(line) for line in lines) + CRLF


def reminder_filename(name: Any) -> str:
    """
    File name for a reminder download.

    Lower-cased, non-alphanumerics stripped, whitespace runs replaced by a
    hyphen. Falls back to "subscription" if nothing is left.
    """
    text = re.sub(r"[^a-z0-9\s]", "", str(name or "").lower())
    slug = re.sub(r"\s+", "-", text.strip())
    return f"{slug or 'subscription'}.ics"
