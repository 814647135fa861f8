"""
Recurrence and spend-normalization engine.

Pure functions only: no I/O, no clock access, no mutation of inputs.
"""

from src.engine.recurrence import (
    CYCLE_RULES,
    LATEST_DUE_DATE,
    BillingCycle,
    CycleRule,
    DueBadge,
    DueTone,
    ParseError,
    advance_due_date,
    classify_urgency,
    days_until,
    due_badge,
    format_ymd,
    monthly_equivalent,
    parse_ymd,
    rule_for,
    yearly_equivalent,
)
from src.engine.calendar import (
    build_reminder,
    escape_text,
    fold_line,
    recurrence_rule,
    reminder_filename,
)

__all__ = [
    # Recurrence
    "CYCLE_RULES",
    "LATEST_DUE_DATE",
    "BillingCycle",
    "CycleRule",
    "DueBadge",
    "DueTone",
    "ParseError",
    "advance_due_date",
    "classify_urgency",
    "days_until",
    "due_badge",
    "format_ymd",
    "monthly_equivalent",
    "parse_ymd",
    "rule_for",
    "yearly_equivalent",
    # Calendar
    "build_reminder",
    "escape_text",
    "fold_line",
    "recurrence_rule",
    "reminder_filename",
]
