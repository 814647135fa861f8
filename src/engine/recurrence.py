"""
Recurrence Engine

Pure date and number transformations for subscription billing cycles:
- advancing a due date by one billing cycle (calendar-aware clamping)
- counting days until a due date
- normalizing an amount to monthly / yearly spend
- classifying due urgency into a badge

DESIGN DECISION: Nothing in this module reads the wall clock, performs I/O
or mutates its inputs. "Today" is always a parameter. Unknown cycles are
resolved through a single rule table so every consumer (advance,
equivalents, calendar recurrence rule) agrees on the monthly fallback.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Union

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict


DateLike = Union[date, datetime, str]

_YMD_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Last due date every cycle can still be advanced from (one year short of date.max).
LATEST_DUE_DATE = date(9998, 12, 31)


# =============================================================================
# ENUMS
# =============================================================================

class BillingCycle(str, Enum):
    """Recurrence period of a subscription charge."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def coerce(cls, value: Any) -> "BillingCycle":
        """
        Resolve any value to a cycle.

        Unrecognized values (including None) resolve to MONTHLY. This is the
        documented default, not an error.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MONTHLY

    @classmethod
    def is_known(cls, value: Any) -> bool:
        """True if value names one of the four cycles exactly."""
        if isinstance(value, cls):
            return True
        return str(value).strip().lower() in {c.value for c in cls}


class DueTone(str, Enum):
    """Display tone of a due badge."""
    BAD = "bad"
    WARN = "warn"
    OK = "ok"
    MUTED = "muted"


class DueBadge(BaseModel):
    """Urgency badge shown next to a subscription."""
    model_config = ConfigDict(frozen=True)

    label: str
    tone: DueTone


class ParseError(ValueError):
    """A date string was not a valid YYYY-MM-DD calendar date."""
    pass


# =============================================================================
# CYCLE RULE TABLE
# =============================================================================

@dataclass(frozen=True)
class CycleRule:
    """How one billing cycle advances, normalizes and recurs."""
    months: int
    days: int
    periods_per_year: int
    rrule_freq: str
    rrule_interval: int


CYCLE_RULES: dict[BillingCycle, CycleRule] = {
    BillingCycle.WEEKLY: CycleRule(
        months=0, days=7, periods_per_year=52, rrule_freq="WEEKLY", rrule_interval=1,
    ),
    BillingCycle.MONTHLY: CycleRule(
        months=1, days=0, periods_per_year=12, rrule_freq="MONTHLY", rrule_interval=1,
    ),
    BillingCycle.QUARTERLY: CycleRule(
        months=3, days=0, periods_per_year=4, rrule_freq="MONTHLY", rrule_interval=3,
    ),
    BillingCycle.YEARLY: CycleRule(
        months=12, days=0, periods_per_year=1, rrule_freq="YEARLY", rrule_interval=1,
    ),
}


def rule_for(cycle: Any) -> CycleRule:
    """Look up the rule for a cycle; unknown cycles get the monthly rule."""
    return CYCLE_RULES[BillingCycle.coerce(cycle)]


# =============================================================================
# DATE PARSING
# =============================================================================

def _in_range(value: date, raw: Any) -> date:
    if value > LATEST_DUE_DATE:
        raise ParseError(
            f"Date {raw!r} is too far in the future (latest is {LATEST_DUE_DATE.isoformat()})"
        )
    return value


def parse_ymd(value: DateLike) -> date:
    """
    Parse a local calendar date.

    Accepts a date, a datetime (time-of-day is dropped) or a strict
    YYYY-MM-DD string. Anything else, or a date after LATEST_DUE_DATE,
    raises ParseError.
    """
    if isinstance(value, datetime):
        return _in_range(value.date(), value)
    if isinstance(value, date):
        return _in_range(value, value)
    if not isinstance(value, str):
        raise ParseError(f"Expected a YYYY-MM-DD date, got {type(value).__name__}")

    match = _YMD_PATTERN.match(value.strip())
    if match is None:
        raise ParseError(f"Invalid date {value!r}: expected YYYY-MM-DD")

    year, month, day = (int(part) for part in match.groups())
    try:
        parsed = date(year, month, day)
    except ValueError as e:
        raise ParseError(f"Invalid date {value!r}: {e}") from e
    return _in_range(parsed, value)


def format_ymd(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


# =============================================================================
# RECURRENCE
# =============================================================================

def advance_due_date(current_due: DateLike, cycle: Any) -> date:
    """
    Move a due date forward by exactly one billing cycle.

    Month-based cycles clamp the day to the target month's length:
    Jan 31 + 1 month is Feb 29 in a leap year and Feb 28 otherwise, never
    March. The clamped day is not recovered later (Jan 31 -> Feb 28 ->
    Mar 28).

    Every date parse_ymd accepts can be advanced, so this never fails for
    a valid date. The result may lie past LATEST_DUE_DATE.
    """
    current = parse_ymd(current_due)
    rule = rule_for(cycle)

    if rule.months:
        # relativedelta keeps the day and clamps it to the target month's end
        return current + relativedelta(months=rule.months)
    return current + timedelta(days=rule.days)


def days_until(due: DateLike, today: DateLike) -> int:
    """
    Whole calendar days from today until due.

    Negative when overdue, zero when due today. Both sides are reduced to
    (year, month, day) before subtracting, so a daylight-saving change
    between the two dates cannot produce a fractional day.
    """
    return parse_ymd(due).toordinal() - parse_ymd(today).toordinal()


# =============================================================================
# SPEND NORMALIZATION
# =============================================================================

def _coerce_amount(amount: Any) -> float:
    """Convert to a finite float; anything else becomes 0."""
    if isinstance(amount, bool):
        return 0.0
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def yearly_equivalent(amount: Any, cycle: Any) -> float:
    """Amount normalized to spend per year."""
    return _coerce_amount(amount) * rule_for(cycle).periods_per_year


def monthly_equivalent(amount: Any, cycle: Any) -> float:
    """
    Amount normalized to spend per month.

    Month-based cycles divide by their length in months, so a monthly
    amount comes back unchanged. Weekly amounts are amount * 52 / 12.
    """
    value = _coerce_amount(amount)
    rule = rule_for(cycle)
    if rule.months:
        return value / rule.months
    return value * rule.periods_per_year / 12


# =============================================================================
# URGENCY
# =============================================================================

def classify_urgency(days: int) -> DueBadge:
    """
    Classify days-until-due into a badge.

    < 0 bad (overdue), 0 bad (today), 1-3 warn, 4-14 ok, > 14 muted.
    """
    if days < 0:
        return DueBadge(label=f"{abs(days)}d overdue", tone=DueTone.BAD)
    if days == 0:
        return DueBadge(label="Due today", tone=DueTone.BAD)
    if days <= 3:
        return DueBadge(label=f"Due in {days}d", tone=DueTone.WARN)
    if days <= 14:
        return DueBadge(label=f"Due in {days}d", tone=DueTone.OK)
    return DueBadge(label=f"Due in {days}d", tone=DueTone.MUTED)


def due_badge(due: DateLike, today: DateLike) -> DueBadge:
    """Badge for a due date as seen from today."""
    return classify_urgency(days_until(due, today))
