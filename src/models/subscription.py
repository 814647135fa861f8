"""
Core Data Models for SubTrack

These models define the strict schemas for subscription data:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage, export and logging

DESIGN DECISION: The billing cycle is a closed enum. Values coming back
from storage that name no known cycle are coerced to MONTHLY through
BillingCycle.coerce, the same fallback the recurrence engine uses.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from src.engine.recurrence import (
    BillingCycle,
    DateLike,
    DueBadge,
    advance_due_date,
    days_until,
    due_badge,
    monthly_equivalent,
    parse_ymd,
    yearly_equivalent,
)


# =============================================================================
# OPTION LISTS - suggestions shown by the form, not enforced
# =============================================================================

CATEGORY_OPTIONS = [
    "Streaming",
    "Music",
    "Cloud/Storage",
    "Gym/Fitness",
    "Utilities",
    "Education",
    "Software",
    "Games",
    "Other",
]

CURRENCY_OPTIONS = ["$", "CAD $", "USD $", "₹", "€", "£"]

CENT = Decimal("0.01")


def quantize_amount(value: Any) -> Decimal:
    """Round an amount to cents (half up)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def new_subscription_id() -> str:
    """Fresh opaque id for a new subscription."""
    return str(uuid4())


# =============================================================================
# CORE SUBSCRIPTION MODEL
# =============================================================================

class Subscription(BaseModel):
    """
    A recurring subscription.

    The engine only ever derives a new next_due from a subscription.
    Every other field is set by the user through the validator.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: str = Field(
        default_factory=new_subscription_id,
        min_length=1,
        max_length=100,
        description="Opaque unique subscription ID"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Charge per billing cycle"
    )
    currency: str = Field(
        default="$",
        min_length=1,
        max_length=10,
        description="Display currency (never converted)"
    )
    cycle: BillingCycle = Field(
        default=BillingCycle.MONTHLY,
        description="Billing cycle"
    )
    next_due: date = Field(
        ...,
        description="Next charge date in the user's local calendar"
    )
    category: str = Field(
        default="Other",
        max_length=50,
        description="Category (suggested from CATEGORY_OPTIONS)"
    )
    notes: str = Field(
        default="",
        max_length=1000,
        description="Free text notes"
    )

    @field_validator('cycle', mode='before')
    @classmethod
    def coerce_cycle(cls, v: Any) -> BillingCycle:
        """Unknown cycles fall back to monthly."""
        return BillingCycle.coerce(v)

    @field_validator('next_due', mode='before')
    @classmethod
    def parse_next_due(cls, v: Any) -> date:
        """Only YYYY-MM-DD strings are accepted."""
        return parse_ymd(v)

    @field_validator('category', mode='before')
    @classmethod
    def default_category(cls, v: Any) -> Any:
        return v or "Other"

    @field_validator('notes', mode='before')
    @classmethod
    def default_notes(cls, v: Any) -> Any:
        return v or ""

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def monthly_cost(self) -> float:
        return monthly_equivalent(self.amount, self.cycle)

    @property
    def yearly_cost(self) -> float:
        return yearly_equivalent(self.amount, self.cycle)

    def days_until_due(self, today: DateLike) -> int:
        return days_until(self.next_due, today)

    def badge(self, today: DateLike) -> DueBadge:
        return due_badge(self.next_due, today)

    def advanced(self) -> "Subscription":
        """
        Copy of this subscription with next_due moved one cycle forward.

        The original is not modified; id and all other fields are kept.
        """
        return self.model_copy(
            update={"next_due": advance_due_date(self.next_due, self.cycle)}
        )

    # -------------------------------------------------------------------------
    # Persistence mapping
    # -------------------------------------------------------------------------

    def to_record(self) -> dict:
        """Plain row for the persistence layer."""
        record = self.model_dump(mode="json")
        record["notes"] = self.notes or None
        return record

    @classmethod
    def from_record(cls, record: dict) -> "Subscription":
        """Build from a persistence row (missing category/notes get defaults)."""
        return cls(
            id=str(record["id"]),
            name=record["name"],
            amount=quantize_amount(record["amount"]),
            currency=record.get("currency") or "$",
            cycle=record.get("cycle"),
            next_due=record["next_due"],
            category=record.get("category"),
            notes=record.get("notes"),
        )


# =============================================================================
# FORM INPUT
# =============================================================================

class SubscriptionForm(BaseModel):
    """
    Raw form input, before validation.

    CRITICAL: Nothing here is trusted. It MUST go through
    SubscriptionValidator before it becomes a Subscription.
    """

    name: str = ""
    amount: str = ""
    currency: str = "$"
    cycle: str = BillingCycle.MONTHLY.value
    next_due: str = ""
    category: str = "Other"
    notes: Optional[str] = None


# =============================================================================
# AGGREGATES
# =============================================================================

class SpendTotals(BaseModel):
    """
    Spend across subscriptions normalized to a common period.

    Amounts in different currencies are summed as-is (no conversion).
    """

    monthly: float = Field(default=0.0, description="Sum of monthly equivalents")
    yearly: float = Field(default=0.0, description="Sum of yearly equivalents")
    count: int = Field(default=0, ge=0, description="Number of subscriptions counted")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a subscription form."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    # Only set when is_valid
    subscription: Optional[Subscription] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
