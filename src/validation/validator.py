"""
Subscription Form Validation

DESIGN DECISION: Validation happens at the boundary, before anything reaches
the recurrence engine or storage. The engine then treats well-formed input as
a precondition.

CHECKS:
- Name present
- Amount numeric, finite, greater than zero (rounded to cents)
- Next due date is a real YYYY-MM-DD calendar date
- Cycle is one of the four known cycles (unknown -> warning, monthly used)
- Currency / category come from the suggestion lists (warning / info only)

IMPORTANT: A rejected form never produces a partial Subscription.
Errors are reported together so the user can fix them in one pass.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import ValidationError as SchemaError

from src.config import TrackerSettings, get_settings
from src.engine.recurrence import BillingCycle, ParseError, parse_ymd
from src.models.subscription import (
    CATEGORY_OPTIONS,
    CURRENCY_OPTIONS,
    Subscription,
    SubscriptionForm,
    ValidationIssue,
    ValidationResult,
    quantize_amount,
)


class ValidationError(ValueError):
    """Form input was rejected. Carries every error-level issue found."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        messages = "; ".join(issue.message for issue in issues) or "invalid input"
        super().__init__(messages)


class SubscriptionValidator:
    """Turns raw form input into a trusted Subscription, or explains why not."""

    def __init__(self, settings: Optional[TrackerSettings] = None):
        self._settings = settings or get_settings().tracker

    def _check_name(self, form: SubscriptionForm) -> list[ValidationIssue]:
        if form.name.strip():
            return []
        return [ValidationIssue(
            field="name",
            issue_type="missing",
            message="Please enter a subscription name.",
            severity="error",
        )]

    def _check_amount(
        self,
        form: SubscriptionForm,
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        raw = form.amount.strip()
        if not raw:
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Enter a valid amount (> 0).",
                severity="error",
            )]

        try:
            amount = Decimal(raw)
        except InvalidOperation:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount {raw!r} is not a number.",
                severity="error",
            )]

        if not amount.is_finite() or amount <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Enter a valid amount (> 0).",
                severity="error",
            )]

        try:
            amount = quantize_amount(amount)
        except InvalidOperation:
            # too many digits to represent in cents
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount is too large.",
                severity="error",
            )]
        if amount <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount rounds to zero.",
                severity="error",
            )]

        issues = []
        if amount > self._settings.max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high.",
                severity="warning",
            ))
        return amount, issues

    def _check_next_due(self, form: SubscriptionForm) -> list[ValidationIssue]:
        raw = form.next_due.strip()
        if not raw:
            return [ValidationIssue(
                field="next_due",
                issue_type="missing",
                message="Next due date is required.",
                severity="error",
            )]
        try:
            parse_ymd(raw)
        except ParseError as e:
            return [ValidationIssue(
                field="next_due",
                issue_type="invalid_format",
                message=str(e),
                severity="error",
            )]
        return []

    def _check_choices(self, form: SubscriptionForm) -> list[ValidationIssue]:
        issues = []

        if not BillingCycle.is_known(form.cycle):
            issues.append(ValidationIssue(
                field="cycle",
                issue_type="unknown_cycle",
                message=f"Unknown billing cycle {form.cycle!r}; monthly will be used.",
                severity="warning",
            ))

        if form.currency.strip() not in CURRENCY_OPTIONS:
            issues.append(ValidationIssue(
                field="currency",
                issue_type="unlisted_value",
                message=f"Currency {form.currency!r} is not in the usual list.",
                severity="warning",
            ))

        if form.category.strip() and form.category.strip() not in CATEGORY_OPTIONS:
            issues.append(ValidationIssue(
                field="category",
                issue_type="custom_value",
                message=f"Using custom category {form.category!r}.",
                severity="info",
            ))

        return issues

    def validate(
        self,
        form: SubscriptionForm,
        subscription_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate a form.

        Args:
            form: Raw form input
            subscription_id: Keep this id (editing); a new one is generated if None

        Returns:
            ValidationResult; `subscription` is set only when valid
        """
        issues = []
        issues.extend(self._check_name(form))
        amount, amount_issues = self._check_amount(form)
        issues.extend(amount_issues)
        issues.extend(self._check_next_due(form))
        issues.extend(self._check_choices(form))

        subscription = None
        if not any(issue.severity == "error" for issue in issues):
            fields = {
                "name": form.name,
                "amount": amount,
                "currency": form.currency or self._settings.default_currency,
                "cycle": form.cycle,
                "next_due": form.next_due.strip(),
                "category": form.category or self._settings.default_category,
                "notes": (form.notes or "").strip(),
            }
            if subscription_id is not None:
                fields["id"] = subscription_id
            try:
                subscription = Subscription(**fields)
            except SchemaError as e:
                for error in e.errors():
                    issues.append(ValidationIssue(
                        field=".".join(str(part) for part in error["loc"]) or "form",
                        issue_type=error["type"],
                        message=error["msg"],
                        severity="error",
                    ))

        warnings = [issue.message for issue in issues if issue.severity == "warning"]

        return ValidationResult(
            is_valid=subscription is not None,
            issues=issues,
            warnings=warnings,
            subscription=subscription,
        )

    def build(
        self,
        form: SubscriptionForm,
        subscription_id: Optional[str] = None,
    ) -> Subscription:
        """
        Validate and return the Subscription.

        Raises:
            ValidationError: If the form has any error-level issue
        """
        result = self.validate(form, subscription_id=subscription_id)
        if result.subscription is None:
            raise ValidationError(
                [issue for issue in result.issues if issue.severity == "error"]
            )
        return result.subscription

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ Looks good."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
