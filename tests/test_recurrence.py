"""
Tests for the recurrence engine.

Pure functions only: every test passes "today" explicitly.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from src.engine import (
    CYCLE_RULES,
    LATEST_DUE_DATE,
    BillingCycle,
    DueTone,
    ParseError,
    advance_due_date,
    classify_urgency,
    days_until,
    format_ymd,
    monthly_equivalent,
    parse_ymd,
    rule_for,
    yearly_equivalent,
)


ALL_CYCLES = list(BillingCycle)


class TestParsing:
    """Tests for YYYY-MM-DD parsing."""

    def test_parse_valid_date(self):
        """Test a well-formed date string parses."""
        assert parse_ymd("2024-02-29") == date(2024, 2, 29)

    def test_parse_strips_surrounding_whitespace(self):
        """Test whitespace around the date is ignored."""
        assert parse_ymd(" 2024-01-05 ") == date(2024, 1, 5)

    def test_parse_passes_dates_through(self):
        """Test date objects are returned unchanged."""
        assert parse_ymd(date(2023, 7, 1)) == date(2023, 7, 1)

    def test_parse_truncates_datetimes(self):
        """Test time-of-day is dropped."""
        assert parse_ymd(datetime(2023, 7, 1, 23, 59)) == date(2023, 7, 1)

    @pytest.mark.parametrize("value", [
        "",
        "2024-1-5",
        "2024/01/05",
        "05-01-2024",
        "2024-01-05T00:00:00",
        "2023-02-29",
        "2024-13-01",
        "2024-00-10",
        "2024-04-31",
        "not a date",
    ])
    def test_parse_rejects_malformed(self, value):
        """Test malformed or impossible dates raise ParseError."""
        with pytest.raises(ParseError):
            parse_ymd(value)

    def test_parse_rejects_non_strings(self):
        """Test numbers are not accepted as dates."""
        with pytest.raises(ParseError):
            parse_ymd(20240105)

    @pytest.mark.parametrize("value", [
        "9999-01-01", "9999-12-31", date(9999, 12, 31), datetime(9999, 6, 1, 12, 0),
    ])
    def test_parse_rejects_dates_that_cannot_be_advanced(self, value):
        """Test dates after the last advanceable day are refused."""
        with pytest.raises(ParseError, match="too far in the future"):
            parse_ymd(value)

    def test_parse_accepts_last_advanceable_day(self):
        """Test the last advanceable day itself parses."""
        assert parse_ymd("9998-12-31") == LATEST_DUE_DATE

    def test_parse_error_is_value_error(self):
        """Test ParseError can be caught as ValueError."""
        assert issubclass(ParseError, ValueError)

    def test_format_pads_components(self):
        """Test formatting zero-pads month and day."""
        assert format_ymd(date(2024, 3, 7)) == "2024-03-07"


class TestAdvanceDueDate:
    """Tests for advance_due_date."""

    def test_weekly_adds_seven_days(self):
        """Test weekly adds exactly 7 days, across a month end."""
        assert advance_due_date("2024-01-28", "weekly") == date(2024, 2, 4)

    def test_monthly_simple(self):
        """Test monthly keeps the day when it exists."""
        assert advance_due_date("2024-03-15", "monthly") == date(2024, 4, 15)

    def test_monthly_clamps_into_leap_february(self):
        """Test Jan 31 -> Feb 29 in a leap year."""
        assert advance_due_date("2024-01-31", "monthly") == date(2024, 2, 29)

    def test_monthly_clamps_into_common_february(self):
        """Test Jan 31 -> Feb 28 in a common year."""
        assert advance_due_date("2023-01-31", "monthly") == date(2023, 2, 28)

    def test_monthly_crosses_year_end(self):
        """Test December rolls into January of the next year."""
        assert advance_due_date("2024-12-31", "monthly") == date(2025, 1, 31)

    def test_quarterly_keeps_day_when_possible(self):
        """Test May 31 + 3 months -> Aug 31."""
        assert advance_due_date("2024-05-31", "quarterly") == date(2024, 8, 31)

    def test_quarterly_clamps(self):
        """Test Nov 30 + 3 months -> Feb 28."""
        assert advance_due_date("2022-11-30", "quarterly") == date(2023, 2, 28)

    def test_yearly_from_leap_day(self):
        """Test Feb 29 + 1 year -> Feb 28."""
        assert advance_due_date("2024-02-29", "yearly") == date(2025, 2, 28)

    def test_century_leap_rules(self):
        """Test 1900 is not a leap year but 2000 is."""
        assert advance_due_date("1900-01-31", "monthly") == date(1900, 2, 28)
        assert advance_due_date("2000-01-31", "monthly") == date(2000, 2, 29)

    def test_unknown_cycle_behaves_monthly(self):
        """Test an unknown cycle advances one month."""
        assert advance_due_date("2024-01-31", "fortnightly") == date(2024, 2, 29)
        assert advance_due_date("2024-01-31", None) == date(2024, 2, 29)

    def test_accepts_enum_and_mixed_case(self):
        """Test enum values and differently cased strings work."""
        assert advance_due_date("2024-01-10", BillingCycle.QUARTERLY) == date(2024, 4, 10)
        assert advance_due_date("2024-01-10", "Weekly") == date(2024, 1, 17)

    def test_repeated_clamping_never_recovers(self):
        """Test Jan 31 -> Feb 28 -> Mar 28, not Mar 31."""
        first = advance_due_date("2023-01-31", "monthly")
        second = advance_due_date(first, "monthly")
        assert first == date(2023, 2, 28)
        assert second == date(2023, 3, 28)

    @pytest.mark.parametrize("start", [
        date(2023, 1, 31), date(2024, 1, 30), date(2024, 12, 29), date(2023, 8, 31),
    ])
    def test_double_monthly_lands_on_clamped_day(self, start):
        """Test two monthly steps land on min(day, days in month + 2) or earlier."""
        once = advance_due_date(start, "monthly")
        twice = advance_due_date(once, "monthly")
        year = start.year + (start.month + 1) // 12
        month = (start.month + 1) % 12 + 1
        expected_day = min(once.day, calendar.monthrange(year, month)[1])
        assert twice == date(year, month, expected_day)
        assert twice.day <= min(start.day, calendar.monthrange(year, month)[1])

    def test_does_not_mutate_input(self):
        """Test the input date is left alone."""
        start = date(2024, 1, 31)
        advance_due_date(start, "monthly")
        assert start == date(2024, 1, 31)

    @pytest.mark.parametrize("cycle", ALL_CYCLES + ["bogus"])
    def test_strictly_monotonic(self, cycle):
        """Test the result is always later than the input."""
        day = date(2023, 12, 1)
        while day < date(2025, 1, 1):
            assert advance_due_date(day, cycle) > day
            day += timedelta(days=1)

    @pytest.mark.parametrize("cycle", ALL_CYCLES + ["bogus"])
    def test_latest_due_date_advances(self, cycle):
        """Test every cycle can advance from the last accepted date."""
        assert advance_due_date(LATEST_DUE_DATE, cycle) > LATEST_DUE_DATE
        assert advance_due_date("9998-12-31", cycle).year == 9999

    @pytest.mark.parametrize("cycle", ALL_CYCLES)
    def test_out_of_range_date_raises_parse_error(self, cycle):
        """Test a date too close to the calendar end is refused, not overflowed."""
        with pytest.raises(ParseError):
            advance_due_date("9999-12-31", cycle)

    def test_malformed_string_raises_parse_error(self):
        """Test malformed input does not produce a date."""
        with pytest.raises(ParseError):
            advance_due_date("2024-02-30", "monthly")


class TestDaysUntil:
    """Tests for days_until."""

    @pytest.mark.parametrize("today", [date(2024, 1, 1), date(2024, 2, 29), date(1999, 12, 31)])
    def test_same_day_is_zero(self, today):
        """Test a date is zero days from itself."""
        assert days_until(today, today) == 0

    def test_future_and_past(self):
        """Test positive for future and negative for overdue."""
        assert days_until("2024-03-10", "2024-03-01") == 9
        assert days_until("2024-02-28", "2024-03-01") == -2

    def test_across_leap_day(self):
        """Test Feb 28 -> Mar 1 is two days in a leap year."""
        assert days_until("2024-03-01", "2024-02-28") == 2

    def test_time_of_day_is_ignored(self):
        """Test datetimes are truncated to calendar days."""
        today = datetime(2024, 3, 1, 23, 59, 59)
        assert days_until(date(2024, 3, 2), today) == 1

    def test_us_spring_forward_is_exactly_one_day_per_day(self):
        """Test a DST change between the dates does not skew the count."""
        tz = ZoneInfo("America/New_York")
        # 2024-03-10 02:00 local clocks jump to 03:00 (23 hour day)
        before = datetime(2024, 3, 9, 0, 0, tzinfo=tz)
        after = datetime(2024, 3, 11, 0, 0, tzinfo=tz)
        assert days_until(after, before) == 2
        assert days_until("2024-03-11", "2024-03-10") == 1

    def test_fall_back_is_exactly_one_day(self):
        """Test the 25 hour day still counts as one day."""
        tz = ZoneInfo("Europe/Berlin")
        today = datetime(2024, 10, 27, 0, 30, tzinfo=tz)
        due = datetime(2024, 10, 28, 0, 0, tzinfo=tz)
        assert days_until(due, today) == 1

    def test_uses_local_calendar_date_not_utc(self):
        """Test aware datetimes count by their own wall-clock date."""
        late_evening = datetime(2024, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=-7)))
        assert days_until("2024-05-02", late_evening) == 1


class TestEquivalents:
    """Tests for monthly / yearly normalization."""

    def test_yearly_to_monthly(self):
        """Test 120 per year is 10 per month."""
        assert monthly_equivalent(120, "yearly") == 10

    def test_monthly_to_yearly(self):
        """Test 10 per month is 120 per year."""
        assert yearly_equivalent(10, "monthly") == 120

    def test_weekly(self):
        """Test weekly uses 52 weeks per year."""
        assert yearly_equivalent(10, "weekly") == 520
        assert monthly_equivalent(12, "weekly") == pytest.approx(52)

    def test_quarterly(self):
        """Test quarterly is a third per month and four per year."""
        assert monthly_equivalent(30, "quarterly") == pytest.approx(10)
        assert yearly_equivalent(30, "quarterly") == 120

    def test_unknown_cycle_is_monthly(self):
        """Test unknown cycles normalize like monthly."""
        assert monthly_equivalent(15, "daily") == 15
        assert yearly_equivalent(15, "daily") == 180

    def test_accepts_decimal_and_numeric_strings(self):
        """Test Decimal and string amounts are converted."""
        assert monthly_equivalent(Decimal("9.99"), "monthly") == pytest.approx(9.99)
        assert yearly_equivalent("2.50", "monthly") == pytest.approx(30.0)

    @pytest.mark.parametrize("amount", [
        None, "", "abc", float("nan"), float("inf"), float("-inf"), Decimal("NaN"), object(),
        True, False,
    ])
    def test_invalid_amount_coerces_to_zero(self, amount):
        """Test invalid amounts become 0 instead of raising or giving NaN."""
        assert monthly_equivalent(amount, "monthly") == 0
        assert yearly_equivalent(amount, "weekly") == 0

    def test_monthly_amount_is_returned_exactly(self):
        """Test a monthly amount is its own monthly equivalent, to the cent."""
        for cents in range(1, 100000):
            amount = cents / 100
            assert monthly_equivalent(amount, "monthly") == amount

    @pytest.mark.parametrize("amount", [0.05, 0.1, 0.19, 13.37, 999.99])
    def test_monthly_conversion_table(self, amount):
        """Test each cycle uses its own monthly conversion."""
        assert monthly_equivalent(amount, "quarterly") == amount / 3
        assert monthly_equivalent(amount, "yearly") == amount / 12
        assert monthly_equivalent(amount, "weekly") == amount * 52 / 12
        assert monthly_equivalent(amount, "bogus") == amount

    @pytest.mark.parametrize("cycle", ALL_CYCLES + ["unknown"])
    @pytest.mark.parametrize("amount", [0.01, 1, 9.99, 13.37, 1234.56])
    def test_monthly_times_twelve_is_yearly(self, cycle, amount):
        """Test both equivalents derive from the same ratio."""
        assert monthly_equivalent(amount, cycle) * 12 == pytest.approx(
            yearly_equivalent(amount, cycle)
        )


class TestCycleRules:
    """Tests for the shared rule table."""

    def test_every_cycle_has_a_rule(self):
        """Test the table covers all cycles."""
        assert set(CYCLE_RULES) == set(BillingCycle)

    def test_unknown_resolves_to_monthly_rule(self):
        """Test unknown cycles get the monthly rule object."""
        assert rule_for("hourly") is CYCLE_RULES[BillingCycle.MONTHLY]

    def test_coerce(self):
        """Test BillingCycle.coerce normalizes case and falls back."""
        assert BillingCycle.coerce(" YEARLY ") == BillingCycle.YEARLY
        assert BillingCycle.coerce("biweekly") == BillingCycle.MONTHLY
        assert BillingCycle.coerce(None) == BillingCycle.MONTHLY

    def test_is_known(self):
        """Test is_known only accepts the four cycles."""
        assert BillingCycle.is_known("quarterly")
        assert BillingCycle.is_known(BillingCycle.WEEKLY)
        assert not BillingCycle.is_known("daily")


class TestClassifyUrgency:
    """Tests for classify_urgency."""

    def test_overdue(self):
        """Test negative days are bad and say how overdue."""
        badge = classify_urgency(-1)
        assert badge.tone == DueTone.BAD
        assert "1d overdue" in badge.label

    def test_long_overdue_uses_absolute_value(self):
        """Test the label shows a positive count."""
        assert classify_urgency(-45).label == "45d overdue"

    def test_due_today(self):
        """Test zero days is bad."""
        badge = classify_urgency(0)
        assert badge.tone == DueTone.BAD
        assert badge.label == "Due today"

    @pytest.mark.parametrize("days,tone", [
        (1, DueTone.WARN),
        (3, DueTone.WARN),
        (4, DueTone.OK),
        (14, DueTone.OK),
        (15, DueTone.MUTED),
        (400, DueTone.MUTED),
    ])
    def test_boundaries(self, days, tone):
        """Test tone boundaries of the table."""
        badge = classify_urgency(days)
        assert badge.tone == tone
        assert badge.label == f"Due in {days}d"

    def test_tone_values(self):
        """Test tone string values."""
        assert [t.value for t in DueTone] == ["bad", "warn", "ok", "muted"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
