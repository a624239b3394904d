"""Unit tests for recurrence intervals and plan projections"""

from datetime import datetime

from loandash.domain.models import RecurrenceSettings
from loandash.domain.recurrence import (
    describe,
    interval_days,
    label,
    next_due_date,
    project_bank_loan_due_date,
    project_due_date,
)


def test_interval_days_known_types():
    assert interval_days("daily") == 1
    assert interval_days("weekly") == 7
    assert interval_days("bi-weekly") == 14
    assert interval_days("monthly") == 30
    assert interval_days("quarterly") == 90
    assert interval_days("yearly") == 365


def test_interval_days_unknown_type_defaults_to_monthly():
    """Test malformed or missing types fall back to 30 days"""
    assert interval_days("fortnightly-ish") == 30
    assert interval_days(None) == 30
    assert interval_days("none") == 30


def test_label_falls_back_to_monthly():
    assert label("bi-weekly") == "Bi-weekly"
    assert label("bogus") == "Monthly"


def test_describe():
    assert describe(RecurrenceSettings(type="weekly", end_date="2024-06-01")) == "Weekly until 2024-06-01"
    assert describe(RecurrenceSettings(type="monthly", max_occurrences=6)) == "Monthly for 6 occurrences"
    assert describe(RecurrenceSettings(type="daily")) == "Daily"


def test_next_due_date_uses_calendar_months():
    start = datetime(2024, 1, 31)
    assert next_due_date(start, "weekly") == datetime(2024, 2, 7)
    assert next_due_date(start, "monthly") == datetime(2024, 2, 29)
    assert next_due_date(start, "yearly") == datetime(2025, 1, 31)


def test_project_due_date_with_fixed_amount():
    """Test 300 at 100/week takes three payments: anchor, +7, +14"""
    settings = RecurrenceSettings(type="weekly", payment_amount=100, first_payment_date="2024-03-01")
    assert project_due_date(300, settings, "2024-02-01") == datetime(2024, 3, 15)


def test_project_due_date_defaults_to_ten_payments():
    settings = RecurrenceSettings(type="daily")
    assert project_due_date(1000, settings, "2024-03-01") == datetime(2024, 3, 10)


def test_project_bank_loan_due_date():
    """Test twelve monthly payments by default"""
    assert project_bank_loan_due_date(1200, "2024-01-01") == datetime(2024, 12, 1)
    assert project_bank_loan_due_date(1200, "2024-01-01", monthly_payment=400) == datetime(2024, 3, 1)
