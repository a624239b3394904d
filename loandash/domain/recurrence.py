"""Recurrence policy: intervals, descriptions and plan projections"""

import math
from datetime import datetime
from typing import Dict, Optional

from loandash.domain.models import RecurrenceSettings, RecurrenceType
from loandash.utils.date_utils import add_days, add_months, parse_timestamp

DEFAULT_INTERVAL_DAYS = 30

INTERVAL_DAYS: Dict[str, int] = {
    RecurrenceType.DAILY.value: 1,
    RecurrenceType.WEEKLY.value: 7,
    RecurrenceType.BI_WEEKLY.value: 14,
    RecurrenceType.MONTHLY.value: 30,
    RecurrenceType.QUARTERLY.value: 90,
    RecurrenceType.YEARLY.value: 365,
}

LABELS: Dict[str, str] = {
    RecurrenceType.DAILY.value: "Daily",
    RecurrenceType.WEEKLY.value: "Weekly",
    RecurrenceType.BI_WEEKLY.value: "Bi-weekly",
    RecurrenceType.MONTHLY.value: "Monthly",
    RecurrenceType.QUARTERLY.value: "Quarterly",
    RecurrenceType.YEARLY.value: "Yearly",
}

# Payment count assumed when a plan has no fixed payment amount
DEFAULT_RECURRING_PAYMENTS = 10
DEFAULT_BANK_LOAN_MONTHS = 12


def interval_days(recurrence_type: Optional[str]) -> int:
    """Days between payments; unknown or missing types fall back to monthly"""
    return max(1, INTERVAL_DAYS.get(recurrence_type or "", DEFAULT_INTERVAL_DAYS))


def label(recurrence_type: Optional[str]) -> str:
    return LABELS.get(recurrence_type or "", LABELS[RecurrenceType.MONTHLY.value])


def describe(settings: RecurrenceSettings) -> str:
    """Human description, e.g. ``Weekly until 2024-06-01`` or ``Monthly for 6 occurrences``"""
    description = label(settings.type)
    if settings.end_date:
        description += f" until {parse_timestamp(settings.end_date).date().isoformat()}"
    elif settings.max_occurrences:
        description += f" for {settings.max_occurrences} occurrences"
    return description


def next_due_date(current: datetime, recurrence_type: Optional[str]) -> datetime:
    """Step one period forward from ``current`` (display only).

    Month-based types use calendar months here; the payment scheduler never
    steps iteratively and always multiplies from the anchor instead.
    """
    if recurrence_type == RecurrenceType.DAILY.value:
        return add_days(current, 1)
    if recurrence_type == RecurrenceType.WEEKLY.value:
        return add_days(current, 7)
    if recurrence_type == RecurrenceType.BI_WEEKLY.value:
        return add_days(current, 14)
    if recurrence_type == RecurrenceType.QUARTERLY.value:
        return add_months(current, 3)
    if recurrence_type == RecurrenceType.YEARLY.value:
        return add_months(current, 12)
    return add_months(current, 1)


def project_due_date(total_amount: float, settings: RecurrenceSettings, start_date: str) -> datetime:
    """Date of the last payment of a recurring plan.

    Without a fixed amount the plan is assumed to run for ten payments.
    """
    payment_amount = settings.payment_amount or total_amount / DEFAULT_RECURRING_PAYMENTS
    first_payment = parse_timestamp(settings.first_payment_date or start_date)
    payments_needed = max(1, math.ceil(total_amount / payment_amount)) if payment_amount > 0 else 1
    return add_days(first_payment, (payments_needed - 1) * interval_days(settings.type))


def project_bank_loan_due_date(
    total_amount: float,
    start_date: str,
    monthly_payment: Optional[float] = None,
    first_payment_date: Optional[str] = None,
) -> datetime:
    """Date of the last monthly auto-payment of a bank loan (twelve months by default)"""
    monthly_payment = monthly_payment or total_amount / DEFAULT_BANK_LOAN_MONTHS
    first_payment = parse_timestamp(first_payment_date or start_date)
    payments_needed = max(1, math.ceil(total_amount / monthly_payment)) if monthly_payment > 0 else 1
    return add_months(first_payment, payments_needed - 1)
