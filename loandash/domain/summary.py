"""Dashboard figures: interest estimate, balances and overdue counts"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict

from loandash.domain.ledger import is_settled, remaining_balance, round_money, total_paid
from loandash.domain.models import AppDocument, Debt, DebtType, Obligation, ObligationStatus
from loandash.utils.date_utils import generate_month_starts, parse_timestamp, to_utc_naive

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Aggregates shown on the dashboard"""

    total_i_owe: float
    total_owed_to_me: float
    total_interest: float
    active_debts: int
    active_loans: int
    archived_debts: int
    archived_loans: int
    overdue_count: int
    has_overdue_debts: bool
    has_overdue_loans: bool


def estimate_accrued_interest(debt: Debt, now: datetime) -> float:
    """
    Approximate interest on an active Bank Loan, compounded monthly.

    Walks month by month from the start month up to ``now``: that month's
    payments come off the balance first, then a positive balance grows by
    ``interestRate / 100 / 12``. Other debts accrue nothing.

    Display only; the scheduler never writes this back.
    """
    rate = debt.interest_rate or 0
    if debt.type != DebtType.BANK_LOAN.value or rate <= 0 or debt.status != ObligationStatus.ACTIVE.value:
        return 0.0

    monthly_rate = rate / 100 / 12
    paid_by_month: Dict[str, float] = defaultdict(float)
    for payment in debt.payments:
        paid_by_month[parse_timestamp(payment.date).strftime("%Y-%m")] += payment.amount

    balance = debt.total_amount
    accrued = 0.0
    for month in generate_month_starts(parse_timestamp(debt.start_date), to_utc_naive(now)):
        if balance <= 0:
            break
        balance -= paid_by_month.get(month.strftime("%Y-%m"), 0.0)
        if balance > 0:
            interest = balance * monthly_rate
            accrued += interest
            balance += interest
    return round_money(max(0.0, accrued))


def _is_overdue(obligation: Obligation, remaining: float, now: datetime) -> bool:
    if is_settled(remaining):
        return False
    if obligation.is_recurring:
        if obligation.next_payment_date:
            return parse_timestamp(obligation.next_payment_date) < now
        return False
    return parse_timestamp(obligation.due_date) < now


def _skip_unreadable(obligation: Obligation, kind: str, error: ValueError) -> None:
    logger.warning(
        f"Leaving record with malformed dates out of the summary: {error}",
        extra={"obligation_id": obligation.id, "kind": kind},
    )


def build_summary(document: AppDocument, now: datetime) -> DashboardSummary:
    """Dashboard figures; records with unreadable dates count toward balances only"""
    now = to_utc_naive(now)
    total_i_owe = 0.0
    total_interest = 0.0
    overdue_debts = 0
    for debt in document.debts:
        paid = total_paid(debt.payments)
        try:
            interest = estimate_accrued_interest(debt, now)
            remaining = remaining_balance(debt.total_amount, interest, paid)
            overdue = _is_overdue(debt, remaining, now)
        except ValueError as e:
            _skip_unreadable(debt, "debts", e)
            interest, overdue = 0.0, False
            remaining = remaining_balance(debt.total_amount, 0, paid)
        total_interest += interest
        total_i_owe += max(0.0, remaining)
        if overdue:
            overdue_debts += 1

    total_owed_to_me = 0.0
    overdue_loans = 0
    for loan in document.loans:
        remaining = remaining_balance(loan.total_amount, 0, total_paid(loan.repayments))
        total_owed_to_me += max(0.0, remaining)
        try:
            overdue = _is_overdue(loan, remaining, now)
        except ValueError as e:
            _skip_unreadable(loan, "loans", e)
            overdue = False
        if overdue:
            overdue_loans += 1

    return DashboardSummary(
        total_i_owe=round_money(total_i_owe),
        total_owed_to_me=round_money(total_owed_to_me),
        total_interest=round_money(total_interest),
        active_debts=len(document.debts),
        active_loans=len(document.loans),
        archived_debts=len(document.archived_debts),
        archived_loans=len(document.archived_loans),
        overdue_count=overdue_debts + overdue_loans,
        has_overdue_debts=overdue_debts > 0,
        has_overdue_loans=overdue_loans > 0,
    )
