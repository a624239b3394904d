"""Payment ledger utilities: totals, settlement and occurrence bookkeeping"""

from datetime import datetime
from typing import Iterable, List, Optional

from loandash.domain.exceptions import PaymentNotFoundError
from loandash.domain.models import Obligation, ObligationStatus, Payment
from loandash.utils.date_utils import parse_timestamp, start_of_day, truncate_to_minute


def round_money(amount: float) -> float:
    """Quantize to cents; every balance comparison goes through this"""
    return float(round(amount, 2))


def total_paid(payments: Iterable[Payment]) -> float:
    return round_money(sum(p.amount for p in payments))


def total_owed(obligation: Obligation) -> float:
    """Principal plus any interest already folded into the record"""
    return round_money(obligation.total_amount + (obligation.accrued_interest or 0))


def remaining_balance(total: float, accrued: float, paid: float) -> float:
    return round_money(total + accrued - paid)


def is_settled(remaining: float) -> bool:
    """Fully paid once the cent-rounded balance reaches zero"""
    return round_money(remaining) <= 0


def obligation_remaining(obligation: Obligation) -> float:
    return remaining_balance(obligation.total_amount, obligation.accrued_interest or 0, total_paid(obligation.history))


def is_scheduled_payment(payment: Payment, marker: str) -> bool:
    """True for scheduler-generated payments.

    Payments written by this service carry an explicit sequence number.
    Older documents only have the marker token in the notes, so those are
    recognised by text as a fallback.
    """
    if payment.auto_payment_sequence_number is not None:
        return True
    return bool(payment.notes) and marker in payment.notes


def count_marked(payments: Iterable[Payment], marker: str) -> int:
    """How many scheduled occurrences have already fired"""
    return sum(1 for p in payments if is_scheduled_payment(p, marker))


def has_payment_for_slot(
    payments: Iterable[Payment],
    marker: str,
    slot: datetime,
    minute_precision: bool,
) -> bool:
    """Whether a scheduled payment already covers ``slot``.

    Minute precision compares the full timestamp truncated to minutes;
    otherwise only the calendar day has to match.
    """
    for payment in payments:
        if not is_scheduled_payment(payment, marker):
            continue
        paid_at = parse_timestamp(payment.date)
        if minute_precision:
            if truncate_to_minute(paid_at) == truncate_to_minute(slot):
                return True
        elif start_of_day(paid_at) == start_of_day(slot):
            return True
    return False


def completion_date(payments: Iterable[Payment], owed: float) -> Optional[datetime]:
    """Date of the payment that brought the running total up to ``owed``.

    Payments are replayed oldest first; ties keep list order (``sorted`` is
    stable). Returns None for an empty history or one that never reaches
    the amount owed.
    """
    running = 0.0
    for payment in sorted(payments, key=lambda p: parse_timestamp(p.date)):
        running = round_money(running + payment.amount)
        if running >= round_money(owed):
            return parse_timestamp(payment.date)
    return None


def _refresh_status(obligation: Obligation, reopen: bool) -> None:
    if is_settled(obligation_remaining(obligation)):
        obligation.status = ObligationStatus.COMPLETED.value
    elif reopen and obligation.status == ObligationStatus.COMPLETED.value:
        obligation.status = ObligationStatus.ACTIVE.value


def add_payment(
    obligation: Obligation,
    payment_id: str,
    amount: float,
    date: str,
    method: Optional[str] = None,
    notes: Optional[str] = None,
    is_partial: Optional[bool] = None,
) -> Payment:
    """Record a manual payment; the record completes once it is settled"""
    if is_partial is None:
        is_partial = round_money(amount) < obligation_remaining(obligation)
    payment = Payment(
        id=payment_id,
        amount=amount,
        date=date,
        method=method,
        notes=notes,
        is_partial=is_partial,
    )
    obligation.history.append(payment)
    _refresh_status(obligation, reopen=False)
    return payment


def update_payment(
    obligation: Obligation,
    payment_id: str,
    amount: float,
    date: str,
    method: Optional[str] = None,
    notes: Optional[str] = None,
    is_partial: Optional[bool] = None,
) -> Payment:
    """Edit a payment in place, keeping its id and sequence number.

    Status is recomputed both ways: an edit that leaves a balance reopens a
    completed record. Defaulted records keep their status.
    """
    history: List[Payment] = obligation.history
    for index, existing in enumerate(history):
        if existing.id != payment_id:
            continue
        updated = existing.model_copy(
            update={
                "amount": amount,
                "date": date,
                "method": method,
                "notes": notes,
                "is_partial": is_partial if is_partial is not None else existing.is_partial,
            }
        )
        history[index] = updated
        _refresh_status(obligation, reopen=True)
        return updated
    raise PaymentNotFoundError(f"Payment {payment_id} not found on {obligation.id}")
