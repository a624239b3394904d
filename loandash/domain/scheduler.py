"""Auto-payment scheduler - recurring and automatic payment engine.

One state machine drives three policies:

- Bank Loan auto-pay: monthly (calendar months), processed at 00:01, due
  checks to the minute, interest-bearing total.
- Recurring Friend/Family debt and recurring loan: fixed day intervals,
  due checks by calendar day, honour endDate and maxOccurrences.

All state lives on the record (status, payment history, nextPaymentDate,
suggestedPaymentAmount). Due dates are computed as ``anchor + n * interval``;
after a bank-loan payment the stored next date is one month past the paid
slot. A pass is idempotent: running it again with
the same ``now`` produces the same record.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from loandash.domain.ledger import (
    count_marked,
    has_payment_for_slot,
    is_settled,
    remaining_balance,
    round_money,
    total_paid,
)
from loandash.domain.models import (
    Debt,
    DebtType,
    Obligation,
    ObligationStatus,
    Payment,
    PaymentAutomation,
    RecurrenceSettings,
)
from loandash.domain.recurrence import interval_days, label
from loandash.utils.date_utils import (
    add_days,
    add_months,
    at_processing_time,
    days_between_ceil,
    format_timestamp,
    months_between_ceil,
    parse_optional,
    parse_timestamp,
    start_of_day,
    to_utc_naive,
)

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def new_payment_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class PaymentPolicy:
    """What distinguishes one scheduling flavour from another"""

    name: str
    marker: str
    payment_method: str
    minute_precision: bool  # due at 00:01 to the minute vs. by calendar day
    calendar_months: bool  # step by calendar month vs. fixed day interval
    includes_interest: bool  # owed = totalAmount + accruedInterest
    honours_recurrence_end: bool  # endDate / maxOccurrences apply


BANK_LOAN_AUTO_PAY = PaymentPolicy(
    name="bank_loan",
    marker="[Auto-Payment]",
    payment_method="Bank Transfer",
    minute_precision=True,
    calendar_months=True,
    includes_interest=True,
    honours_recurrence_end=False,
)

RECURRING_DEBT = PaymentPolicy(
    name="recurring_debt",
    marker="[Recurring Payment]",
    payment_method="Cash",
    minute_precision=False,
    calendar_months=False,
    includes_interest=False,
    honours_recurrence_end=True,
)

RECURRING_LOAN = PaymentPolicy(
    name="recurring_loan",
    marker="[Recurring Payment]",
    payment_method="Bank Transfer",
    minute_precision=False,
    calendar_months=False,
    includes_interest=False,
    honours_recurrence_end=True,
)


@dataclass
class ScheduleResult:
    """What a single pass did to one obligation"""

    obligation_id: str
    policy: Optional[str] = None
    payment: Optional[Payment] = None
    completed: bool = False


def select_policy(obligation: Obligation) -> Optional[PaymentPolicy]:
    """Policy governing an active obligation, or None if it is not scheduled"""
    if obligation.status != ObligationStatus.ACTIVE.value:
        return None
    if isinstance(obligation, Debt):
        automation = (obligation.payment_automation or "").lower()
        if obligation.type == DebtType.BANK_LOAN.value:
            if automation == PaymentAutomation.AUTO.value.lower():
                return BANK_LOAN_AUTO_PAY
            return None
        if obligation.type == DebtType.FRIEND.value and obligation.is_recurring and obligation.recurrence_settings:
            return RECURRING_DEBT
        return None
    if obligation.is_recurring and obligation.recurrence_settings:
        return RECURRING_LOAN
    return None


class _Plan:
    """Occurrence arithmetic for one obligation under one policy"""

    def __init__(self, obligation: Obligation, policy: PaymentPolicy, recurrence: RecurrenceSettings):
        self.policy = policy
        self.recurrence_type = recurrence.type
        self.anchor = parse_timestamp(recurrence.first_payment_date or obligation.start_date)
        self.due_date = parse_timestamp(obligation.due_date)
        self.end_date = parse_optional(recurrence.end_date) if policy.honours_recurrence_end else None
        self.max_occurrences = (recurrence.max_occurrences or None) if policy.honours_recurrence_end else None
        amount = recurrence.payment_amount
        self.fixed_amount = amount if amount and amount > 0 else None
        self.interval = interval_days(recurrence.type)

    def occurrence(self, n: int) -> datetime:
        """Date of occurrence ``n`` counted from the anchor (n=0 is the anchor)"""
        if self.policy.calendar_months:
            return add_months(self.anchor, n)
        return add_days(self.anchor, n * self.interval)

    def expected_occurrences(self) -> int:
        """Number of payments the plan is sized for (at least one)"""
        if self.policy.calendar_months:
            count = max(1, months_between_ceil(self.anchor, self.due_date))
        else:
            count = max(1, math.ceil(days_between_ceil(self.anchor, self.due_date) / self.interval))
        if self.max_occurrences:
            count = min(count, self.max_occurrences)
        return count

    def installment(self, owed: float) -> float:
        if self.fixed_amount:
            return self.fixed_amount
        return math.ceil(owed / self.expected_occurrences())

    def total_installments(self, owed: float) -> int:
        if not self.fixed_amount:
            return self.expected_occurrences()
        count = max(1, math.ceil(owed / self.fixed_amount))
        if self.max_occurrences:
            count = min(count, self.max_occurrences)
        return count

    def clamp(self, moment: datetime) -> datetime:
        if moment > self.due_date:
            moment = self.due_date
        if self.end_date and moment > self.end_date:
            moment = self.end_date
        if self.policy.minute_precision:
            moment = at_processing_time(moment)
        return moment

    def following(self, slot: datetime, count: int) -> datetime:
        """Next date to store once occurrence ``count`` has been paid at ``slot``.

        Bank loans move one calendar month past the slot that was paid;
        recurring plans stay on the anchor grid.
        """
        if self.policy.calendar_months:
            return self.clamp(add_months(slot, 1))
        return self.clamp(self.occurrence(count))

    def describe(self, occurrence: int, total: int, amount: float) -> str:
        if self.policy.calendar_months:
            return (
                f"{self.policy.marker} Monthly payment for bank loan ({occurrence}/{total})"
                " - Processed at 00:01 AM"
            )
        return f"{self.policy.marker} {label(self.recurrence_type)} payment ({occurrence}/{total}) - Amount: {amount:.2f}"


def _complete(obligation: Obligation, reason: str) -> None:
    obligation.status = ObligationStatus.COMPLETED.value
    obligation.next_payment_date = None
    obligation.suggested_payment_amount = None
    logger.info("Obligation completed", extra={"obligation_id": obligation.id, "reason": reason})


def schedule_obligation(
    obligation: Obligation,
    now: datetime,
    id_factory: IdFactory = new_payment_id,
) -> ScheduleResult:
    """Run one scheduler pass over ``obligation`` (mutated in place).

    Raises ValueError only for unparseable date strings on the record.
    """
    result = ScheduleResult(obligation_id=obligation.id)
    policy = select_policy(obligation)
    if policy is None:
        return result
    result.policy = policy.name

    now = to_utc_naive(now)
    today = start_of_day(now)
    history = obligation.history
    accrued = (obligation.accrued_interest or 0) if policy.includes_interest else 0
    owed = round_money(obligation.total_amount + accrued)
    remaining = remaining_balance(obligation.total_amount, accrued, total_paid(history))

    # 1. Settlement guard
    if is_settled(remaining):
        _complete(obligation, "settled")
        result.completed = True
        return result

    plan = _Plan(obligation, policy, obligation.recurrence_settings or RecurrenceSettings())

    # 2. Policy end
    if plan.end_date and today > plan.end_date:
        _complete(obligation, "end_date")
        result.completed = True
        return result
    if plan.max_occurrences and len(history) >= plan.max_occurrences:
        _complete(obligation, "max_occurrences")
        result.completed = True
        return result

    # 3. Amount
    installment = plan.installment(owed)
    suggested = round_money(min(installment, remaining))

    # 4. Next date
    count = count_marked(history, policy.marker)
    if count == 0:
        next_date = max(plan.anchor, today)
    else:
        next_date = plan.occurrence(count)
        if next_date < today:
            next_date = today
    next_date = plan.clamp(next_date)

    obligation.next_payment_date = format_timestamp(next_date)
    obligation.suggested_payment_amount = suggested

    # 5. Due evaluation
    if policy.minute_precision:
        due = now >= next_date
        slot = next_date
    else:
        due = start_of_day(next_date) <= today
        slot = today
    if not due:
        return result

    if has_payment_for_slot(history, policy.marker, slot, policy.minute_precision):
        # Slot filled by an earlier pass; project the same way that pass did
        obligation.next_payment_date = format_timestamp(plan.following(slot, count))
        return result

    amount = round_money(min(suggested, remaining))
    occurrence = count + 1
    payment = Payment(
        id=id_factory(),
        amount=amount,
        date=format_timestamp(slot),
        method=policy.payment_method,
        is_partial=amount < remaining,
        notes=plan.describe(occurrence, plan.total_installments(owed), amount),
        auto_payment_sequence_number=occurrence,
    )
    history.append(payment)
    result.payment = payment
    if policy.minute_precision and isinstance(obligation, Debt):
        obligation.last_auto_payment_date = payment.date

    following = plan.following(slot, occurrence)
    remaining = remaining_balance(obligation.total_amount, accrued, total_paid(history))
    obligation.next_payment_date = format_timestamp(following)
    obligation.suggested_payment_amount = round_money(min(installment, remaining))

    logger.info(
        "Scheduled payment recorded",
        extra={
            "obligation_id": obligation.id,
            "policy": policy.name,
            "amount": amount,
            "occurrence": occurrence,
            "payment_date": payment.date,
        },
    )

    exhausted = plan.max_occurrences is not None and (
        occurrence >= plan.max_occurrences or len(history) >= plan.max_occurrences
    )
    ended = plan.end_date is not None and following >= plan.end_date
    if is_settled(remaining) or exhausted or ended:
        _complete(obligation, "final_payment")
        result.completed = True

    return result
