"""Archive handling: the auto-archive sweep and manual archive operations"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from loandash.domain.exceptions import ObligationNotFoundError
from loandash.domain.ledger import completion_date, is_settled, obligation_remaining, total_owed
from loandash.domain.models import (
    AppDocument,
    AutoArchivePolicy,
    Obligation,
    ObligationKind,
    ObligationStatus,
)
from loandash.utils.date_utils import format_timestamp, to_utc_naive, whole_days_elapsed

logger = logging.getLogger(__name__)

# Days a completed record waits in the active list before it is archived
ARCHIVE_THRESHOLD_DAYS: Dict[str, int] = {
    AutoArchivePolicy.IMMEDIATELY.value: 0,
    AutoArchivePolicy.ONE_DAY.value: 1,
    AutoArchivePolicy.SEVEN_DAYS.value: 7,
    AutoArchivePolicy.THIRTY_DAYS.value: 30,
}


@dataclass
class SweepResult:
    """Records moved or flagged by one sweep"""

    archived: List[Tuple[ObligationKind, str]] = field(default_factory=list)
    completed: List[Tuple[ObligationKind, str]] = field(default_factory=list)


def days_since_completion(obligation: Obligation, now: datetime) -> int:
    """Whole days since the paying-off payment; 0 when it cannot be determined"""
    completed_on = completion_date(obligation.history, total_owed(obligation))
    if completed_on is None:
        return 0
    return whole_days_elapsed(completed_on, to_utc_naive(now))


def should_archive(obligation: Obligation, policy: str, now: datetime) -> bool:
    threshold = ARCHIVE_THRESHOLD_DAYS.get(policy)
    if threshold is None:
        return False
    if threshold == 0:
        return True
    try:
        elapsed = days_since_completion(obligation, now)
    except ValueError as e:
        logger.warning(f"Cannot date completion, keeping record active: {e}", extra={"obligation_id": obligation.id})
        return False
    return elapsed >= threshold


def _is_done(obligation: Obligation) -> bool:
    if obligation.status == ObligationStatus.COMPLETED.value:
        return True
    return obligation.status == ObligationStatus.ACTIVE.value and is_settled(obligation_remaining(obligation))


def _sweep_list(
    active: List[Obligation],
    archived: List[Obligation],
    kind: ObligationKind,
    policy: str,
    now: datetime,
    result: SweepResult,
) -> Tuple[List[Obligation], List[Obligation]]:
    still_active: List[Obligation] = []
    archived = list(archived)
    for obligation in active:
        if not _is_done(obligation):
            still_active.append(obligation)
            continue
        if obligation.status != ObligationStatus.COMPLETED.value:
            result.completed.append((kind, obligation.id))
        if should_archive(obligation, policy, now):
            archived.append(
                obligation.model_copy(
                    update={
                        "status": ObligationStatus.COMPLETED.value,
                        "archived_date": format_timestamp(now),
                        "auto_archived": True,
                    }
                )
            )
            result.archived.append((kind, obligation.id))
            logger.info(
                "Auto-archived completed record",
                extra={"obligation_id": obligation.id, "kind": kind.value, "auto_archive": policy},
            )
        else:
            still_active.append(obligation.model_copy(update={"status": ObligationStatus.COMPLETED.value}))
    return still_active, archived


def auto_archive(document: AppDocument, now: datetime) -> Tuple[AppDocument, SweepResult]:
    """Move completed records into the archive lists according to the document's policy.

    Completed (or paid-off active) records that are not yet due for archiving
    stay in the active list with status ``completed``. Nothing happens when
    the policy is ``never``.
    """
    result = SweepResult()
    policy = document.auto_archive or AutoArchivePolicy.NEVER.value
    if policy == AutoArchivePolicy.NEVER.value:
        return document, result

    debts, archived_debts = _sweep_list(
        document.debts, document.archived_debts, ObligationKind.DEBTS, policy, now, result
    )
    loans, archived_loans = _sweep_list(
        document.loans, document.archived_loans, ObligationKind.LOANS, policy, now, result
    )
    swept = document.model_copy(
        update={
            "debts": debts,
            "archived_debts": archived_debts,
            "loans": loans,
            "archived_loans": archived_loans,
        }
    )
    return swept, result


def _find(records: List[Obligation], obligation_id: str) -> Optional[int]:
    for index, record in enumerate(records):
        if record.id == obligation_id:
            return index
    return None


def find_obligation(document: AppDocument, kind: ObligationKind, obligation_id: str) -> Obligation:
    records = document.active(kind)
    index = _find(records, obligation_id)
    if index is None:
        raise ObligationNotFoundError(f"No active {kind.value[:-1]} with id {obligation_id}")
    return records[index]


def archive_obligation(
    document: AppDocument,
    kind: ObligationKind,
    obligation_id: str,
    status: str,
    now: datetime,
) -> Obligation:
    """Manually move a record to the archive as completed or defaulted"""
    records = document.active(kind)
    index = _find(records, obligation_id)
    if index is None:
        raise ObligationNotFoundError(f"No active {kind.value[:-1]} with id {obligation_id}")
    record = records.pop(index)
    archived = record.model_copy(
        update={"status": status, "archived_date": format_timestamp(now), "auto_archived": False}
    )
    document.archived(kind).append(archived)
    return archived


def delete_archived(document: AppDocument, kind: ObligationKind, obligation_id: str) -> None:
    """Permanently remove an archived record"""
    records = document.archived(kind)
    index = _find(records, obligation_id)
    if index is None:
        raise ObligationNotFoundError(f"No archived {kind.value[:-1]} with id {obligation_id}")
    del records[index]
