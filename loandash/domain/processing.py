"""Document pass: scheduler over every record, then the auto-archive sweep"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple

from loandash.domain.archiver import SweepResult, auto_archive
from loandash.domain.models import AppDocument, ObligationKind
from loandash.domain.scheduler import IdFactory, ScheduleResult, new_payment_id, schedule_obligation

logger = logging.getLogger(__name__)


@dataclass
class PassReport:
    """Outcome of one full-document pass"""

    document: AppDocument
    changed: bool
    scheduled: List[Tuple[ObligationKind, ScheduleResult]] = field(default_factory=list)
    sweep: SweepResult = field(default_factory=SweepResult)
    skipped: List[Tuple[ObligationKind, str]] = field(default_factory=list)

    @property
    def payments(self) -> List[Tuple[ObligationKind, ScheduleResult]]:
        return [(kind, r) for kind, r in self.scheduled if r.payment is not None]

    @property
    def completed(self) -> List[Tuple[ObligationKind, ScheduleResult]]:
        return [(kind, r) for kind, r in self.scheduled if r.completed]


def run_pass(
    document: AppDocument,
    now: datetime,
    id_factory: IdFactory = new_payment_id,
) -> PassReport:
    """
    Run the scheduler over every active debt and loan, then the sweep.

    The input document is left untouched; the report carries a processed
    copy and whether it differs from the input. A record whose dates cannot
    be parsed is left as it was and listed in ``skipped``.
    """
    before = document.to_json_dict()
    processed = document.model_copy(deep=True)
    report = PassReport(document=processed, changed=False)

    for kind, records in ((ObligationKind.DEBTS, processed.debts), (ObligationKind.LOANS, processed.loans)):
        for index, record in enumerate(records):
            snapshot = record.model_copy(deep=True)
            try:
                result = schedule_obligation(record, now, id_factory)
            except ValueError as e:
                records[index] = snapshot
                report.skipped.append((kind, record.id))
                logger.warning(
                    f"Skipping record with malformed dates: {e}",
                    extra={"obligation_id": record.id, "kind": kind.value},
                )
                continue
            if result.policy is not None:
                report.scheduled.append((kind, result))

    processed, report.sweep = auto_archive(processed, now)
    report.document = processed
    report.changed = processed.to_json_dict() != before
    return report


def run_scheduler_and_archiver(
    document: AppDocument,
    now: datetime,
    id_factory: IdFactory = new_payment_id,
) -> Tuple[AppDocument, bool]:
    """Public contract: ``(document', changed)`` for a given clock reading"""
    report = run_pass(document, now, id_factory)
    return report.document, report.changed
