"""Read-modify-write cycle: every load and save goes through a document pass"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from loandash.domain.exceptions import StorageError
from loandash.domain.models import AppDocument
from loandash.domain.processing import PassReport, run_pass
from loandash.domain.scheduler import IdFactory, new_payment_id
from loandash.infrastructure.observability.logging import log_pass
from loandash.infrastructure.observability.metrics import (
    document_pass_histogram,
    record_pass,
    storage_failure_counter,
)


class DocumentStore(Protocol):
    def load(self) -> AppDocument: ...

    def save(self, document: AppDocument) -> None: ...


@dataclass
class SyncResult:
    """Processed document plus what happened when persisting it"""

    report: PassReport
    persisted: bool
    error: Optional[StorageError] = None

    @property
    def document(self) -> AppDocument:
        return self.report.document


def _process(document: AppDocument, now: datetime, id_factory: IdFactory, request_id: str, trigger: str) -> PassReport:
    start_time = time.time()
    with document_pass_histogram.time():
        report = run_pass(document, now, id_factory)
    record_pass(report)
    log_pass(
        request_id,
        trigger,
        report.changed,
        len(report.payments),
        len(report.sweep.archived),
        (time.time() - start_time) * 1000,
    )
    return report


def load_document(
    store: DocumentStore,
    now: datetime,
    id_factory: IdFactory = new_payment_id,
    request_id: str = "unknown",
) -> SyncResult:
    """
    Load, run the pass and persist only if the pass changed something.

    A failed write does not hide the computed document: the caller still
    gets it, with ``persisted=False`` and the error attached, and the next
    pass will try again.
    """
    report = _process(store.load(), now, id_factory, request_id, "load")
    if not report.changed:
        return SyncResult(report=report, persisted=False)
    try:
        store.save(report.document)
    except StorageError as e:
        storage_failure_counter.inc()
        logging.error(f"Could not persist processed document: {e}", extra={"request_id": request_id})
        return SyncResult(report=report, persisted=False, error=e)
    return SyncResult(report=report, persisted=True)


def save_document(
    store: DocumentStore,
    document: AppDocument,
    now: datetime,
    id_factory: IdFactory = new_payment_id,
    request_id: str = "unknown",
) -> SyncResult:
    """Run the pass over a client-supplied document and always persist it.

    Raises:
        StorageError: if the write fails
    """
    report = _process(document, now, id_factory, request_id, "save")
    try:
        store.save(report.document)
    except StorageError:
        storage_failure_counter.inc()
        raise
    return SyncResult(report=report, persisted=True)
