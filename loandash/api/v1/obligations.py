"""Per-record operations: payments, manual archive and archive deletion"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from loandash.api.dependencies import get_document_store, get_id_factory, get_now, get_request_id
from loandash.api.v1.schemas import ArchiveRequest, PaymentDraft
from loandash.domain.archiver import archive_obligation, delete_archived, find_obligation
from loandash.domain.exceptions import ObligationNotFoundError, PaymentNotFoundError, StorageError
from loandash.domain.ledger import add_payment, update_payment
from loandash.domain.models import AppDocument, ObligationKind
from loandash.domain.scheduler import IdFactory
from loandash.infrastructure.storage.json_store import JsonDocumentStore
from loandash.infrastructure.storage.sync import save_document

router = APIRouter()


def _apply(
    store: JsonDocumentStore,
    now: datetime,
    id_factory: IdFactory,
    request_id: str,
    mutation: Callable[[AppDocument], None],
) -> Dict[str, Any]:
    """Load, mutate, run the pass, persist; return the resulting document"""
    try:
        document = store.load()
        mutation(document)
        result = save_document(store, document, now, id_factory, request_id)
    except (ObligationNotFoundError, PaymentNotFoundError) as e:
        logging.warning(f"Record not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        logging.error(f"Could not save data file: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not save data.")
    return result.document.to_json_dict()


@router.post("/{kind}/{obligation_id}/payments", status_code=201)
def create_payment(
    kind: ObligationKind,
    obligation_id: str,
    draft: PaymentDraft,
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
) -> Dict[str, Any]:
    """Record a manual payment (debts) or repayment (loans)"""

    def mutation(document: AppDocument) -> None:
        obligation = find_obligation(document, kind, obligation_id)
        add_payment(
            obligation,
            id_factory(),
            amount=draft.amount,
            date=draft.date,
            method=draft.method,
            notes=draft.notes,
            is_partial=draft.is_partial,
        )

    return _apply(store, now, id_factory, get_request_id(request), mutation)


@router.put("/{kind}/{obligation_id}/payments/{payment_id}")
def edit_payment(
    kind: ObligationKind,
    obligation_id: str,
    payment_id: str,
    draft: PaymentDraft,
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
) -> Dict[str, Any]:
    """Replace amount/date/method/notes of an existing payment"""

    def mutation(document: AppDocument) -> None:
        obligation = find_obligation(document, kind, obligation_id)
        update_payment(
            obligation,
            payment_id,
            amount=draft.amount,
            date=draft.date,
            method=draft.method,
            notes=draft.notes,
            is_partial=draft.is_partial,
        )

    return _apply(store, now, id_factory, get_request_id(request), mutation)


@router.post("/{kind}/{obligation_id}/archive")
def archive(
    kind: ObligationKind,
    obligation_id: str,
    body: ArchiveRequest,
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
) -> Dict[str, Any]:
    """Move a record to the archive as completed or defaulted"""

    def mutation(document: AppDocument) -> None:
        archive_obligation(document, kind, obligation_id, body.status, now)

    return _apply(store, now, id_factory, get_request_id(request), mutation)


@router.delete("/archive/{kind}/{obligation_id}")
def remove_archived(
    kind: ObligationKind,
    obligation_id: str,
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
) -> Dict[str, Any]:
    """Permanently delete an archived record"""

    def mutation(document: AppDocument) -> None:
        delete_archived(document, kind, obligation_id)

    return _apply(store, now, id_factory, get_request_id(request), mutation)
