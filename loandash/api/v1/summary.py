"""GET /api/summary - dashboard figures"""

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request

from loandash.api.dependencies import get_document_store, get_id_factory, get_now, get_request_id
from loandash.api.v1.schemas import SummaryResponse
from loandash.domain.exceptions import StorageError
from loandash.domain.scheduler import IdFactory
from loandash.domain.summary import build_summary
from loandash.infrastructure.storage.json_store import JsonDocumentStore
from loandash.infrastructure.storage.sync import load_document

router = APIRouter()


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
):
    """
    Balances and overdue counts for the dashboard.

    Runs the same pass as GET /api/data first, so figures reflect any
    payment that fell due since the last request.
    """
    request_id = get_request_id(request)
    try:
        result = load_document(store, now, id_factory, request_id)
    except StorageError as e:
        logging.error(f"Could not read data file: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not read data file.")
    return SummaryResponse(**asdict(build_summary(result.document, now)))
