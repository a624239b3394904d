"""GET/POST /api/data - whole-document read and write"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from loandash.api.dependencies import get_document_store, get_id_factory, get_now, get_request_id
from loandash.api.v1.schemas import MessageResponse
from loandash.domain.exceptions import StorageError
from loandash.domain.models import AppDocument
from loandash.domain.scheduler import IdFactory
from loandash.infrastructure.storage.json_store import JsonDocumentStore
from loandash.infrastructure.storage.sync import load_document, save_document

router = APIRouter()


@router.get("/data")
def get_data(
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
) -> Dict[str, Any]:
    """
    Return the full document after a scheduler/archive pass.

    The pass may generate payments or archive records, in which case the
    document is written back before responding. A failed write is logged
    and the computed document is still returned.
    """
    request_id = get_request_id(request)
    try:
        result = load_document(store, now, id_factory, request_id)
    except StorageError as e:
        logging.error(f"Could not read data file: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not read data file.")
    return result.document.to_json_dict()


@router.post("/data", response_model=MessageResponse)
def post_data(
    document: AppDocument,
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    now: datetime = Depends(get_now),
    id_factory: IdFactory = Depends(get_id_factory),
):
    """Replace the stored document with the client's copy, processed by a pass"""
    request_id = get_request_id(request)
    try:
        save_document(store, document, now, id_factory, request_id)
    except StorageError as e:
        logging.error(f"Could not save data file: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not save data.")
    return MessageResponse(message="Data saved successfully.")
