"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone

from fastapi import Request

from loandash.domain.scheduler import IdFactory, new_payment_id
from loandash.infrastructure.clients.releases import ReleaseClient
from loandash.infrastructure.storage.json_store import JsonDocumentStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_document_store() -> JsonDocumentStore:
    """Provide the configured JSON document store"""
    return JsonDocumentStore()


def get_now() -> datetime:
    """Clock reading used for the document pass"""
    return datetime.now(timezone.utc)


def get_id_factory() -> IdFactory:
    """Identifier source for generated payments"""
    return new_payment_id


def get_release_client() -> ReleaseClient:
    """Provide release feed client instance"""
    return ReleaseClient()
