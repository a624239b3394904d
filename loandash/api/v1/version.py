"""GET /api/version - update notification"""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from loandash.api.dependencies import get_release_client
from loandash.api.v1.schemas import VersionResponse
from loandash.infrastructure.clients.releases import ReleaseClient

router = APIRouter()


@router.get("/version", response_model=VersionResponse)
async def get_version(release_client: ReleaseClient = Depends(get_release_client)):
    """Running version and whether a newer release is published"""
    info = await release_client.check_for_updates()
    return VersionResponse(**asdict(info))
