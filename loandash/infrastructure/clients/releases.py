"""Release feed HTTP client for the update notification"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from loandash.config import settings
from loandash.domain.exceptions import ReleaseCheckError

logger = logging.getLogger(__name__)


@dataclass
class VersionInfo:
    current: str
    latest: Optional[str]
    has_update: bool
    release_url: str


def _version_parts(version: str) -> List[int]:
    parts = []
    for piece in version.split("."):
        digits = ""
        for char in piece:
            if not char.isdigit():
                break
            digits += char
        parts.append(int(digits) if digits else 0)
    return parts


def compare_versions(a: str, b: str) -> int:
    """Compare dotted versions numerically: 1 if a > b, -1 if a < b, else 0"""
    a_parts, b_parts = _version_parts(a), _version_parts(b)
    for i in range(max(len(a_parts), len(b_parts))):
        a_part = a_parts[i] if i < len(a_parts) else 0
        b_part = b_parts[i] if i < len(b_parts) else 0
        if a_part > b_part:
            return 1
        if a_part < b_part:
            return -1
    return 0


class ReleaseClient:
    """Client for the latest-release endpoint of the project's release feed"""

    def __init__(
        self,
        api_url: str | None = None,
        current_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url or settings.releases_api_url
        self.current_version = current_version or settings.app_version
        self.releases_page = settings.releases_page_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch_latest(self) -> dict:
        """
        Fetch the latest release payload.

        Raises:
            ReleaseCheckError: On timeout, HTTP errors, or a non-JSON response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(self.api_url, headers={"Accept": "application/json"})
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as e:
                raise ReleaseCheckError(f"Release feed timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ReleaseCheckError(f"Release feed error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ReleaseCheckError(f"Release feed unreachable: {e}") from e
            except ValueError as e:
                raise ReleaseCheckError(f"Invalid release payload: {e}") from e

    async def check_for_updates(self) -> VersionInfo:
        """Compare the running version with the latest release; never raises"""
        fallback = VersionInfo(
            current=self.current_version,
            latest=None,
            has_update=False,
            release_url=self.releases_page,
        )
        try:
            release = await self.fetch_latest()
        except ReleaseCheckError as e:
            logger.warning(f"Update check failed: {e}")
            return fallback
        if not isinstance(release, dict):
            logger.warning("Update check returned an unexpected payload")
            return fallback

        tag = release.get("tag_name") or release.get("name") or ""
        latest = tag[1:] if tag.startswith("v") else tag
        if not latest:
            return fallback

        return VersionInfo(
            current=self.current_version,
            latest=latest,
            has_update=compare_versions(latest, self.current_version) > 0,
            release_url=release.get("html_url") or self.releases_page,
        )
