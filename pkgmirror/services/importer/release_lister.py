"""
List the assets of the newest GitHub release.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from pkgmirror.domain.errors import NetworkError
from pkgmirror.domain.models import MirrorSettings, Release

logger = logging.getLogger(__name__)

# GitHub rejects requests without a User-Agent; send a regular browser one.
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)
DEFAULT_HEADERS = {"User-Agent": USER_AGENT}
REQUEST_TIMEOUT = 60.0


class ReleaseLister:
    """Reads release metadata for the configured `owner/repo`."""

    def __init__(self, settings: MirrorSettings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.client = client

    @property
    def release_url(self) -> str:
        base = self.settings.api_base_url.rstrip("/")
        return f"{base}/repos/{self.settings.github_repo}/releases"

    async def _fetch(self) -> httpx.Response:
        if self.client is not None:
            return await self.client.get(self.release_url, headers=DEFAULT_HEADERS)
        async with httpx.AsyncClient(follow_redirects=True, timeout=REQUEST_TIMEOUT) as client:
            return await client.get(self.release_url, headers=DEFAULT_HEADERS)

    async def list_latest_assets(self) -> List[str]:
        """
        Return the asset filenames of the most recently published release.

        Older releases are never examined. An empty release list, or a newest
        release without an assets array, yields an empty list.
        """
        logger.debug(f"Listing releases from {self.release_url}")
        try:
            response = await self._fetch()
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to list releases for {self.settings.github_repo}: {e}") from e
        except ValueError as e:
            raise NetworkError(f"Release listing for {self.settings.github_repo} is not valid JSON: {e}") from e

        if not isinstance(payload, list) or not payload:
            logger.debug(f"No releases found for {self.settings.github_repo}")
            return []

        newest = payload[0]
        if not isinstance(newest, dict) or not isinstance(newest.get("assets"), list):
            return []

        try:
            release = Release.model_validate(newest)
        except ValidationError as e:
            raise NetworkError(f"Unexpected release payload for {self.settings.github_repo}: {e}") from e

        names = [asset.name for asset in release.assets]
        logger.debug(f"Release {release.tag_name} has {len(names)} assets")
        return names
