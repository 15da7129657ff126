"""
Install release assets into the local pacman repository.

Downloads go straight to their final filename inside the architecture
directory and are fsynced once complete. The repository database is then
updated with `repo-add`. There is no rollback between the two steps: a
package file may briefly exist without a database entry.
"""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from pkgmirror.domain.errors import FilesystemError, IndexBuildError, NetworkError
from pkgmirror.domain.models import MirrorSettings
from pkgmirror.services.importer.release_lister import DEFAULT_HEADERS, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class PackageDownloader:
    """Streams a single asset to disk."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        self.client = client
        self.attempts = max(1, attempts)
        self.retry_delay = retry_delay

    async def _stream_to(self, client: httpx.AsyncClient, url: str, target_path: Path) -> int:
        written = 0
        async with client.stream("GET", url, headers=DEFAULT_HEADERS) as response:
            response.raise_for_status()
            async with aiofiles.open(target_path, "wb") as f:
                async for chunk in response.aiter_bytes():
                    await f.write(chunk)
                    written += len(chunk)
                await f.flush()
                await asyncio.to_thread(os.fsync, f.fileno())
        return written

    async def _download_once(self, url: str, target_path: Path) -> int:
        if self.client is not None:
            return await self._stream_to(self.client, url, target_path)
        async with httpx.AsyncClient(follow_redirects=True, timeout=REQUEST_TIMEOUT) as client:
            return await self._stream_to(client, url, target_path)

    async def download(self, url: str, target_path: Path) -> int:
        """
        Download `url` into `target_path`, returning the number of bytes written.

        A failed attempt removes whatever was partially written before retrying.
        """
        logger.debug(f"Downloading {url} to {target_path}")
        for attempt in range(1, self.attempts + 1):
            try:
                return await self._download_once(url, target_path)
            except (httpx.HTTPError, OSError) as e:
                try:
                    target_path.unlink(missing_ok=True)
                except OSError as cleanup_error:
                    logger.warning(f"Could not remove partial download {target_path}: {cleanup_error}")

                if attempt < self.attempts:
                    logger.warning(f"Download failed (attempt {attempt}/{self.attempts}): {e}. Retrying...")
                    await asyncio.sleep(self.retry_delay * attempt)
                    continue
                if isinstance(e, httpx.HTTPError):
                    raise NetworkError(f"Failed to download {url}: {e}") from e
                raise FilesystemError(f"Failed to write {target_path}: {e}") from e


class RepoIndexBuilder:
    """Adds packages to the repository database with `repo-add`."""

    def __init__(self, command: str = "repo-add"):
        self.command = command

    async def add(self, index_path: Path, package_path: Path) -> None:
        logger.debug(f"Running {self.command} {index_path} {package_path}")
        try:
            proc = await asyncio.create_subprocess_exec(
                self.command,
                str(index_path),
                str(package_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise IndexBuildError(f"Could not run {self.command}: {e}") from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            detail = (stderr or stdout).decode("utf-8", errors="replace").strip()
            raise IndexBuildError(
                f"{self.command} exited with status {proc.returncode} for {package_path.name}: {detail}"
            )


class RepositoryMutator:
    """
    The only component that writes to the repository directory.

    The HTTP server reads the same directory concurrently without locking.
    """

    def __init__(
        self,
        settings: MirrorSettings,
        downloader: Optional[PackageDownloader] = None,
        index_builder: Optional[RepoIndexBuilder] = None,
    ):
        self.settings = settings
        self.downloader = downloader or PackageDownloader()
        self.index_builder = index_builder or RepoIndexBuilder(settings.repo_add_command)

    def download_url(self, package_file: str) -> str:
        base = self.settings.download_base_url.rstrip("/")
        return (
            f"{base}/{self.settings.github_repo}/releases/download/"
            f"{self.settings.release_tag}/{package_file}"
        )

    def package_path(self, package_file: str) -> Path:
        return self.settings.arch_dir / package_file

    async def install(self, package_file: str) -> Path:
        """Download an asset into the repository and register it in the database."""
        target = self.package_path(package_file)
        size = await self.downloader.download(self.download_url(package_file), target)
        logger.info(f"Downloaded {package_file} ({size} bytes)")
        await self.index_builder.add(self.settings.index_path, target)
        return target

    def remove(self, package_file: str) -> bool:
        """
        Delete a superseded package file.

        Failures are logged and reported as False; they never abort a cycle.
        The database entry is left for `repo-add` to replace.
        """
        target = self.package_path(package_file)
        try:
            target.unlink()
        except OSError as e:
            logger.warning(f"Could not remove superseded package {target}: {e}")
            return False
        logger.info(f"Removed superseded package {package_file}")
        return True
