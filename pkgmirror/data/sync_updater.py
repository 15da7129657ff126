"""
Background task that keeps the local repository in step with the newest release.
"""
from __future__ import annotations

import asyncio
import logging

from pkgmirror.data.repository import list_local_packages
from pkgmirror.domain.models import MirrorSettings, SyncReport
from pkgmirror.domain.package_utils import is_package_file
from pkgmirror.services.importer.package_importer import RepositoryMutator
from pkgmirror.services.importer.release_lister import ReleaseLister
from pkgmirror.services.package_set import Comparator, reduce_package_list

logger = logging.getLogger(__name__)


class SyncService:
    """
    Reconciles the local package directory against the latest release.

    Each cycle starts from scratch: nothing but the settings carries over
    between cycles.
    """

    def __init__(
        self,
        settings: MirrorSettings,
        lister: ReleaseLister,
        mutator: RepositoryMutator,
        comparator: Comparator,
    ):
        self.settings = settings
        self.lister = lister
        self.mutator = mutator
        self.comparator = comparator

    async def sync_once(self) -> SyncReport:
        """
        Run one cycle:
        - reduce the local package files to the newest build per package
        - reduce the newest release's assets the same way
        - download packages missing locally, replace those with a newer remote build

        Packages that disappeared upstream are left alone. Any error aborts the
        rest of the cycle; whatever was already installed stays installed.
        """
        report = SyncReport()

        local_files = list_local_packages(self.settings.arch_dir)
        local = await reduce_package_list(local_files, self.comparator)

        # Signatures, databases and other non-package assets are never mirrored.
        remote_files = [f for f in await self.lister.list_latest_assets() if is_package_file(f)]
        if not remote_files:
            logger.debug("Newest release has no package assets, nothing to do")
            return report
        remote = await reduce_package_list(remote_files, self.comparator)

        for name, remote_file in remote.items():
            local_file = local.get(name)
            if local_file is None:
                logger.info(f"Installing new package {remote_file}")
                await self.mutator.install(remote_file)
                report.installed.append(remote_file)
                continue

            if await self.comparator.compare(remote_file, local_file) > 0:
                logger.info(f"Upgrading {local_file} to {remote_file}")
                report.superseded.append(local_file)
                if self.mutator.remove(local_file):
                    report.removed.append(local_file)
                await self.mutator.install(remote_file)
                report.installed.append(remote_file)

        return report

    async def sync_loop(self) -> None:
        """
        Run sync cycles forever, waiting `sync_interval` before and after each.

        Cycle failures are logged and retried on the next pass; this coroutine
        only returns by cancellation.
        """
        interval = self.settings.sync_interval
        while True:
            await asyncio.sleep(interval)
            try:
                report = await self.sync_once()
                if report.changed:
                    logger.info(
                        f"Sync finished: {len(report.installed)} installed, {len(report.removed)} removed"
                    )
            except Exception as e:
                logger.warning(f"Sync of {self.settings.github_repo} failed: {e}")
            await asyncio.sleep(interval)
