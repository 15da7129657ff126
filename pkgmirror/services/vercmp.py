"""
Version comparison through pacman's `vercmp` utility.
"""
from __future__ import annotations

import asyncio
import logging

from pkgmirror.domain.errors import ComparatorError

logger = logging.getLogger(__name__)


class VersionComparator:
    """
    Orders two artifact filenames of the same package.

    The full filenames are passed to the external tool, which prints a single
    integer: positive when the first is newer, zero when equal, negative when
    older. Only the sign is meaningful.
    """

    def __init__(self, command: str = "vercmp"):
        self.command = command

    async def compare(self, new: str, old: str) -> int:
        logger.debug(f"Running {self.command} {new} {old}")
        try:
            proc = await asyncio.create_subprocess_exec(
                self.command,
                new,
                old,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ComparatorError(f"Could not run {self.command}: {e}") from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise ComparatorError(
                f"{self.command} exited with status {proc.returncode} comparing {new} and {old}: {detail}"
            )

        output = stdout.decode("utf-8", errors="replace").strip()
        try:
            return int(output)
        except ValueError:
            raise ComparatorError(
                f"{self.command} printed unexpected output {output!r} comparing {new} and {old}"
            ) from None
