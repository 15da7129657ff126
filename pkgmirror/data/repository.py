from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from pkgmirror.domain.errors import FilesystemError
from pkgmirror.domain.models import MirrorSettings
from pkgmirror.domain.package_utils import is_package_file

logger = logging.getLogger(__name__)


def ensure_repository_dirs(settings: MirrorSettings) -> Path:
    """
    Create `<repo_dir>/<arch>` if it does not exist yet.

    Called once at startup, before the server or the sync loop touch it.
    """
    arch_dir = settings.arch_dir
    try:
        arch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create repository directory {arch_dir}: {e}") from e
    return arch_dir


def list_local_packages(arch_dir: Path) -> List[str]:
    """
    Return the package filenames present in the architecture directory.

    The order is whatever the directory enumeration yields; it is kept as is
    because reduction resolves version ties by first occurrence.
    """
    try:
        return [entry.name for entry in arch_dir.iterdir() if is_package_file(entry.name)]
    except OSError as e:
        raise FilesystemError(f"Could not list {arch_dir}: {e}") from e
