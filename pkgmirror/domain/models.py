"""
Pydantic models for the package mirror.

This module defines the data models used throughout the application, including:
- Process-wide mirror settings (paths, bind address, remote identifier)
- GitHub release listing payloads
- Per-cycle sync reports

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_OWNER = "myrepo"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class MirrorSettings(BaseModel):
    """
    Immutable process-wide configuration.

    Built once at startup from the config file, environment and command line,
    then handed explicitly to every component that needs it.
    """

    model_config = ConfigDict(frozen=True)

    repo_dir: Path = Field(
        description="Root directory of the local package repository.",
    )
    bind_address: str = Field(
        description="HTTP bind address as 'host:port' (IPv6 as '[addr]:port').",
    )
    github_repo: str = Field(
        description="Remote identifier in 'owner/repo' form.",
    )
    log_level: int = Field(
        default=3,
        description="Verbosity: 1=debug, 2=info, 3=warning, 4=error.",
    )
    sync_interval: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait before and again after every sync cycle.",
    )
    arch: str = Field(
        default="x86_64",
        description="Architecture subdirectory holding packages and the database.",
    )
    release_tag: str = Field(
        default="packages",
        description="Release tag used when building asset download URLs.",
    )
    vercmp_command: str = Field(
        default="vercmp",
        description="Executable used to compare two package versions.",
    )
    repo_add_command: str = Field(
        default="repo-add",
        description="Executable used to add a package to the repository database.",
    )
    api_base_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the hosting service API.",
    )
    download_base_url: str = Field(
        default="https://github.com",
        description="Base URL release assets are downloaded from.",
    )

    @property
    def owner(self) -> str:
        return self.github_repo.split("/", 1)[0] or DEFAULT_OWNER

    @property
    def arch_dir(self) -> Path:
        return self.repo_dir / self.arch

    @property
    def index_path(self) -> Path:
        """Path of the repository database maintained by repo-add."""
        return self.arch_dir / f"{self.owner}.db.tar.gz"

    @property
    def host_port(self) -> Tuple[str, int]:
        return parse_bind_address(self.bind_address)


def parse_bind_address(value: str) -> Tuple[str, int]:
    """
    Split 'host:port' (or '[v6addr]:port') into its parts.

    Raises ValueError when the port is missing or not a number.
    """
    host, sep, port = value.strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"Bind address must look like 'host:port', got {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in bind address {value!r}") from None
    if not 0 <= port_number <= 65535:
        raise ValueError(f"Port out of range in bind address {value!r}")
    return host, port_number


# ---------------------------------------------------------------------------
# GitHub Release Models
# ---------------------------------------------------------------------------


class ReleaseAsset(BaseModel):
    """A single file attached to a release. Only the name is used."""

    model_config = ConfigDict(extra="ignore")

    name: str


class Release(BaseModel):
    """
    One entry of the `GET /repos/{owner}/{repo}/releases` array.

    The API returns releases newest first.
    """

    model_config = ConfigDict(extra="ignore")

    tag_name: Optional[str] = None
    assets: List[ReleaseAsset] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Sync Results
# ---------------------------------------------------------------------------


class SyncReport(BaseModel):
    """
    What a single sync cycle changed on disk.

    Rebuilt every cycle and never persisted.
    """

    installed: List[str] = Field(
        default_factory=list,
        description="Artifacts downloaded and added to the database.",
    )
    removed: List[str] = Field(
        default_factory=list,
        description="Superseded local artifacts that were deleted.",
    )
    superseded: List[str] = Field(
        default_factory=list,
        description="Local artifacts replaced by a newer remote build (deleted or not).",
    )

    @property
    def changed(self) -> bool:
        return bool(self.installed or self.removed)
