"""Shared pytest fixtures for pkgmirror tests."""

import json
import os
import stat
import sys
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest

from pkgmirror.domain.models import MirrorSettings
from pkgmirror.services.importer.package_importer import PackageDownloader, RepositoryMutator
from pkgmirror.services.importer.release_lister import ReleaseLister
from pkgmirror.data.sync_updater import SyncService


def pkg(name: str, version: str, release: str = "1", arch: str = "x86_64") -> str:
    """Build an artifact filename like `name-1.0-1-x86_64.pkg.tar.zst`."""
    return f"{name}-{version}-{release}-{arch}.pkg.tar.zst"


def _version_key(filename: str) -> tuple:
    _, version, release, _ = filename.rsplit("-", 3)
    parts = []
    for part in version.split(".") + [release]:
        try:
            parts.append((0, int(part)))
        except ValueError:
            parts.append((1, part))
    return tuple(parts)


class FakeComparator:
    """Numeric version+release ordering standing in for `vercmp`."""

    def __init__(self):
        self.calls: List[tuple] = []

    async def compare(self, new: str, old: str) -> int:
        self.calls.append((new, old))
        a, b = _version_key(new), _version_key(old)
        return (a > b) - (a < b)


class RecordingIndexBuilder:
    """Replaces repo-add; remembers every (database, package) pair."""

    def __init__(self):
        self.calls: List[tuple] = []

    async def add(self, index_path: Path, package_path: Path) -> None:
        self.calls.append((index_path, package_path))


class FakeGitHub:
    """
    In-memory GitHub serving a release listing and asset downloads
    through httpx.MockTransport.
    """

    def __init__(self, github_repo: str = "alice/pkgs"):
        self.github_repo = github_repo
        self.releases: List[dict] = []
        self.assets: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []
        self.downloads: List[str] = []

    def publish(self, *names: str) -> None:
        """Publish a new release (newest first) holding the given assets."""
        self.releases.insert(
            0,
            {"tag_name": "packages", "assets": [{"name": n} for n in names]},
        )
        for n in names:
            self.assets.setdefault(n, f"contents of {n}".encode())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.url.host == "api.github.com" and path == f"/repos/{self.github_repo}/releases":
            return httpx.Response(200, content=json.dumps(self.releases).encode(),
                                  headers={"content-type": "application/json"})
        prefix = f"/{self.github_repo}/releases/download/packages/"
        if request.url.host == "github.com" and path.startswith(prefix):
            name = path[len(prefix):]
            if name in self.assets:
                self.downloads.append(name)
                return httpx.Response(200, content=self.assets[name])
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings(tmp_path: Path) -> MirrorSettings:
    s = MirrorSettings(
        repo_dir=tmp_path / "repo",
        bind_address="127.0.0.1:8080",
        github_repo="alice/pkgs",
        sync_interval=0.01,
    )
    s.arch_dir.mkdir(parents=True)
    return s


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def comparator() -> FakeComparator:
    return FakeComparator()


@pytest.fixture
def index_builder() -> RecordingIndexBuilder:
    return RecordingIndexBuilder()


@pytest.fixture
def make_service(settings, github, comparator, index_builder) -> Callable[[], SyncService]:
    def _make() -> SyncService:
        client = github.client()
        return SyncService(
            settings,
            lister=ReleaseLister(settings, client),
            mutator=RepositoryMutator(
                settings,
                downloader=PackageDownloader(client, retry_delay=0),
                index_builder=index_builder,
            ),
            comparator=comparator,
        )

    return _make


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], str]:
    """Write an executable Python script and return its path."""

    def _make(name: str, body: str) -> str:
        path = tmp_path / name
        path.write_text(f"#!{sys.executable}\nimport sys\n{body}\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return os.fspath(path)

    return _make
