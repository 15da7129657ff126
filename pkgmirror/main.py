import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from pkgmirror.core.config import log_level_from_verbosity, resolve_settings
from pkgmirror.core.dependencies import get_settings
from pkgmirror.core.runtime import serve_and_sync
from pkgmirror.data.repository import ensure_repository_dirs, list_local_packages
from pkgmirror.data.sync_updater import SyncService
from pkgmirror.domain.errors import MirrorError
from pkgmirror.domain.models import MirrorSettings
from pkgmirror.services.importer.package_importer import (
    PackageDownloader,
    RepoIndexBuilder,
    RepositoryMutator,
)
from pkgmirror.services.importer.release_lister import REQUEST_TIMEOUT, ReleaseLister
from pkgmirror.services.vercmp import VersionComparator

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def configure_logging(verbosity: int) -> None:
    logging.basicConfig(
        level=log_level_from_verbosity(verbosity),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: MirrorSettings) -> FastAPI:
    """
    Build the HTTP app serving `<repo_dir>` under /repo.

    The repository directory must already exist; StaticFiles checks it on creation.
    """
    app = FastAPI(
        title="pkgmirror",
        version="0.1.0",
        description="pacman repository mirrored from GitHub release assets.",
    )
    app.state.settings = settings

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request, settings: MirrorSettings = Depends(get_settings)) -> HTMLResponse:
        """
        Landing page listing the packages currently on disk and the pacman.conf snippet.
        """
        try:
            packages = sorted(list_local_packages(settings.arch_dir))
        except MirrorError as e:
            logger.warning(f"Could not list packages for landing page: {e}")
            packages = []
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "title": f"{settings.owner} package repository",
                "repo_name": settings.owner,
                "github_repo": settings.github_repo,
                "server_url": f"{str(request.base_url).rstrip('/')}/repo/$arch",
                "packages": packages,
            },
        )

    @app.get("/health")
    async def health() -> dict:
        """
        Lightweight health check endpoint.
        """
        return {"status": "ok"}

    app.mount("/repo", StaticFiles(directory=settings.repo_dir), name="repo")
    return app


def build_sync_service(settings: MirrorSettings, client: httpx.AsyncClient) -> SyncService:
    return SyncService(
        settings,
        lister=ReleaseLister(settings, client),
        mutator=RepositoryMutator(
            settings,
            downloader=PackageDownloader(client),
            index_builder=RepoIndexBuilder(settings.repo_add_command),
        ),
        comparator=VersionComparator(settings.vercmp_command),
    )


def build_server(settings: MirrorSettings, app: FastAPI) -> uvicorn.Server:
    host, port = settings.host_port
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_config=None,
        log_level=log_level_from_verbosity(settings.log_level),
    )
    return uvicorn.Server(config)


async def run(settings: MirrorSettings) -> None:
    app = create_app(settings)
    server = build_server(settings, app)
    async with httpx.AsyncClient(follow_redirects=True, timeout=REQUEST_TIMEOUT) as client:
        await serve_and_sync(server, build_sync_service(settings, client))


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = resolve_settings(argv)
    configure_logging(settings.log_level)
    try:
        ensure_repository_dirs(settings)
        logger.info(
            f"Mirroring {settings.github_repo} into {settings.arch_dir}, serving on {settings.bind_address}"
        )
        asyncio.run(run(settings))
    except MirrorError as e:
        logger.error(f"{e}")
        return 1
    except KeyboardInterrupt:
        # SIGINT re-raised by uvicorn after a graceful shutdown.
        logger.info("Interrupted, shut down")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
