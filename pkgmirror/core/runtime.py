"""
Run the HTTP server and the sync loop side by side.

Both are meant to run forever. Whichever stops first takes the other down
with it: the sync loop swallows its own cycle errors, so in practice only the
server ending (bind failure, listener error, shutdown signal) ends the race.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from pkgmirror.data.sync_updater import SyncService
from pkgmirror.domain.errors import MirrorError, ServeError

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 10.0


class Server(Protocol):
    should_exit: bool

    async def serve(self) -> None: ...


async def _cancel(task: asyncio.Task) -> None:
    if task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.debug(f"{task.get_name()} raised while shutting down: {e}")


async def _stop_server(server: Server, task: asyncio.Task, timeout: float) -> None:
    if task.done():
        return
    server.should_exit = True
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if not done:
        await _cancel(task)
    elif not task.cancelled() and task.exception() is not None:
        logger.debug(f"HTTP server raised while shutting down: {task.exception()}")


async def serve_and_sync(
    server: Server,
    sync_service: SyncService,
    shutdown_timeout: float = SHUTDOWN_TIMEOUT,
) -> None:
    """
    Supervise the server and the sync loop until one of them stops.

    Returns normally only when the server stopped because its `should_exit`
    flag was set programmatically. uvicorn re-raises SIGINT/SIGTERM once
    `serve()` returns, so a real signal ends the process from there instead.
    Any other ending raises ServeError and is fatal to the process; no
    restart is attempted.
    """
    serve_task = asyncio.create_task(server.serve(), name="http-server")
    sync_task = asyncio.create_task(sync_service.sync_loop(), name="sync-loop")

    try:
        done, _ = await asyncio.wait({serve_task, sync_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        await _cancel(sync_task)
        await _stop_server(server, serve_task, shutdown_timeout)

    if serve_task in done:
        error = None if serve_task.cancelled() else serve_task.exception()
        if error is not None:
            raise ServeError(f"HTTP server failed: {error}") from error
        if server.should_exit:
            logger.info("HTTP server stopped, sync loop cancelled")
            return
        raise ServeError("HTTP server stopped unexpectedly")

    error = None if sync_task.cancelled() else sync_task.exception()
    if error is not None:
        raise MirrorError(f"Sync loop crashed: {error}") from error
    raise MirrorError("Sync loop stopped unexpectedly")
