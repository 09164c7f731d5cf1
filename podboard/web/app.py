"""
FastAPI web application serving the pod registry.

Renders the latest episodes of every pod as HTML and JSON, and exposes a
manual refresh trigger that shares the registry lock with the scheduler.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Iterator, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, StreamingResponse

from podboard import __version__
from podboard.log_buffer import RecentLogHandler
from podboard.pods.registry import Registry
from podboard.scheduler import RefreshScheduler
from podboard.web.models import HealthResponse, PodView, RefreshResponse
from podboard.web.renderer import render_index_html

logger = logging.getLogger(__name__)

# Browsers buffer the first kilobyte of a response before rendering it
_STREAM_PADDING = " " * 1025


def create_app(
    registry: Registry,
    scheduler: Optional[RefreshScheduler] = None,
    log_handler: Optional[RecentLogHandler] = None,
) -> FastAPI:
    """Build the web application around an existing registry.

    Args:
        registry: Registry to serve.
        scheduler: Scheduler started and stopped with the application. When
            omitted, the manual trigger still works but nothing refreshes
            on a timer.
        log_handler: Source of the lines shown on /logs.

    Returns:
        Configured FastAPI application.
    """
    manage_scheduler = scheduler is not None
    if scheduler is None:
        scheduler = RefreshScheduler(registry)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        """
        FastAPI lifespan context manager.

        Starts the refresh scheduler on startup and stops it on shutdown.
        """
        if manage_scheduler:
            scheduler.start()
        logger.info("Application started")

        yield

        if manage_scheduler:
            scheduler.shutdown(wait=False)
        logger.info("Application shutdown")

    app = FastAPI(
        title="podboard",
        description="Latest episodes of a fixed set of podcasts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.scheduler = scheduler
    app.state.log_handler = log_handler

    app.add_api_route("/", index, methods=["GET"], response_class=HTMLResponse)
    app.add_api_route("/api/pods", list_pods, methods=["GET"], response_model=List[PodView])
    app.add_api_route("/forceupdate", force_update, methods=["GET"])
    app.add_api_route("/api/refresh", refresh, methods=["POST"], response_model=RefreshResponse)
    app.add_api_route("/logs", logs, methods=["GET"], response_class=PlainTextResponse)
    app.add_api_route("/health", health, methods=["GET"], response_model=HealthResponse)

    return app


def _get_registry(request: Request) -> Registry:
    """Get registry from app state."""
    return request.app.state.registry


def _get_scheduler(request: Request) -> RefreshScheduler:
    """Get scheduler from app state."""
    return request.app.state.scheduler


async def index(request: Request) -> HTMLResponse:
    """Render every pod and its episodes as an HTML page."""
    # Snapshot blocks while a refresh holds the registry lock
    pods = await asyncio.to_thread(_get_registry(request).snapshot)
    return HTMLResponse(content=render_index_html(pods), status_code=200)


async def list_pods(request: Request) -> List[PodView]:
    """
    List every pod with its last update time and episodes.

    Returns:
        Pods in registration order, episodes most recent first.
    """
    pods = await asyncio.to_thread(_get_registry(request).snapshot)
    return [PodView.from_snapshot(pod) for pod in pods]


def force_update(request: Request) -> StreamingResponse:
    """
    Refresh all pods now, streaming progress as plain text.

    The response completes once the refresh (and any refresh it had to
    wait for) is done.
    """
    scheduler = _get_scheduler(request)

    def progress() -> Iterator[str]:
        yield _STREAM_PADDING
        yield "Starting update... "
        scheduler.trigger()
        yield "Done"

    return StreamingResponse(progress(), media_type="text/plain")


async def refresh(request: Request) -> RefreshResponse:
    """
    Refresh all pods now and report the result.

    Returns:
        RefreshResponse with duration and per-pod episode counts
    """
    result = await asyncio.to_thread(_get_scheduler(request).trigger)
    return RefreshResponse(
        duration_seconds=max(result.duration_seconds, 0.0),
        episode_counts=result.episode_counts,
    )


async def logs(request: Request) -> PlainTextResponse:
    """Show recent log lines, newest first."""
    handler: Optional[RecentLogHandler] = request.app.state.log_handler
    lines = handler.recent() if handler else []
    return PlainTextResponse(_STREAM_PADDING + "\n" + "\n".join(lines))


async def health(request: Request) -> HealthResponse:
    """Report service health and whether a refresh is in progress."""
    return HealthResponse(state=_get_scheduler(request).state)
