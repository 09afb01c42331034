"""
FastAPI application for the Focus Insights dashboard.

PURPOSE: Build the app and serve it with uvicorn.
AI CONTEXT: All routes live in routes.py; this module wires them together
and reports which snapshot folder the server reads.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import Config
from . import routes

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Report the snapshot folder on startup.

    Business context: The dashboard usually runs unattended next to a
    synced folder. Pointing it at the wrong folder shows an empty dashboard
    with no error, so a missing sessions file is logged as a warning.
    """
    repository = routes.get_repository()
    logger.info(f"Focus Insights {__version__} reading snapshots from {repository.data_dir}")
    if not repository.has_snapshot():
        logger.warning(f"No session snapshot at {repository.sessions_file}; dashboard will be empty")
    yield
    logger.info("Focus Insights dashboard stopped")


def create_app() -> FastAPI:
    """
    Build the dashboard application.

    Returns:
        FastAPI app serving the HTML dashboard at /, chart images under
        /charts, the JSON API under /api and OpenAPI docs at /docs.

    Example:
        >>> from fastapi.testclient import TestClient
        >>> TestClient(create_app()).get('/api/stats?range=month').status_code
        200
    """
    app = FastAPI(
        title="Focus Insights",
        description="Read-only analytics over tracked focus sessions",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(routes.router)
    return app


def run_dashboard(
    host: str = "127.0.0.1",
    port: int = 8000,
    data_dir: str | None = None,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Serve the dashboard until interrupted.

    uvicorn builds the app through the import string so --reload works;
    data_dir is therefore handed over through FOCUS_INSIGHTS_DATA_DIR,
    which reload workers inherit.

    Args:
        host: Interface to bind. '0.0.0.0' exposes the dashboard on the LAN.
        port: TCP port.
        data_dir: Snapshot folder. None keeps the configured one.
        reload: Restart on source changes (development only).
        log_level: uvicorn log level.

    Raises:
        OSError: If the address cannot be bound.
    """
    if data_dir:
        os.environ[Config.DATA_DIR_ENV_VAR] = data_dir
    uvicorn.run(
        "focus_insights.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
