"""FastAPI application entry point — wires everything together.

Usage:
    python -m changelogs.main

Serves the health check; the change log components are available to route
handlers through ``app.state.change_logs``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from changelogs import __version__
from changelogs.bootstrap import create_change_logs
from changelogs.config import settings
from changelogs.db.engine import db_lifespan
from changelogs.jobs.queue import task_queue
from changelogs.middleware import ChangeLogContextMiddleware

logger = logging.getLogger(__name__)


# ── Logging setup ────────────────────────────────────────────────────


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting change logs (env=%s)", settings.environment)

    async with db_lifespan():
        logger.info("Database initialized")

        app.state.change_logs = create_change_logs(settings, queue=task_queue)
        logger.info(
            "Change logging %s (deferred=%s)",
            "enabled" if settings.enabled else "disabled",
            settings.queue.enabled,
        )

        try:
            yield
        finally:
            # Pending deferred writes must land before the engine is disposed
            await task_queue.stop()

    logger.info("Change logs shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="Change Logs API",
    version=__version__,
    lifespan=lifespan,
)
app.add_middleware(ChangeLogContextMiddleware)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "change_logs": "enabled" if settings.enabled else "disabled",
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    configure_logging()
    uvicorn.run(
        "changelogs.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
