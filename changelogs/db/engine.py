"""Async database engine, session factory, and lifespan management.

Uses SQLAlchemy 2.0 async with asyncpg driver for PostgreSQL.
"""

from __future__ import annotations

import contextlib
import json
from collections.abc import AsyncGenerator
from typing import Any

from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from changelogs.config import settings


def _json_serializer(value: Any) -> str:
    """JSONB serializer accepting UUIDs, Decimals, enums and dates in payloads."""
    return json.dumps(value, default=to_jsonable_python)


# ── Async PostgreSQL engine ──────────────────────────────────────────

engine: AsyncEngine = create_async_engine(
    settings.db.database_url,
    echo=settings.log_level == "DEBUG",
    pool_size=settings.db.pool_size,
    max_overflow=settings.db.max_overflow,
    pool_pre_ping=True,
    pool_recycle=3600,
    json_serializer=_json_serializer,
)

# ── Session factory ──────────────────────────────────────────────────

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Lifespan helpers ─────────────────────────────────────────────────


async def init_db() -> None:
    """Verify connectivity and, outside production, create missing tables.

    In production the change_logs table is created by the Alembic migration.
    """
    async with engine.begin() as conn:
        # Import here to ensure all models are registered with Base.metadata
        from changelogs.models import Base

        if not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the database engine."""
    await engine.dispose()


@contextlib.asynccontextmanager
async def db_lifespan() -> AsyncGenerator[None, None]:
    """Context manager for database lifecycle.

    Usage in FastAPI lifespan:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with db_lifespan():
                yield
    """
    await init_db()
    try:
        yield
    finally:
        await close_db()
