"""DB utilities for SQLAlchemy async sessions/engine.

Uses `DATABASE_URL` or falls back to `sqlite+aiosqlite:///:memory:` for tests. In-memory SQLite is
pinned to a single connection (StaticPool) so every session sees the same database.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .models import Base

DEFAULT_URL = "sqlite+aiosqlite:///:memory:"


def get_engine(url: str | None = None) -> AsyncEngine:
    """Crée un moteur SQLAlchemy asynchrone à partir de l'URL de base de données."""
    db_url = url or os.getenv("DATABASE_URL") or DEFAULT_URL
    kwargs: dict = {"echo": False}
    if db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url:
            kwargs["poolclass"] = StaticPool
    return create_async_engine(db_url, **kwargs)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Crée une factory de sessions asynchrones."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Crée les tables manquantes (dev/tests ; en production passer par Alembic)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Contexte de session avec commit en sortie normale et rollback sur exception."""
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
