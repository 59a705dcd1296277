"""Async engine and session factory helpers."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from launchit.core.config import settings


def create_engine(uri: str | None = None, **kwargs) -> AsyncEngine:
    return create_async_engine(uri or str(settings.DATABASE_URI), **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions outlive commits because gateway results are read afterwards."""

    return async_sessionmaker(engine, expire_on_commit=False)
