"""Async SQLAlchemy session factory helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


def create_session_factory(
    database_url: str,
    *,
    echo: bool = False,
) -> async_sessionmaker[AsyncSession]:
    """Create a reusable async session factory for identity lookups."""

    engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
    return async_sessionmaker(engine, expire_on_commit=False)
