"""SQLAlchemy adapter for back-office user lookups."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commerce_auth.application.ports.identity_source_port import PasswordHashProjection
from commerce_auth.application.ports.user_repository_port import UserRecord, UserRepositoryPort
from commerce_auth.domain.auth.credentials import normalize_identity_email
from commerce_auth.domain.auth.roles import UserRole
from commerce_auth.infrastructure.db.metadata import users

_USER_COLUMNS = (
    users.c.id,
    users.c.email,
    users.c.first_name,
    users.c.last_name,
    users.c.role,
    users.c.created_at,
    users.c.updated_at,
)


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions.

    Soft-deleted users are invisible to every lookup.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, *, identity_id: str) -> UserRecord | None:
        """Return live user by id."""

        return await self._fetch_one(users.c.id == identity_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return live user by normalized email."""

        normalized = normalize_identity_email(email=email)
        if not normalized:
            return None
        return await self._fetch_one(users.c.email == normalized)

    async def get_password_hash_by_email(self, *, email: str) -> PasswordHashProjection | None:
        """Return only the password hash of a live user by normalized email."""

        normalized = normalize_identity_email(email=email)
        if not normalized:
            return None

        statement = (
            sa.select(users.c.password_hash)
            .where(users.c.email == normalized, users.c.deleted_at.is_(None))
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return PasswordHashProjection(password_hash=cast(str | None, row["password_hash"]))

    async def get_by_api_token(self, *, api_token: str) -> UserRecord | None:
        """Return live user owning the exact API token."""

        if not api_token:
            return None
        return await self._fetch_one(users.c.api_token == api_token)

    async def _fetch_one(self, criterion: sa.ColumnElement[bool]) -> UserRecord | None:
        statement = (
            sa.select(*_USER_COLUMNS)
            .where(criterion, users.c.deleted_at.is_(None))
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    return UserRecord(
        user_id=cast(str, row["id"]),
        email=cast(str, row["email"]),
        first_name=cast(str | None, row["first_name"]),
        last_name=cast(str | None, row["last_name"]),
        role=UserRole(cast(str, row["role"])),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
