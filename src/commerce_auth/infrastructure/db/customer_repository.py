"""SQLAlchemy adapter for storefront customer lookups."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commerce_auth.application.ports.customer_repository_port import (
    CustomerRecord,
    CustomerRepositoryPort,
)
from commerce_auth.application.ports.identity_source_port import PasswordHashProjection
from commerce_auth.domain.auth.credentials import normalize_identity_email
from commerce_auth.infrastructure.db.metadata import customers

_CUSTOMER_COLUMNS = (
    customers.c.id,
    customers.c.email,
    customers.c.first_name,
    customers.c.last_name,
    customers.c.phone,
    customers.c.has_account,
    customers.c.created_at,
    customers.c.updated_at,
)


class SqlAlchemyCustomerRepository(CustomerRepositoryPort):
    """Customer repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, *, identity_id: str) -> CustomerRecord | None:
        """Return live customer by id."""

        return await self._fetch_one(customers.c.id == identity_id)

    async def get_by_email(self, *, email: str) -> CustomerRecord | None:
        """Return live customer by normalized email."""

        normalized = normalize_identity_email(email=email)
        if not normalized:
            return None
        return await self._fetch_one(customers.c.email == normalized)

    async def get_password_hash_by_email(self, *, email: str) -> PasswordHashProjection | None:
        """Return only the password hash of a live customer, which may be unset."""

        normalized = normalize_identity_email(email=email)
        if not normalized:
            return None

        statement = (
            sa.select(customers.c.password_hash)
            .where(customers.c.email == normalized, customers.c.deleted_at.is_(None))
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return PasswordHashProjection(password_hash=cast(str | None, row["password_hash"]))

    async def _fetch_one(self, criterion: sa.ColumnElement[bool]) -> CustomerRecord | None:
        statement = (
            sa.select(*_CUSTOMER_COLUMNS)
            .where(criterion, customers.c.deleted_at.is_(None))
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return CustomerRecord(
            customer_id=cast(str, row["id"]),
            email=cast(str, row["email"]),
            first_name=cast(str | None, row["first_name"]),
            last_name=cast(str | None, row["last_name"]),
            phone=cast(str | None, row["phone"]),
            has_account=bool(row["has_account"]),
            created_at=cast(datetime, row["created_at"]),
            updated_at=cast(datetime, row["updated_at"]),
        )
