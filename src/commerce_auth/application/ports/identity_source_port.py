"""Shared lookup contract for stores that own authenticatable identities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TypeVar

RecordT_co = TypeVar("RecordT_co", covariant=True)


@dataclass(frozen=True)
class PasswordHashProjection:
    """Identity row projected to its stored password hash only."""

    password_hash: str | None


class IdentitySourcePort(Protocol[RecordT_co]):
    """Identity lookups by unique id and by email.

    Every lookup returns None when no live identity matches.
    """

    async def get_by_id(self, *, identity_id: str) -> RecordT_co | None:
        """Return full identity record by unique id."""

    async def get_by_email(self, *, email: str) -> RecordT_co | None:
        """Return full identity record by email."""

    async def get_password_hash_by_email(self, *, email: str) -> PasswordHashProjection | None:
        """Return only the stored password hash for one email."""
