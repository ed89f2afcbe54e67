"""Port for back-office user lookups used by authentication services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from commerce_auth.application.ports.identity_source_port import IdentitySourcePort
from commerce_auth.domain.auth.roles import UserRole


@dataclass(frozen=True)
class UserRecord:
    """User identity model without secret fields."""

    user_id: str
    email: str
    first_name: str | None
    last_name: str | None
    role: UserRole
    created_at: datetime
    updated_at: datetime


class UserRepositoryPort(IdentitySourcePort[UserRecord], Protocol):
    """User repository contract."""

    async def get_by_api_token(self, *, api_token: str) -> UserRecord | None:
        """Return user owning the persistent API token or None."""
