"""Port for storefront customer lookups used by authentication services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from commerce_auth.application.ports.identity_source_port import IdentitySourcePort


@dataclass(frozen=True)
class CustomerRecord:
    """Customer identity model without secret fields."""

    customer_id: str
    email: str
    first_name: str | None
    last_name: str | None
    phone: str | None
    has_account: bool
    created_at: datetime
    updated_at: datetime


class CustomerRepositoryPort(IdentitySourcePort[CustomerRecord], Protocol):
    """Customer repository contract."""
