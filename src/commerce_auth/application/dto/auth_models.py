"""Pydantic models for admin and store authentication contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from commerce_auth.application.ports.customer_repository_port import CustomerRecord
from commerce_auth.application.ports.user_repository_port import UserRecord


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class EmailPasswordRequest(StrictModel):
    """HTTP request model for email/password authentication."""

    email: str = Field(min_length=1)
    password: str


class UserPayload(StrictModel):
    """Public user fields; secret columns are never serialized."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> UserPayload:
        return cls(
            id=record.user_id,
            email=record.email,
            first_name=record.first_name,
            last_name=record.last_name,
            role=record.role.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CustomerPayload(StrictModel):
    """Public customer fields; secret columns are never serialized."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    has_account: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: CustomerRecord) -> CustomerPayload:
        return cls(
            id=record.customer_id,
            email=record.email,
            first_name=record.first_name,
            last_name=record.last_name,
            phone=record.phone,
            has_account=record.has_account,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class UserAuthResponse(StrictModel):
    """HTTP response model for an authenticated user."""

    user: UserPayload


class CustomerAuthResponse(StrictModel):
    """HTTP response model for an authenticated customer."""

    customer: CustomerPayload
