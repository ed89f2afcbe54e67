"""Application authentication service for credential verification."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

from commerce_auth.application.ports.customer_repository_port import (
    CustomerRecord,
    CustomerRepositoryPort,
)
from commerce_auth.application.ports.identity_source_port import IdentitySourcePort
from commerce_auth.application.ports.password_hasher_port import PasswordHasherPort
from commerce_auth.application.ports.user_repository_port import UserRecord, UserRepositoryPort

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_API_TOKEN_MESSAGE = "Invalid API Token"

RecordT = TypeVar("RecordT")

logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Supported authentication outcomes."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_API_TOKEN = "invalid_api_token"


class AuthFailureCause(StrEnum):
    """Internal failure causes; logged only, never returned to callers."""

    NOT_FOUND = "not_found"
    MISSING_PASSWORD_HASH = "missing_password_hash"
    VERIFICATION_MISMATCH = "verification_mismatch"
    STORE_FAULT = "store_fault"


@dataclass(frozen=True)
class AuthResult:
    """Authentication result model.

    A successful result carries exactly one identity; a failed result carries
    only the generic error message for its flow.
    """

    outcome: AuthOutcome
    user: UserRecord | None = None
    customer: CustomerRecord | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is AuthOutcome.SUCCESS


_INVALID_CREDENTIALS = AuthResult(
    outcome=AuthOutcome.INVALID_CREDENTIALS,
    error=INVALID_CREDENTIALS_MESSAGE,
)
_INVALID_API_TOKEN = AuthResult(
    outcome=AuthOutcome.INVALID_API_TOKEN,
    error=INVALID_API_TOKEN_MESSAGE,
)


class _PasswordCheckFailed(Exception):
    def __init__(self, cause: AuthFailureCause) -> None:
        super().__init__(cause.value)
        self.cause = cause


class AuthService:
    """Authenticate users and customers by password, and users by API token."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        customers: CustomerRepositoryPort,
        password_hasher: PasswordHasherPort,
        development_mode: Callable[[], bool] | None = None,
    ) -> None:
        self._users = users
        self._customers = customers
        self._password_hasher = password_hasher
        self._development_mode = development_mode

    async def authenticate_by_token(self, *, token: str) -> AuthResult:
        """Authenticate a user by persistent API token.

        In development mode the token is first tried as a raw user id. That
        shortcut exists for local testing only and grants access to any user
        whose id is known, so it must never be enabled outside development.
        """

        if self._development_mode is not None and self._development_mode():
            user = await self._lookup_user_by_id_for_development(token)
            if user is not None:
                logger.warning("auth_development_bypass_used user_id=%s", user.user_id)
                return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)

        try:
            user = await self._users.get_by_api_token(api_token=token)
        except Exception:
            logger.exception("auth_failed kind=api_token cause=%s", AuthFailureCause.STORE_FAULT)
            return _INVALID_API_TOKEN

        if user is None:
            logger.info("auth_failed kind=api_token cause=%s", AuthFailureCause.NOT_FOUND)
            return _INVALID_API_TOKEN
        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)

    async def authenticate_user(self, *, email: str, password: str) -> AuthResult:
        """Authenticate a back-office user by email and password."""

        try:
            user = await self._authenticate_password(
                self._users,
                email=email,
                password=password,
            )
        except _PasswordCheckFailed as failure:
            logger.info("auth_failed kind=user cause=%s", failure.cause)
            return _INVALID_CREDENTIALS
        except Exception:
            logger.exception("auth_failed kind=user cause=%s", AuthFailureCause.STORE_FAULT)
            return _INVALID_CREDENTIALS

        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)

    async def authenticate_customer(self, *, email: str, password: str) -> AuthResult:
        """Authenticate a storefront customer by email and password.

        Customers created without a password (guest checkout, social login)
        always fail here.
        """

        try:
            customer = await self._authenticate_password(
                self._customers,
                email=email,
                password=password,
            )
        except _PasswordCheckFailed as failure:
            logger.info("auth_failed kind=customer cause=%s", failure.cause)
            return _INVALID_CREDENTIALS
        except Exception:
            logger.exception("auth_failed kind=customer cause=%s", AuthFailureCause.STORE_FAULT)
            return _INVALID_CREDENTIALS

        return AuthResult(outcome=AuthOutcome.SUCCESS, customer=customer)

    async def _authenticate_password(
        self,
        source: IdentitySourcePort[RecordT],
        *,
        email: str,
        password: str,
    ) -> RecordT:
        """Verify password against the projected hash, then load the full record."""

        projection = await source.get_password_hash_by_email(email=email)
        if projection is None:
            raise _PasswordCheckFailed(AuthFailureCause.NOT_FOUND)
        if not projection.password_hash:
            raise _PasswordCheckFailed(AuthFailureCause.MISSING_PASSWORD_HASH)

        # CPU-bound derivation runs in a worker thread and is not interruptible.
        matches = await asyncio.to_thread(
            self._password_hasher.verify_password,
            password=password,
            password_hash=projection.password_hash,
        )
        if not matches:
            raise _PasswordCheckFailed(AuthFailureCause.VERIFICATION_MISMATCH)

        record = await source.get_by_email(email=email)
        if record is None:
            raise _PasswordCheckFailed(AuthFailureCause.NOT_FOUND)
        return record

    async def _lookup_user_by_id_for_development(self, token: str) -> UserRecord | None:
        try:
            return await self._users.get_by_id(identity_id=token)
        except Exception:
            logger.warning("auth_development_bypass_lookup_failed", exc_info=True)
            return None
