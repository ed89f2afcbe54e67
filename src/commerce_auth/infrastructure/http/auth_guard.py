"""Auth header parsing and API-token guard helpers for admin endpoints."""

from __future__ import annotations

from commerce_auth.application.ports.user_repository_port import UserRecord
from commerce_auth.application.services.auth_service import AuthService


class MissingAuthTokenError(PermissionError):
    """Raised when a bearer token is required but not provided."""


class InvalidAuthTokenError(PermissionError):
    """Raised when bearer token header or API token is invalid."""


def extract_bearer_token(authorization_header: str | None) -> str:
    """Extract API token from standard `Authorization: Bearer <token>` header."""

    if authorization_header is None or not authorization_header.strip():
        raise MissingAuthTokenError("missing bearer token")

    parts = authorization_header.strip().split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise InvalidAuthTokenError("invalid bearer token header")

    return parts[1]


class ApiTokenAuthGuard:
    """Resolve the admin caller from a bearer API token."""

    def __init__(self, *, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def require_user(self, *, authorization_header: str | None) -> UserRecord:
        """Return authenticated user or raise a token error."""

        token = extract_bearer_token(authorization_header)
        result = await self._auth_service.authenticate_by_token(token=token)
        if not result.success or result.user is None:
            raise InvalidAuthTokenError(result.error or "invalid bearer token")
        return result.user
