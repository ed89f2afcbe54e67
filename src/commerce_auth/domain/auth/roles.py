"""Back-office user roles."""

from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    """Roles a back-office user record may carry."""

    ADMIN = "admin"
    MEMBER = "member"
    DEVELOPER = "developer"
