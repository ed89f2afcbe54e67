"""auth-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from collections.abc import Callable

import uvicorn
from fastapi import FastAPI

from commerce_auth.application.services.auth_service import AuthService
from commerce_auth.config.settings import load_settings
from commerce_auth.infrastructure.db.customer_repository import SqlAlchemyCustomerRepository
from commerce_auth.infrastructure.db.session import create_session_factory
from commerce_auth.infrastructure.db.user_repository import SqlAlchemyUserRepository
from commerce_auth.infrastructure.http.auth_guard import ApiTokenAuthGuard
from commerce_auth.infrastructure.http.auth_router import build_auth_router
from commerce_auth.infrastructure.logging import configure_logging
from commerce_auth.infrastructure.security.password_hasher import ScryptPasswordHasher

AUTH_API_HOST = "0.0.0.0"
AUTH_API_PORT = 9000
logger = logging.getLogger(__name__)


def _settings_development_mode() -> bool:
    return load_settings().is_development_mode


def build_auth_service(
    database_url: str,
    *,
    development_mode: Callable[[], bool] | None = None,
) -> AuthService:
    """Build authentication service with SQLAlchemy-backed identity sources."""

    session_factory = create_session_factory(database_url)
    return AuthService(
        users=SqlAlchemyUserRepository(session_factory),
        customers=SqlAlchemyCustomerRepository(session_factory),
        password_hasher=ScryptPasswordHasher(),
        development_mode=development_mode,
    )


def create_app(
    *,
    auth_service: AuthService | None = None,
    database_url: str | None = None,
) -> FastAPI:
    """Create FastAPI app exposing admin and store authentication routes."""

    if auth_service is None:
        development_mode: Callable[[], bool] | None = None
        if database_url is None:
            settings = load_settings()
            configure_logging(level=settings.log_level)
            database_url = settings.database_url
            if settings.is_development_mode:
                logger.warning("auth_api_development_mode api_token_id_bypass=enabled")
            development_mode = _settings_development_mode
        auth_service = build_auth_service(database_url, development_mode=development_mode)

    app = FastAPI()
    app.include_router(
        build_auth_router(
            auth_service=auth_service,
            auth_guard=ApiTokenAuthGuard(auth_service=auth_service),
        )
    )
    return app


def main() -> None:
    """Run auth-api with uvicorn."""

    uvicorn.run(create_app(), host=AUTH_API_HOST, port=AUTH_API_PORT)


if __name__ == "__main__":
    main()
