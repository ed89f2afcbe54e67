"""FastAPI router for admin and store authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Header, HTTPException

from commerce_auth.application.dto.auth_models import (
    CustomerAuthResponse,
    CustomerPayload,
    EmailPasswordRequest,
    UserAuthResponse,
    UserPayload,
)
from commerce_auth.application.services.auth_service import AuthService
from commerce_auth.infrastructure.http.auth_guard import (
    ApiTokenAuthGuard,
    InvalidAuthTokenError,
    MissingAuthTokenError,
)


def build_auth_router(*, auth_service: AuthService, auth_guard: ApiTokenAuthGuard) -> APIRouter:
    """Build router exposing password and API-token authentication endpoints."""

    router = APIRouter(tags=["auth"])

    @router.post("/admin/auth", response_model=UserAuthResponse)
    async def authenticate_admin_user(payload: EmailPasswordRequest) -> UserAuthResponse:
        result = await auth_service.authenticate_user(
            email=payload.email,
            password=payload.password,
        )
        if not result.success or result.user is None:
            raise HTTPException(status_code=401, detail=result.error)
        return UserAuthResponse(user=UserPayload.from_record(result.user))

    @router.get("/admin/auth", response_model=UserAuthResponse)
    async def current_admin_user(
        authorization: Annotated[str | None, Header()] = None,
    ) -> UserAuthResponse:
        try:
            user = await auth_guard.require_user(authorization_header=authorization)
        except (MissingAuthTokenError, InvalidAuthTokenError) as error:
            raise HTTPException(
                status_code=401,
                detail=str(error),
                headers={"WWW-Authenticate": "Bearer"},
            ) from error
        return UserAuthResponse(user=UserPayload.from_record(user))

    @router.post("/store/auth", response_model=CustomerAuthResponse)
    async def authenticate_store_customer(payload: EmailPasswordRequest) -> CustomerAuthResponse:
        result = await auth_service.authenticate_customer(
            email=payload.email,
            password=payload.password,
        )
        if not result.success or result.customer is None:
            raise HTTPException(status_code=401, detail=result.error)
        return CustomerAuthResponse(customer=CustomerPayload.from_record(result.customer))

    return router
