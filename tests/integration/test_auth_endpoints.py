from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.config import Config
from fastapi.testclient import TestClient

from alembic import command
from apps.api.main import build_auth_service, create_app
from commerce_auth.application.services.auth_service import AuthService
from commerce_auth.infrastructure.db.customer_repository import SqlAlchemyCustomerRepository
from commerce_auth.infrastructure.db.session import create_session_factory
from commerce_auth.infrastructure.db.user_repository import SqlAlchemyUserRepository
from commerce_auth.infrastructure.security.password_hasher import ScryptPasswordHasher

_HASHER = ScryptPasswordHasher(log_n=4, r=8, p=1)


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _seed(sync_url: str) -> None:
    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        connection.execute(
            sa.text(
                "INSERT INTO users (id, email, password_hash, api_token, role) "
                "VALUES (:id, :email, :password_hash, :api_token, 'admin')"
            ),
            {
                "id": "usr_admin",
                "email": "admin@example.org",
                "password_hash": _HASHER.hash_password("correct-password"),
                "api_token": "tok_admin",
            },
        )
        connection.execute(
            sa.text(
                "INSERT INTO customers (id, email, password_hash, has_account) "
                "VALUES (:id, :email, :password_hash, :has_account)"
            ),
            [
                {
                    "id": "cus_member",
                    "email": "member@example.org",
                    "password_hash": _HASHER.hash_password("customer-password"),
                    "has_account": True,
                },
                {
                    "id": "cus_guest",
                    "email": "guest@example.org",
                    "password_hash": None,
                    "has_account": False,
                },
            ],
        )


def _build_client(async_url: str, *, development: bool = False) -> TestClient:
    session_factory = create_session_factory(async_url)
    auth_service = AuthService(
        users=SqlAlchemyUserRepository(session_factory),
        customers=SqlAlchemyCustomerRepository(session_factory),
        password_hasher=ScryptPasswordHasher(),
        development_mode=lambda: development,
    )
    return TestClient(create_app(auth_service=auth_service))


@pytest.mark.asyncio
async def test_admin_login_returns_user_without_secret_fields(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "admin_login.db")
    _seed(sync_url)

    with _build_client(async_url) as client:
        response = client.post(
            "/admin/auth",
            json={"email": "admin@example.org", "password": "correct-password"},
        )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == "usr_admin"
    assert user["email"] == "admin@example.org"
    assert user["role"] == "admin"
    assert "password_hash" not in user
    assert "api_token" not in user


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "admin@example.org", "password": "wrong-password"},
        {"email": "missing@example.org", "password": "correct-password"},
    ],
)
async def test_admin_login_failures_share_generic_detail(
    tmp_path: Path,
    payload: dict[str, str],
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "admin_login_invalid.db")
    _seed(sync_url)

    with _build_client(async_url) as client:
        response = client.post("/admin/auth", json=payload)

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}


@pytest.mark.asyncio
async def test_store_login_returns_customer(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "store_login.db")
    _seed(sync_url)

    with _build_client(async_url) as client:
        response = client.post(
            "/store/auth",
            json={"email": "member@example.org", "password": "customer-password"},
        )

    assert response.status_code == 200
    customer = response.json()["customer"]
    assert customer["id"] == "cus_member"
    assert customer["has_account"] is True
    assert "password_hash" not in customer


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "guest@example.org", "password": ""},
        {"email": "member@example.org", "password": "wrong"},
        {"email": "admin@example.org", "password": "correct-password"},
    ],
)
async def test_store_login_failures_share_generic_detail(
    tmp_path: Path,
    payload: dict[str, str],
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "store_login_invalid.db")
    _seed(sync_url)

    with _build_client(async_url) as client:
        response = client.post("/store/auth", json=payload)

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_rejects_unknown_fields(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "login_strict.db")

    with _build_client(async_url) as client:
        response = client.post(
            "/admin/auth",
            json={"email": "admin@example.org", "password": "x", "remember": True},
        )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_api_token_resolves_current_user(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "api_token.db")
    _seed(sync_url)

    with _build_client(async_url) as client:
        response = client.get("/admin/auth", headers={"authorization": "Bearer tok_admin"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == "usr_admin"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("headers", "detail"),
    [
        ({}, "missing bearer token"),
        ({"authorization": "Basic tok_admin"}, "invalid bearer token header"),
        ({"authorization": "Bearer tok_unknown"}, "Invalid API Token"),
        ({"authorization": "Bearer usr_admin"}, "Invalid API Token"),
    ],
)
async def test_api_token_failures_return_unauthorized(
    tmp_path: Path,
    headers: dict[str, str],
    detail: str,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "api_token_invalid.db")
    _seed(sync_url)

    with _build_client(async_url) as client:
        response = client.get("/admin/auth", headers=headers)

    assert response.status_code == 401
    assert response.json() == {"detail": detail}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_development_mode_accepts_user_id_as_token(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "api_token_dev.db")
    _seed(sync_url)

    with _build_client(async_url, development=True) as client:
        response = client.get("/admin/auth", headers={"authorization": "Bearer usr_admin"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == "usr_admin"


@pytest.mark.asyncio
async def test_create_app_with_database_url_keeps_development_bypass_off(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "api_token_wired.db")
    _seed(sync_url)

    with TestClient(create_app(database_url=async_url)) as client:
        response = client.get("/admin/auth", headers={"authorization": "Bearer usr_admin"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid API Token"}


def test_build_auth_service_wires_sqlalchemy_sources(tmp_path: Path) -> None:
    service = build_auth_service(f"sqlite+aiosqlite:///{tmp_path / 'wiring.db'}")

    assert isinstance(service, AuthService)


@pytest.mark.asyncio
async def test_route_paths_only_expose_auth_endpoints(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "auth_routes.db")

    with _build_client(async_url) as client:
        paths = client.get("/openapi.json").json()["paths"]

    routes = {(path, method.upper()) for path, operations in paths.items() for method in operations}
    assert routes == {
        ("/admin/auth", "POST"),
        ("/admin/auth", "GET"),
        ("/store/auth", "POST"),
    }
