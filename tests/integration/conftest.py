"""Integration-test fixtures.

Needs a migrated PostgreSQL and a Redis at the configured URLs; collected
only when RUN_INTEGRATION=1. All tests share one session-scoped event loop
so the module-level engine and Redis pools stay valid.
"""

import os
import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.rs_common.database import async_session_factory
from src.rs_common.errors import UsernameExistsError
from src.rs_gateway.user.service import AdminUserService

if os.environ.get("RUN_INTEGRATION") != "1":
    collect_ignore_glob = ["test_*.py"]

ADMIN_USERNAME = "it_admin"
ADMIN_PASSWORD = "IntegrationPass123"

_INSERT_DRIVER_SQL = text("""
    INSERT INTO drivers (name, phone, email, license_plate, vehicle_make, vehicle_model)
    VALUES (:name, :phone, :email, :plate, 'Toyota', 'Corolla')
    RETURNING id
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Authenticated client — bootstraps an administrator and injects its Bearer token."""
    async with async_session_factory() as db:
        try:
            await AdminUserService().create_admin(
                ADMIN_USERNAME, "it_admin@example.com", ADMIN_PASSWORD, db
            )
            await db.commit()
        except UsernameExistsError:
            # Left over from an earlier run
            await db.rollback()

    login_resp = await client.post(
        "/api/v1/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    token = login_resp.json()["data"]["access_token"]
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client


@pytest_asyncio.fixture(loop_scope="session")
async def driver() -> dict:
    """A fresh driver with no wallet yet: {"id": ..., "name": ...}."""
    suffix = uuid.uuid4().hex[:8]
    name = f"Driver {suffix}"
    async with async_session_factory() as db:
        result = await db.execute(
            _INSERT_DRIVER_SQL,
            {
                "name": name,
                "phone": f"+225{suffix}",
                "email": f"driver_{suffix}@example.com",
                "plate": f"AB-{suffix}",
            },
        )
        new_id = result.scalar_one()
        await db.commit()
    return {"id": new_id, "name": name}
