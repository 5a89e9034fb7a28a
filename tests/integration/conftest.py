"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Identity comes from an external provider; tests mint tokens directly with
create_access_token instead of logging in.
"""

import uuid
from collections.abc import Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.fx_common.database import async_session_factory
from src.fx_common.enums import Role
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.jwt_handler import create_access_token
from src.main import app


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if "tests/integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(scope="session")
def headers_for() -> Callable[..., dict[str, str]]:
    """Build an Authorization header for an arbitrary caller."""

    def _headers(
        role: Role, user_id: str | None = None, agency_id: str | None = None
    ) -> dict[str, str]:
        uid = user_id or f"{role.value}-{uuid.uuid4().hex[:8]}"
        token = create_access_token(
            Caller(user_id=uid, name=uid, role=role, agency_id=agency_id)
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def executor_id() -> str:
    """Ensure at least one active executor exists for transfer routing."""
    async with async_session_factory() as session:
        result = await session.execute(
            text("""
                INSERT INTO users (username, role)
                VALUES (:username, 'executor')
                RETURNING id
            """),
            {"username": f"exec_{uuid.uuid4().hex[:8]}"},
        )
        new_id = str(result.scalar_one())
        await session.commit()
    return new_id
