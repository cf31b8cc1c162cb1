"""Integration test fixtures for database and HTTP client operations.

Each test gets its own SQLite database file with the full schema, so tests
never share state. The app's session dependency is pointed at it, and the
Google client is replaced with a mock.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from src.identity import models  # noqa: F401 - registers tables on SQLModel.metadata
from src.identity.api.dependencies import get_db_session, get_google_client
from src.identity.core import redis as redis_core
from src.identity.core.db import get_session
from src.identity.core.health import reset_health_cache
from src.identity.core.oauth import GoogleOAuthClient
from src.identity.main import create_app
from src.identity.models import AuthUser
from tests.factories import DEFAULT_TEST_PASSWORD
from tests.helpers import bearer, create_owner, login


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Redis clients hold a reference to their event loop; drop them per test."""
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture(autouse=True)
def _clear_health_cache() -> None:
    reset_health_cache()
    yield
    reset_health_cache()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Fresh database file with every table created."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}", poolclass=NullPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session for arranging and inspecting data.

    Tests must commit what they write so that request sessions see it, and
    refresh objects after a request has changed them.
    """
    async with get_session(engine) as session:
        yield session


@pytest.fixture
def google_client() -> MagicMock:
    client = MagicMock(spec=GoogleOAuthClient)
    client.build_authorization_url.side_effect = (
        lambda state: f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"
    )
    client.exchange_code = AsyncMock()
    return client


@pytest.fixture
def app(engine: AsyncEngine, google_client: MagicMock) -> FastAPI:
    application = create_app()

    async def _get_test_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    application.dependency_overrides[get_db_session] = _get_test_session
    application.dependency_overrides[get_google_client] = lambda: google_client
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def owner(db_session: AsyncSession) -> AuthUser:
    return await create_owner(db_session)


@pytest.fixture
async def owner_headers(client: AsyncClient, owner: AuthUser) -> dict[str, str]:
    token = await login(client, owner.email, DEFAULT_TEST_PASSWORD)
    return bearer(token)
