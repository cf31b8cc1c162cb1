"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Set APP_ENV to testing before any app imports to disable rate limiting
os.environ.setdefault("APP_ENV", "testing")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
# Cheap argon2 parameters keep password hashing fast in tests
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.pop("REDIS_URL", None)
os.environ.pop("RESEND_API_KEY", None)

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from src.identity.core import rate_limit
from src.identity.core import redis as redis_core
from src.identity.core.config import get_settings
from src.identity.core.notifications import DeliveryPurpose
from tests.helpers import Delivery

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


# --- Delivery capture ---


@pytest.fixture(autouse=True)
def outbox(monkeypatch: pytest.MonkeyPatch) -> list[Delivery]:
    """Capture codes and links instead of emailing them.

    Services import deliver by name, so it is patched where it is used.
    """
    sent: list[Delivery] = []

    def _capture(destination: str, payload: str, purpose: DeliveryPurpose) -> None:
        sent.append(Delivery(destination, payload, purpose))

    monkeypatch.setattr("src.identity.services.auth_service.deliver", _capture)
    monkeypatch.setattr("src.identity.services.invitation_service.deliver", _capture)
    return sent


# --- Rate Limit Fixtures ---


@pytest.fixture
def reset_rate_limit_buckets() -> None:
    """Reset rate limit in-memory state."""
    rate_limit._rate_limit_buckets.clear()
    rate_limit._script_sha = None
    yield
    rate_limit._rate_limit_buckets.clear()
    rate_limit._script_sha = None


# --- Redis Test Fixtures (shared) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """In-memory Redis that behaves like a real server."""
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return the fakeredis client.

    Patches both src.identity.core.redis and src.identity.core.cache, since
    cache imports get_redis by name.
    """
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    monkeypatch.setattr("src.identity.core.redis.get_redis", _get_fake_redis)
    monkeypatch.setattr("src.identity.core.cache.get_redis", _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patches get_redis() to return None (Redis unavailable)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    monkeypatch.setattr("src.identity.core.redis.get_redis", _get_none)
    monkeypatch.setattr("src.identity.core.cache.get_redis", _get_none)
    yield
    redis_core.reset_redis_state()
