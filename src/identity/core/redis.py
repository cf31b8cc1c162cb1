"""Optional Redis connection.

Redis only holds the revocation cache and rate-limit buckets. When REDIS_URL
is unset or the server cannot be reached, get_redis() returns None and every
caller falls back to the database or process memory.
"""

from redis.asyncio import Redis

from src.identity.core.config import get_settings
from src.identity.core.logging import get_logger

logger = get_logger(__name__)

_client: Redis | None = None
# Set after the first connection attempt, successful or not
_attempted = False


async def _discard(client: Redis) -> None:
    await client.aclose(close_connection_pool=True)


async def get_redis() -> Redis | None:
    """Shared client, connected on first use. None when Redis is unavailable.

    A failed connection is not retried until close_redis() resets the state.
    """
    global _client, _attempted

    if _client is not None or _attempted:
        return _client
    _attempted = True

    settings = get_settings()
    if not settings.redis_url:
        logger.info("Redis not configured, using database-only revocation checks")
        return None

    client = Redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_pool_size,
        decode_responses=True,
    )
    try:
        await client.ping()  # type: ignore[misc]
    except Exception as e:
        logger.warning("Redis unreachable, continuing without it", error=str(e))
        await _discard(client)
        return None

    logger.info("Redis connected")
    _client = client
    return _client


async def close_redis() -> None:
    """Close the shared client. Called on shutdown and between tests."""
    global _client
    if _client is not None:
        await _discard(_client)
        logger.info("Redis connection closed")
    reset_redis_state()


def reset_redis_state() -> None:
    """Forget the client without closing it, so the next call reconnects."""
    global _client, _attempted
    _client = None
    _attempted = False
