"""Revoked-session cache backed by Redis.

The database is the source of truth for session state. This cache only lets
validation reject a revoked token without a query; when Redis is missing,
callers fall back to the database.
"""

from src.identity.core.redis import get_redis

PREFIX_REVOKED_SESSION = "revoked_session"


def _key(token_hash: str) -> str:
    return f"{PREFIX_REVOKED_SESSION}:{token_hash}"


async def mark_session_revoked(token_hash: str, ttl: int) -> bool:
    """Record a revoked session token hash.

    Args:
        token_hash: SHA256 hash of the session token
        ttl: Seconds until the token would have expired anyway

    Returns:
        True if written to Redis, False if Redis is unavailable or ttl <= 0
    """
    if ttl <= 0:
        return False
    redis = await get_redis()
    if not redis:
        return False
    await redis.setex(_key(token_hash), ttl, "1")
    return True


async def mark_sessions_revoked(tokens_with_ttls: list[tuple[str, int]]) -> int:
    """Bulk variant of mark_session_revoked, used by revoke-all.

    Returns:
        Number of hashes written (0 if Redis is unavailable)
    """
    live = [(token_hash, ttl) for token_hash, ttl in tokens_with_ttls if ttl > 0]
    if not live:
        return 0
    redis = await get_redis()
    if not redis:
        return 0

    pipe = redis.pipeline()
    for token_hash, ttl in live:
        pipe.setex(_key(token_hash), ttl, "1")
    await pipe.execute()
    return len(live)


async def is_session_revoked(token_hash: str) -> bool | None:
    """Check the revocation cache.

    Returns:
        True: revoked
        False: Redis has no record (the database must still be checked)
        None: Redis unavailable
    """
    redis = await get_redis()
    if not redis:
        return None
    result = await redis.get(_key(token_hash))
    return result is not None
