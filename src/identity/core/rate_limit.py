"""Rate limiting with optional Redis backend.

Two layers:
1. Global middleware: token bucket per client IP for every request (DoS protection)
2. Route decorators: slowapi fixed windows on credential endpoints
   (login, verification codes, registration)

Both use Redis when REDIS_URL is configured and fall back to per-process
memory otherwise. Exceeding either limit fails fast with 429 before any
handler code runs.
"""

import asyncio
import time
from collections import defaultdict
from collections.abc import Awaitable, Callable

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from src.identity.core.config import get_settings
from src.identity.core.logging import get_logger
from src.identity.core.redis import get_redis

logger = get_logger(__name__)

# In-memory fallback storage for the global bucket
_rate_limit_buckets: dict[str, dict[str, float]] = defaultdict(dict)
_rate_limit_lock = asyncio.Lock()

# Atomic token bucket, evaluated server-side
_REDIS_TOKEN_BUCKET_SCRIPT = """
local key = KEYS[1]
local rate = tonumber(ARGV[1])
local burst = tonumber(ARGV[2])
local now = tonumber(ARGV[3])
local ttl = tonumber(ARGV[4])

local bucket = redis.call('HMGET', key, 'tokens', 'last_update')
local tokens = tonumber(bucket[1]) or burst
local last_update = tonumber(bucket[2]) or now

local elapsed = now - last_update
tokens = math.min(burst, tokens + elapsed * rate)

local allowed = 0
if tokens >= 1 then
    tokens = tokens - 1
    allowed = 1
end
redis.call('HMSET', key, 'tokens', tokens, 'last_update', now)
redis.call('EXPIRE', key, ttl)
return allowed
"""

_script_sha: str | None = None

_EXEMPT_PATHS = frozenset({"/health", "/metrics", "/docs", "/openapi.json", "/redoc"})


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key: client IP only.

    Never include user-controlled headers or body fields here; rotating them
    would create unlimited fresh buckets.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create the route limiter. Disabled in the testing environment."""
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(key_func=get_rate_limit_key, storage_uri=settings.redis_url)

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


limiter = create_limiter()


def login_limit() -> str:
    return get_settings().login_rate_limit


def otp_limit() -> str:
    return get_settings().otp_rate_limit


def registration_limit() -> str:
    return get_settings().registration_rate_limit


async def _check_in_memory_rate_limit(client_ip: str) -> bool:
    """Token bucket in process memory. Returns True if the request is allowed."""
    settings = get_settings()
    rate = settings.global_rate_limit_per_second
    burst = settings.global_rate_limit_burst
    now = time.time()

    async with _rate_limit_lock:
        if client_ip not in _rate_limit_buckets:
            _rate_limit_buckets[client_ip] = {"tokens": float(burst), "last_update": now}

        bucket = _rate_limit_buckets[client_ip]
        elapsed = now - bucket["last_update"]
        bucket["tokens"] = min(burst, bucket["tokens"] + elapsed * rate)
        bucket["last_update"] = now

        if bucket["tokens"] >= 1:
            bucket["tokens"] -= 1
            return True
        return False


async def _get_or_register_script(redis: object) -> str:
    """Load the Lua script once and reuse its SHA with EVALSHA."""
    global _script_sha
    if _script_sha is None:
        _script_sha = await redis.script_load(_REDIS_TOKEN_BUCKET_SCRIPT)  # type: ignore[attr-defined]
    return _script_sha


async def _check_redis_rate_limit(redis: object, client_ip: str) -> bool:
    """Distributed token bucket. Returns True if the request is allowed."""
    settings = get_settings()
    rate = settings.global_rate_limit_per_second
    burst = settings.global_rate_limit_burst
    ttl = int(burst / rate) + 60

    script_sha = await _get_or_register_script(redis)
    result = await redis.evalsha(  # type: ignore[attr-defined]
        script_sha,
        1,
        f"global_ratelimit:{client_ip}",
        str(rate),
        str(burst),
        str(time.time()),
        str(ttl),
    )
    return bool(result == 1)


async def _check_global_rate_limit(client_ip: str) -> bool:
    """Check the global bucket, preferring Redis and falling back to memory."""
    if get_settings().app_env == "testing":
        return True

    redis = await get_redis()
    if redis:
        try:
            return await _check_redis_rate_limit(redis, client_ip)
        except Exception as e:
            logger.warning(
                "Redis rate limit check failed, falling back to in-memory",
                error=str(e),
                client_ip=client_ip,
            )
            # Script cache is lost if Redis restarted
            global _script_sha
            _script_sha = None

    return await _check_in_memory_rate_limit(client_ip)


async def global_rate_limit_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Reject clients that exceed the global token bucket with 429."""
    if request.url.path in _EXEMPT_PATHS:
        return await call_next(request)

    client_ip = get_remote_address(request) or "unknown"

    if not await _check_global_rate_limit(client_ip):
        logger.warning("Global rate limit exceeded", client_ip=client_ip, path=request.url.path)
        return JSONResponse(
            status_code=429,
            content={
                "success": False,
                "message": "Too many requests. Please slow down.",
                "retry_after": 1,
            },
            headers={"Retry-After": "1"},
        )

    return await call_next(request)
