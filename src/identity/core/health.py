"""Health and metrics endpoints."""

import secrets
import time
from typing import Any

from fastapi import Depends, FastAPI, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.identity.core.config import get_settings
from src.identity.core.db import get_session
from src.identity.core.exceptions import UnauthorizedError
from src.identity.core.redis import get_redis

_health_cache: dict[str, Any] | None = None
_health_cache_time: float = 0
HEALTH_CACHE_TTL = 10  # seconds


def reset_health_cache() -> None:
    global _health_cache, _health_cache_time
    _health_cache = None
    _health_cache_time = 0


async def check_health() -> dict[str, Any]:
    """Probe the database (required) and Redis (optional)."""
    report: dict[str, Any] = {
        "status": "healthy",
        "database": "unknown",
        "redis": "not_configured",
        "cached": False,
        "timestamp": time.time(),
    }

    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
        report["database"] = "healthy"
    except Exception as e:
        report["database"] = f"unhealthy: {e!s}"
        report["status"] = "unhealthy"

    redis = await get_redis()
    if redis:
        try:
            await redis.ping()
            report["redis"] = "healthy"
        except Exception as e:
            report["redis"] = f"unhealthy: {e!s}"
            # Sessions still validate against the database without Redis
            if report["status"] == "healthy":
                report["status"] = "degraded"

    return report


def setup_health_endpoint(app: FastAPI) -> None:
    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        """Health check with a short result cache."""
        global _health_cache, _health_cache_time

        now = time.time()
        if _health_cache and (now - _health_cache_time) < HEALTH_CACHE_TTL:
            report = {
                **_health_cache,
                "cached": True,
                "cache_age_seconds": round(now - _health_cache_time, 1),
            }
        else:
            report = await check_health()
            _health_cache = report
            _health_cache_time = now

        code = status.HTTP_200_OK if report["status"] == "healthy" else 503
        return JSONResponse(content=report, status_code=code)


def setup_metrics(app: FastAPI) -> None:
    """Prometheus metrics, protected by X-Metrics-Key when METRICS_API_KEY is set."""
    settings = get_settings()
    instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app)

    if not settings.metrics_api_key:
        instrumentator.expose(app, endpoint="/metrics", include_in_schema=False)
        return

    api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

    async def verify_metrics_key(api_key: str | None = Depends(api_key_header)) -> None:
        expected = settings.metrics_api_key
        if api_key is None or expected is None or not secrets.compare_digest(api_key, expected):
            raise UnauthorizedError("Invalid or missing metrics API key")

    instrumentator.expose(
        app,
        endpoint="/metrics",
        include_in_schema=False,
        dependencies=[Depends(verify_metrics_key)],
    )
