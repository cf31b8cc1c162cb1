from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.identity.api.middlewares import setup_middlewares
from src.identity.api.v1.router import api_router
from src.identity.core.config import get_settings
from src.identity.core.db import dispose_engine
from src.identity.core.exceptions import setup_exception_handlers
from src.identity.core.health import setup_health_endpoint, setup_metrics
from src.identity.core.logging import get_logger, setup_logging
from src.identity.core.notifications import shutdown_delivery
from src.identity.core.rate_limit import limiter
from src.identity.core.redis import close_redis

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("Starting application", app_name=settings.app_name, env=settings.app_env)

    yield

    logger.info("Closing connections...")
    shutdown_delivery(wait=True)
    await close_redis()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Sign-up, login, sessions and verification codes"},
    {"name": "admin", "description": "Admin invitations, registration and permissions"},
    {"name": "oauth", "description": "Google sign-in"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Identity service for owners, admins and students",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)
    app.state.limiter = limiter
    setup_middlewares(app, settings)

    app.include_router(api_router)
    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
