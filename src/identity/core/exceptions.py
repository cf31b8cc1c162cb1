"""Application error taxonomy and exception handlers.

Services raise these at the point of detection; the handlers below turn them
into the standard `{success, message, request_id}` envelope. Anything that
is not an AppError is logged and reported as a generic 500.
"""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.identity.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors surfaced to API callers verbatim."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class RateLimitedError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests. Please slow down."


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


# --- Session credentials ---


class UnauthenticatedError(UnauthorizedError):
    default_message = "Authentication required"


class MalformedTokenError(UnauthorizedError):
    default_message = "Malformed token"


class InvalidSignatureOrExpiredError(UnauthorizedError):
    default_message = "Invalid or expired token"


class RevokedTokenError(UnauthorizedError):
    default_message = "Token has been revoked"


class InvalidCredentialsError(UnauthorizedError):
    default_message = "Invalid email or password"


# --- Verification codes ---


class InvalidOrExpiredCodeError(BadRequestError):
    default_message = "Invalid or expired verification code"


# --- Invitations ---


class InvitationNotFoundError(NotFoundError):
    default_message = "No invitation found for this email"


class InvitationExpiredError(BadRequestError):
    default_message = "Invitation has expired"


class InvitationAlreadyUsedError(BadRequestError):
    default_message = "Invitation has already been used"


class InvalidInvitationSecretError(UnauthorizedError):
    default_message = "Invalid invitation token"


class InvitationEmailMismatchError(BadRequestError):
    default_message = "Email does not match invitation"


# --- Identities ---


class EmailAlreadyExistsError(ConflictError):
    default_message = "Email already registered"


class OAuthError(BadRequestError):
    default_message = "OAuth authentication failed"


def _envelope(status_code: int, message: str, **extra: object) -> JSONResponse:
    content: dict[str, object] = {
        "success": False,
        "message": message,
        "request_id": correlation_id.get(),
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that render the error envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Application error", error=exc.message, path=request.url.path)
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return _envelope(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", errors=errors
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Route rate limit exceeded", path=request.url.path, limit=str(exc.detail))
        return _envelope(status.HTTP_429_TOO_MANY_REQUESTS, RateLimitedError.default_message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, InternalError.default_message)
