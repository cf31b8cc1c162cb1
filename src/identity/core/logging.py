"""structlog setup and request/identity log context.

Every event carries the request_id bound by the logging middleware and, once
a bearer token has been validated, the caller's user_id and role. Values
under secret-looking keys are masked before rendering.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

REDACTED = "[redacted]"

# Event keys whose values must never reach a log sink
SECRET_KEYS = frozenset(
    {"password", "new_password", "code", "token", "secret", "invitation_token", "authorization"}
)

_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "resend")


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(debug: bool = False) -> None:
    """Route structlog through stdlib logging to stdout.

    Console rendering in debug, one JSON object per line otherwise.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    renderer: structlog.typing.Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_secrets,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    if request_id:
        bind_contextvars(request_id=request_id)


def loggable_email(email: str) -> str:
    """The address itself when LOG_USER_EMAILS is enabled, REDACTED otherwise."""
    from src.identity.core.config import get_settings

    return email if get_settings().log_user_emails else REDACTED


def bind_user_context(user_id: UUID, role: str, email: str | None = None) -> None:
    """Attach the authenticated identity to the rest of the request's events.

    The email is only attached when LOG_USER_EMAILS is enabled.
    """
    bind_contextvars(user_id=str(user_id), role=role)
    if email and loggable_email(email) != REDACTED:
        bind_contextvars(user_email=email)


def clear_request_context() -> None:
    clear_contextvars()
