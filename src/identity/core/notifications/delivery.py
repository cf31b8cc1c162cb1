"""Out-of-band delivery of codes and links.

deliver() is fire-and-forget: it hands the message to a worker thread and
returns immediately. Transport failures are logged and never reach the
request that triggered them.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum

from src.identity.core.logging import get_logger, loggable_email
from src.identity.core.notifications.email import (
    EmailMessage,
    build_invitation_email,
    build_password_reset_email,
    build_verification_email,
    send_email,
)

logger = get_logger(__name__)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="delivery")


class DeliveryPurpose(str, Enum):
    """What a delivered payload is for."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    ADMIN_INVITATION = "admin_invitation"


_BUILDERS: dict[DeliveryPurpose, Callable[[str, str], EmailMessage]] = {
    DeliveryPurpose.EMAIL_VERIFICATION: build_verification_email,
    DeliveryPurpose.PASSWORD_RESET: build_password_reset_email,
    DeliveryPurpose.ADMIN_INVITATION: build_invitation_email,
}


def _log_outcome(purpose: DeliveryPurpose, destination: str) -> Callable[[Future[None]], None]:
    def _callback(future: Future[None]) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Delivery failed",
                purpose=purpose.value,
                to=loggable_email(destination),
                error=str(exc),
            )
        else:
            logger.info("Delivery sent", purpose=purpose.value, to=loggable_email(destination))

    return _callback


def deliver(destination: str, payload: str, purpose: DeliveryPurpose) -> None:
    """Queue a code or link for delivery to destination. Never raises."""
    try:
        message = _BUILDERS[purpose](destination, payload)
        future = _executor.submit(send_email, message)
    except Exception as e:
        logger.error("Delivery could not be queued", purpose=purpose.value, error=str(e))
        return
    future.add_done_callback(_log_outcome(purpose, destination))


def shutdown_delivery(wait: bool = True) -> None:
    """Drain queued deliveries. Called during application shutdown."""
    _executor.shutdown(wait=wait)
