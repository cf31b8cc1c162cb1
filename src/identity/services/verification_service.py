"""One-time verification code engine."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.config import get_settings
from src.identity.core.exceptions import InvalidOrExpiredCodeError
from src.identity.core.logging import get_logger
from src.identity.core.security import generate_numeric_code, hash_code
from src.identity.models import AuthUser, VerificationToken, VerificationTokenType
from src.identity.models.base import utc_now
from src.identity.repositories import VerificationTokenRepository

logger = get_logger(__name__)


def default_ttl(token_type: VerificationTokenType) -> timedelta:
    settings = get_settings()
    match token_type:
        case VerificationTokenType.VERIFY_EMAIL:
            return timedelta(minutes=settings.email_verification_code_ttl_minutes)
        case VerificationTokenType.VERIFY_PHONE:
            return timedelta(minutes=settings.phone_verification_code_ttl_minutes)
        case VerificationTokenType.PASSWORD_RESET:
            return timedelta(minutes=settings.password_reset_code_ttl_minutes)
        case VerificationTokenType.INVITE_ADMIN:
            return timedelta(days=settings.invite_expire_days)


class VerificationService:
    """Issues and consumes short numeric codes bound to (identity, purpose).

    Only a keyed hash of each code is stored. Flushes but never commits;
    the calling service owns the transaction.
    """

    def __init__(self, token_repo: VerificationTokenRepository, session: AsyncSession):
        self.token_repo = token_repo
        self.session = session

    async def issue(
        self,
        user: AuthUser,
        token_type: VerificationTokenType,
        ttl: timedelta | None = None,
    ) -> str:
        """Create a code and return it for out-of-band delivery."""
        settings = get_settings()
        if settings.supersede_previous_codes:
            await self.token_repo.supersede_unused(user.id, token_type.value)

        code = generate_numeric_code(settings.verification_code_length)
        self.token_repo.add(
            VerificationToken(
                auth_user_id=user.id,
                token_hash=hash_code(code),
                type=token_type.value,
                expires_at=utc_now() + (ttl if ttl is not None else default_ttl(token_type)),
            )
        )
        await self.session.flush()
        logger.info("Verification code issued", user_id=str(user.id), type=token_type.value)
        return code

    async def consume(
        self, user: AuthUser, code: str, token_type: VerificationTokenType
    ) -> VerificationToken:
        """Mark the oldest matching live code as used.

        A wrong code counts against the identity's outstanding codes of this
        type, and after verification_max_attempts misses they stop working.
        The count is written to the session; the caller commits it even
        though the request fails.

        Raises:
            InvalidOrExpiredCodeError: No unused, unexpired code matches, or a
                concurrent request used it first.
        """
        token = await self.token_repo.find_first_valid(user.id, token_type.value, hash_code(code))
        if token is None:
            burned = await self.token_repo.record_failed_attempt(
                user.id, token_type.value, get_settings().verification_max_attempts
            )
            if burned:
                logger.warning(
                    "Verification codes locked after repeated misses",
                    user_id=str(user.id),
                    type=token_type.value,
                )
            logger.info("Verification code rejected", user_id=str(user.id), type=token_type.value)
            raise InvalidOrExpiredCodeError()

        if not await self.token_repo.mark_used_if_unused(token.id):
            logger.info("Verification code already used", user_id=str(user.id))
            raise InvalidOrExpiredCodeError()
        return token
