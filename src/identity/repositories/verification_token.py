"""Repository for VerificationToken entity."""

from uuid import UUID

from sqlmodel import select

from src.identity.models import VerificationToken
from src.identity.models.base import utc_now
from src.identity.repositories.base import BaseRepository


class VerificationTokenRepository(BaseRepository[VerificationToken]):
    model = VerificationToken

    async def find_first_valid(
        self, user_id: UUID, token_type: str, token_hash: str
    ) -> VerificationToken | None:
        """Oldest unused, unexpired code of this type matching the hash."""
        result = await self.session.execute(
            select(VerificationToken)
            .where(
                VerificationToken.auth_user_id == user_id,
                VerificationToken.type == token_type,
                VerificationToken.token_hash == token_hash,
                VerificationToken.is_used == False,  # noqa: E712
                VerificationToken.expires_at > utc_now(),
            )
            .order_by(VerificationToken.created_at.asc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mark_used_if_unused(self, token_id: UUID) -> bool:
        """Atomically flip is_used. False if another request used it first."""
        updated = await self.update_where(
            VerificationToken.id == token_id,
            VerificationToken.is_used == False,  # noqa: E712
            is_used=True,
            used_at=utc_now(),
        )
        return updated == 1

    async def supersede_unused(self, user_id: UUID, token_type: str) -> int:
        """Mark all outstanding codes of this type as used."""
        return await self.update_where(
            VerificationToken.auth_user_id == user_id,
            VerificationToken.type == token_type,
            VerificationToken.is_used == False,  # noqa: E712
            is_used=True,
            used_at=utc_now(),
        )

    async def record_failed_attempt(
        self, user_id: UUID, token_type: str, max_attempts: int
    ) -> int:
        """Count a wrong guess against every live code of this type.

        Codes that reach max_attempts are marked used. Returns how many were.
        """
        live = (
            VerificationToken.auth_user_id == user_id,
            VerificationToken.type == token_type,
            VerificationToken.is_used == False,  # noqa: E712
            VerificationToken.expires_at > utc_now(),
        )
        await self.update_where(*live, failed_attempts=VerificationToken.failed_attempts + 1)
        return await self.update_where(
            *live,
            VerificationToken.failed_attempts >= max_attempts,
            is_used=True,
            used_at=utc_now(),
        )
