"""Repository for SessionToken entity."""

from datetime import datetime
from uuid import UUID

from sqlmodel import select

from src.identity.models import SessionToken
from src.identity.models.base import utc_now
from src.identity.repositories.base import BaseRepository


class SessionTokenRepository(BaseRepository[SessionToken]):
    """Session rows are appended with INSERT and retired with conditional UPDATE.

    Nothing here reads a collection, edits it and writes it back, so concurrent
    logins for one identity cannot clobber each other.
    """

    model = SessionToken

    async def get_active_by_hash(self, token_hash: str) -> SessionToken | None:
        """Get an active, unexpired session by token hash."""
        return await self.get_one_where(
            SessionToken.token_hash == token_hash,
            SessionToken.is_active == True,  # noqa: E712
            SessionToken.expires_at > utc_now(),
        )

    async def list_active_for_user(self, user_id: UUID) -> list[SessionToken]:
        """Active sessions of an identity, newest first."""
        result = await self.session.execute(
            select(SessionToken)
            .where(
                SessionToken.auth_user_id == user_id,
                SessionToken.is_active == True,  # noqa: E712
                SessionToken.expires_at > utc_now(),
            )
            .order_by(SessionToken.issued_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def deactivate(self, session_id: UUID, user_id: UUID) -> SessionToken | None:
        """Deactivate one active session owned by user_id.

        Returns the session if this call deactivated it, None otherwise.
        """
        session_token = await self.get_by_id(session_id)
        if session_token is None or session_token.auth_user_id != user_id:
            return None

        updated = await self.update_where(
            SessionToken.id == session_id,
            SessionToken.is_active == True,  # noqa: E712
            is_active=False,
            revoked_at=utc_now(),
        )
        return session_token if updated == 1 else None

    async def deactivate_many(self, session_ids: list[UUID]) -> int:
        if not session_ids:
            return 0
        return await self.update_where(
            SessionToken.id.in_(session_ids),  # type: ignore[attr-defined]
            SessionToken.is_active == True,  # noqa: E712
            is_active=False,
            revoked_at=utc_now(),
        )

    async def deactivate_all_for_user(
        self, user_id: UUID, except_session_id: UUID | None = None
    ) -> list[tuple[str, datetime]]:
        """Deactivate every active session of an identity.

        Returns (token_hash, expires_at) for each session that was active, for
        the revocation cache.
        """
        active = await self.list_active_for_user(user_id)
        targets = [s for s in active if s.id != except_session_id]
        await self.deactivate_many([s.id for s in targets])
        return [(s.token_hash, s.expires_at) for s in targets]
