"""Repository for Invitation entity."""

from uuid import UUID

from sqlmodel import select

from src.identity.models import Invitation, InvitationStatus
from src.identity.models.base import utc_now
from src.identity.repositories.auth_user import normalize_email
from src.identity.repositories.base import BaseRepository

_PENDING = InvitationStatus.PENDING.value


class InvitationRepository(BaseRepository[Invitation]):
    model = Invitation

    async def get_by_hash(self, token_hash: str) -> Invitation | None:
        return await self.get_one_where(Invitation.token_hash == token_hash)

    async def get_latest_by_email(self, email: str) -> Invitation | None:
        result = await self.session.execute(
            select(Invitation)
            .where(Invitation.email == normalize_email(email))
            .order_by(Invitation.created_at.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_by_status(self, status: InvitationStatus | None = None) -> list[Invitation]:
        """List invitations, filtering on effective status."""
        query = select(Invitation)
        now = utc_now()
        match status:
            case None:
                pass
            case InvitationStatus.PENDING:
                query = query.where(Invitation.status == _PENDING, Invitation.expires_at > now)
            case InvitationStatus.EXPIRED:
                query = query.where(Invitation.status == _PENDING, Invitation.expires_at <= now)
            case InvitationStatus.ACCEPTED | InvitationStatus.REVOKED:
                query = query.where(Invitation.status == status.value)
        result = await self.session.execute(
            query.order_by(Invitation.created_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def revoke_pending_for_email(self, email: str) -> int:
        return await self.update_where(
            Invitation.email == normalize_email(email),
            Invitation.status == _PENDING,
            status=InvitationStatus.REVOKED.value,
            revoked_at=utc_now(),
        )

    async def mark_accepted(self, invitation_id: UUID, user_id: UUID) -> bool:
        """PENDING -> ACCEPTED. False if the row had left PENDING or expired."""
        updated = await self.update_where(
            Invitation.id == invitation_id,
            Invitation.status == _PENDING,
            Invitation.expires_at > utc_now(),
            status=InvitationStatus.ACCEPTED.value,
            accepted_by=user_id,
            accepted_at=utc_now(),
        )
        return updated == 1

    async def mark_revoked(self, invitation_id: UUID) -> bool:
        """PENDING -> REVOKED. False if the row had already left PENDING."""
        updated = await self.update_where(
            Invitation.id == invitation_id,
            Invitation.status == _PENDING,
            status=InvitationStatus.REVOKED.value,
            revoked_at=utc_now(),
        )
        return updated == 1
