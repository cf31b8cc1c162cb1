"""Admin invitation state machine.

PENDING -> ACCEPTED | REVOKED. EXPIRED is derived from expires_at on every
read. ACCEPTED and REVOKED are terminal.
"""

import hmac
import secrets
from datetime import timedelta
from urllib.parse import urlencode
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.config import get_settings
from src.identity.core.exceptions import (
    BadRequestError,
    EmailAlreadyExistsError,
    InvalidInvitationSecretError,
    InvitationAlreadyUsedError,
    InvitationEmailMismatchError,
    InvitationExpiredError,
    InvitationNotFoundError,
    NotFoundError,
)
from src.identity.core.logging import get_logger
from src.identity.core.notifications import DeliveryPurpose, deliver
from src.identity.core.security import Principal, authorize, hash_token
from src.identity.models import Invitation, InvitationStatus, Role
from src.identity.models.base import utc_now
from src.identity.repositories import AuthUserRepository, InvitationRepository, normalize_email

logger = get_logger(__name__)


def build_invitation_link(secret: str) -> str:
    return f"{get_settings().app_url}/admin/register?{urlencode({'token': secret})}"


class InvitationService:
    def __init__(
        self,
        invitation_repo: InvitationRepository,
        user_repo: AuthUserRepository,
        session: AsyncSession,
    ):
        self.invitation_repo = invitation_repo
        self.user_repo = user_repo
        self.session = session

    async def create(
        self, email: str, inviter: Principal, role: Role = Role.ADMIN
    ) -> tuple[Invitation, str]:
        """Create an invitation and send its link.

        Earlier PENDING invitations for the same email are revoked, so at most
        one is ever live per email.

        Returns (invitation, link).
        """
        authorize(inviter, [Role.OWNER])
        if role is not Role.ADMIN:
            raise BadRequestError("Only ADMIN invitations are supported")

        settings = get_settings()
        email = normalize_email(email)

        try:
            if await self.user_repo.exists_by_email(email):
                raise EmailAlreadyExistsError("An account with this email already exists")

            await self.invitation_repo.revoke_pending_for_email(email)

            secret = secrets.token_urlsafe(32)
            invitation = Invitation(
                email=email,
                token_hash=hash_token(secret),
                role=role.value,
                expires_at=utc_now() + timedelta(days=settings.invite_expire_days),
                invited_by=inviter.user_id,
            )
            self.invitation_repo.add(invitation)
            await self.session.commit()
        except EmailAlreadyExistsError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create invitation", error=str(e))
            raise

        link = build_invitation_link(secret)
        deliver(email, link, DeliveryPurpose.ADMIN_INVITATION)
        logger.info(
            "Invitation created",
            invitation_id=str(invitation.id),
            invited_by=str(inviter.user_id),
        )
        return invitation, link

    async def claim(self, email: str, secret: str) -> Invitation:
        """Validate that secret grants email an ADMIN registration. No writes.

        Check order:
        1. secret belongs to another email -> InvitationEmailMismatchError
        2. no invitation for email -> InvitationNotFoundError
        3. ACCEPTED -> InvitationAlreadyUsedError; REVOKED or expired ->
           InvitationExpiredError
        4. secret does not match -> InvalidInvitationSecretError
        """
        email = normalize_email(email)
        secret_hash = hash_token(secret)

        by_secret = await self.invitation_repo.get_by_hash(secret_hash)
        if by_secret is not None and not hmac.compare_digest(by_secret.email, email):
            raise InvitationEmailMismatchError()

        invitation = await self.invitation_repo.get_latest_by_email(email)
        if invitation is None:
            raise InvitationNotFoundError()

        match invitation.effective_status():
            case InvitationStatus.ACCEPTED:
                raise InvitationAlreadyUsedError()
            case InvitationStatus.REVOKED | InvitationStatus.EXPIRED:
                raise InvitationExpiredError()
            case InvitationStatus.PENDING:
                pass

        if not hmac.compare_digest(invitation.token_hash, secret_hash):
            raise InvalidInvitationSecretError()
        return invitation

    async def accept(self, invitation: Invitation, user_id: UUID) -> None:
        """PENDING -> ACCEPTED inside the caller's transaction.

        Raises:
            InvitationExpiredError: The deadline passed after the claim.
            InvitationAlreadyUsedError: A concurrent request accepted first.
        """
        if not await self.invitation_repo.mark_accepted(invitation.id, user_id):
            if invitation.expires_at <= utc_now():
                raise InvitationExpiredError()
            raise InvitationAlreadyUsedError()

    async def revoke(self, invitation_id: UUID, actor: Principal) -> Invitation:
        authorize(actor, [Role.OWNER])
        try:
            invitation = await self.invitation_repo.get_by_id(invitation_id)
            if invitation is None:
                raise NotFoundError("Invitation not found")
            if invitation.effective_status() is not InvitationStatus.PENDING:
                raise BadRequestError("Only pending invitations can be revoked")
            if not await self.invitation_repo.mark_revoked(invitation_id):
                raise BadRequestError("Only pending invitations can be revoked")
            await self.session.commit()
            await self.session.refresh(invitation)
        except (NotFoundError, BadRequestError):
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to revoke invitation", error=str(e))
            raise

        logger.info("Invitation revoked", invitation_id=str(invitation_id))
        return invitation

    async def list_invitations(
        self, actor: Principal, status: InvitationStatus | None = None
    ) -> list[Invitation]:
        authorize(actor, [Role.OWNER])
        return await self.invitation_repo.list_by_status(status)
