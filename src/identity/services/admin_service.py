"""Admin registration, admin profiles and permission assignment."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.config import get_settings
from src.identity.core.exceptions import (
    AppError,
    BadRequestError,
    EmailAlreadyExistsError,
    NotFoundError,
)
from src.identity.core.logging import get_logger
from src.identity.core.oauth import GoogleIdentity
from src.identity.core.security import Principal, authorize, hash_password
from src.identity.models import (
    AdminProfile,
    AdminStatus,
    AuthProvider,
    AuthUser,
    Permission,
    Role,
    SignUpVia,
)
from src.identity.models.base import utc_now
from src.identity.repositories import (
    AdminProfileRepository,
    AuthUserRepository,
    PermissionRepository,
)
from src.identity.schemas import AdminProfileUpdate
from src.identity.services.invitation_service import InvitationService
from src.identity.services.token_service import DeviceInfo, IssuedToken, TokenService

logger = get_logger(__name__)


class AdminService:
    def __init__(
        self,
        user_repo: AuthUserRepository,
        admin_repo: AdminProfileRepository,
        permission_repo: PermissionRepository,
        invitation_service: InvitationService,
        token_service: TokenService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.admin_repo = admin_repo
        self.permission_repo = permission_repo
        self.invitation_service = invitation_service
        self.token_service = token_service
        self.session = session

    async def register(
        self,
        email: str,
        invitation_token: str,
        password: str,
        device: DeviceInfo | None = None,
    ) -> tuple[AuthUser, IssuedToken]:
        """Claim an invitation with a password and create the ADMIN."""
        return await self._register(
            email,
            invitation_token,
            password_hash=hash_password(password),
            provider=AuthProvider.LOCAL,
            provider_id=None,
            sign_up_via=SignUpVia.WEB,
            device=device,
        )

    async def register_with_google(
        self,
        identity: GoogleIdentity,
        invitation_token: str,
        device: DeviceInfo | None = None,
    ) -> tuple[AuthUser, IssuedToken]:
        """Claim an invitation with the email Google verified."""
        return await self._register(
            identity.email,
            invitation_token,
            password_hash=None,
            provider=AuthProvider.GOOGLE,
            provider_id=identity.external_id,
            sign_up_via=SignUpVia.GOOGLE,
            device=device,
            first_name=identity.given_name,
            last_name=identity.family_name,
            image=identity.picture,
        )

    async def _register(
        self,
        email: str,
        invitation_token: str,
        *,
        password_hash: str | None,
        provider: AuthProvider,
        provider_id: str | None,
        sign_up_via: SignUpVia,
        device: DeviceInfo | None,
        first_name: str | None = None,
        last_name: str | None = None,
        image: str | None = None,
    ) -> tuple[AuthUser, IssuedToken]:
        """Identity creation and invitation acceptance commit together or not at all."""
        try:
            invitation = await self.invitation_service.claim(email, invitation_token)
            if await self.user_repo.exists_by_email(invitation.email):
                raise EmailAlreadyExistsError()

            user = AuthUser(
                email=invitation.email,
                password_hash=password_hash,
                role=Role.ADMIN.value,
                provider=provider.value,
                provider_id=provider_id,
                email_verified=True,
                account_verified=False,
                max_login_devices=get_settings().max_login_devices,
                last_login=utc_now(),
            )
            self.user_repo.add(user)
            await self.session.flush()

            self.admin_repo.add(
                AdminProfile(
                    auth_user_id=user.id,
                    first_name=first_name,
                    last_name=last_name,
                    image=image,
                    sign_up_via=sign_up_via.value,
                    status=AdminStatus.PENDING.value,
                )
            )
            await self.invitation_service.accept(invitation, user.id)
            issued = await self.token_service.issue(user, device)
            await self.session.commit()
        except AppError:
            await self.session.rollback()
            raise
        except IntegrityError as e:
            await self.session.rollback()
            raise EmailAlreadyExistsError() from e
        except Exception as e:
            await self.session.rollback()
            logger.error("Admin registration failed", error=str(e))
            raise

        logger.info(
            "Admin registered",
            user_id=str(user.id),
            invitation_id=str(invitation.id),
            sign_up_via=sign_up_via.value,
        )
        return user, issued

    async def update_profile(self, principal: Principal, data: AdminProfileUpdate) -> AdminProfile:
        authorize(principal, [Role.ADMIN])
        try:
            user = await self.user_repo.get_by_id(principal.user_id)
            profile = await self.admin_repo.get_by_user_id(principal.user_id)
            if user is None or profile is None:
                raise NotFoundError("Admin profile not found")

            for field, value in data.model_dump(exclude_unset=True, mode="json").items():
                setattr(profile, field, value)

            now = utc_now()
            profile.updated_at = now
            if profile.first_name and profile.last_name:
                profile.is_profile_completed = True
                if not user.account_verified:
                    user.account_verified = True
                    user.updated_at = now
                    self.session.add(user)

            self.session.add(profile)
            await self.session.commit()
        except NotFoundError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to update admin profile", error=str(e))
            raise

        logger.info("Admin profile updated", user_id=str(user.id))
        return profile

    async def get_permission_names(self, profile: AdminProfile) -> list[str]:
        return await self.permission_repo.list_names_for_admin(profile.id)

    async def assign_permissions(
        self, actor: Principal, admin_id: UUID, names: list[str]
    ) -> list[str]:
        """Replace the admin's permission set. Returns the new set of names.

        Raises:
            ForbiddenError: actor is not an OWNER.
            NotFoundError: admin_id is not an ADMIN with a profile.
            BadRequestError: A requested permission does not exist.
        """
        authorize(actor, [Role.OWNER])
        requested = sorted(set(names))
        try:
            target = await self.user_repo.get_by_id(admin_id)
            if target is None or target.role_enum is not Role.ADMIN:
                raise NotFoundError("Admin not found")
            profile = await self.admin_repo.get_by_user_id(admin_id)
            if profile is None:
                raise NotFoundError("Admin profile not found")

            permissions = await self.permission_repo.get_by_names(requested)
            if len(permissions) != len(requested):
                raise BadRequestError("Some permissions do not exist")

            await self.permission_repo.replace_for_admin(profile.id, [p.id for p in permissions])
            await self.session.commit()
        except (NotFoundError, BadRequestError):
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to assign permissions", error=str(e))
            raise

        logger.info(
            "Permissions assigned",
            admin_id=str(admin_id),
            assigned_by=str(actor.user_id),
            count=len(permissions),
        )
        return requested

    async def list_permissions(self, actor: Principal) -> list[Permission]:
        authorize(actor, [Role.OWNER])
        return await self.permission_repo.list_all()
