"""Password sign-up, login, sessions, email verification and password reset."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.config import get_settings
from src.identity.core.exceptions import (
    BadRequestError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    InvalidOrExpiredCodeError,
    NotFoundError,
)
from src.identity.core.logging import get_logger
from src.identity.core.notifications import DeliveryPurpose, deliver
from src.identity.core.security import (
    DUMMY_PASSWORD_HASH,
    Principal,
    hash_password,
    verify_password,
)
from src.identity.models import (
    AuthProvider,
    AuthUser,
    Role,
    SessionToken,
    StudentProfile,
    VerificationTokenType,
)
from src.identity.models.base import utc_now
from src.identity.repositories import (
    AdminProfileRepository,
    AuthUserRepository,
    PermissionRepository,
    StudentProfileRepository,
    normalize_email,
)
from src.identity.schemas import AdminProfileRead, AuthDataRead, StudentProfileRead
from src.identity.services.token_service import DeviceInfo, IssuedToken, TokenService
from src.identity.services.verification_service import VerificationService

logger = get_logger(__name__)


class AuthService:
    """Flows shared by every role, plus student password sign-up."""

    def __init__(
        self,
        user_repo: AuthUserRepository,
        student_repo: StudentProfileRepository,
        admin_repo: AdminProfileRepository,
        permission_repo: PermissionRepository,
        token_service: TokenService,
        verification_service: VerificationService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.student_repo = student_repo
        self.admin_repo = admin_repo
        self.permission_repo = permission_repo
        self.token_service = token_service
        self.verification_service = verification_service
        self.session = session

    async def _get_user(self, user_id: UUID) -> AuthUser:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def signup_student(
        self, email: str, password: str, device: DeviceInfo | None = None
    ) -> tuple[AuthUser, IssuedToken]:
        """Create a STUDENT with an empty profile and sign it in."""
        settings = get_settings()
        email = normalize_email(email)
        try:
            if await self.user_repo.exists_by_email(email):
                raise EmailAlreadyExistsError()

            user = AuthUser(
                email=email,
                password_hash=hash_password(password),
                role=Role.STUDENT.value,
                provider=AuthProvider.LOCAL.value,
                email_verified=settings.password_signup_email_verified,
                max_login_devices=settings.max_login_devices,
                last_login=utc_now(),
            )
            self.user_repo.add(user)
            await self.session.flush()

            self.student_repo.add(StudentProfile(auth_user_id=user.id))
            issued = await self.token_service.issue(user, device)
            await self.session.commit()
        except EmailAlreadyExistsError:
            await self.session.rollback()
            raise
        except IntegrityError as e:
            # Lost a race with a concurrent sign-up for the same email
            await self.session.rollback()
            raise EmailAlreadyExistsError() from e
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to sign up student", error=str(e))
            raise

        logger.info("Student signed up", user_id=str(user.id))
        return user, issued

    async def login(
        self, email: str, password: str, device: DeviceInfo | None = None
    ) -> tuple[AuthUser, IssuedToken]:
        """Password login for any role.

        Raises:
            InvalidCredentialsError: Unknown email, wrong password, no password
                set (provider account) or deactivated account.
        """
        try:
            user = await self.user_repo.get_by_email(email)

            # Always run argon2 so response time does not reveal which emails exist
            password_hash = user.password_hash if user and user.password_hash else None
            password_valid = verify_password(password, password_hash or DUMMY_PASSWORD_HASH)

            if user is None or password_hash is None or not password_valid:
                raise InvalidCredentialsError()
            if not user.is_active:
                raise InvalidCredentialsError()

            issued = await self.token_service.issue(user, device)
            user.last_login = utc_now()
            self.session.add(user)
            await self.session.commit()
        except InvalidCredentialsError:
            await self.session.rollback()
            logger.info("Login rejected")
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Login failed", error=str(e))
            raise

        logger.info("User logged in", user_id=str(user.id), role=user.role)
        return user, issued

    async def logout(self, token: str) -> bool:
        """Revoke the presented session. Other sessions stay valid."""
        try:
            row = await self.token_service.revoke_by_token(token)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Logout failed", error=str(e))
            raise

        if row is None:
            return False
        await self.token_service.cache_revocations([(row.token_hash, row.expires_at)])
        return True

    async def logout_all(self, principal: Principal, keep_current: bool = False) -> int:
        except_id = principal.session_id if keep_current else None
        try:
            revoked = await self.token_service.revoke_all(principal.user_id, except_id)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Logout-all failed", error=str(e))
            raise

        await self.token_service.cache_revocations(revoked)
        logger.info("All sessions revoked", user_id=str(principal.user_id), count=len(revoked))
        return len(revoked)

    async def list_sessions(self, principal: Principal) -> list[SessionToken]:
        return await self.token_service.list_active(principal.user_id)

    async def revoke_session(self, principal: Principal, session_id: UUID) -> None:
        try:
            row = await self.token_service.revoke(principal.user_id, session_id)
            await self.session.commit()
        except NotFoundError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to revoke session", error=str(e))
            raise

        await self.token_service.cache_revocations([(row.token_hash, row.expires_at)])

    async def request_email_verification(self, principal: Principal) -> None:
        """Issue a VERIFY_EMAIL code and send it to the identity's email."""
        try:
            user = await self._get_user(principal.user_id)
            if user.email is None:
                raise BadRequestError("No email address on this account")
            if user.email_verified:
                raise BadRequestError("Email is already verified")

            code = await self.verification_service.issue(user, VerificationTokenType.VERIFY_EMAIL)
            await self.session.commit()
        except (NotFoundError, BadRequestError):
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to issue email verification code", error=str(e))
            raise

        deliver(user.email, code, DeliveryPurpose.EMAIL_VERIFICATION)

    async def verify_email(self, principal: Principal, code: str) -> AuthUser:
        try:
            user = await self._get_user(principal.user_id)
            await self.verification_service.consume(user, code, VerificationTokenType.VERIFY_EMAIL)
            user.email_verified = True
            user.updated_at = utc_now()
            self.session.add(user)
            await self.session.commit()
        except NotFoundError:
            await self.session.rollback()
            raise
        except InvalidOrExpiredCodeError:
            # Keep the failed-attempt count written by consume()
            await self.session.commit()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Email verification failed", error=str(e))
            raise

        logger.info("Email verified", user_id=str(user.id))
        return user

    async def request_password_reset(self, email: str) -> None:
        """Issue a PASSWORD_RESET code if the email has a password account.

        Returns silently otherwise so the endpoint cannot be used to discover
        which emails are registered.
        """
        try:
            user = await self.user_repo.get_by_email(email)
            if user is None or not user.is_active or user.email is None:
                logger.info("Password reset requested for unknown or inactive account")
                return

            code = await self.verification_service.issue(
                user, VerificationTokenType.PASSWORD_RESET
            )
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to issue password reset code", error=str(e))
            raise

        deliver(user.email, code, DeliveryPurpose.PASSWORD_RESET)

    async def reset_password(
        self,
        code: str,
        new_password: str,
        *,
        user_id: UUID | None = None,
        email: str | None = None,
    ) -> None:
        """Consume a reset code, set the new password and revoke every session.

        The account is looked up by user_id when given, otherwise by email.
        """
        try:
            if user_id is not None:
                user = await self.user_repo.get_by_id(user_id)
            else:
                user = await self.user_repo.get_by_email(email or "")
            if user is None:
                raise InvalidOrExpiredCodeError()

            await self.verification_service.consume(
                user, code, VerificationTokenType.PASSWORD_RESET
            )
            user.password_hash = hash_password(new_password)
            user.password_changed_at = utc_now()
            user.updated_at = utc_now()
            self.session.add(user)
            revoked = await self.token_service.revoke_all(user.id)
            await self.session.commit()
        except InvalidOrExpiredCodeError:
            # Keep the failed-attempt count written by consume()
            await self.session.commit()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Password reset failed", error=str(e))
            raise

        await self.token_service.cache_revocations(revoked)
        logger.info("Password reset", user_id=str(user.id), sessions_revoked=len(revoked))

    async def get_auth_data(self, principal: Principal) -> AuthDataRead:
        user = await self._get_user(principal.user_id)
        data = AuthDataRead.model_validate(user)

        match user.role_enum:
            case Role.STUDENT:
                student = await self.student_repo.get_by_user_id(user.id)
                if student is not None:
                    data.profile = StudentProfileRead.model_validate(student)
            case Role.ADMIN:
                admin = await self.admin_repo.get_by_user_id(user.id)
                if admin is not None:
                    profile = AdminProfileRead.model_validate(admin)
                    profile.permissions = await self.permission_repo.list_names_for_admin(admin.id)
                    data.profile = profile
            case Role.OWNER:
                pass
        return data
