"""Google sign-in for students and invited admins."""

from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.config import get_settings
from src.identity.core.exceptions import OAuthError
from src.identity.core.logging import get_logger
from src.identity.core.oauth import GoogleIdentity, GoogleOAuthClient
from src.identity.core.security import TokenType, create_oauth_state_token, decode_token
from src.identity.models import AuthProvider, AuthUser, Role, StudentProfile
from src.identity.models.base import utc_now
from src.identity.repositories import AuthUserRepository, StudentProfileRepository
from src.identity.services.admin_service import AdminService
from src.identity.services.token_service import DeviceInfo, IssuedToken, TokenService

logger = get_logger(__name__)


def success_redirect_url(user: AuthUser, issued: IssuedToken) -> str:
    query = urlencode({"token": issued.token, "userId": str(user.id), "role": user.role})
    return f"{get_settings().app_url}/auth-callback?{query}"


def error_redirect_url(message: str) -> str:
    query = urlencode({"error": "oauth_failed", "description": message})
    return f"{get_settings().app_url}/auth-error?{query}"


class OAuthService:
    def __init__(
        self,
        user_repo: AuthUserRepository,
        student_repo: StudentProfileRepository,
        admin_service: AdminService,
        token_service: TokenService,
        session: AsyncSession,
        google_client: GoogleOAuthClient,
    ):
        self.user_repo = user_repo
        self.student_repo = student_repo
        self.admin_service = admin_service
        self.token_service = token_service
        self.session = session
        self.google_client = google_client

    def initiate(self, role: Role, invitation_token: str | None = None) -> str:
        """Return the Google consent URL carrying a signed state."""
        match role:
            case Role.STUDENT | Role.ADMIN:
                pass
            case Role.OWNER:
                raise OAuthError("Owner accounts cannot sign in with Google")
        state = create_oauth_state_token(role.value, invitation_token)
        return self.google_client.build_authorization_url(state)

    async def callback(
        self, code: str, state: str, device: DeviceInfo | None = None
    ) -> tuple[AuthUser, IssuedToken]:
        """Finish the round trip: verify state, exchange code, sign in or register.

        Raises:
            OAuthError: Any step failed. Callers turn this into an error redirect.
        """
        claims = decode_token(state, expected_type=TokenType.OAUTH_STATE)
        if claims is None:
            raise OAuthError("Invalid or expired OAuth state")
        try:
            role = Role(claims.get("role"))
        except ValueError as e:
            raise OAuthError("Invalid OAuth state role") from e

        identity = await self.google_client.exchange_code(code)

        match role:
            case Role.STUDENT:
                return await self._sign_in_student(identity, device)
            case Role.ADMIN:
                return await self._sign_in_admin(identity, claims.get("invitation_token"), device)
            case Role.OWNER:
                raise OAuthError("Owner accounts cannot sign in with Google")

    async def _find_linked(self, identity: GoogleIdentity) -> AuthUser | None:
        user = await self.user_repo.get_by_provider_id(
            AuthProvider.GOOGLE.value, identity.external_id
        )
        if user is None:
            user = await self.user_repo.get_by_email(identity.email)
        return user

    async def _sign_in_existing(
        self, user: AuthUser, device: DeviceInfo | None
    ) -> tuple[AuthUser, IssuedToken]:
        if not user.is_active:
            raise OAuthError("Account is deactivated")
        try:
            issued = await self.token_service.issue(user, device)
            user.email_verified = True
            user.last_login = utc_now()
            self.session.add(user)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Google sign-in failed", error=str(e))
            raise
        logger.info("Signed in with Google", user_id=str(user.id), role=user.role)
        return user, issued

    async def _sign_in_student(
        self, identity: GoogleIdentity, device: DeviceInfo | None
    ) -> tuple[AuthUser, IssuedToken]:
        existing = await self._find_linked(identity)
        if existing is not None:
            if existing.role_enum is not Role.STUDENT:
                raise OAuthError("This account cannot sign in as a student")
            return await self._sign_in_existing(existing, device)

        settings = get_settings()
        try:
            user = AuthUser(
                email=identity.email,
                role=Role.STUDENT.value,
                provider=AuthProvider.GOOGLE.value,
                provider_id=identity.external_id,
                email_verified=True,
                max_login_devices=settings.max_login_devices,
                last_login=utc_now(),
            )
            self.user_repo.add(user)
            await self.session.flush()
            self.student_repo.add(
                StudentProfile(
                    auth_user_id=user.id,
                    first_name=identity.given_name,
                    last_name=identity.family_name,
                    profile_picture=identity.picture,
                )
            )
            issued = await self.token_service.issue(user, device)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise OAuthError("An account with this email already exists") from e
        except Exception as e:
            await self.session.rollback()
            logger.error("Google student sign-up failed", error=str(e))
            raise

        logger.info("Student signed up with Google", user_id=str(user.id))
        return user, issued

    async def _sign_in_admin(
        self,
        identity: GoogleIdentity,
        invitation_token: str | None,
        device: DeviceInfo | None,
    ) -> tuple[AuthUser, IssuedToken]:
        existing = await self._find_linked(identity)
        if existing is not None:
            if existing.role_enum is not Role.ADMIN:
                raise OAuthError("This account cannot sign in as an admin")
            return await self._sign_in_existing(existing, device)

        if not invitation_token:
            raise OAuthError("Invitation token required for admin signup")
        return await self.admin_service.register_with_google(identity, invitation_token, device)
