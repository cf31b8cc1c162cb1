"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.identity.api.dependencies.db import DBSession
from src.identity.api.dependencies.repositories import (
    AdminProfileRepo,
    InvitationRepo,
    PermissionRepo,
    SessionTokenRepo,
    StudentProfileRepo,
    UserRepo,
    VerificationTokenRepo,
)
from src.identity.core.oauth import GoogleOAuthClient
from src.identity.services import (
    AdminService,
    AuthService,
    InvitationService,
    OAuthService,
    StudentService,
    TokenService,
    VerificationService,
)


def get_token_service(session_repo: SessionTokenRepo, session: DBSession) -> TokenService:
    return TokenService(session_repo, session)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def get_verification_service(
    token_repo: VerificationTokenRepo, session: DBSession
) -> VerificationService:
    return VerificationService(token_repo, session)


VerificationServiceDep = Annotated[VerificationService, Depends(get_verification_service)]


def get_invitation_service(
    invitation_repo: InvitationRepo, user_repo: UserRepo, session: DBSession
) -> InvitationService:
    return InvitationService(invitation_repo, user_repo, session)


InvitationServiceDep = Annotated[InvitationService, Depends(get_invitation_service)]


def get_auth_service(
    user_repo: UserRepo,
    student_repo: StudentProfileRepo,
    admin_repo: AdminProfileRepo,
    permission_repo: PermissionRepo,
    token_service: TokenServiceDep,
    verification_service: VerificationServiceDep,
    session: DBSession,
) -> AuthService:
    return AuthService(
        user_repo,
        student_repo,
        admin_repo,
        permission_repo,
        token_service,
        verification_service,
        session,
    )


def get_student_service(
    user_repo: UserRepo, student_repo: StudentProfileRepo, session: DBSession
) -> StudentService:
    return StudentService(user_repo, student_repo, session)


def get_admin_service(
    user_repo: UserRepo,
    admin_repo: AdminProfileRepo,
    permission_repo: PermissionRepo,
    invitation_service: InvitationServiceDep,
    token_service: TokenServiceDep,
    session: DBSession,
) -> AdminService:
    return AdminService(
        user_repo, admin_repo, permission_repo, invitation_service, token_service, session
    )


AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]


def get_google_client() -> GoogleOAuthClient:
    """Overridden in tests to avoid calling Google."""
    return GoogleOAuthClient()


def get_oauth_service(
    user_repo: UserRepo,
    student_repo: StudentProfileRepo,
    admin_service: AdminServiceDep,
    token_service: TokenServiceDep,
    session: DBSession,
    google_client: Annotated[GoogleOAuthClient, Depends(get_google_client)],
) -> OAuthService:
    return OAuthService(
        user_repo, student_repo, admin_service, token_service, session, google_client
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
OAuthServiceDep = Annotated[OAuthService, Depends(get_oauth_service)]
