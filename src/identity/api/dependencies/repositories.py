"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.identity.api.dependencies.db import DBSession
from src.identity.repositories import (
    AdminProfileRepository,
    AuthUserRepository,
    InvitationRepository,
    PermissionRepository,
    SessionTokenRepository,
    StudentProfileRepository,
    VerificationTokenRepository,
)


def get_user_repository(session: DBSession) -> AuthUserRepository:
    return AuthUserRepository(session)


def get_session_token_repository(session: DBSession) -> SessionTokenRepository:
    return SessionTokenRepository(session)


def get_verification_token_repository(session: DBSession) -> VerificationTokenRepository:
    return VerificationTokenRepository(session)


def get_invitation_repository(session: DBSession) -> InvitationRepository:
    return InvitationRepository(session)


def get_student_profile_repository(session: DBSession) -> StudentProfileRepository:
    return StudentProfileRepository(session)


def get_admin_profile_repository(session: DBSession) -> AdminProfileRepository:
    return AdminProfileRepository(session)


def get_permission_repository(session: DBSession) -> PermissionRepository:
    return PermissionRepository(session)


UserRepo = Annotated[AuthUserRepository, Depends(get_user_repository)]
SessionTokenRepo = Annotated[SessionTokenRepository, Depends(get_session_token_repository)]
VerificationTokenRepo = Annotated[
    VerificationTokenRepository, Depends(get_verification_token_repository)
]
InvitationRepo = Annotated[InvitationRepository, Depends(get_invitation_repository)]
StudentProfileRepo = Annotated[StudentProfileRepository, Depends(get_student_profile_repository)]
AdminProfileRepo = Annotated[AdminProfileRepository, Depends(get_admin_profile_repository)]
PermissionRepo = Annotated[PermissionRepository, Depends(get_permission_repository)]
