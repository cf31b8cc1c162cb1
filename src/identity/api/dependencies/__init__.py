"""FastAPI dependency injection definitions.

Re-exports all dependencies for convenience.
"""

from src.identity.api.dependencies.auth import (
    AdminPrincipal,
    BearerToken,
    CurrentPrincipal,
    OwnerPrincipal,
    RequestDevice,
    StudentPrincipal,
    get_bearer_token,
    get_current_principal,
    get_device_info,
    require_roles,
)
from src.identity.api.dependencies.db import DBSession, get_db_session
from src.identity.api.dependencies.services import (
    AdminServiceDep,
    AuthServiceDep,
    InvitationServiceDep,
    OAuthServiceDep,
    StudentServiceDep,
    TokenServiceDep,
    VerificationServiceDep,
    get_admin_service,
    get_auth_service,
    get_google_client,
    get_invitation_service,
    get_oauth_service,
    get_student_service,
    get_token_service,
    get_verification_service,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "AdminPrincipal",
    "BearerToken",
    "CurrentPrincipal",
    "OwnerPrincipal",
    "RequestDevice",
    "StudentPrincipal",
    "get_bearer_token",
    "get_current_principal",
    "get_device_info",
    "require_roles",
    # Services
    "AdminServiceDep",
    "AuthServiceDep",
    "InvitationServiceDep",
    "OAuthServiceDep",
    "StudentServiceDep",
    "TokenServiceDep",
    "VerificationServiceDep",
    "get_admin_service",
    "get_auth_service",
    "get_google_client",
    "get_invitation_service",
    "get_oauth_service",
    "get_student_service",
    "get_token_service",
    "get_verification_service",
]
