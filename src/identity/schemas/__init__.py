from src.identity.schemas.auth import (
    AuthDataRead,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    RevokedSessionsRead,
    SessionRead,
    SessionTokenRead,
    SignupRequest,
    VerifyCodeRequest,
)
from src.identity.schemas.common import ApiResponse, CamelModel
from src.identity.schemas.invitation import AdminRegisterRequest, InvitationCreate, InvitationRead
from src.identity.schemas.permission import (
    PermissionAssignmentRead,
    PermissionAssignRequest,
    PermissionRead,
)
from src.identity.schemas.profile import (
    AdminProfileRead,
    AdminProfileUpdate,
    DeliveryDetails,
    StudentProfileRead,
    StudentProfileUpdate,
)

__all__ = [
    # Envelope
    "ApiResponse",
    "CamelModel",
    # Auth
    "AuthDataRead",
    "LoginRequest",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "RevokedSessionsRead",
    "SessionRead",
    "SessionTokenRead",
    "SignupRequest",
    "VerifyCodeRequest",
    # Invitations
    "AdminRegisterRequest",
    "InvitationCreate",
    "InvitationRead",
    # Permissions
    "PermissionAssignRequest",
    "PermissionAssignmentRead",
    "PermissionRead",
    # Profiles
    "AdminProfileRead",
    "AdminProfileUpdate",
    "DeliveryDetails",
    "StudentProfileRead",
    "StudentProfileUpdate",
]
