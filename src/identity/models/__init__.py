"""Model exports.

Import from here: `from src.identity.models import AuthUser, Invitation`
"""

from src.identity.models.enums import (
    AdminStatus,
    AdminType,
    AuthProvider,
    Gender,
    InvitationStatus,
    Role,
    SignUpVia,
    VerificationTokenType,
)
from src.identity.models.identity import AuthUser, SessionToken, VerificationToken
from src.identity.models.invitation import Invitation
from src.identity.models.profile import (
    AdminPermission,
    AdminProfile,
    Permission,
    StudentProfile,
)

__all__ = [
    # Enums
    "AdminStatus",
    "AdminType",
    "AuthProvider",
    "Gender",
    "InvitationStatus",
    "Role",
    "SignUpVia",
    "VerificationTokenType",
    # Credential store
    "AuthUser",
    "SessionToken",
    "VerificationToken",
    # Invitations
    "Invitation",
    # Profiles
    "AdminPermission",
    "AdminProfile",
    "Permission",
    "StudentProfile",
]
