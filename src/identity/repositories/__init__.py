from src.identity.repositories.auth_user import AuthUserRepository, normalize_email
from src.identity.repositories.base import BaseRepository
from src.identity.repositories.invitation import InvitationRepository
from src.identity.repositories.permission import PermissionRepository
from src.identity.repositories.profile import AdminProfileRepository, StudentProfileRepository
from src.identity.repositories.session_token import SessionTokenRepository
from src.identity.repositories.verification_token import VerificationTokenRepository

__all__ = [
    "AdminProfileRepository",
    "AuthUserRepository",
    "BaseRepository",
    "InvitationRepository",
    "PermissionRepository",
    "SessionTokenRepository",
    "StudentProfileRepository",
    "VerificationTokenRepository",
    "normalize_email",
]
