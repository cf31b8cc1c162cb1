from src.identity.services.admin_service import AdminService
from src.identity.services.auth_service import AuthService
from src.identity.services.invitation_service import InvitationService
from src.identity.services.oauth_service import OAuthService
from src.identity.services.student_service import StudentService
from src.identity.services.token_service import DeviceInfo, IssuedToken, TokenService
from src.identity.services.verification_service import VerificationService

__all__ = [
    "AdminService",
    "AuthService",
    "DeviceInfo",
    "InvitationService",
    "IssuedToken",
    "OAuthService",
    "StudentService",
    "TokenService",
    "VerificationService",
]
