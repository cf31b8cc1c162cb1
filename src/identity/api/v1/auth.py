"""Authentication endpoints shared by every role, plus student sign-up."""

from uuid import UUID

from fastapi import APIRouter, status
from starlette.requests import Request

from src.identity.api.dependencies import (
    AuthServiceDep,
    BearerToken,
    CurrentPrincipal,
    RequestDevice,
    StudentPrincipal,
    StudentServiceDep,
)
from src.identity.core.rate_limit import limiter, login_limit, otp_limit, registration_limit
from src.identity.models import AuthUser
from src.identity.schemas import (
    ApiResponse,
    AuthDataRead,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    RevokedSessionsRead,
    SessionRead,
    SessionTokenRead,
    SignupRequest,
    StudentProfileRead,
    StudentProfileUpdate,
    VerifyCodeRequest,
)
from src.identity.services import DeviceInfo, IssuedToken

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_REQUESTED_MESSAGE = "If an account exists for this email, a reset code has been sent"


def session_token_read(user: AuthUser, issued: IssuedToken) -> SessionTokenRead:
    return SessionTokenRead(
        token=issued.token,
        user_id=user.id,
        role=user.role,
        email_verified=user.email_verified,
        account_verified=user.account_verified,
        expires_at=issued.session.expires_at,
    )


@router.post(
    "/signup",
    response_model=ApiResponse[SessionTokenRead],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered"}},
)
@limiter.limit(registration_limit)
async def signup(
    request: Request, body: SignupRequest, service: AuthServiceDep, device: RequestDevice
) -> ApiResponse[SessionTokenRead]:
    """Register a STUDENT with email and password. Returns a session token."""
    user, issued = await service.signup_student(body.email, body.password, device)
    return ApiResponse(
        message="Student registered successfully", data=session_token_read(user, issued)
    )


@router.post(
    "/login",
    response_model=ApiResponse[SessionTokenRead],
    responses={401: {"description": "Invalid email or password"}},
)
@limiter.limit(login_limit)
async def login(
    request: Request, body: LoginRequest, service: AuthServiceDep, device: RequestDevice
) -> ApiResponse[SessionTokenRead]:
    """Password login for any role. Each login is a new, independent session."""
    device = DeviceInfo(
        device_name=body.device_name,
        ip_address=device.ip_address,
        user_agent=device.user_agent,
    )
    user, issued = await service.login(body.email, body.password, device)
    return ApiResponse(message="Login successful", data=session_token_read(user, issued))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    principal: CurrentPrincipal, token: BearerToken, service: AuthServiceDep
) -> ApiResponse[None]:
    """Revoke the presented session. The caller's other sessions stay valid."""
    await service.logout(token)
    return ApiResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=ApiResponse[RevokedSessionsRead])
async def logout_all(
    principal: CurrentPrincipal, service: AuthServiceDep
) -> ApiResponse[RevokedSessionsRead]:
    revoked = await service.logout_all(principal)
    return ApiResponse(
        message="Logged out from all devices", data=RevokedSessionsRead(revoked=revoked)
    )


@router.get("/sessions", response_model=ApiResponse[list[SessionRead]])
async def list_sessions(
    principal: CurrentPrincipal, service: AuthServiceDep
) -> ApiResponse[list[SessionRead]]:
    sessions = await service.list_sessions(principal)
    data = [
        SessionRead.model_validate(s).model_copy(update={"current": s.id == principal.session_id})
        for s in sessions
    ]
    return ApiResponse(message="Active sessions fetched successfully", data=data)


@router.delete("/sessions/{session_id}", response_model=ApiResponse[None])
async def revoke_session(
    session_id: UUID, principal: CurrentPrincipal, service: AuthServiceDep
) -> ApiResponse[None]:
    await service.revoke_session(principal, session_id)
    return ApiResponse(message="Session revoked successfully")


@router.post("/request-email-verification", response_model=ApiResponse[None])
@limiter.limit(otp_limit)
async def request_email_verification(
    request: Request, principal: CurrentPrincipal, service: AuthServiceDep
) -> ApiResponse[None]:
    """Send a verification code to the caller's email. The code is never returned."""
    await service.request_email_verification(principal)
    return ApiResponse(message="Verification code sent to your email")


@router.post("/verify-email", response_model=ApiResponse[None])
@limiter.limit(otp_limit)
async def verify_email(
    request: Request,
    body: VerifyCodeRequest,
    principal: CurrentPrincipal,
    service: AuthServiceDep,
) -> ApiResponse[None]:
    await service.verify_email(principal, body.code)
    return ApiResponse(message="Email verified successfully")


@router.post("/reset-password-request", response_model=ApiResponse[None])
@limiter.limit(otp_limit)
async def reset_password_request(
    request: Request, body: PasswordResetRequest, service: AuthServiceDep
) -> ApiResponse[None]:
    """Same response whether or not the email is registered."""
    await service.request_password_reset(body.email)
    return ApiResponse(message=RESET_REQUESTED_MESSAGE)


@router.post(
    "/reset-password",
    response_model=ApiResponse[None],
    responses={400: {"description": "Invalid or expired verification code"}},
)
@limiter.limit(otp_limit)
async def reset_password(
    request: Request, body: PasswordResetConfirm, service: AuthServiceDep
) -> ApiResponse[None]:
    """Set a new password with a reset code. Signs out every session."""
    await service.reset_password(
        body.code, body.new_password, user_id=body.user_id, email=body.email
    )
    return ApiResponse(message="Password reset successfully")


@router.get("/auth-data", response_model=ApiResponse[AuthDataRead])
async def auth_data(
    principal: CurrentPrincipal, service: AuthServiceDep
) -> ApiResponse[AuthDataRead]:
    data = await service.get_auth_data(principal)
    return ApiResponse(message="Auth data fetched successfully", data=data)


@router.put("/student/profile", response_model=ApiResponse[StudentProfileRead])
async def update_student_profile(
    body: StudentProfileUpdate, principal: StudentPrincipal, service: StudentServiceDep
) -> ApiResponse[StudentProfileRead]:
    profile = await service.update_profile(principal, body)
    return ApiResponse(
        message="Profile updated successfully", data=StudentProfileRead.model_validate(profile)
    )
