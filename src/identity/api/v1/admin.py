"""Admin invitation, registration, profile and permission endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status
from starlette.requests import Request

from src.identity.api.dependencies import (
    AdminPrincipal,
    AdminServiceDep,
    InvitationServiceDep,
    OwnerPrincipal,
    RequestDevice,
)
from src.identity.api.v1.auth import session_token_read
from src.identity.core.rate_limit import limiter, registration_limit
from src.identity.models import InvitationStatus
from src.identity.schemas import (
    AdminProfileRead,
    AdminProfileUpdate,
    AdminRegisterRequest,
    ApiResponse,
    InvitationCreate,
    InvitationRead,
    PermissionAssignmentRead,
    PermissionAssignRequest,
    PermissionRead,
    SessionTokenRead,
)

router = APIRouter(prefix="/auth/admin", tags=["admin"])


@router.post(
    "/invite",
    response_model=ApiResponse[InvitationRead],
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Caller is not an OWNER"},
        409: {"description": "An account with this email already exists"},
    },
)
async def invite_admin(
    body: InvitationCreate, principal: OwnerPrincipal, service: InvitationServiceDep
) -> ApiResponse[InvitationRead]:
    """Invite an email to register as ADMIN. The link is emailed, never returned."""
    invitation, _ = await service.create(body.email, principal)
    return ApiResponse(
        message="Invitation sent successfully", data=InvitationRead.from_model(invitation)
    )


@router.get("/invitations", response_model=ApiResponse[list[InvitationRead]])
async def list_invitations(
    principal: OwnerPrincipal,
    service: InvitationServiceDep,
    status_filter: Annotated[InvitationStatus | None, Query(alias="status")] = None,
) -> ApiResponse[list[InvitationRead]]:
    invitations = await service.list_invitations(principal, status_filter)
    return ApiResponse(
        message="Invitations fetched successfully",
        data=[InvitationRead.from_model(i) for i in invitations],
    )


@router.delete("/invitations/{invitation_id}", response_model=ApiResponse[InvitationRead])
async def revoke_invitation(
    invitation_id: UUID, principal: OwnerPrincipal, service: InvitationServiceDep
) -> ApiResponse[InvitationRead]:
    invitation = await service.revoke(invitation_id, principal)
    return ApiResponse(
        message="Invitation revoked successfully", data=InvitationRead.from_model(invitation)
    )


@router.post(
    "/register",
    response_model=ApiResponse[SessionTokenRead],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Email mismatch, expired or already used invitation"},
        401: {"description": "Invalid invitation token"},
        404: {"description": "No invitation for this email"},
    },
)
@limiter.limit(registration_limit)
async def register_admin(
    request: Request,
    body: AdminRegisterRequest,
    service: AdminServiceDep,
    device: RequestDevice,
) -> ApiResponse[SessionTokenRead]:
    """Claim an invitation with a password. Creates the ADMIN and signs it in."""
    user, issued = await service.register(
        body.email, body.invitation_token, body.password, device
    )
    return ApiResponse(
        message="Admin registered successfully", data=session_token_read(user, issued)
    )


@router.put("/profile", response_model=ApiResponse[AdminProfileRead])
async def update_admin_profile(
    body: AdminProfileUpdate, principal: AdminPrincipal, service: AdminServiceDep
) -> ApiResponse[AdminProfileRead]:
    profile = await service.update_profile(principal, body)
    data = AdminProfileRead.model_validate(profile)
    data.permissions = await service.get_permission_names(profile)
    return ApiResponse(message="Profile updated successfully", data=data)


@router.get("/permissions", response_model=ApiResponse[list[PermissionRead]])
async def list_permissions(
    principal: OwnerPrincipal, service: AdminServiceDep
) -> ApiResponse[list[PermissionRead]]:
    permissions = await service.list_permissions(principal)
    return ApiResponse(
        message="Permissions fetched successfully",
        data=[PermissionRead.model_validate(p) for p in permissions],
    )


@router.post(
    "/{admin_id}/permissions",
    response_model=ApiResponse[PermissionAssignmentRead],
    responses={
        400: {"description": "Some permissions do not exist"},
        404: {"description": "Admin not found"},
    },
)
async def assign_permissions(
    admin_id: UUID,
    body: PermissionAssignRequest,
    principal: OwnerPrincipal,
    service: AdminServiceDep,
) -> ApiResponse[PermissionAssignmentRead]:
    """Replace the admin's permission set with the given names."""
    names = await service.assign_permissions(principal, admin_id, body.permissions)
    return ApiResponse(
        message="Permissions assigned successfully",
        data=PermissionAssignmentRead(admin_id=admin_id, permissions=names),
    )
