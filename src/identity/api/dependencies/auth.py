"""Authentication and authorization dependencies."""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header, Request

from src.identity.api.dependencies.services import TokenServiceDep
from src.identity.core.exceptions import UnauthenticatedError
from src.identity.core.logging import bind_user_context
from src.identity.core.security import Principal, authorize
from src.identity.models import Role
from src.identity.services import DeviceInfo


async def get_bearer_token(authorization: Annotated[str | None, Header()] = None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthenticatedError("Missing or invalid authorization header")
    token = authorization[7:].strip()
    if not token:
        raise UnauthenticatedError("Missing or invalid authorization header")
    return token


BearerToken = Annotated[str, Depends(get_bearer_token)]


async def get_current_principal(token: BearerToken, token_service: TokenServiceDep) -> Principal:
    """Validate the bearer token and bind the identity to the log context."""
    principal = await token_service.validate(token)
    bind_user_context(principal.user_id, principal.role.value)
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_roles(*roles: Role) -> Callable[[Principal], Awaitable[Principal]]:
    """Dependency factory: allow only principals holding one of roles."""

    async def _require(principal: CurrentPrincipal) -> Principal:
        return authorize(principal, roles)

    return _require


OwnerPrincipal = Annotated[Principal, Depends(require_roles(Role.OWNER))]
AdminPrincipal = Annotated[Principal, Depends(require_roles(Role.ADMIN))]
StudentPrincipal = Annotated[Principal, Depends(require_roles(Role.STUDENT))]


def get_device_info(
    request: Request, user_agent: Annotated[str | None, Header()] = None
) -> DeviceInfo:
    return DeviceInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=user_agent[:512] if user_agent else None,
    )


RequestDevice = Annotated[DeviceInfo, Depends(get_device_info)]
